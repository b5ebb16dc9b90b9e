"""产物集成器

职责:
- 头文件: 暂存源码 include/ 下所有文件按相对路径镜像到项目 include/
- 库文件: 沿 lib/ 下的单子目录链找到真实输出目录，静态库平铺复制到项目 lib/
- 进度: 先枚举再复制，每个文件回报 "N/Total"

单个文件复制失败即中止本次调用并抛 IntegrationError，
已复制的文件保留（重试时覆盖即可）。
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable
from pathlib import Path

from tegen.core.exceptions import IntegrationError

logger = logging.getLogger(__name__)

# (已处理数, 总数, 刚复制的目标文件)
ProgressCallback = Callable[[int, int, Path], None]


class ArtifactIntegrator:
    """头文件与静态库集成器"""

    def __init__(
        self,
        static_lib_extensions: Iterable[str],
        max_descent: int = 8,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.static_lib_extensions = frozenset(e.lower() for e in static_lib_extensions)
        self.max_descent = max_descent
        self.on_progress = on_progress

    # ------------------------------------------------------------------
    # 头文件
    # ------------------------------------------------------------------

    def integrate_headers(self, staged_source: Path, include_dir: Path) -> list[Path]:
        """镜像复制 include/ 子树，返回复制后的目标路径；无 include/ 时为空操作"""
        src_root = staged_source / "include"
        if not src_root.is_dir():
            logger.info("  %s 没有 include/ 目录，跳过头文件", staged_source.name)
            return []
        files = sorted(p for p in src_root.rglob("*") if p.is_file())
        pairs = [(f, include_dir / f.relative_to(src_root)) for f in files]
        copied = self._copy_all(pairs, label="头文件")
        logger.info("  头文件: %d 个 -> %s", len(copied), include_dir)
        return copied

    # ------------------------------------------------------------------
    # 库文件
    # ------------------------------------------------------------------

    def find_library_dir(self, staged_source: Path) -> Path | None:
        """从 lib/ 开始沿单子目录链下探，返回真实的库输出目录

        如 lib/x64/Release/ 这类每层只有一个子目录的嵌套。下探层数超过
        max_descent 抛 IntegrationError；没有 lib/ 返回 None。
        """
        current = staged_source / "lib"
        if not current.is_dir():
            return None
        for _ in range(self.max_descent + 1):
            entries = list(current.iterdir())
            if len(entries) != 1 or not entries[0].is_dir():
                return current
            current = entries[0]
        raise IntegrationError(
            f"库目录嵌套超过 {self.max_descent} 层: {staged_source / 'lib'}"
        )

    def integrate_libraries(self, staged_source: Path, lib_dir: Path) -> list[Path]:
        """平铺复制静态库，返回复制后的目标路径；无 lib/ 时为空操作

        不同子目录下的同名库会互相覆盖，以最后复制的为准。
        """
        found = self.find_library_dir(staged_source)
        if found is None:
            logger.info("  %s 没有 lib/ 目录，跳过库文件", staged_source.name)
            return []
        files = sorted(
            p for p in found.rglob("*")
            if p.is_file() and p.suffix.lower() in self.static_lib_extensions
        )
        pairs = [(f, lib_dir / f.name) for f in files]
        copied = self._copy_all(pairs, label="库文件")
        # 同名覆盖后去重，保持首次出现的顺序
        unique = list(dict.fromkeys(copied))
        logger.info("  库文件: %d 个 -> %s (来自 %s)", len(unique), lib_dir, found)
        return unique

    # ------------------------------------------------------------------
    # 复制
    # ------------------------------------------------------------------

    def _copy_all(self, pairs: list[tuple[Path, Path]], label: str) -> list[Path]:
        total = len(pairs)
        copied: list[Path] = []
        for i, (src, dst) in enumerate(pairs, start=1):
            try:
                dst.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(src, dst)
            except OSError as e:
                raise IntegrationError(
                    f"{label}复制失败 ({i}/{total}): {src} -> {dst}: {e}", cause=e,
                ) from e
            copied.append(dst)
            logger.debug("  %s %d/%d processed: %s", label, i, total, dst.name)
            if self.on_progress is not None:
                self.on_progress(i, total, dst)
        return copied
