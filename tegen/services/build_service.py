"""构建服务 - build / run 透传给 CMake 与构建产物

职责:
- build: cmake -S . -B build && cmake --build build
- run:   检查 build/<项目名>[.exe] 存在后执行

外部工具返回非零时抛 ExternalToolError，不重试。
"""

from __future__ import annotations

import logging
from pathlib import Path

from tegen.core.config import Config
from tegen.core.exceptions import ExternalToolError
from tegen.core.manifest import ManifestStore
from tegen.core.platform import Platform
from tegen.utils.shell import CommandExecutor, run_cmd

logger = logging.getLogger(__name__)


class BuildService:
    """CMake 构建与运行"""

    def __init__(
        self,
        project_root: Path,
        config: Config,
        store: ManifestStore,
        platform: Platform,
        executor: CommandExecutor | None = None,
    ) -> None:
        self.project_root = Path(project_root)
        self.config = config
        self.store = store
        self.platform = platform
        self.executor = executor

    @property
    def build_dir(self) -> Path:
        return self.project_root / self.config.build_dir

    def build(self) -> Path:
        """配置并编译项目，返回构建目录"""
        self.store.load()  # 未 init 的项目直接报 ManifestMissingError
        self.build_dir.mkdir(parents=True, exist_ok=True)
        cmake = self.config.cmake
        logger.info("构建项目: %s", self.project_root)
        run_cmd(
            [cmake, "-S", ".", "-B", self.config.build_dir],
            cwd=self.project_root, label="cmake 配置", capture=False,
            executor=self.executor,
        )
        run_cmd(
            [cmake, "--build", self.config.build_dir],
            cwd=self.project_root, label="cmake 构建", capture=False,
            executor=self.executor,
        )
        logger.info("构建完成: %s", self.build_dir)
        return self.build_dir

    def executable_path(self) -> Path:
        name = self.store.load().name
        return self.build_dir / f"{name}{self.platform.executable_suffix}"

    def run(self, args: tuple[str, ...] = ()) -> int:
        """运行构建产物，返回退出码（仅成功时返回）"""
        exe = self.executable_path()
        if not exe.is_file():
            raise ExternalToolError(
                f"未找到可执行文件 {exe}，请先执行 'tegen build'"
            )
        logger.info("运行: %s", exe)
        r = run_cmd(
            [str(exe), *args], cwd=self.project_root, label=exe.name,
            capture=False, executor=self.executor,
        )
        return r.returncode
