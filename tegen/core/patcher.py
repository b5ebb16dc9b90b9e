"""构建描述补丁器 - 向 CMakeLists.txt 追加依赖的 include / link 指令

每个依赖对应一个带标记的块:

    # >>> tegen: widgets >>>
    include_directories(${CMAKE_CURRENT_SOURCE_DIR}/include)
    target_link_libraries(${PROJECT_NAME} PRIVATE ${CMAKE_CURRENT_SOURCE_DIR}/lib/libwidgets.a)
    # <<< tegen: widgets <<<

追加前检查开始标记，已存在则跳过，保证重复 install 不会重复写入。
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from tegen.core.exceptions import WorkspaceError

logger = logging.getLogger(__name__)

SOURCE_DIR_VAR = "${CMAKE_CURRENT_SOURCE_DIR}"


def _read_descriptor(build_file: Path) -> str:
    """读取构建描述；非 UTF-8 字节（如 Latin-1 注释）按 surrogateescape 保留

    只追加不回写，原有字节不会被重新编码。
    """
    return build_file.read_text(encoding="utf-8", errors="surrogateescape")


def begin_marker(name: str) -> str:
    return f"# >>> tegen: {name} >>>"


def end_marker(name: str) -> str:
    return f"# <<< tegen: {name} <<<"


class BuildDescriptorPatcher:
    """CMakeLists.txt 补丁器"""

    def __init__(
        self,
        project_root: Path,
        include_dir: Path,
        system_libraries: Iterable[str] = (),
    ) -> None:
        self.project_root = Path(project_root)
        self.include_dir = Path(include_dir)
        self.system_libraries = tuple(system_libraries)

    def has_block(self, build_file: Path, name: str) -> bool:
        if not build_file.is_file():
            return False
        marker = begin_marker(name)
        text = _read_descriptor(build_file)
        return any(line.strip() == marker for line in text.splitlines())

    def render_block(self, name: str, linked_library_paths: Iterable[Path]) -> str:
        lines = [
            begin_marker(name),
            f"include_directories({self._cmake_path(self.include_dir)})",
        ]
        for lib in linked_library_paths:
            lines.append(
                f"target_link_libraries(${{PROJECT_NAME}} PRIVATE {self._cmake_path(lib)})"
            )
        for syslib in self.system_libraries:
            lines.append(f"target_link_libraries(${{PROJECT_NAME}} PRIVATE {syslib})")
        lines.append(end_marker(name))
        return "\n".join(lines) + "\n"

    def patch(
        self, build_file: Path, name: str, linked_library_paths: Iterable[Path],
    ) -> bool:
        """追加依赖块，已存在返回 False（空操作），追加成功返回 True"""
        if not build_file.is_file():
            raise WorkspaceError(
                f"构建描述文件不存在: {build_file}，请先执行 'tegen init'"
            )
        if self.has_block(build_file, name):
            logger.info("  %s 已包含 %s 的依赖块，跳过", build_file.name, name)
            return False

        block = self.render_block(name, linked_library_paths)
        try:
            existing = _read_descriptor(build_file)
            prefix = "" if not existing or existing.endswith("\n") else "\n"
            with open(build_file, "a", encoding="utf-8") as f:
                f.write(f"{prefix}\n{block}")
        except OSError as e:
            raise WorkspaceError(f"写入 {build_file} 失败: {e}", cause=e) from e
        logger.info("  已向 %s 追加 %s 的依赖块", build_file.name, name)
        return True

    def _cmake_path(self, path: Path) -> str:
        """项目内路径写成 ${CMAKE_CURRENT_SOURCE_DIR}/相对路径，项目外保持绝对路径"""
        path = Path(path)
        try:
            rel = Path(os.path.relpath(path, self.project_root))
        except ValueError:
            # Windows 下跨盘符无法求相对路径
            return path.as_posix()
        if rel.parts and rel.parts[0] == "..":
            return path.as_posix()
        if str(rel) == ".":
            return SOURCE_DIR_VAR
        return f"{SOURCE_DIR_VAR}/{rel.as_posix()}"
