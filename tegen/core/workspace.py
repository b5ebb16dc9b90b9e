"""工作空间布局 - 计算并创建 install 使用的目录

所有路径都从显式传入的项目根目录推导，不读取进程当前目录。
"""

from __future__ import annotations

import logging
from pathlib import Path

from tegen.core.config import Config
from tegen.core.exceptions import WorkspaceError
from tegen.core.models import WorkspacePaths

logger = logging.getLogger(__name__)


class WorkspaceLayout:
    """工作空间布局"""

    def __init__(self, project_root: Path, config: Config) -> None:
        self.project_root = Path(project_root)
        self.config = config

    @property
    def paths(self) -> WorkspacePaths:
        root = self.project_root
        return WorkspacePaths(
            project_root=root,
            staging_dir=root / self.config.staging_dir,
            include_dir=root / self.config.include_dir,
            lib_dir=root / self.config.lib_dir,
            build_file=root / self.config.build_file,
        )

    def ensure_directories(self) -> WorkspacePaths:
        """幂等创建暂存、include、lib 目录，失败抛 WorkspaceError"""
        paths = self.paths
        for d in (paths.staging_dir, paths.include_dir, paths.lib_dir):
            try:
                d.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise WorkspaceError(f"无法创建目录 {d}: {e}", cause=e) from e
        logger.debug(
            "工作空间就绪: staging=%s include=%s lib=%s",
            paths.staging_dir, paths.include_dir, paths.lib_dir,
        )
        return paths
