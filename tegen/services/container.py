"""服务容器 - 统一依赖注入

项目根目录、配置、平台在构造时显式给出，所有组件都从这里懒加载，
同一容器内的实例共享。CLI 为每次调用构造一个容器，测试可直接注入假执行器
或替换 fetcher。

依赖关系（→ 表示依赖）:
  installer → manifest, layout, fetcher, integrator, patcher
  project   → manifest
  build     → manifest

用法:
    container = ServiceContainer(project_root=Path("."))
    report = container.installer.install("widgets")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from tegen.core.config import Config, get_config
from tegen.core.platform import Platform

if TYPE_CHECKING:
    from tegen.core.fetcher import Fetcher
    from tegen.core.installer import Installer
    from tegen.core.integrator import ArtifactIntegrator, ProgressCallback
    from tegen.core.manifest import ManifestStore
    from tegen.core.patcher import BuildDescriptorPatcher
    from tegen.core.workspace import WorkspaceLayout
    from tegen.services.build_service import BuildService
    from tegen.services.project_service import ProjectService
    from tegen.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器 - 每个实例绑定一个项目根目录"""

    def __init__(
        self,
        project_root: Path,
        config: Config | None = None,
        platform: Platform | None = None,
        executor: CommandExecutor | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._instances: dict[str, object] = {}
        self.project_root = Path(project_root).resolve()
        self._config = config if config is not None else get_config()
        self.platform = platform or Platform.detect()
        self.executor = executor
        self.on_progress = on_progress

    @property
    def config(self) -> Config:
        return self._config

    # ---- 核心组件 ----

    @property
    def manifest(self) -> ManifestStore:
        if "manifest" not in self._instances:
            from tegen.core.manifest import ManifestStore
            self._instances["manifest"] = ManifestStore(
                self.project_root / self._config.manifest_file,
            )
        return self._instances["manifest"]  # type: ignore[return-value]

    @property
    def layout(self) -> WorkspaceLayout:
        if "layout" not in self._instances:
            from tegen.core.workspace import WorkspaceLayout
            self._instances["layout"] = WorkspaceLayout(self.project_root, self._config)
        return self._instances["layout"]  # type: ignore[return-value]

    @property
    def fetcher(self) -> Fetcher:
        if "fetcher" not in self._instances:
            from tegen.core.fetcher import create_fetcher
            self._instances["fetcher"] = create_fetcher(
                self._config.fetch_method, self._config.repo_base_url,
                executor=self.executor, git=self._config.git,
            )
        return self._instances["fetcher"]  # type: ignore[return-value]

    @fetcher.setter
    def fetcher(self, value: Fetcher) -> None:
        self._instances["fetcher"] = value
        self._instances.pop("installer", None)

    @property
    def integrator(self) -> ArtifactIntegrator:
        if "integrator" not in self._instances:
            from tegen.core.integrator import ArtifactIntegrator
            self._instances["integrator"] = ArtifactIntegrator(
                self.platform.static_lib_extensions,
                max_descent=self._config.max_lib_descent,
                on_progress=self.on_progress,
            )
        return self._instances["integrator"]  # type: ignore[return-value]

    @property
    def patcher(self) -> BuildDescriptorPatcher:
        if "patcher" not in self._instances:
            from tegen.core.patcher import BuildDescriptorPatcher
            self._instances["patcher"] = BuildDescriptorPatcher(
                self.project_root,
                self.layout.paths.include_dir,
                system_libraries=self.platform.system_libraries,
            )
        return self._instances["patcher"]  # type: ignore[return-value]

    @property
    def installer(self) -> Installer:
        if "installer" not in self._instances:
            from tegen.core.installer import Installer
            self._instances["installer"] = Installer(
                manifest=self.manifest,
                layout=self.layout,
                fetcher=self.fetcher,
                integrator=self.integrator,
                patcher=self.patcher,
                platform=self.platform,
            )
        return self._instances["installer"]  # type: ignore[return-value]

    # ---- 服务层 ----

    @property
    def project(self) -> ProjectService:
        if "project" not in self._instances:
            from tegen.services.project_service import ProjectService
            self._instances["project"] = ProjectService(
                self.project_root, self._config, self.manifest,
            )
        return self._instances["project"]  # type: ignore[return-value]

    @property
    def build(self) -> BuildService:
        if "build" not in self._instances:
            from tegen.services.build_service import BuildService
            self._instances["build"] = BuildService(
                self.project_root, self._config, self.manifest,
                self.platform, executor=self.executor,
            )
        return self._instances["build"]  # type: ignore[return-value]
