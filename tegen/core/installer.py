"""依赖安装流水线

状态顺序:
  NOT_STARTED → WORKSPACE_READY → FETCHED → HEADERS_INTEGRATED
  → LIBS_INTEGRATED → DESCRIPTOR_PATCHED → MANIFEST_SAVED → CLEANED_UP

- 清单保存是最后一个内容写入，之前任何一步失败都进入 FAILED，清单不变
- 清理失败只产生警告，结果仍为成功
- 已记录在清单中的依赖直接返回（不重复拉取、不改动任何文件）

各组件抛出的异常在此边界转换为 StepError{kind, cause}，
调用方（CLI）只检查 InstallReport，不需要捕获异常。
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from tegen.core.cleanup import remove_staging
from tegen.core.exceptions import (
    CLEANUP_WARNING,
    TegenError,
    ValidationError,
    WorkspaceError,
)
from tegen.core.fetcher import Fetcher
from tegen.core.integrator import ArtifactIntegrator
from tegen.core.manifest import ManifestStore
from tegen.core.models import (
    DependencySpec,
    InstallReport,
    InstallState,
    StepError,
    WorkspacePaths,
)
from tegen.core.patcher import BuildDescriptorPatcher
from tegen.core.platform import Platform
from tegen.core.workspace import WorkspaceLayout

logger = logging.getLogger(__name__)

_SAFE_NAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.\-]*$")
_SAFE_REF_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_./@\-]*$")


def validate_dependency(name: str, version: str | None) -> None:
    """校验依赖名与版本，拒绝路径穿越和可被当作命令行选项的值"""
    if not name or not _SAFE_NAME_RE.match(name) or ".." in name:
        raise ValidationError(f"依赖名包含非法字符: {name!r}")
    if version is not None and version != "":
        if not _SAFE_REF_RE.match(version) or ".." in version:
            raise ValidationError(f"版本包含非法字符: {version!r}")


class Installer:
    """install 编排器"""

    def __init__(
        self,
        manifest: ManifestStore,
        layout: WorkspaceLayout,
        fetcher: Fetcher,
        integrator: ArtifactIntegrator,
        patcher: BuildDescriptorPatcher,
        platform: Platform,
    ) -> None:
        self.manifest = manifest
        self.layout = layout
        self.fetcher = fetcher
        self.integrator = integrator
        self.patcher = patcher
        self.platform = platform

    def install(self, name: str, version: str | None = None) -> InstallReport:
        """安装单个依赖，返回执行报告（不抛业务异常）"""
        report = InstallReport(name=name, requested_version=version or None)
        try:
            self._run(name, version, report)
        except TegenError as e:
            self._fail(report, e)
        except OSError as e:
            self._fail(report, WorkspaceError(f"文件操作失败: {e}", cause=e))
        return report

    def _run(self, name: str, version: str | None, report: InstallReport) -> None:
        validate_dependency(name, version)
        manifest = self.manifest.load()

        recorded = manifest.dependencies.get(name)
        if recorded is not None:
            report.already_installed = True
            report.resolved_version = recorded
            logger.info("%s 已安装 (版本 %s)，跳过", name, recorded)
            return

        dep = DependencySpec.resolve(name, version, self.platform.default_branch)
        report.resolved_version = dep.resolved_version
        logger.info("安装依赖: %s (版本 %s)", dep.name, dep.resolved_version)

        paths = self.layout.ensure_directories()
        self._advance(report, InstallState.WORKSPACE_READY, staging=str(paths.staging_dir))

        staged = paths.staging_path(dep.name)
        self.fetcher.fetch(dep.name, dep.resolved_version, staged)
        self._advance(report, InstallState.FETCHED, path=str(staged))

        report.headers = self.integrator.integrate_headers(staged, paths.include_dir)
        self._advance(report, InstallState.HEADERS_INTEGRATED, files=len(report.headers))

        report.libraries = self.integrator.integrate_libraries(staged, paths.lib_dir)
        self._advance(report, InstallState.LIBS_INTEGRATED, files=len(report.libraries))

        report.patched = self.patcher.patch(paths.build_file, dep.name, report.libraries)
        self._advance(report, InstallState.DESCRIPTOR_PATCHED, appended=report.patched)

        # 重新读取，避免覆盖拉取期间其他写入
        manifest = self.manifest.load()
        manifest.dependencies[dep.name] = dep.resolved_version
        self.manifest.save(manifest)
        self._advance(report, InstallState.MANIFEST_SAVED)

        self._cleanup(paths, staged, report)

    def _cleanup(self, paths: WorkspacePaths, staged: Path, report: InstallReport) -> None:
        try:
            warnings = remove_staging(staged, staging_root=paths.staging_dir)
        except OSError as e:
            warnings = [f"清理暂存目录失败: {e}"]
            logger.warning("清理警告: %s", warnings[0])
        if warnings:
            report.warnings.extend(f"[{CLEANUP_WARNING}] {w}" for w in warnings)
            report.steps.append({
                "step": "cleaned_up", "status": "warning", "warnings": len(warnings),
            })
            return
        self._advance(report, InstallState.CLEANED_UP)

    @staticmethod
    def _advance(report: InstallReport, state: InstallState, **detail: object) -> None:
        report.state = state
        report.steps.append({"step": state.value, "status": "done", **detail})
        logger.debug("[%s] %s %s", report.name, state.value, detail or "")

    @staticmethod
    def _fail(report: InstallReport, exc: TegenError) -> None:
        failed_after = report.state
        report.state = InstallState.FAILED
        cause = exc.cause if exc.cause is not None else exc.__cause__
        report.error = StepError(
            kind=exc.code, message=str(exc), cause=repr(cause) if cause else "",
        )
        report.steps.append({
            "step": "failed", "status": "error",
            "after": failed_after.value, "kind": exc.code,
        })
        logger.error("安装 %s 失败 (%s): %s", report.name, exc.code, exc)
