"""核心数据模型

清单、依赖描述、工作空间路径、安装状态与安装报告集中定义，
各组件统一从此处导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# =========================================================================
# 清单
# =========================================================================

MANIFEST_DEFAULTS: dict[str, str] = {
    "name": "my-package",
    "version": "1.0.0",
    "author": "Anonymous",
    "license": "MIT",
    "description": "A C++ project",
}


@dataclass
class Manifest:
    """项目清单 TegenConfig.json"""

    name: str = MANIFEST_DEFAULTS["name"]
    version: str = MANIFEST_DEFAULTS["version"]
    author: str = MANIFEST_DEFAULTS["author"]
    license: str = MANIFEST_DEFAULTS["license"]
    description: str = MANIFEST_DEFAULTS["description"]
    dependencies: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)  # 未识别的键，保存时原样写回

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Manifest:
        deps = data.get("dependencies") or {}
        known = {"name", "version", "author", "license", "description", "dependencies"}
        return cls(
            name=str(data.get("name", MANIFEST_DEFAULTS["name"])),
            version=str(data.get("version", MANIFEST_DEFAULTS["version"])),
            author=str(data.get("author", MANIFEST_DEFAULTS["author"])),
            license=str(data.get("license", MANIFEST_DEFAULTS["license"])),
            description=str(data.get("description", MANIFEST_DEFAULTS["description"])),
            dependencies={str(k): str(v) for k, v in deps.items()},
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "author": self.author,
            "license": self.license,
            "description": self.description,
            "dependencies": dict(self.dependencies),
        }
        data.update(self.extra)
        return data


# =========================================================================
# 依赖描述
# =========================================================================


@dataclass(frozen=True)
class DependencySpec:
    """单次 install 的依赖描述，resolved_version 永不为空"""

    name: str
    requested_version: str | None
    resolved_version: str

    @classmethod
    def resolve(cls, name: str, requested: str | None, default_branch: str) -> DependencySpec:
        """未指定版本时回退到平台默认分支，否则原样使用请求的版本"""
        resolved = requested if requested else default_branch
        if not resolved:
            raise ValueError(f"无法解析 {name} 的版本")
        return cls(name=name, requested_version=requested or None, resolved_version=resolved)


# =========================================================================
# 工作空间
# =========================================================================


@dataclass(frozen=True)
class WorkspacePaths:
    """install 使用的磁盘位置"""

    project_root: Path
    staging_dir: Path
    include_dir: Path
    lib_dir: Path
    build_file: Path

    def staging_path(self, name: str) -> Path:
        """依赖源码的暂存目录"""
        return self.staging_dir / name


# =========================================================================
# 安装状态机与报告
# =========================================================================


class InstallState(str, Enum):
    NOT_STARTED = "not_started"
    WORKSPACE_READY = "workspace_ready"
    FETCHED = "fetched"
    HEADERS_INTEGRATED = "headers_integrated"
    LIBS_INTEGRATED = "libs_integrated"
    DESCRIPTOR_PATCHED = "descriptor_patched"
    MANIFEST_SAVED = "manifest_saved"
    CLEANED_UP = "cleaned_up"
    FAILED = "failed"


@dataclass(frozen=True)
class StepError:
    """流水线失败的错误值 {kind, cause}"""

    kind: str
    message: str
    cause: str = ""

    def __str__(self) -> str:
        return f"[{self.kind}] {self.message}"


@dataclass
class InstallReport:
    """install 执行报告"""

    name: str
    requested_version: str | None = None
    resolved_version: str = ""
    state: InstallState = InstallState.NOT_STARTED
    already_installed: bool = False
    error: StepError | None = None
    warnings: list[str] = field(default_factory=list)
    headers: list[Path] = field(default_factory=list)
    libraries: list[Path] = field(default_factory=list)
    patched: bool = False
    steps: list[dict[str, Any]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        if self.already_installed:
            return True
        return self.state in (InstallState.MANIFEST_SAVED, InstallState.CLEANED_UP)
