"""宿主平台枚举

启动时解析一次，显式注入到 Fetcher（默认分支）和 Patcher（系统库、可执行后缀），
避免各模块散落 sys.platform 判断。
"""

from __future__ import annotations

import sys
from enum import Enum


class Platform(str, Enum):
    """宿主操作系统家族"""

    LINUX = "linux"
    WINDOWS = "windows"
    MACOS = "macos"

    @classmethod
    def detect(cls, sys_platform: str | None = None) -> Platform:
        """根据 sys.platform 解析平台，未知的类 Unix 系统按 Linux 处理"""
        value = sys_platform if sys_platform is not None else sys.platform
        if value.startswith(("win32", "cygwin", "msys")):
            return cls.WINDOWS
        if value.startswith("darwin"):
            return cls.MACOS
        return cls.LINUX

    @property
    def default_branch(self) -> str:
        """未指定版本时使用的默认分支名"""
        return _DEFAULT_BRANCHES[self]

    @property
    def static_lib_extensions(self) -> frozenset[str]:
        return _STATIC_LIB_EXTS[self]

    @property
    def system_libraries(self) -> tuple[str, ...]:
        """每个依赖补丁块都需附加链接的系统库"""
        return _SYSTEM_LIBS[self]

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self is Platform.WINDOWS else ""


_DEFAULT_BRANCHES = {
    Platform.LINUX: "linux",
    Platform.WINDOWS: "windows",
    Platform.MACOS: "macos",
}

_STATIC_LIB_EXTS = {
    Platform.LINUX: frozenset({".a"}),
    Platform.WINDOWS: frozenset({".lib", ".a"}),
    Platform.MACOS: frozenset({".a"}),
}

_SYSTEM_LIBS: dict[Platform, tuple[str, ...]] = {
    Platform.LINUX: (),
    Platform.WINDOWS: ("ws2_32", "wsock32"),
    Platform.MACOS: (),
}
