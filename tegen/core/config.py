"""集中配置管理

替代各模块散落的默认路径常量，提供统一的配置入口。
支持从项目根目录的 tegen.yml 加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

import yaml

from tegen.core.exceptions import ConfigError
from tegen.utils.file_io import load_yaml

logger = logging.getLogger(__name__)

CONFIG_FILE = "tegen.yml"
FETCH_METHODS = ("git", "archive")


@dataclass
class Config:
    """工具全局配置，路径均相对于项目根目录"""

    # 项目文件
    manifest_file: str = "TegenConfig.json"
    build_file: str = "CMakeLists.txt"
    build_dir: str = "build"

    # 目录
    staging_dir: str = "TegenModules"
    include_dir: str = "include"
    lib_dir: str = "lib"

    # 拉取
    repo_base_url: str = "https://github.com/TegenPackages"
    fetch_method: str = "git"
    max_lib_descent: int = 8

    # 外部工具
    git: str = "git"
    cmake: str = "cmake"

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.fetch_method not in FETCH_METHODS:
            raise ConfigError(
                f"不支持的 fetch_method '{self.fetch_method}'，"
                f"可选: {', '.join(FETCH_METHODS)}"
            )
        if not isinstance(self.max_lib_descent, int) or self.max_lib_descent < 0:
            raise ConfigError(
                f"max_lib_descent 必须为非负整数: {self.max_lib_descent!r}"
            )

    @classmethod
    def from_file(cls, path: str | Path = CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except yaml.YAMLError as e:
            raise ConfigError(f"配置文件格式错误: {path}: {e}", cause=e) from e
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(project_root: str | Path) -> Config:
    """从项目根目录的 tegen.yml 初始化全局配置"""
    global _current  # noqa: PLW0603
    path = Path(project_root) / CONFIG_FILE
    _current = Config.from_file(path)
    if path.exists():
        logger.info("配置已加载: %s", path)
    return _current
