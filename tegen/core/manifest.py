"""项目清单存储

职责:
- 读取 / 原子写入 TegenConfig.json
- 查询依赖是否已记录

save() 是唯一的写入入口，安装流水线只在集成全部完成后调用。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from tegen.core.exceptions import ConfigError, ManifestMissingError
from tegen.core.models import Manifest
from tegen.utils.file_io import load_json, save_json

logger = logging.getLogger(__name__)


class ManifestStore:
    """项目清单存储 - 每次操作都从磁盘读取，不保留内存态"""

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Manifest:
        """读取清单，文件不存在时抛 ManifestMissingError"""
        if not self.exists():
            raise ManifestMissingError(
                f"未找到 {self.path.name}（{self.path.parent}），请先执行 'tegen init'"
            )
        try:
            data = load_json(self.path)
        except json.JSONDecodeError as e:
            raise ConfigError(f"清单格式错误: {self.path}: {e}", cause=e) from e
        except UnicodeDecodeError as e:
            raise ConfigError(f"清单不是 UTF-8 编码: {self.path}: {e}", cause=e) from e
        except ValueError as e:
            # 文件大小超限
            raise ConfigError(f"无法读取清单: {e}", cause=e) from e
        if not isinstance(data, dict):
            raise ConfigError(f"清单顶层必须是 JSON 对象: {self.path}")
        deps = data.get("dependencies")
        if deps is not None and not isinstance(deps, dict):
            raise ConfigError(f"清单 dependencies 必须是对象: {self.path}")
        return Manifest.from_dict(data)

    def save(self, manifest: Manifest) -> None:
        """原子覆盖写入（临时文件 + rename），失败时旧清单保持完整"""
        save_json(self.path, manifest.to_dict())
        logger.debug("清单已保存: %s (%d 个依赖)", self.path, len(manifest.dependencies))

    def create(self, manifest: Manifest) -> bool:
        """新建清单，已存在则不覆盖并返回 False"""
        if self.exists():
            return False
        self.save(manifest)
        logger.info("已创建清单: %s", self.path)
        return True

    def contains(self, name: str) -> bool:
        return name in self.load().dependencies
