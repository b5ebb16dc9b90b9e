"""项目服务 - 初始化项目骨架、查询依赖

init 生成清单、src/main.cpp 与 CMakeLists.txt，已存在的文件一律不覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from tegen.core.config import Config
from tegen.core.manifest import ManifestStore
from tegen.core.models import Manifest

logger = logging.getLogger(__name__)

MAIN_CPP = """\
#include <iostream>

int main() {
    std::cout << "Hello, World!" << std::endl;
    return 0;
}
"""


def render_cmakelists(name: str, version: str, include_dir: str = "include") -> str:
    return (
        "cmake_minimum_required(VERSION 3.10)\n"
        f"project({name} VERSION {version})\n"
        "\n"
        "set(CMAKE_CXX_STANDARD 17)\n"
        "\n"
        f"include_directories({include_dir})\n"
        f"add_executable({name} src/main.cpp)\n"
    )


@dataclass
class InitResult:
    """init 执行结果"""

    created: bool
    manifest: Manifest
    files: list[Path] = field(default_factory=list)


class ProjectService:
    """项目初始化与依赖查询"""

    def __init__(self, project_root: Path, config: Config, store: ManifestStore) -> None:
        self.project_root = Path(project_root)
        self.config = config
        self.store = store

    def init(self, manifest: Manifest) -> InitResult:
        """写入清单与 CMake 项目骨架；清单已存在时不做任何改动"""
        if self.store.exists():
            logger.info("清单已存在: %s", self.store.path)
            return InitResult(created=False, manifest=self.store.load())

        manifest.dependencies = {}
        self.store.create(manifest)
        files = [self.store.path]

        (self.project_root / "src").mkdir(parents=True, exist_ok=True)
        (self.project_root / self.config.include_dir).mkdir(parents=True, exist_ok=True)

        scaffold = {
            self.project_root / "src" / "main.cpp": MAIN_CPP,
            self.project_root / self.config.build_file: render_cmakelists(
                manifest.name, manifest.version, self.config.include_dir,
            ),
        }
        for path, content in scaffold.items():
            if path.exists():
                logger.info("  已存在，保留: %s", path)
                continue
            path.write_text(content, encoding="utf-8")
            files.append(path)
            logger.info("  已创建: %s", path)
        return InitResult(created=True, manifest=manifest, files=files)

    def list_dependencies(self) -> dict[str, str]:
        """返回 {依赖名: 版本}，按名称排序"""
        deps = self.store.load().dependencies
        return dict(sorted(deps.items()))
