"""测试共享 fixture - 假执行器、本地源码拉取器、示例项目

  sources/                project/
  ┌──────────────────┐    ┌──────────────────────┐
  │ widgets/         │    │ TegenConfig.json     │
  │   include/...    │───>│ CMakeLists.txt       │
  │   lib/linux/...  │    │ (install 后)         │
  └──────────────────┘    │ include/ lib/        │
   LocalTreeFetcher       └──────────────────────┘

外部命令通过 FakeExecutor 注入，拉取通过 LocalTreeFetcher 从本地目录复制，
测试不访问网络、不依赖 git/cmake。
"""

from __future__ import annotations

import json
import shutil
from collections.abc import Callable
from pathlib import Path

import pytest

from tegen.core.config import Config
from tegen.core.exceptions import FetchError
from tegen.core.platform import Platform
from tegen.services.container import ServiceContainer
from tegen.utils.shell import CommandResult

CMAKELISTS = (
    "cmake_minimum_required(VERSION 3.10)\n"
    "project(demo VERSION 1.0.0)\n"
    "add_executable(demo src/main.cpp)\n"
)


class FakeExecutor:
    """记录调用的假命令执行器，按规则返回结果"""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], str]] = []
        self.rules: list[tuple[Callable[[list[str]], bool], CommandResult]] = []
        self.side_effects: list[tuple[Callable[[list[str]], bool], Callable[[list[str], Path], None]]] = []

    def fail_when(self, predicate: Callable[[list[str]], bool], rc: int = 1, stderr: str = "boom") -> None:
        self.rules.append((predicate, CommandResult(returncode=rc, stdout="", stderr=stderr)))

    def on(self, predicate: Callable[[list[str]], bool], action: Callable[[list[str], Path], None]) -> None:
        self.side_effects.append((predicate, action))

    def execute(self, args, *, cwd=".", env=None, capture=True) -> CommandResult:  # noqa: ANN001
        self.calls.append((list(args), str(cwd)))
        for predicate, result in self.rules:
            if predicate(list(args)):
                return result
        for predicate, action in self.side_effects:
            if predicate(list(args)):
                action(list(args), Path(cwd))
        return CommandResult(returncode=0, stdout="", stderr="")

    def commands(self) -> list[list[str]]:
        return [c for c, _ in self.calls]


class LocalTreeFetcher:
    """从本地 sources/<name> 复制的拉取器，已存在时覆盖更新"""

    def __init__(self, sources: Path) -> None:
        self.sources = sources
        self.calls: list[tuple[str, str, Path]] = []

    def fetch(self, name: str, version: str, destination: Path) -> None:
        self.calls.append((name, version, destination))
        src = self.sources / name
        if not src.is_dir():
            raise FetchError(f"仓库不存在: {name}")
        shutil.copytree(src, destination, dirs_exist_ok=True)


class FailingFetcher:
    """模拟网络错误"""

    def __init__(self) -> None:
        self.calls = 0

    def fetch(self, name: str, version: str, destination: Path) -> None:
        self.calls += 1
        raise FetchError(f"下载失败: {name}@{version}", cause=ConnectionError("network unreachable"))


def write_widgets_source(root: Path) -> Path:
    """生成一个典型依赖源码树: 头文件 + 嵌套的静态库输出目录"""
    src = root / "widgets"
    (src / "include" / "widgets" / "detail").mkdir(parents=True)
    (src / "include" / "widgets" / "core.h").write_text("#pragma once\nint widgets_core();\n")
    (src / "include" / "widgets" / "detail" / "impl.h").write_text("#pragma once\n")
    release = src / "lib" / "linux" / "Release"
    (release / "extra").mkdir(parents=True)
    (release / "libwidgets.a").write_bytes(b"!<arch>\nwidgets")
    (release / "extra" / "libwidgets_extra.a").write_bytes(b"!<arch>\nextra")
    (release / "widgets.lib").write_bytes(b"msvc")
    (release / "notes.txt").write_text("not a library")
    (src / "src").mkdir()
    (src / "src" / "core.cpp").write_text("int widgets_core() { return 1; }\n")
    return src


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture()
def sources(tmp_path: Path) -> Path:
    root = tmp_path / "sources"
    root.mkdir()
    write_widgets_source(root)
    return root


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """已 init 的示例项目"""
    root = tmp_path / "project"
    root.mkdir()
    (root / "TegenConfig.json").write_text(
        json.dumps({"name": "demo", "dependencies": {}}, indent=4),
    )
    (root / "CMakeLists.txt").write_text(CMAKELISTS)
    return root


@pytest.fixture()
def local_fetcher(sources: Path) -> LocalTreeFetcher:
    return LocalTreeFetcher(sources)


@pytest.fixture()
def container(project: Path, local_fetcher: LocalTreeFetcher, fake_executor: FakeExecutor) -> ServiceContainer:
    c = ServiceContainer(
        project, config=Config(), platform=Platform.LINUX, executor=fake_executor,
    )
    c.fetcher = local_fetcher
    return c


@pytest.fixture()
def failing_fetcher() -> FailingFetcher:
    return FailingFetcher()


@pytest.fixture()
def snapshot() -> Callable[[Path], dict[str, bytes]]:
    """目录树快照 {相对路径: 内容}，用于比较前后状态"""

    def _snap(root: Path) -> dict[str, bytes]:
        return {
            p.relative_to(root).as_posix(): p.read_bytes()
            for p in sorted(root.rglob("*")) if p.is_file()
        }

    return _snap
