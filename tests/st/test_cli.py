"""CLI 系统测试 - CliRunner 驱动完整命令"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

import tegen.core.config as cfgmod
from tegen import __version__
from tegen.cli import main
from tegen.services.container import ServiceContainer
from tegen.utils.logger import reset_logging


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setattr(cfgmod, "_current", None)
    monkeypatch.delenv("TEGEN_LOG_LEVEL", raising=False)
    monkeypatch.delenv("TEGEN_LOG_JSON", raising=False)
    yield
    reset_logging()


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


class TestGlobal:
    def test_help_short_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["-h"])
        assert result.exit_code == 0
        for cmd in ("init", "install", "list", "build", "run"):
            assert cmd in result.output

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_unknown_command(self, runner: CliRunner) -> None:
        assert runner.invoke(main, ["frobnicate"]).exit_code != 0


class TestInit:
    def test_defaults(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(main, ["-C", str(tmp_path), "init", "--yes"])
        assert result.exit_code == 0, result.output
        data = json.loads((tmp_path / "TegenConfig.json").read_text())
        assert data == {
            "name": "my-package",
            "version": "1.0.0",
            "author": "Anonymous",
            "license": "MIT",
            "description": "A C++ project",
            "dependencies": {},
        }
        assert (tmp_path / "src" / "main.cpp").is_file()
        assert "project(my-package VERSION 1.0.0)" in (tmp_path / "CMakeLists.txt").read_text()

    def test_prompts(self, runner: CliRunner, tmp_path: Path) -> None:
        answers = "rocket\n2.0.0\nAda\nApache-2.0\nA launcher\n"
        result = runner.invoke(main, ["-C", str(tmp_path), "init"], input=answers)
        assert result.exit_code == 0, result.output
        data = json.loads((tmp_path / "TegenConfig.json").read_text())
        assert data["name"] == "rocket"
        assert data["author"] == "Ada"
        assert data["license"] == "Apache-2.0"

    def test_existing_manifest(self, runner: CliRunner, project: Path) -> None:
        before = (project / "TegenConfig.json").read_text()
        result = runner.invoke(main, ["-C", str(project), "init", "--yes"])
        assert result.exit_code == 0
        assert "已存在" in result.output
        assert (project / "TegenConfig.json").read_text() == before

    def test_verbose_logs_effective_config(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "tegen.yml").write_text("staging_dir: .deps\nmirror: internal\n")
        result = runner.invoke(main, ["-C", str(tmp_path), "-v", "init", "--yes"])
        assert result.exit_code == 0, result.output
        assert "有效配置" in result.output
        assert "'staging_dir': '.deps'" in result.output
        assert "'mirror': 'internal'" in result.output

    def test_bad_config_file(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "tegen.yml").write_text("fetch_method: svn\n")
        result = runner.invoke(main, ["-C", str(tmp_path), "init", "--yes"])
        assert result.exit_code == 1
        assert "加载配置失败" in result.output


class TestInstall:
    def test_success(self, runner: CliRunner, container: ServiceContainer, project: Path) -> None:
        result = runner.invoke(main, ["install", "widgets"], obj=container)
        assert result.exit_code == 0, result.output
        assert "依赖 widgets 安装成功 (版本 linux)" in result.output
        assert json.loads((project / "TegenConfig.json").read_text())["dependencies"] == {
            "widgets": "linux",
        }

    def test_already_installed(self, runner: CliRunner, container: ServiceContainer) -> None:
        runner.invoke(main, ["install", "widgets"], obj=container)
        result = runner.invoke(main, ["install", "widgets"], obj=container)
        assert result.exit_code == 0
        assert "已安装" in result.output

    def test_fetch_failure(
        self, runner: CliRunner, container: ServiceContainer, failing_fetcher,
    ) -> None:
        container.fetcher = failing_fetcher
        result = runner.invoke(main, ["install", "widgets", "v1"], obj=container)
        assert result.exit_code == 1
        assert "[FETCH_ERROR]" in result.output

    def test_missing_manifest(self, runner: CliRunner, container: ServiceContainer, project: Path) -> None:
        (project / "TegenConfig.json").unlink()
        result = runner.invoke(main, ["install", "widgets"], obj=container)
        assert result.exit_code == 1
        assert "tegen init" in result.output


class TestList:
    def test_empty(self, runner: CliRunner, container: ServiceContainer) -> None:
        result = runner.invoke(main, ["list"], obj=container)
        assert result.exit_code == 0
        assert "未安装任何依赖" in result.output

    def test_after_install(self, runner: CliRunner, container: ServiceContainer) -> None:
        runner.invoke(main, ["install", "widgets", "v2"], obj=container)
        result = runner.invoke(main, ["list"], obj=container)
        assert "  - widgets: v2" in result.output


class TestBuildRun:
    def test_build(self, runner: CliRunner, container: ServiceContainer, fake_executor) -> None:
        result = runner.invoke(main, ["build"], obj=container)
        assert result.exit_code == 0, result.output
        assert "构建完成" in result.output
        assert [c[0] for c in fake_executor.commands()] == ["cmake", "cmake"]

    def test_build_failure(self, runner: CliRunner, container: ServiceContainer, fake_executor) -> None:
        fake_executor.fail_when(lambda a: a[0] == "cmake", stderr="CMake Error")
        result = runner.invoke(main, ["build"], obj=container)
        assert result.exit_code == 1
        assert "[EXTERNAL_TOOL_ERROR]" in result.output

    def test_run_passes_arguments(
        self, runner: CliRunner, container: ServiceContainer, project: Path, fake_executor,
    ) -> None:
        exe = project / "build" / "demo"
        exe.parent.mkdir()
        exe.write_text("")
        result = runner.invoke(main, ["run", "--fast", "input.txt"], obj=container)
        assert result.exit_code == 0, result.output
        assert fake_executor.commands()[-1][1:] == ["--fast", "input.txt"]

    def test_run_without_build(self, runner: CliRunner, container: ServiceContainer) -> None:
        result = runner.invoke(main, ["run"], obj=container)
        assert result.exit_code == 1
        assert "tegen build" in result.output
