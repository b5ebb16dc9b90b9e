"""Config 单元测试"""

from __future__ import annotations

from pathlib import Path

import pytest

import tegen.core.config as cfgmod
from tegen.core.config import Config, get_config, init_config
from tegen.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _reset_global(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cfgmod, "_current", None)


class TestConfig:
    def test_defaults(self) -> None:
        cfg = Config()
        assert cfg.manifest_file == "TegenConfig.json"
        assert cfg.build_file == "CMakeLists.txt"
        assert cfg.fetch_method == "git"
        assert cfg.repo_base_url == "https://github.com/TegenPackages"

    def test_from_missing_file_returns_defaults(self, tmp_path: Path) -> None:
        cfg = Config.from_file(tmp_path / "tegen.yml")
        assert cfg == Config()

    def test_from_file_with_extra_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "tegen.yml"
        path.write_text("fetch_method: archive\nmax_lib_descent: 3\nmirror: internal\n")
        cfg = Config.from_file(path)
        assert cfg.fetch_method == "archive"
        assert cfg.max_lib_descent == 3
        assert cfg.extra == {"mirror": "internal"}

    def test_invalid_fetch_method(self) -> None:
        with pytest.raises(ConfigError, match="fetch_method"):
            Config(fetch_method="svn")

    def test_negative_descent(self) -> None:
        with pytest.raises(ConfigError, match="max_lib_descent"):
            Config(max_lib_descent=-1)

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "tegen.yml"
        path.write_text("fetch_method: [unclosed\n")
        with pytest.raises(ConfigError, match="格式错误"):
            Config.from_file(path)


class TestGlobalConfig:
    def test_get_config_default(self) -> None:
        assert get_config().staging_dir == "TegenModules"

    def test_init_config_from_project_root(self, tmp_path: Path) -> None:
        (tmp_path / "tegen.yml").write_text("staging_dir: .deps\n")
        cfg = init_config(tmp_path)
        assert cfg.staging_dir == ".deps"
        assert get_config() is cfg
