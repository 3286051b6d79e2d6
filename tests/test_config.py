"""
Tests for configuration loading — ui-build.yml parsing and validation.
"""

from pathlib import Path

import pytest

from tests.helpers import write
from uibundle.core.config.loader import ConfigError, find_config_file, load_config, sourcemaps_enabled
from uibundle.core.models.config import BuildConfig


class TestDefaults:
    def test_no_config_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config(search=False)
        assert config.root == tmp_path.resolve()
        assert config.dest == (tmp_path / "public" / "_").resolve()
        assert config.build == (tmp_path / "build").resolve()
        assert config.bundle_name == "ui"
        assert config.sourcemap_mode == "external"

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        path = write(tmp_path / "ui-build.yml", "")
        config = load_config(path)
        assert config.src_dir == "src"
        assert config.js_files == ["src/{helpers,js}/**/*.js"]


class TestLoadConfig:
    def test_values_and_root(self, tmp_path: Path):
        path = write(tmp_path / "site-ui" / "ui-build.yml", "bundle_name: docs\nsrc_dir: ui-src\n")
        config = load_config(path)
        assert config.bundle_name == "docs"
        assert config.src == (tmp_path / "site-ui" / "ui-src").resolve()
        assert config.node_modules == (tmp_path / "site-ui" / "node_modules").resolve()

    def test_search_upward(self, tmp_path: Path, monkeypatch):
        write(tmp_path / "ui-build.yml", "bundle_name: found\n")
        nested = tmp_path / "src" / "css"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert find_config_file() == (tmp_path / "ui-build.yml").resolve()
        assert load_config().bundle_name == "found"

    def test_missing_explicit_path(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = write(tmp_path / "ui-build.yml", "css_files: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = write(tmp_path / "ui-build.yml", "- src\n")
        with pytest.raises(ConfigError, match="YAML mapping"):
            load_config(path)

    def test_schema_error(self, tmp_path: Path):
        path = write(tmp_path / "ui-build.yml", "sourcemap_mode: sideways\n")
        with pytest.raises(ConfigError, match="Invalid build configuration"):
            load_config(path)


class TestSourcemapsEnabled:
    def test_off_by_default(self):
        assert sourcemaps_enabled(BuildConfig(), env={}) is False

    def test_env_switch(self):
        assert sourcemaps_enabled(BuildConfig(), env={"SOURCEMAPS": "true"}) is True
        assert sourcemaps_enabled(BuildConfig(), env={"SOURCEMAPS": "1"}) is False

    def test_preview_and_config(self):
        assert sourcemaps_enabled(BuildConfig(), preview=True, env={}) is True
        assert sourcemaps_enabled(BuildConfig(sourcemaps=True), env={}) is True
