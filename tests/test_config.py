"""Tests for configuration loading and validation."""

import dataclasses
import os
from pathlib import Path

import pytest

from coverage_treemap.config import DEFAULT_THRESHOLDS, LayoutThresholds, TreemapConfig, load_config
from coverage_treemap.exceptions import ConfigurationError, InvalidConfigError, InvalidPathError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Keep user and project config files out of every test."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for key in list(os.environ):
        if key.startswith("COVERAGE_TREEMAP_"):
            monkeypatch.delenv(key)
    return work


class TestLayoutThresholds:
    """Test layout guard values."""

    def test_defaults(self):
        assert DEFAULT_THRESHOLDS.min_area == 0.1
        assert DEFAULT_THRESHOLDS.min_thickness == 0.1
        assert DEFAULT_THRESHOLDS.fit_tolerance == 0.01
        assert DEFAULT_THRESHOLDS.min_dimension == 0.1

    @pytest.mark.parametrize("size,share", [(2, 0.10), (4, 0.10), (5, 0.05), (40, 0.05)])
    def test_min_share(self, size, share):
        assert DEFAULT_THRESHOLDS.min_share(size) == share

    @pytest.mark.parametrize(
        "kwargs",
        [{"min_area": -1}, {"small_row_share": 0.6}, {"large_row_share": 0.5}, {"small_row_limit": 1}],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            LayoutThresholds(**kwargs)


class TestTreemapConfig:
    """Test the config dataclass."""

    def test_defaults(self):
        config = TreemapConfig()
        assert config.source_directories == ["src"]
        assert config.default_namespace == "root"
        assert config.zero_weight == 0.5
        assert config.layout == DEFAULT_THRESHOLDS

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            TreemapConfig().zero_weight = 1.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"source_directories": []},
            {"default_namespace": ""},
            {"default_namespace": "a/b"},
            {"zero_weight": 0},
            {"nested_padding": -1},
            {"verbosity": "loud"},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            TreemapConfig(**kwargs)

    def test_root_path(self, isolated):
        assert TreemapConfig().root_path == isolated.resolve()
        assert TreemapConfig(project_root="/repo").root_path == Path("/repo").resolve()


class TestLoadConfig:
    """Test merging config sources."""

    def test_defaults(self):
        assert load_config() == TreemapConfig()

    def test_project_file(self, isolated):
        (isolated / "coverage-treemap.toml").write_text(
            'default_namespace = "main"\nsource_directories = ["lib"]\n\n[layout]\nmin_area = 0.5\n'
        )
        config = load_config()
        assert config.default_namespace == "main"
        assert config.source_directories == ["lib"]
        assert config.layout.min_area == 0.5

    def test_global_file_overridden_by_project_file(self, tmp_path, isolated):
        (tmp_path / "home" / ".coverage-treemap.toml").write_text('default_namespace = "global"\nzero_weight = 2.0\n')
        (isolated / "coverage-treemap.toml").write_text('default_namespace = "project"\n')
        config = load_config()
        assert config.default_namespace == "project"
        assert config.zero_weight == 2.0

    def test_tool_section(self, tmp_path):
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n\n[tool.coverage-treemap]\nnested_padding = 5.0\n')
        assert load_config(config_file=path).nested_padding == 5.0

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("COVERAGE_TREEMAP_SOURCE_DIRECTORIES", "src, lib")
        monkeypatch.setenv("COVERAGE_TREEMAP_ZERO_WEIGHT", "1.5")
        monkeypatch.setenv("COVERAGE_TREEMAP_DEFAULT_DEPTH", "2")
        config = load_config()
        assert config.source_directories == ["src", "lib"]
        assert config.zero_weight == 1.5
        assert config.default_depth == 2

    def test_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("COVERAGE_TREEMAP_DEFAULT_NAMESPACE", "fromenv")
        assert load_config(default_namespace="flag").default_namespace == "flag"

    def test_none_overrides_ignored(self, monkeypatch):
        monkeypatch.setenv("COVERAGE_TREEMAP_DEFAULT_NAMESPACE", "fromenv")
        assert load_config(default_namespace=None).default_namespace == "fromenv"

    def test_verbose_flag(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False).verbosity == "normal"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(config_file=tmp_path / "missing.toml")

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("this is = = not toml")
        with pytest.raises(ConfigurationError):
            load_config(config_file=path)

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text("colour = 'blue'\n")
        with pytest.raises(ConfigurationError):
            load_config(config_file=path)

    def test_invalid_value(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config(zero_weight=-1.0)
        assert "zero_weight" in exc_info.value.reason

    def test_invalid_layout_value(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text("[layout]\nmin_area = -3\n")
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config(config_file=path)
        assert exc_info.value.key == "layout"

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("COVERAGE_TREEMAP_DEFAULT_DEPTH", "deep")
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config()
        assert exc_info.value.key == "COVERAGE_TREEMAP_DEFAULT_DEPTH"

    def test_project_root_must_be_directory(self, tmp_path):
        not_a_dir = tmp_path / "file.txt"
        not_a_dir.write_text("")
        with pytest.raises(InvalidPathError) as exc_info:
            load_config(project_root=str(not_a_dir))
        assert exc_info.value.reason == "project root must be a directory"
