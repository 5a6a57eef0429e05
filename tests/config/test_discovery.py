"""Tests for config discovery and table reading."""

from pathlib import Path

import pytest

from fieldbind.config.discovery import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    PYPROJECT_FILENAME,
    find_config,
    read_config_table,
)
from fieldbind.errors import ConfigError


class TestFindConfig:
    def test_finds_in_current_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[apply]\natomic = true\n")
        assert find_config(tmp_path) == config_file

    def test_walks_up(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert find_config(child) == config_file

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        child = tmp_path / "empty"
        child.mkdir()
        assert find_config(child) is None

    def test_pyproject_with_tool_table(self, tmp_path: Path) -> None:
        pyproject = tmp_path / PYPROJECT_FILENAME
        pyproject.write_text('[project]\nname = "app"\n[tool.fieldbind.apply]\natomic = true\n')
        child = tmp_path / "src"
        child.mkdir()
        assert find_config(child) == pyproject

    def test_pyproject_without_table_is_skipped(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        project = tmp_path / "project"
        project.mkdir()
        (project / PYPROJECT_FILENAME).write_text('[project]\nname = "app"\n')
        assert find_config(project) == tmp_path / CONFIG_FILENAME

    def test_invalid_pyproject_is_skipped(self, tmp_path: Path) -> None:
        (tmp_path / PYPROJECT_FILENAME).write_text("[tool.fieldbind\n")
        assert find_config(tmp_path) is None

    def test_dedicated_file_wins_in_same_dir(self, tmp_path: Path) -> None:
        (tmp_path / PYPROJECT_FILENAME).write_text("[tool.fieldbind]\nverbose = true\n")
        (tmp_path / CONFIG_FILENAME).write_text("")
        assert find_config(tmp_path) == tmp_path / CONFIG_FILENAME

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("")
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
        assert find_config(tmp_path) == config_file

    def test_env_var_to_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.toml"))
        assert find_config(tmp_path) is None


class TestReadConfigTable:
    def test_dedicated_file_is_the_table(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("verbose = true\n[convert]\nlegacy_numeric = true\n")
        assert read_config_table(path) == {"verbose": True, "convert": {"legacy_numeric": True}}

    def test_pyproject_tool_table(self, tmp_path: Path) -> None:
        path = tmp_path / PYPROJECT_FILENAME
        path.write_text('[project]\nname = "app"\n[tool.fieldbind.plugins]\nenabled = false\n')
        assert read_config_table(path) == {"plugins": {"enabled": False}}

    def test_pyproject_without_table_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / PYPROJECT_FILENAME
        path.write_text('[tool.other]\nx = 1\n')
        assert read_config_table(path) == {}

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("[convert\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            read_config_table(path)
