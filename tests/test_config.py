"""Tests for apicurate configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from apicurate.config import CurateConfig, find_config_file, load_config

_ENV_VARS = [
    "APICURATE_SPECS_DIR",
    "APICURATE_CACHE_DIR",
    "APICURATE_ERROR_EXIT_CODE",
    "APICURATE_MAX_FIX_PASSES",
    "APICURATE_REQUEST_TIMEOUT",
    "APICURATE_CONVERTER_COMMAND",
]


@pytest.fixture
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove APICURATE_* variables for the duration of a test."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestCurateConfig:
    """Tests for the CurateConfig dataclass."""

    def test_default_values(self) -> None:
        """Test that default values are set correctly."""
        config = CurateConfig()
        assert config.specs_dir == "."
        assert config.spec_filename == "swagger.json"
        assert config.patch_filename == "patch.json"
        assert config.fixup_filename == "fixup.json"
        assert config.error_exit_code == 255
        assert config.max_fix_passes == 100

    def test_custom_values(self) -> None:
        """Test that custom values can be set."""
        config = CurateConfig(specs_dir="APIs", error_exit_code=1, max_fix_passes=5)
        assert config.specs_dir == "APIs"
        assert config.error_exit_code == 1
        assert config.max_fix_passes == 5

    def test_validation_empty_specs_dir(self) -> None:
        """Test that empty specs_dir raises ValueError."""
        with pytest.raises(ValueError, match="specs_dir must be a non-empty string"):
            CurateConfig(specs_dir="")

    def test_validation_json_artifact_extension(self) -> None:
        """Test that JSON artifact names must end with .json."""
        with pytest.raises(ValueError, match="patch_filename must end with .json"):
            CurateConfig(patch_filename="patch.yaml")

    def test_validation_csv_extension(self) -> None:
        """Test that csv_path must end with .csv."""
        with pytest.raises(ValueError, match="csv_path must end with .csv"):
            CurateConfig(csv_path="list.txt")

    @pytest.mark.parametrize("code", [-1, 256])
    def test_validation_exit_code_range(self, code: int) -> None:
        """Test that the exit code must be a valid process status."""
        with pytest.raises(ValueError, match="error_exit_code"):
            CurateConfig(error_exit_code=code)

    def test_validation_max_fix_passes(self) -> None:
        """Test that at least one fix pass is allowed."""
        with pytest.raises(ValueError, match="max_fix_passes must be a positive integer"):
            CurateConfig(max_fix_passes=0)

    def test_validation_request_timeout(self) -> None:
        """Test that the timeout must be positive."""
        with pytest.raises(ValueError, match="request_timeout must be a positive number"):
            CurateConfig(request_timeout=0)

    def test_get_specs_path(self, tmp_path: Path) -> None:
        """Test get_specs_path returns correct path."""
        config = CurateConfig(specs_dir="APIs")
        assert config.get_specs_path(tmp_path) == tmp_path / "APIs"

    def test_get_specs_path_default(self) -> None:
        """Test get_specs_path uses cwd when no base_path provided."""
        assert CurateConfig(specs_dir="APIs").get_specs_path() == Path.cwd() / "APIs"


class TestFindConfigFile:
    """Tests for find_config_file function."""

    def test_find_in_current_dir(self, tmp_path: Path) -> None:
        """Test finding config file in current directory."""
        config_file = tmp_path / ".apicuraterc"
        config_file.write_text("specs_dir = 'APIs'\n")

        assert find_config_file(".apicuraterc", tmp_path) == config_file

    def test_find_in_grandparent_dir(self, tmp_path: Path) -> None:
        """Test finding config file in grandparent directory."""
        config_file = tmp_path / ".apicuraterc"
        config_file.write_text("")

        nested_dir = tmp_path / "a" / "b"
        nested_dir.mkdir(parents=True)

        assert find_config_file(".apicuraterc", nested_dir) == config_file

    def test_not_found(self, tmp_path: Path) -> None:
        """Test returning None when config file not found."""
        assert find_config_file(".apicuraterc", tmp_path) is None


class TestLoadConfig:
    """Tests for load_config sources."""

    def test_load_rcfile(self, tmp_path: Path, _clean_env: None) -> None:
        """Test loading values from .apicuraterc."""
        (tmp_path / ".apicuraterc").write_text(
            'specs_dir = "APIs"\n'
            "max_fix_passes = 10\n"
            'unknown_field = "ignored"\n'
        )

        config = load_config(start_dir=tmp_path)
        assert config.specs_dir == "APIs"
        assert config.max_fix_passes == 10
        # Defaults are used for other values
        assert config.error_exit_code == 255

    def test_load_pyproject_section(self, tmp_path: Path, _clean_env: None) -> None:
        """Test loading from the [tool.apicurate] section."""
        (tmp_path / "pyproject.toml").write_text(
            "[project]\n"
            'name = "collection"\n'
            "\n"
            "[tool.apicurate]\n"
            'collection_name = "My APIs"\n'
        )

        assert load_config(start_dir=tmp_path).collection_name == "My APIs"

    def test_invalid_toml_ignored(self, tmp_path: Path, _clean_env: None) -> None:
        """Test that a broken rc file falls back to defaults."""
        (tmp_path / ".apicuraterc").write_text("specs_dir = \n")
        assert load_config(start_dir=tmp_path).specs_dir == "."

    def test_load_from_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, _clean_env: None
    ) -> None:
        """Test loading and converting environment variables."""
        monkeypatch.setenv("APICURATE_SPECS_DIR", "env-apis")
        monkeypatch.setenv("APICURATE_ERROR_EXIT_CODE", "3")
        monkeypatch.setenv("APICURATE_REQUEST_TIMEOUT", "2.5")

        config = load_config(start_dir=tmp_path)
        assert config.specs_dir == "env-apis"
        assert config.error_exit_code == 3
        assert config.request_timeout == 2.5

    def test_invalid_env_value(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, _clean_env: None
    ) -> None:
        """Test that a non-numeric value for a numeric variable fails."""
        monkeypatch.setenv("APICURATE_MAX_FIX_PASSES", "many")
        with pytest.raises(ValueError, match="APICURATE_MAX_FIX_PASSES"):
            load_config(start_dir=tmp_path)


class TestConfigPrecedence:
    """Tests for configuration precedence."""

    def _write_files(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[tool.apicurate]\nspecs_dir = "pyproject"\n')
        (tmp_path / ".apicuraterc").write_text('specs_dir = "rcfile"\n')

    def test_cli_overrides_all(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, _clean_env: None
    ) -> None:
        """Test that CLI arguments override all other sources."""
        self._write_files(tmp_path)
        monkeypatch.setenv("APICURATE_SPECS_DIR", "env")

        config = load_config(cli_overrides={"specs_dir": "cli"}, start_dir=tmp_path)
        assert config.specs_dir == "cli"

    def test_env_overrides_files(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, _clean_env: None
    ) -> None:
        """Test that environment variables override file configs."""
        self._write_files(tmp_path)
        monkeypatch.setenv("APICURATE_SPECS_DIR", "env")

        assert load_config(start_dir=tmp_path).specs_dir == "env"

    def test_rcfile_overrides_pyproject(self, tmp_path: Path, _clean_env: None) -> None:
        """Test that .apicuraterc overrides pyproject.toml."""
        self._write_files(tmp_path)
        assert load_config(start_dir=tmp_path).specs_dir == "rcfile"

    def test_none_cli_values_ignored(self, tmp_path: Path, _clean_env: None) -> None:
        """Test that unset CLI options do not override files."""
        self._write_files(tmp_path)
        config = load_config(cli_overrides={"specs_dir": None}, start_dir=tmp_path)
        assert config.specs_dir == "rcfile"
