"""Configuration management for the apicurate CLI tool.

Handles configuration loading from multiple sources with precedence:
CLI args > environment variables > .apicuraterc > pyproject.toml > defaults
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]


@dataclass
class CurateConfig:
    """Configuration for the apicurate CLI tool.

    Attributes:
        specs_dir: Root of the provider[/service]/version tree (default: ".")
        spec_filename: Canonical artifact name (default: "swagger.json")
        patch_filename: Persisted curated patch name (default: "patch.json")
        fixup_filename: Persisted fixup diff name (default: "fixup.json")
        cache_dir: Collection-relative directory for cached logos (default: "cache")
        list_path: Output path of the version-list index
        csv_path: Output path of the tabular export
        apis_json_path: Output path of the directory-aggregation document
        error_exit_code: Exit code used when any document failed (default: 255)
        max_fix_passes: Safety cap on autofix passes per document (default: 100)
        request_timeout: Per-request HTTP timeout in seconds (default: 60)
        converter_command: External dialect converter executable
        collection_name: Name published in the aggregation document
        collection_description: Description published in the aggregation document
        collection_image: Logo URL published in the aggregation document (left
            out when empty)
    """

    specs_dir: str = "."
    spec_filename: str = "swagger.json"
    patch_filename: str = "patch.json"
    fixup_filename: str = "fixup.json"
    cache_dir: str = "cache"
    list_path: str = "api/v1/list.json"
    csv_path: str = "internal_api/list.csv"
    apis_json_path: str = "apis.json"
    error_exit_code: int = 255
    max_fix_passes: int = 100
    request_timeout: float = 60.0
    converter_command: str = "api-spec-converter"
    collection_name: str = "API Collection"
    collection_description: str = "Curated machine-readable API descriptions"
    collection_image: str = ""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        for name in ("specs_dir", "cache_dir", "converter_command"):
            value = getattr(self, name)
            if not value or not isinstance(value, str):
                raise ValueError(f"{name} must be a non-empty string")

        for name in (
            "spec_filename",
            "patch_filename",
            "fixup_filename",
            "list_path",
            "apis_json_path",
        ):
            value = getattr(self, name)
            if not value or not isinstance(value, str):
                raise ValueError(f"{name} must be a non-empty string")
            if not value.endswith(".json"):
                raise ValueError(f"{name} must end with .json")

        if not self.csv_path or not isinstance(self.csv_path, str):
            raise ValueError("csv_path must be a non-empty string")
        if not self.csv_path.endswith(".csv"):
            raise ValueError("csv_path must end with .csv")

        if not isinstance(self.error_exit_code, int) or not 0 <= self.error_exit_code <= 255:
            raise ValueError("error_exit_code must be an integer between 0 and 255")

        if not isinstance(self.max_fix_passes, int) or self.max_fix_passes < 1:
            raise ValueError("max_fix_passes must be a positive integer")

        if not isinstance(self.request_timeout, (int, float)) or self.request_timeout <= 0:
            raise ValueError("request_timeout must be a positive number")

    def get_specs_path(self, base_path: Path | None = None) -> Path:
        """Get the full path to the collection tree.

        Args:
            base_path: Base path to resolve from. Defaults to current directory.

        Returns:
            Path to the directory holding provider folders.
        """
        base = base_path or Path.cwd()
        return base / self.specs_dir


def _get_config_field_names() -> set[str]:
    """Get the set of valid configuration field names.

    Returns:
        Set of field names from CurateConfig.
    """
    return {f.name for f in fields(CurateConfig)}


def find_config_file(filename: str = ".apicuraterc", start_dir: Path | None = None) -> Path | None:
    """Find a configuration file by traversing up the directory tree.

    Searches for the specified file starting from start_dir (or current directory)
    and traversing up to the filesystem root.

    Args:
        filename: Name of the config file to find.
        start_dir: Directory to start searching from. Defaults to current directory.

    Returns:
        Path to the config file if found, None otherwise.
    """
    current = start_dir or Path.cwd()
    current = current.resolve()

    while True:
        config_path = current / filename
        if config_path.is_file():
            return config_path

        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    with open(path, "rb") as f:
        result: dict[str, Any] = tomllib.load(f)
        return result


def _load_from_rcfile(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from .apicuraterc file.

    Args:
        start_dir: Directory to start searching from.

    Returns:
        Dictionary containing configuration from .apicuraterc, or empty dict if not found.
    """
    config_path = find_config_file(".apicuraterc", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
        valid_fields = _get_config_field_names()
        return {k: v for k, v in data.items() if k in valid_fields}
    except (tomllib.TOMLDecodeError, OSError):
        return {}


def _load_from_pyproject(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from pyproject.toml [tool.apicurate] section.

    Args:
        start_dir: Directory to start searching from.

    Returns:
        Dictionary containing configuration from pyproject.toml, or empty dict if not found.
    """
    config_path = find_config_file("pyproject.toml", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
        section = data.get("tool", {}).get("apicurate", {})

        valid_fields = _get_config_field_names()
        return {k: v for k, v in section.items() if k in valid_fields}
    except (tomllib.TOMLDecodeError, OSError):
        return {}


# Environment variable -> (field, converter)
_ENV_MAPPING: dict[str, tuple[str, type]] = {
    "APICURATE_SPECS_DIR": ("specs_dir", str),
    "APICURATE_CACHE_DIR": ("cache_dir", str),
    "APICURATE_ERROR_EXIT_CODE": ("error_exit_code", int),
    "APICURATE_MAX_FIX_PASSES": ("max_fix_passes", int),
    "APICURATE_REQUEST_TIMEOUT": ("request_timeout", float),
    "APICURATE_CONVERTER_COMMAND": ("converter_command", str),
}


def _load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables.

    Environment variables are prefixed with APICURATE_ and use uppercase names.
    For example: APICURATE_SPECS_DIR, APICURATE_ERROR_EXIT_CODE

    Returns:
        Dictionary containing configuration from environment variables.

    Raises:
        ValueError: If a numeric variable cannot be parsed.
    """
    result: dict[str, Any] = {}
    for env_var, (config_key, convert) in _ENV_MAPPING.items():
        value = os.environ.get(env_var)
        if value is None:
            continue
        try:
            result[config_key] = convert(value)
        except ValueError as e:
            raise ValueError(f"{env_var} has an invalid value: {value!r}") from e

    return result


def _merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge multiple configuration dictionaries.

    Later dictionaries take precedence over earlier ones.
    """
    result: dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if value is not None:
                result[key] = value
    return result


def load_config(
    cli_overrides: dict[str, Any] | None = None,
    start_dir: Path | None = None,
) -> CurateConfig:
    """Load configuration with full precedence chain.

    Loads configuration from multiple sources and merges them with the following
    precedence (highest to lowest):
    1. CLI arguments (cli_overrides)
    2. Environment variables (APICURATE_*)
    3. .apicuraterc file
    4. pyproject.toml [tool.apicurate] section
    5. Default values

    Args:
        cli_overrides: Configuration overrides from CLI arguments.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved CurateConfig instance.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    pyproject_config = _load_from_pyproject(start_dir)
    rc_config = _load_from_rcfile(start_dir)
    env_config = _load_from_env()
    cli_config = cli_overrides or {}

    valid_fields = _get_config_field_names()
    cli_config = {k: v for k, v in cli_config.items() if k in valid_fields and v is not None}

    merged = _merge_configs(
        pyproject_config,
        rc_config,
        env_config,
        cli_config,
    )

    return CurateConfig(**merged)
