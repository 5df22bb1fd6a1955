"""Configuration loading with YAML parsing and validation."""

from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import InsightConfig


def parse_config(yaml_content: str) -> InsightConfig:
    """Validate YAML text as an InsightConfig; an empty document gives the defaults."""
    if not yaml_content.strip():
        return InsightConfig()
    return pydantic_yaml.parse_yaml_raw_as(InsightConfig, yaml_content)


def load_config(config_path: Path | str) -> InsightConfig:
    """
    Load and validate configuration from a YAML file.

    Sections missing from the file fall back to their defaults.

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If config is invalid
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    return parse_config(config_path.read_text())


def _set_dotted(target: dict[str, Any], key: str, value: Any) -> None:
    *sections, leaf = key.split(".")
    for section in sections:
        if not isinstance(target.get(section), dict):
            raise KeyError(f"Unknown config section in override '{key}'")
        target = target[section]
    target[leaf] = value


def load_config_with_overrides(
    config_path: Path | str,
    overrides: dict[str, Any],
) -> InsightConfig:
    """
    Load config from YAML and apply overrides, e.g. from CLI flags.

    Args:
        config_path: Path to YAML configuration file
        overrides: Values to override; dotted keys address nested
            sections (e.g. "fetch.chunk_size")

    Returns:
        InsightConfig re-validated with overrides applied

    Raises:
        KeyError: If a dotted key names a section that does not exist
        pydantic.ValidationError: If an override value is invalid
    """
    config_dict = load_config(config_path).model_dump()
    for key, value in overrides.items():
        _set_dotted(config_dict, key, value)
    return InsightConfig.model_validate(config_dict)
