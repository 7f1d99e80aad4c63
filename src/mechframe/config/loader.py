"""
YAML configuration loader and saver for MechFrame.

This module provides functions to load and save RankingConfig objects
from/to YAML files, with environment variable expansion and resolution
of relative paths against the configuration file's directory.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from mechframe.config.schema import RankingConfig

PATH_KEYS = {"path", "summary", "assignments", "merged_table", "report"}


def _expand_paths(data: Dict[str, Any], base_path: Path) -> Dict[str, Any]:
    """Recursively expand relative paths in configuration data.

    Args:
        data: Configuration dictionary
        base_path: Directory containing the config file

    Returns:
        Configuration with absolute, variable-expanded paths
    """

    def expand_value(key: str, value: Any) -> Any:
        if key in PATH_KEYS and isinstance(value, str):
            path = Path(os.path.expandvars(value)).expanduser()
            if not path.is_absolute():
                path = base_path / path
            return str(path)
        elif isinstance(value, dict):
            return {k: expand_value(k, v) for k, v in value.items()}
        elif isinstance(value, list):
            return [expand_value(key, item) for item in value]
        return value

    return {k: expand_value(k, v) for k, v in data.items()}


def _convert_paths_to_relative(data: Dict[str, Any], base_path: Path) -> Dict[str, Any]:
    """Convert absolute paths to relative paths for saving.

    Args:
        data: Configuration dictionary with absolute paths
        base_path: Directory where config file will be saved

    Returns:
        Configuration with relative paths where possible
    """

    def relativize_value(key: str, value: Any) -> Any:
        if key in PATH_KEYS and isinstance(value, str):
            path = Path(value)
            if path.is_absolute():
                try:
                    return str(path.relative_to(base_path))
                except ValueError:
                    # Not under base_path, keep absolute
                    return value
            return value
        elif isinstance(value, dict):
            return {k: relativize_value(k, v) for k, v in value.items()}
        elif isinstance(value, list):
            return [relativize_value(key, item) for item in value]
        return value

    return {k: relativize_value(k, v) for k, v in data.items()}


def load_config(path: Union[str, Path]) -> RankingConfig:
    """Load a RankingConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file

    Returns:
        Validated RankingConfig instance

    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If the YAML is malformed
        pydantic.ValidationError: If the configuration is invalid

    Example:
        >>> config = load_config("mechframe.yaml")
        >>> config.scoring.combination
        'sum'
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")

    return load_config_dict(data, base_path=path.parent.absolute())


def load_config_dict(
    data: Dict[str, Any], base_path: Union[str, Path, None] = None
) -> RankingConfig:
    """Create a RankingConfig from a dictionary.

    Args:
        data: Configuration dictionary
        base_path: Base path for resolving relative paths (default: cwd)

    Returns:
        Validated RankingConfig instance
    """
    base = Path(base_path) if base_path is not None else Path.cwd()
    return RankingConfig.model_validate(_expand_paths(data, base))


def save_config(
    config: RankingConfig, path: Union[str, Path], relative_paths: bool = True
) -> None:
    """Save a RankingConfig to a YAML file.

    Args:
        config: Configuration to save
        path: Destination path for the YAML file
        relative_paths: Whether to convert paths to relative (default: True)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_none=True)

    if relative_paths:
        data = _convert_paths_to_relative(data, path.parent.absolute())

    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, width=100)
