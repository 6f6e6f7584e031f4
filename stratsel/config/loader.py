"""YAML configuration loading."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import yaml

from ..utils import atomic_write_text
from .schema import Config

DEFAULT_CONFIG_PATH = Path(__file__).with_name("defaults.yaml")


def load_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """Load and validate a configuration.

    Args:
        config_path: YAML file; the packaged ``defaults.yaml`` when None

    Returns:
        Validated configuration

    Raises:
        FileNotFoundError: If ``config_path`` does not exist
        ValueError: If the file is not valid YAML, holds unknown or
            mistyped settings, or fails validation
    """
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return Config()
        path = DEFAULT_CONFIG_PATH
    else:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")

    try:
        config = Config.from_dict(data)
        config.validate()
    except TypeError as e:
        raise ValueError(f"{path}: {e}") from e

    return config


def save_config(config: Config, config_path: Union[str, Path]) -> None:
    """Write ``config`` as YAML, replacing the file atomically."""
    payload = yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False, indent=2)
    atomic_write_text(Path(config_path).expanduser(), payload)
