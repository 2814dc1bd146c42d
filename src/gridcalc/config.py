"""Configuration loading from ``gridcalc.yaml``, with defaults."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from gridcalc.errors import ConfigError
from gridcalc.render import DEFAULT_CELL_WIDTH

CONFIG_FILENAME = "gridcalc.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "cell_width": DEFAULT_CELL_WIDTH,
    "log_dir": None,  # no event logging unless set
    "logging_fsync": False,
    "error_markers": True,
}


def load_config(path: Path | str | None = None) -> dict[str, Any]:
    """Load configuration, merged over ``DEFAULT_CONFIG``.

    Args:
        path: A YAML file, or a directory containing ``gridcalc.yaml``.
            ``None`` or a missing file gives the defaults.

    Returns:
        Merged configuration dict.  Unknown keys are kept.

    Raises:
        ConfigError: If the file is not a YAML mapping or a known key has
            an invalid value.
    """
    config = dict(DEFAULT_CONFIG)
    if path is None:
        return config

    config_path = Path(path)
    if config_path.is_dir():
        config_path = config_path / CONFIG_FILENAME
    if not config_path.exists():
        return config

    try:
        user_config = yaml.safe_load(config_path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    if not isinstance(user_config, dict):
        raise ConfigError(f"{config_path} must contain a mapping, got {type(user_config).__name__}")

    config.update(user_config)
    _validate(config, config_path)
    return config


def _validate(config: dict[str, Any], source: Path) -> None:
    width = config["cell_width"]
    if isinstance(width, bool) or not isinstance(width, int) or width < 1:
        raise ConfigError(f"cell_width must be a positive integer in {source}, got {width!r}")
    for key in ("logging_fsync", "error_markers"):
        if not isinstance(config[key], bool):
            raise ConfigError(f"{key} must be true or false in {source}, got {config[key]!r}")
    log_dir = config["log_dir"]
    if log_dir is not None and not isinstance(log_dir, str):
        raise ConfigError(f"log_dir must be a path string in {source}, got {log_dir!r}")
