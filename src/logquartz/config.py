"""Configuration loader with YAML and environment variable support.

Reads ``~/.config/logquartz/config.yaml`` and lets ``LOGQUARTZ_*``
environment variables and command-line options override it, in that order.

Environment variables:
- LOGQUARTZ_GRAPH_PATH: Override graph_path
- LOGQUARTZ_OUTPUT_DIR: Override output_dir
- LOGQUARTZ_INCLUDE_PRIVATE: Override include_private ("true"/"false")
- LOGQUARTZ_CREATE_STUBS: Override create_stubs ("true"/"false")
- LOGQUARTZ_WORKERS: Override workers
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from logquartz.models.config import PublishConfig
from logquartz.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "logquartz" / "config.yaml"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def load_config(config_path: Optional[Path] = None, **overrides: Any) -> PublishConfig:
    """Load configuration from YAML file with environment and CLI overrides.

    Args:
        config_path: Path to config file. If None, uses ~/.config/logquartz/config.yaml
        **overrides: Field values from the command line; None means "not given"

    Returns:
        Validated PublishConfig object

    Raises:
        FileNotFoundError: If no graph path is configured anywhere, or an
            explicitly given config file doesn't exist
        ValueError: If the config file or a value is invalid
    """
    explicit = config_path is not None
    config_path = config_path or DEFAULT_CONFIG_PATH

    if config_path.exists():
        logger.info("config_loading", path=str(config_path))
        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {config_path} must be a mapping")
    elif explicit:
        raise FileNotFoundError(f"Configuration file not found at {config_path}")
    else:
        # No config file is fine; env vars and options fill it in
        data = {}

    data = _apply_env_overrides(data)
    data.update({key: value for key, value in overrides.items() if value is not None})

    if not data.get("graph_path"):
        raise FileNotFoundError(
            f"No graph path configured. Pass --input, set LOGQUARTZ_GRAPH_PATH, "
            f"or add graph_path to {config_path}"
        )

    try:
        config = PublishConfig(**data)
    except ValidationError as e:
        logger.error("config_validation_error", error=str(e))
        raise ValueError(f"Configuration validation failed:\n{e}") from e

    logger.info("config_loaded", graph_path=str(config.graph_path), workers=config.workers)
    return config


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply LOGQUARTZ_* environment variable overrides to configuration data.

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied

    Raises:
        ValueError: If a boolean or integer variable can't be parsed
    """
    data = dict(data)

    if env_graph_path := os.getenv("LOGQUARTZ_GRAPH_PATH"):
        data["graph_path"] = env_graph_path

    if env_output_dir := os.getenv("LOGQUARTZ_OUTPUT_DIR"):
        data["output_dir"] = env_output_dir

    if env_private := os.getenv("LOGQUARTZ_INCLUDE_PRIVATE"):
        data["include_private"] = _parse_bool("LOGQUARTZ_INCLUDE_PRIVATE", env_private)

    if env_stubs := os.getenv("LOGQUARTZ_CREATE_STUBS"):
        data["create_stubs"] = _parse_bool("LOGQUARTZ_CREATE_STUBS", env_stubs)

    if env_workers := os.getenv("LOGQUARTZ_WORKERS"):
        try:
            data["workers"] = int(env_workers)
        except ValueError as e:
            raise ValueError(f"LOGQUARTZ_WORKERS must be an integer, got {env_workers!r}") from e

    return data


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be true or false, got {value!r}")
