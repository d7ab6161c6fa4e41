"""
Configuration loader — reads netconverge.yml into a typed config model.

Reads YAML, validates against the Pydantic schema, and returns a
``ConvergeConfig``.  Every setting has a default, so running without a
config file is valid; an explicit path that cannot be read is not.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from netconverge.core.errors import ConfigurationError
from netconverge.core.naming import DEFAULT_AWS_IDENTIFIER_LENGTH
from netconverge.core.reliability.poll import DEFAULT_POLL_INTERVAL, DEFAULT_POLL_TIMEOUT
from netconverge.core.services.network_locator import TieBreak
from netconverge.core.services.security_posture import DEFAULT_SECURITY_GROUP_POSTFIX

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "netconverge.yml"


class ConfigError(ConfigurationError):
    """Raised when the configuration file is invalid or missing."""


class PollConfig(BaseModel):
    """Subnet listing poll settings, in seconds."""

    interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    timeout: float = Field(default=DEFAULT_POLL_TIMEOUT, gt=0)


class ConvergeConfig(BaseModel):
    """Settings for a convergence run."""

    cluster_id: str | None = None
    region: str | None = None
    security_group_postfix: str = DEFAULT_SECURITY_GROUP_POSTFIX
    max_name_length: int = Field(default=DEFAULT_AWS_IDENTIFIER_LENGTH, ge=10)
    tie_break: TieBreak = TieBreak.LAST
    poll: PollConfig = Field(default_factory=PollConfig)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for netconverge.yml starting from the given directory, walking up."""
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> ConvergeConfig:
    """Load and validate configuration.

    Args:
        path: Explicit path to netconverge.yml. If None, searches upward
            and falls back to defaults when nothing is found.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return ConvergeConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = ConvergeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded config from %s (cluster_id=%s)", path, config.cluster_id)
    return config
