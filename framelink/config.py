"""
Configuration loader.

A service is configured from a YAML file or from defaults:

    target_origin: "http://192.168.156.168:8080"
    identity: host-page          # optional, generated when absent
    transport: memory            # memory | zyre
    codec: json                  # json | msgpack
    retry:
      window_s: 1.0              # bootstrap delay is uniform over [0, window_s]
      floor_s: 0.05              # ...but never shorter than floor_s
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigurationError
from .transport import WILDCARD_ORIGIN

log = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Bootstrap retry timing."""
    window_s: float = 1.0
    floor_s: float = 0.05


@dataclass
class ServiceConfig:
    """Complete service configuration."""
    target_origin: str = ""
    identity: Optional[str] = None
    transport: str = "memory"
    codec: str = "json"
    retry: RetryConfig = field(default_factory=RetryConfig)

    def validate(self) -> "ServiceConfig":
        if self.target_origin == WILDCARD_ORIGIN:
            raise ConfigurationError("Don't use '*' as target.")
        if not self.target_origin:
            raise ConfigurationError("target_origin is required")
        if self.retry.floor_s < 0:
            raise ConfigurationError("retry.floor_s must not be negative")
        if self.retry.window_s < self.retry.floor_s:
            raise ConfigurationError("retry.window_s must be at least retry.floor_s")
        return self


def load_config(config_path: Optional[str] = None) -> ServiceConfig:
    """
    Load configuration from a YAML file or return defaults.

    Args:
        config_path: Path to YAML config file (optional)

    Returns:
        ServiceConfig; not validated, since a caller may still fill in target_origin
    """
    if config_path is None:
        return ServiceConfig()

    path = Path(config_path)
    if not path.exists():
        log.warning("%s not found, using defaults", config_path)
        return ServiceConfig()

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path}: top level must be a mapping")

    retry_data = data.get("retry", {}) or {}
    if not isinstance(retry_data, dict):
        raise ConfigurationError(f"{config_path}: retry must be a mapping")

    return ServiceConfig(
        target_origin=data.get("target_origin", ""),
        identity=data.get("identity"),
        transport=data.get("transport", "memory"),
        codec=data.get("codec", "json"),
        retry=RetryConfig(
            window_s=float(retry_data.get("window_s", 1.0)),
            floor_s=float(retry_data.get("floor_s", 0.05)),
        ),
    )
