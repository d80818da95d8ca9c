"""Configuration: environment settings and the persisted config store."""

from vana_cli.config.settings import VanaSettings, get_settings
from vana_cli.config.store import ConfigStore

__all__ = [
    "ConfigStore",
    "VanaSettings",
    "get_settings",
]
