"""Persisted CLI configuration.

Unprotected values live in a small TOML file; the wallet private key lives in the OS
keyring. One ``ConfigStore`` is built per process and handed to the commands that need it.
"""

import tomllib
from pathlib import Path
from typing import Optional

import keyring
import structlog
from keyring.errors import KeyringError, PasswordDeleteError

from vana_cli.config.settings import VanaSettings
from vana_cli.services.errors import ConfigError

logger = structlog.get_logger(__name__)

NETWORKS: tuple[str, ...] = ("vana", "moksha")

UNPROTECTED_KEYS: tuple[str, ...] = (
    "network",
    "rpc_endpoint",
    "query_engine_endpoint",
    "refinement_service_endpoint",
)
PROTECTED_KEYS: tuple[str, ...] = ("wallet_private_key",)

DEFAULT_CONFIG: dict[str, str] = {
    "network": "moksha",
    "rpc_endpoint": "https://rpc.moksha.vana.org",
    "query_engine_endpoint": (
        "https://54531900daaa8493797db8d07d6bfbfc77f75b4b-8000.dstack-prod5.phala.network"
    ),
}

_HEADER = """# Vana CLI Configuration
# This file stores unprotected configuration values
# Secrets like private keys are stored securely in the OS keyring
"""


def is_protected_key(key: str) -> bool:
    return key in PROTECTED_KEYS


class ConfigStore:
    """TOML file + OS keyring backed configuration."""

    def __init__(self, config_path: Path, keyring_service: str = "vana"):
        self.config_path = config_path
        self.keyring_service = keyring_service
        self._unprotected: Optional[dict[str, str]] = None

    @classmethod
    def from_settings(cls, settings: VanaSettings) -> "ConfigStore":
        return cls(settings.config_path, keyring_service=settings.keyring_service)

    def initialize(self) -> None:
        """Create the config directory and a default config file if absent."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Failed to initialize config: {e}") from e
        if not self.config_path.exists():
            self._write_unprotected(dict(DEFAULT_CONFIG))

    def keys(self) -> dict[str, tuple[str, ...]]:
        return {"unprotected": UNPROTECTED_KEYS, "protected": PROTECTED_KEYS}

    def get_config(self) -> dict[str, str]:
        return {**self.get_unprotected_config(), **self.get_protected_config()}

    def get_unprotected_config(self) -> dict[str, str]:
        """Config file contents merged over defaults. Unreadable files yield defaults."""
        if self._unprotected is not None:
            return dict(self._unprotected)

        values: dict[str, str] = dict(DEFAULT_CONFIG)
        try:
            data = tomllib.loads(self.config_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            logger.debug("Config file unreadable, using defaults", path=str(self.config_path), error=str(e))
        else:
            for key in UNPROTECTED_KEYS:
                value = data.get(key)
                if value is not None and str(value) != "":
                    values[key] = str(value)

        self._unprotected = values
        return dict(values)

    def get_protected_config(self) -> dict[str, str]:
        """Secrets from the keyring. Keyring failures yield an empty mapping."""
        secrets: dict[str, str] = {}
        for key in PROTECTED_KEYS:
            try:
                value = keyring.get_password(self.keyring_service, key)
            except KeyringError as e:
                logger.debug("Keyring read failed", key=key, error=str(e))
                continue
            if value:
                secrets[key] = value
        return secrets

    def get_value(self, key: str) -> Optional[str]:
        if key not in UNPROTECTED_KEYS and key not in PROTECTED_KEYS:
            raise ConfigError(f"Configuration key '{key}' not found")
        if is_protected_key(key):
            return self.get_protected_config().get(key)
        return self.get_unprotected_config().get(key)

    def set_value(self, key: str, value: str) -> None:
        if is_protected_key(key):
            try:
                keyring.set_password(self.keyring_service, key, value)
            except KeyringError as e:
                raise ConfigError(f"Failed to store {key} in keyring: {e}") from e
            return

        if key not in UNPROTECTED_KEYS:
            raise ConfigError(f"Configuration key '{key}' not found")
        if key == "network" and value not in NETWORKS:
            raise ConfigError(
                f"Invalid network value: {value}. Must be {' or '.join(repr(n) for n in NETWORKS)}"
            )

        config = self.get_unprotected_config()
        config[key] = value
        self._write_unprotected(config)
        self._unprotected = config

    def reset(self) -> None:
        """Rewrite defaults and drop the stored secrets."""
        self._write_unprotected(dict(DEFAULT_CONFIG))
        self._unprotected = None
        for key in PROTECTED_KEYS:
            try:
                keyring.delete_password(self.keyring_service, key)
            except PasswordDeleteError:
                pass
            except KeyringError as e:
                logger.warning("Keyring delete failed", key=key, error=str(e))

    def _write_unprotected(self, config: dict[str, str]) -> None:
        lines = [_HEADER, "\n"]
        for key in UNPROTECTED_KEYS:
            if key in config:
                escaped = config[key].replace("\\", "\\\\").replace('"', '\\"')
                lines.append(f'{key} = "{escaped}"\n')
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text("".join(lines), encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to write config file: {e}") from e
