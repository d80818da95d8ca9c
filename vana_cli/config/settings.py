"""Process settings using Pydantic.

Settings come from the environment (``VANA_`` prefix) and an optional ``.env`` in the
working directory. They only describe where the persisted CLI config lives and how the
process behaves; user-facing values (network, endpoints, wallet key) are in the
``ConfigStore``.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _ensure_env_loaded() -> None:
    """Load .env from the working directory before any settings. Idempotent."""
    candidate = Path.cwd() / ".env"
    if candidate.exists():
        load_dotenv(candidate, override=False)


_ensure_env_loaded()


class VanaSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VANA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".vana",
        description="Directory holding the CLI config file",
    )
    config_filename: str = Field(default="cli.config.toml", description="Config file name")
    keyring_service: str = Field(default="vana", description="OS keyring service name for secrets")
    request_timeout: Optional[float] = Field(
        default=None,
        description="HTTP timeout in seconds; None leaves the platform default",
    )
    log_level: str = Field(default="WARNING", description="structlog level for stderr events")

    @property
    def config_path(self) -> Path:
        return self.config_dir.expanduser() / self.config_filename


@lru_cache()
def get_settings() -> VanaSettings:
    """Cached settings instance."""
    return VanaSettings()
