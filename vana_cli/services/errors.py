"""Shared exception hierarchy for the Vana CLI."""

from typing import Optional


class VanaCliError(Exception):
    """Base exception for all CLI errors."""


# ── Input ─────────────────────────────────────────────────────────────────────


class ValidationError(VanaCliError):
    """User input failed validation (e.g. a malformed refiner id)."""


# ── Credentials ───────────────────────────────────────────────────────────────


class MissingCredentialError(VanaCliError):
    """No value could be resolved for a required credential."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No value found for '{key}'")


class MissingEndpointError(VanaCliError):
    """Neither the ingestion nor the execution endpoint is configured."""

    def __init__(self) -> None:
        super().__init__(
            "At least one API endpoint is required (Query Engine or Refinement Service)."
        )


class InvalidCredentialError(VanaCliError):
    """The private key is malformed."""


# ── Stats clients ─────────────────────────────────────────────────────────────


class StatsClientError(VanaCliError):
    """Base exception for a failed stats fetch."""


class RemoteError(StatsClientError):
    """The backend answered with a non-2xx status or an unusable body."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class NetworkError(StatsClientError):
    """The request never got an HTTP answer (DNS, refused connection, timeout)."""


# ── Config ────────────────────────────────────────────────────────────────────


class ConfigError(VanaCliError):
    """Reading or writing persisted configuration failed."""


# ── Catch-all ─────────────────────────────────────────────────────────────────


class UnexpectedError(VanaCliError):
    """Wraps an exception nothing else handled."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Unexpected error: {cause}")
