"""Shared fixtures: in-memory keyring, temporary config store, fake HTTP backends."""

import io
import json
import urllib.error
import urllib.request
from collections.abc import Generator
from pathlib import Path
from typing import Optional, Union

import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from vana_cli.config.settings import VanaSettings
from vana_cli.config.store import ConfigStore

# Well-known development key (Hardhat / Anvil account #0)
TEST_PRIVATE_KEY: str = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS: str = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

INGESTION_URL: str = "https://query.test"
EXECUTION_URL: str = "https://refine.test"

INGESTION_PAYLOAD: dict[str, object] = {
    "refiner_id": 45,
    "total_file_contributions": 234,
    "total_data_rows": 15420,
    "first_ingestion_at": "2024-01-15T10:30:00Z",
    "last_ingestion_at": "2024-01-20T14:45:00Z",
    "total_queries_executed": 87,
    "successful_queries": 82,
    "failed_queries": 5,
    "query_errors_by_type": {"PERMISSION_ERROR": 2, "SQL_VALIDATION_ERROR": 3},
    "average_ingestion_rate_per_hour": 2.1,
    "ingestion_period_days": 5.18,
    "unique_contributors": 234,
    "rows_per_table": {"users": 5420, "posts": 8000, "comments": 2000},
    "last_processed_block": 2945678,
}

EXECUTION_PAYLOAD: dict[str, object] = {
    "refiner_id": 45,
    "total_jobs": 150,
    "successful_jobs": 142,
    "failed_jobs": 8,
    "processing_jobs": 2,
    "submitted_jobs": 5,
    "first_job_at": "2024-01-15T10:30:00Z",
    "last_job_at": "2024-01-20T14:45:00Z",
    "average_processing_time_seconds": 45.7,
    "success_rate": 0.947,
    "jobs_per_hour": 1.2,
    "processing_period_days": 5.18,
    "error_types": {"VALIDATION_ERROR": 3, "TIMEOUT_ERROR": 2, "NETWORK_ERROR": 3},
    "recent_errors": [
        {"error": "File validation failed", "timestamp": "2024-01-20T14:30:00Z", "job_id": "job-123"},
        {"error": "Timed out", "timestamp": "2024-01-20T13:00:00Z"},
        {"error": "Schema mismatch", "timestamp": "2024-01-20T12:00:00Z", "job_id": "job-121"},
        {"error": "Oldest error", "timestamp": "2024-01-19T12:00:00Z", "job_id": "job-100"},
    ],
}


class MemoryKeyring(KeyringBackend):
    priority = 1

    def __init__(self) -> None:
        super().__init__()
        self.passwords: dict[tuple[str, str], str] = {}

    def get_password(self, service: str, username: str) -> Optional[str]:
        return self.passwords.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self.passwords[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        if (service, username) not in self.passwords:
            raise PasswordDeleteError("not found")
        del self.passwords[(service, username)]


@pytest.fixture()
def memory_keyring() -> Generator[MemoryKeyring, None, None]:
    previous: KeyringBackend = keyring.get_keyring()
    backend: MemoryKeyring = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture()
def settings(tmp_path: Path) -> VanaSettings:
    return VanaSettings(config_dir=tmp_path / ".vana", keyring_service="vana-test")


@pytest.fixture()
def config_store(settings: VanaSettings, memory_keyring: MemoryKeyring) -> ConfigStore:
    return ConfigStore.from_settings(settings)


class FakeResponse:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc: object) -> None:
        return None


Route = Union[tuple[int, object], Exception]


class FakeBackends:
    """Stands in for urllib.request.urlopen; routes by full URL."""

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[urllib.request.Request] = []

    def add(self, url: str, status: int = 200, body: object = None) -> None:
        self.routes[url] = (status, body)

    def fail(self, url: str, error: Exception) -> None:
        self.routes[url] = error

    def urls(self) -> list[str]:
        return [r.full_url for r in self.requests]

    def __call__(self, request: urllib.request.Request, timeout: object = None) -> FakeResponse:
        self.requests.append(request)
        route: Optional[Route] = self.routes.get(request.full_url)
        if route is None:
            raise urllib.error.URLError(f"no route to {request.full_url}")
        if isinstance(route, Exception):
            raise route

        status, body = route
        if isinstance(body, bytes):
            raw: bytes = body
        elif isinstance(body, str):
            raw = body.encode()
        elif body is None:
            raw = b""
        else:
            raw = json.dumps(body).encode()

        if status >= 400:
            raise urllib.error.HTTPError(
                request.full_url, status, _REASONS.get(status, "Error"), None, io.BytesIO(raw)
            )
        return FakeResponse(raw)


_REASONS: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    500: "Internal Server Error",
    502: "Bad Gateway",
}


@pytest.fixture()
def backends(monkeypatch: pytest.MonkeyPatch) -> FakeBackends:
    fake: FakeBackends = FakeBackends()
    monkeypatch.setattr(urllib.request, "urlopen", fake)
    return fake
