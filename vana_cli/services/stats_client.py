"""Signed HTTP client for the refiner stats endpoints.

Both backends expose ``GET {base_url}/stats/refiner/{id}`` authenticated by
``X-Refiner-Signature``; they only differ in the response shape, so one client class is
parameterized by a ``StatsSource``.
"""

import json
import urllib.error
import urllib.request
from dataclasses import dataclass
from http.client import HTTPException
from typing import Callable, Generic, Optional, TypeVar

import structlog

from vana_cli.services._helpers import JsonDict, load_json
from vana_cli.services.errors import NetworkError, RemoteError
from vana_cli.services.schemas.stats import ExecutionStats, IngestionStats
from vana_cli.services.signer import RequestSigner

logger = structlog.get_logger(__name__)

SIGNATURE_HEADER = "X-Refiner-Signature"

StatsT = TypeVar("StatsT")


@dataclass(frozen=True)
class StatsSource(Generic[StatsT]):
    name: str
    label: str
    path_template: str
    decoder: Callable[[JsonDict], StatsT]


INGESTION_SOURCE: StatsSource[IngestionStats] = StatsSource(
    name="ingestion",
    label="Query Engine",
    path_template="/stats/refiner/{refiner_id}",
    decoder=IngestionStats.from_payload,
)

EXECUTION_SOURCE: StatsSource[ExecutionStats] = StatsSource(
    name="execution",
    label="Refinement Service",
    path_template="/stats/refiner/{refiner_id}",
    decoder=ExecutionStats.from_payload,
)


def error_message_from_body(body: str, status: int, reason: str) -> str:
    """Best error text for a failed response: JSON detail/message, raw body, or status line."""
    fallback = f"HTTP {status}: {reason}"
    try:
        payload = json.loads(body)
    except ValueError:
        return body or fallback

    if isinstance(payload, dict):
        for key in ("detail", "message"):
            value = payload.get(key)
            if value:
                return value if isinstance(value, str) else json.dumps(value)
    return fallback


class SignedStatsClient(Generic[StatsT]):
    """One signed GET per call. No retries, no caching."""

    def __init__(
        self,
        base_url: str,
        source: StatsSource[StatsT],
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.source = source
        self.timeout = timeout

    def url_for(self, refiner_id: int) -> str:
        return self.base_url + self.source.path_template.format(refiner_id=refiner_id)

    def fetch_stats(self, refiner_id: int, signer: RequestSigner) -> StatsT:
        """Sign the id, fetch and decode. Raises RemoteError or NetworkError."""
        signature = signer.sign(refiner_id)
        url = self.url_for(refiner_id)
        kwargs = {} if self.timeout is None else {"timeout": self.timeout}

        logger.debug("Fetching refiner stats", source=self.source.name, url=url)
        try:
            request = urllib.request.Request(
                url,
                method="GET",
                headers={
                    SIGNATURE_HEADER: signature,
                    "Content-Type": "application/json",
                },
            )
            with urllib.request.urlopen(request, **kwargs) as resp:
                body = resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            raw = e.read() or b""
            message = error_message_from_body(
                raw.decode("utf-8", errors="replace"), e.code, str(e.reason or "")
            )
            logger.debug("Stats request rejected", source=self.source.name, status=e.code)
            raise RemoteError(message, status=e.code) from e
        except urllib.error.URLError as e:
            raise NetworkError(f"Network error connecting to {url}: {e.reason}") from e
        except ValueError as e:
            raise NetworkError(f"Invalid endpoint URL {url}: {e}") from e
        except (HTTPException, OSError) as e:
            raise NetworkError(f"Network error connecting to {url}: {e}") from e

        try:
            payload = load_json(body)
        except ValueError as e:
            raise RemoteError(f"Invalid JSON response from {self.source.label}: {e}") from e
        if not isinstance(payload, dict):
            raise RemoteError(f"Unexpected response from {self.source.label}: expected a JSON object")

        return self.source.decoder(payload)


def ingestion_client(base_url: str, timeout: Optional[float] = None) -> SignedStatsClient[IngestionStats]:
    return SignedStatsClient(base_url, INGESTION_SOURCE, timeout=timeout)


def execution_client(base_url: str, timeout: Optional[float] = None) -> SignedStatsClient[ExecutionStats]:
    return SignedStatsClient(base_url, EXECUTION_SOURCE, timeout=timeout)
