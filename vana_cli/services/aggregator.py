"""Fetch both backends independently and merge the outcomes."""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, TypeVar

import structlog

from vana_cli.services.errors import StatsClientError
from vana_cli.services.schemas.stats import (
    CombinedStatsResult,
    CredentialContext,
    ExecutionStats,
    IngestionStats,
)
from vana_cli.services.signer import RequestSigner
from vana_cli.services.stats_client import SignedStatsClient, execution_client, ingestion_client

logger = structlog.get_logger(__name__)

StatsT = TypeVar("StatsT")

# (stats, error message); exactly one is set
Outcome = tuple[Optional[StatsT], Optional[str]]


class StatsAggregator:
    """Runs the configured clients side by side; one failing never affects the other."""

    def __init__(
        self,
        ingestion: Optional[SignedStatsClient[IngestionStats]] = None,
        execution: Optional[SignedStatsClient[ExecutionStats]] = None,
    ):
        self.ingestion = ingestion
        self.execution = execution

    @classmethod
    def from_credentials(
        cls, credentials: CredentialContext, timeout: Optional[float] = None
    ) -> "StatsAggregator":
        return cls(
            ingestion=(
                ingestion_client(credentials.ingestion_endpoint, timeout=timeout)
                if credentials.ingestion_endpoint
                else None
            ),
            execution=(
                execution_client(credentials.execution_endpoint, timeout=timeout)
                if credentials.execution_endpoint
                else None
            ),
        )

    @staticmethod
    def _fetch(
        client: SignedStatsClient[StatsT], refiner_id: int, signer: RequestSigner
    ) -> Outcome[StatsT]:
        try:
            return client.fetch_stats(refiner_id, signer), None
        except StatsClientError as e:
            logger.info(
                "Stats fetch failed",
                source=client.source.name,
                refiner_id=refiner_id,
                error=str(e),
            )
            return None, str(e)

    def aggregate(self, refiner_id: int, signer: RequestSigner) -> CombinedStatsResult:
        """Both fetches run to completion before returning.

        Only StatsClientError is recorded per source; anything else propagates.
        """
        futures: dict[str, Future] = {}
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="stats") as pool:
            if self.ingestion is not None:
                futures["ingestion"] = pool.submit(self._fetch, self.ingestion, refiner_id, signer)
            if self.execution is not None:
                futures["execution"] = pool.submit(self._fetch, self.execution, refiner_id, signer)

        ingestion_stats, ingestion_error = (
            futures["ingestion"].result() if "ingestion" in futures else (None, None)
        )
        execution_stats, execution_error = (
            futures["execution"].result() if "execution" in futures else (None, None)
        )

        return CombinedStatsResult(
            refiner_id=refiner_id,
            ingestion_stats=ingestion_stats,
            execution_stats=execution_stats,
            ingestion_error=ingestion_error,
            execution_error=execution_error,
        )
