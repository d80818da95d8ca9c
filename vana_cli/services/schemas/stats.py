"""Statistics snapshots returned by the two backends, and their combination.

The backends are trusted for shape: decoding picks known fields with neutral defaults
and keeps the original payload, so ``to_dict`` reproduces exactly what the server sent.
"""

from dataclasses import dataclass, field
from typing import Optional

from vana_cli.services._helpers import JsonDict


@dataclass(frozen=True)
class CredentialContext:
    private_key: str = field(repr=False)
    ingestion_endpoint: Optional[str] = None
    execution_endpoint: Optional[str] = None


@dataclass(frozen=True)
class RecentError:
    error: str
    timestamp: str
    job_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: JsonDict) -> "RecentError":
        return cls(
            error=payload.get("error", ""),
            timestamp=payload.get("timestamp", ""),
            job_id=payload.get("job_id"),
        )


@dataclass(frozen=True)
class IngestionStats:
    refiner_id: int
    total_file_contributions: int = 0
    total_data_rows: int = 0
    first_ingestion_at: Optional[str] = None
    last_ingestion_at: Optional[str] = None
    total_queries_executed: int = 0
    successful_queries: int = 0
    failed_queries: int = 0
    query_errors_by_type: dict[str, int] = field(default_factory=dict)
    average_ingestion_rate_per_hour: float = 0.0
    ingestion_period_days: Optional[float] = None
    unique_contributors: int = 0
    rows_per_table: dict[str, int] = field(default_factory=dict)
    last_processed_block: Optional[int] = None
    raw: JsonDict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_payload(cls, payload: JsonDict) -> "IngestionStats":
        return cls(
            refiner_id=payload.get("refiner_id", 0),
            total_file_contributions=payload.get("total_file_contributions", 0),
            total_data_rows=payload.get("total_data_rows", 0),
            first_ingestion_at=payload.get("first_ingestion_at"),
            last_ingestion_at=payload.get("last_ingestion_at"),
            total_queries_executed=payload.get("total_queries_executed", 0),
            successful_queries=payload.get("successful_queries", 0),
            failed_queries=payload.get("failed_queries", 0),
            query_errors_by_type=payload.get("query_errors_by_type") or {},
            average_ingestion_rate_per_hour=payload.get("average_ingestion_rate_per_hour", 0.0),
            ingestion_period_days=payload.get("ingestion_period_days"),
            unique_contributors=payload.get("unique_contributors", 0),
            rows_per_table=payload.get("rows_per_table") or {},
            last_processed_block=payload.get("last_processed_block"),
            raw=dict(payload),
        )

    def to_dict(self) -> JsonDict:
        return dict(self.raw)


@dataclass(frozen=True)
class ExecutionStats:
    refiner_id: int
    total_jobs: int = 0
    successful_jobs: int = 0
    failed_jobs: int = 0
    processing_jobs: int = 0
    submitted_jobs: int = 0
    first_job_at: Optional[str] = None
    last_job_at: Optional[str] = None
    average_processing_time_seconds: float = 0.0
    success_rate: float = 0.0
    jobs_per_hour: float = 0.0
    processing_period_days: Optional[float] = None
    error_types: dict[str, int] = field(default_factory=dict)
    recent_errors: tuple[RecentError, ...] = ()
    raw: JsonDict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_payload(cls, payload: JsonDict) -> "ExecutionStats":
        recent = payload.get("recent_errors") or []
        return cls(
            refiner_id=payload.get("refiner_id", 0),
            total_jobs=payload.get("total_jobs", 0),
            successful_jobs=payload.get("successful_jobs", 0),
            failed_jobs=payload.get("failed_jobs", 0),
            processing_jobs=payload.get("processing_jobs", 0),
            submitted_jobs=payload.get("submitted_jobs", 0),
            first_job_at=payload.get("first_job_at"),
            last_job_at=payload.get("last_job_at"),
            average_processing_time_seconds=payload.get("average_processing_time_seconds", 0.0),
            success_rate=payload.get("success_rate", 0.0),
            jobs_per_hour=payload.get("jobs_per_hour", 0.0),
            processing_period_days=payload.get("processing_period_days"),
            error_types=payload.get("error_types") or {},
            recent_errors=tuple(
                RecentError.from_payload(item) for item in recent if isinstance(item, dict)
            ),
            raw=dict(payload),
        )

    def to_dict(self) -> JsonDict:
        return dict(self.raw)


@dataclass(frozen=True)
class CombinedStatsResult:
    """Per-source outcome: stats, an error string, or neither (source not configured)."""

    refiner_id: int
    ingestion_stats: Optional[IngestionStats] = None
    execution_stats: Optional[ExecutionStats] = None
    ingestion_error: Optional[str] = None
    execution_error: Optional[str] = None

    @property
    def has_data(self) -> bool:
        return self.ingestion_stats is not None or self.execution_stats is not None

    def to_dict(self) -> JsonDict:
        """JSON shape; absent fields are omitted rather than null."""
        data: JsonDict = {"refiner_id": self.refiner_id}
        if self.ingestion_stats is not None:
            data["ingestion_stats"] = self.ingestion_stats.to_dict()
        if self.execution_stats is not None:
            data["execution_stats"] = self.execution_stats.to_dict()
        if self.ingestion_error is not None:
            data["ingestion_error"] = self.ingestion_error
        if self.execution_error is not None:
            data["execution_error"] = self.execution_error
        return data
