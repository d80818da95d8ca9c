"""Tests for vana_cli.services.aggregator."""

import threading
import urllib.error

import pytest

from tests.conftest import (
    EXECUTION_PAYLOAD,
    EXECUTION_URL,
    INGESTION_PAYLOAD,
    INGESTION_URL,
    TEST_PRIVATE_KEY,
    FakeBackends,
)
from vana_cli.services.aggregator import StatsAggregator
from vana_cli.services.schemas.stats import CombinedStatsResult, CredentialContext
from vana_cli.services.signer import RequestSigner
from vana_cli.services.stats_client import execution_client, ingestion_client

INGESTION_45: str = f"{INGESTION_URL}/stats/refiner/45"
EXECUTION_45: str = f"{EXECUTION_URL}/stats/refiner/45"


@pytest.fixture()
def signer() -> RequestSigner:
    return RequestSigner(TEST_PRIVATE_KEY)


def _both() -> StatsAggregator:
    return StatsAggregator(ingestion_client(INGESTION_URL), execution_client(EXECUTION_URL))


class TestAggregate:
    def test_both_succeed(self, backends: FakeBackends, signer: RequestSigner) -> None:
        backends.add(INGESTION_45, body=INGESTION_PAYLOAD)
        backends.add(EXECUTION_45, body=EXECUTION_PAYLOAD)

        result: CombinedStatsResult = _both().aggregate(45, signer)

        assert result.ingestion_stats is not None
        assert result.execution_stats is not None
        assert result.ingestion_error is None
        assert result.execution_error is None
        assert result.to_dict() == {
            "refiner_id": 45,
            "ingestion_stats": INGESTION_PAYLOAD,
            "execution_stats": EXECUTION_PAYLOAD,
        }

    def test_execution_failure_keeps_ingestion(self, backends: FakeBackends, signer: RequestSigner) -> None:
        backends.add(INGESTION_45, body=INGESTION_PAYLOAD)
        backends.add(EXECUTION_45, status=500, body={"detail": "database down"})

        result: CombinedStatsResult = _both().aggregate(45, signer)

        assert result.ingestion_stats is not None
        assert result.execution_stats is None
        assert result.execution_error == "database down"
        assert set(result.to_dict()) == {"refiner_id", "ingestion_stats", "execution_error"}

    def test_first_failure_does_not_stop_second(self, backends: FakeBackends, signer: RequestSigner) -> None:
        backends.fail(INGESTION_45, urllib.error.URLError("Name or service not known"))
        backends.add(EXECUTION_45, body=EXECUTION_PAYLOAD)

        result: CombinedStatsResult = _both().aggregate(45, signer)

        assert sorted(backends.urls()) == sorted([INGESTION_45, EXECUTION_45])
        assert result.ingestion_error is not None
        assert "Name or service not known" in result.ingestion_error
        assert result.execution_stats is not None

    def test_both_fail(self, backends: FakeBackends, signer: RequestSigner) -> None:
        backends.add(INGESTION_45, status=404, body={"detail": "Refiner not found"})
        backends.add(EXECUTION_45, status=404)

        result: CombinedStatsResult = _both().aggregate(45, signer)

        assert not result.has_data
        assert result.ingestion_error == "Refiner not found"
        assert result.execution_error == "HTTP 404: Not Found"

    def test_only_ingestion_configured(self, backends: FakeBackends, signer: RequestSigner) -> None:
        backends.add(INGESTION_45, body=INGESTION_PAYLOAD)
        creds: CredentialContext = CredentialContext(TEST_PRIVATE_KEY, ingestion_endpoint=INGESTION_URL)

        result: CombinedStatsResult = StatsAggregator.from_credentials(creds).aggregate(45, signer)

        assert backends.urls() == [INGESTION_45]
        assert result.execution_stats is None
        assert result.execution_error is None

    def test_only_execution_configured(self, backends: FakeBackends, signer: RequestSigner) -> None:
        backends.add(EXECUTION_45, body=EXECUTION_PAYLOAD)
        creds: CredentialContext = CredentialContext(TEST_PRIVATE_KEY, execution_endpoint=EXECUTION_URL)

        result: CombinedStatsResult = StatsAggregator.from_credentials(creds).aggregate(45, signer)

        assert backends.urls() == [EXECUTION_45]
        assert result.ingestion_stats is None
        assert result.ingestion_error is None

    def test_fetches_overlap(self, monkeypatch: pytest.MonkeyPatch, signer: RequestSigner) -> None:
        barrier: threading.Barrier = threading.Barrier(2, timeout=5)
        aggregator: StatsAggregator = _both()

        def _ingestion(refiner_id: int, _signer: RequestSigner) -> object:
            barrier.wait()
            return "ingestion"

        def _execution(refiner_id: int, _signer: RequestSigner) -> object:
            barrier.wait()
            return "execution"

        monkeypatch.setattr(aggregator.ingestion, "fetch_stats", _ingestion)
        monkeypatch.setattr(aggregator.execution, "fetch_stats", _execution)

        result: CombinedStatsResult = aggregator.aggregate(1, signer)
        assert result.ingestion_stats == "ingestion"
        assert result.execution_stats == "execution"

    def test_unexpected_errors_propagate(self, monkeypatch: pytest.MonkeyPatch, signer: RequestSigner) -> None:
        aggregator: StatsAggregator = _both()

        def _boom(refiner_id: int, _signer: RequestSigner) -> object:
            raise KeyError("bug")

        monkeypatch.setattr(aggregator.ingestion, "fetch_stats", _boom)
        monkeypatch.setattr(aggregator.execution, "fetch_stats", lambda rid, s: None)
        with pytest.raises(KeyError):
            aggregator.aggregate(1, signer)
