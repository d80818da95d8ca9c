"""Business logic for refiner statistics."""

from vana_cli.services.aggregator import StatsAggregator
from vana_cli.services.credentials import CredentialResolver
from vana_cli.services.signer import RequestSigner, sign_refiner_id
from vana_cli.services.stats_client import SignedStatsClient, execution_client, ingestion_client

__all__ = [
    "CredentialResolver",
    "RequestSigner",
    "SignedStatsClient",
    "StatsAggregator",
    "execution_client",
    "ingestion_client",
    "sign_refiner_id",
]
