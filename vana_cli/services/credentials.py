"""Resolve the wallet key and backend endpoints for one command run."""

from typing import Optional, Protocol

import structlog

from vana_cli.services.errors import ConfigError, MissingCredentialError, MissingEndpointError
from vana_cli.services.schemas.stats import CredentialContext

logger = structlog.get_logger(__name__)

PRIVATE_KEY_KEY = "wallet_private_key"
INGESTION_ENDPOINT_KEY = "query_engine_endpoint"
EXECUTION_ENDPOINT_KEY = "refinement_service_endpoint"


class ConfigLookup(Protocol):
    def get_value(self, key: str) -> Optional[str]: ...


class CredentialResolver:
    """Explicit values win; otherwise the config store is consulted read-only."""

    def __init__(self, config: ConfigLookup):
        self.config = config

    def _lookup(self, key: str) -> Optional[str]:
        try:
            value = self.config.get_value(key)
        except ConfigError as e:
            logger.debug("Config lookup failed", key=key, error=str(e))
            return None
        return value or None

    def _pick(self, explicit: Optional[str], key: str) -> Optional[str]:
        if explicit:
            return explicit
        return self._lookup(key)

    def resolve_private_key(self, private_key: Optional[str] = None) -> str:
        key = self._pick(private_key, PRIVATE_KEY_KEY)
        if not key:
            raise MissingCredentialError(PRIVATE_KEY_KEY)
        return key

    def resolve(
        self,
        private_key: Optional[str] = None,
        ingestion_endpoint: Optional[str] = None,
        execution_endpoint: Optional[str] = None,
    ) -> CredentialContext:
        """Raises MissingCredentialError, then MissingEndpointError if no backend is reachable."""
        key = self.resolve_private_key(private_key)
        ingestion_url = self._pick(ingestion_endpoint, INGESTION_ENDPOINT_KEY)
        execution_url = self._pick(execution_endpoint, EXECUTION_ENDPOINT_KEY)

        if not ingestion_url and not execution_url:
            raise MissingEndpointError()

        return CredentialContext(
            private_key=key,
            ingestion_endpoint=ingestion_url,
            execution_endpoint=execution_url,
        )
