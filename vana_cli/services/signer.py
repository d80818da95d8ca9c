"""Request signing with an Ethereum-style wallet key.

The backends verify ``X-Refiner-Signature`` as an EIP-191 ``personal_sign`` signature over
the decimal refiner id, recovered against the caller's address.
"""

import re

import structlog
from eth_account import Account
from eth_account.messages import encode_defunct

from vana_cli.services.errors import InvalidCredentialError, ValidationError

logger = structlog.get_logger(__name__)

HEX_PREFIX = "0x"
_PRIVATE_KEY_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def normalize_private_key(private_key: str) -> str:
    """Strip whitespace and make sure the key carries the 0x prefix."""
    key = private_key.strip()
    if not key.lower().startswith(HEX_PREFIX):
        key = HEX_PREFIX + key
    return HEX_PREFIX + key[2:]


def refiner_message(refiner_id: int) -> str:
    """Signed message text: the id in base 10, no padding or separators."""
    if isinstance(refiner_id, bool) or not isinstance(refiner_id, int) or refiner_id < 0:
        raise ValidationError(f"Invalid refiner ID: {refiner_id!r}")
    return str(refiner_id)


class RequestSigner:
    """Signs refiner ids with one account. Pure, no I/O."""

    def __init__(self, private_key: str):
        key = normalize_private_key(private_key)
        if not _PRIVATE_KEY_RE.match(key):
            raise InvalidCredentialError(
                "Invalid private key: expected 32 bytes of hex (64 characters, optional 0x prefix)"
            )
        try:
            self._account = Account.from_key(key)
        except Exception as e:
            # eth-keys rejects keys outside the curve order with its own ValidationError
            raise InvalidCredentialError(f"Invalid private key: {e}") from e

    @property
    def address(self) -> str:
        return self._account.address

    def sign(self, refiner_id: int) -> str:
        message = encode_defunct(text=refiner_message(refiner_id))
        signed = self._account.sign_message(message)
        signature = HEX_PREFIX + bytes(signed.signature).hex()
        logger.debug("Signed refiner request", refiner_id=refiner_id, address=self.address)
        return signature


def sign_refiner_id(private_key: str, refiner_id: int) -> str:
    return RequestSigner(private_key).sign(refiner_id)
