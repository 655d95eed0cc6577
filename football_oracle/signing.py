"""
Payload hashing and the oracle's signing key.
"""

import base64
import json
from typing import Any, Dict

from eth_account import Account
from web3 import Web3


def canonical_json(payload: Dict[str, Any]) -> str:
    """Serialize a payload deterministically (sorted keys, no whitespace)."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def create_payload_hash(payload: Dict[str, Any]) -> str:
    """
    Create the keccak256 hash that binds a message to its payload.

    Args:
        payload: data feed dict

    Returns:
        base64-encoded 32-byte hash
    """
    digest = Web3.keccak(text=canonical_json(payload))
    return base64.b64encode(bytes(digest)).decode("ascii")


class OracleSigner:
    """Signs ledger transactions with the oracle's single key."""

    def __init__(self, private_key: str):
        if not private_key.startswith('0x'):
            private_key = '0x' + private_key
        self._account = Account.from_key(private_key)

    @property
    def address(self) -> str:
        return self._account.address

    def sign_hash(self, message_hash: bytes) -> str:
        """Sign a raw 32-byte hash and return the hex signature."""
        signed = self._account.unsafe_sign_hash(message_hash)
        return '0x' + bytes(signed.signature).hex()

    def __repr__(self):
        return f"<OracleSigner(address='{self.address}')>"
