"""Key material for the intermediary ledger: Entry Credit addresses and signing keys."""

from __future__ import annotations

import hashlib

import base58
from nacl.exceptions import CryptoError
from nacl.signing import SigningKey

EC_PRIVATE_PREFIX = bytes((0x5D, 0xB6))
EC_PUBLIC_PREFIX = bytes((0x59, 0x2A))
KEY_BYTES = 32
CHECKSUM_BYTES = 4
CHAIN_ID_BYTES = 32


def _checksum(body: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(body).digest()).digest()[:CHECKSUM_BYTES]


def _encode_address(prefix: bytes, key: bytes) -> str:
    body = prefix + key
    return base58.b58encode(body + _checksum(body)).decode("ascii")


class ECAddress:
    """An Entry Credit key pair used to pay for entry commits."""

    def __init__(self, seed: bytes) -> None:
        if len(seed) != KEY_BYTES:
            raise ValueError(f"entry credit key must be {KEY_BYTES} bytes")
        self._signing_key = SigningKey(seed)

    @classmethod
    def from_private_address(cls, address: str) -> ECAddress:
        """Parse a human readable ``Es...`` address."""

        try:
            raw = base58.b58decode(address.strip())
        except ValueError as exc:
            raise ValueError(f"invalid entry credit address: {exc}") from exc
        if len(raw) != len(EC_PRIVATE_PREFIX) + KEY_BYTES + CHECKSUM_BYTES:
            raise ValueError("invalid entry credit address length")
        body, checksum = raw[:-CHECKSUM_BYTES], raw[-CHECKSUM_BYTES:]
        if not body.startswith(EC_PRIVATE_PREFIX):
            raise ValueError("not a private entry credit address")
        if _checksum(body) != checksum:
            raise ValueError("entry credit address checksum mismatch")
        return cls(body[len(EC_PRIVATE_PREFIX) :])

    @property
    def pub_bytes(self) -> bytes:
        return bytes(self._signing_key.verify_key)

    def sign(self, message: bytes) -> bytes:
        return self._signing_key.sign(message).signature

    def private_address(self) -> str:
        return _encode_address(EC_PRIVATE_PREFIX, bytes(self._signing_key))

    def public_address(self) -> str:
        return _encode_address(EC_PUBLIC_PREFIX, self.pub_bytes)


def private_key_from_hex(value: str) -> SigningKey:
    """Parse an ed25519 key given as a 32-byte seed or a 64-byte seed+public key."""

    try:
        raw = bytes.fromhex(value.strip())
    except ValueError as exc:
        raise ValueError(f"signature key is not hex: {exc}") from exc
    if len(raw) not in (KEY_BYTES, 2 * KEY_BYTES):
        raise ValueError(f"signature key must be {KEY_BYTES} or {2 * KEY_BYTES} bytes, got {len(raw)}")
    try:
        key = SigningKey(raw[:KEY_BYTES])
    except CryptoError as exc:
        raise ValueError(f"invalid signature key: {exc}") from exc
    if len(raw) == 2 * KEY_BYTES and bytes(key.verify_key) != raw[KEY_BYTES:]:
        raise ValueError("signature key public half does not match its seed")
    return key


def chain_id_from_hex(value: str) -> str:
    """Validate and normalize a chain id to 64 lowercase hex characters."""

    try:
        raw = bytes.fromhex(value.strip())
    except ValueError as exc:
        raise ValueError(f"chain id is not hex: {exc}") from exc
    if len(raw) != CHAIN_ID_BYTES:
        raise ValueError(f"chain id must be {CHAIN_ID_BYTES} bytes, got {len(raw)}")
    return raw.hex()
