"""Intermediary-ledger entries and their binary form."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

ENTRY_VERSION = 0
ENTRY_HEADER_BYTES = 35
MAX_ENTRY_PAYLOAD_BYTES = 10240
ENTRY_CREDIT_UNIT_BYTES = 1024


@dataclass(frozen=True)
class Entry:
    """A unit of content for one chain: chain id, external ids and content."""

    chain_id: str
    ext_ids: tuple[bytes, ...]
    content: bytes

    def marshal_binary(self) -> bytes:
        ext = bytearray()
        for ext_id in self.ext_ids:
            ext += len(ext_id).to_bytes(2, "big")
            ext += ext_id
        if len(ext) > 0xFFFF:
            raise ValueError("external ids are too large")
        return (
            ENTRY_VERSION.to_bytes(1, "big")
            + bytes.fromhex(self.chain_id)
            + len(ext).to_bytes(2, "big")
            + bytes(ext)
            + self.content
        )

    def hash(self) -> bytes:
        data = self.marshal_binary()
        return hashlib.sha256(hashlib.sha512(data).digest() + data).digest()

    def cost(self) -> int:
        """Entry credits needed to commit this entry."""

        payload = len(self.marshal_binary()) - ENTRY_HEADER_BYTES
        if payload > MAX_ENTRY_PAYLOAD_BYTES:
            raise ValueError("entry cannot be larger than 10KB")
        units, rest = divmod(payload, ENTRY_CREDIT_UNIT_BYTES)
        if rest:
            units += 1
        return max(units, 1)


def new_entry(chain_id: str, external: bytes, content: bytes) -> Entry:
    """Build an entry carrying one external id (the record signature) and the raw record."""

    return Entry(chain_id=chain_id, ext_ids=(bytes(external),), content=bytes(content))
