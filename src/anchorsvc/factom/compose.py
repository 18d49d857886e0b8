"""Entry composition rules: commit and reveal JSON-RPC 2.0 requests."""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, Field

from anchorsvc.errors import ProtocolCompositionError
from anchorsvc.factom.entry import Entry
from anchorsvc.factom.keys import ECAddress

COMMIT_VERSION = 0


class JSON2Request(BaseModel):
    """A JSON-RPC 2.0 request as accepted by the ledger's ``/v2`` endpoint."""

    jsonrpc: str = "2.0"
    id: int = 0
    method: str
    params: dict[str, Any] = Field(default_factory=dict)

    def encode(self) -> bytes:
        return self.model_dump_json().encode("utf-8")


class JSON2Error(BaseModel):
    code: int
    message: str
    data: Any = None


class JSON2Response(BaseModel):
    """A JSON-RPC 2.0 response; ``result`` and ``error`` are mutually exclusive."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JSON2Error | None = None


def milli_time(now_ms: int | None = None) -> bytes:
    """Current unix time in milliseconds, truncated to 6 big-endian bytes."""

    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return now_ms.to_bytes(8, "big")[2:]


def compose_entry_commit(entry: Entry, ec_address: ECAddress, *, now_ms: int | None = None) -> JSON2Request:
    """Build the paid commitment for ``entry``.

    Layout: version(1) | millis(6) | entry hash(32) | credits(1) | EC public key(32) | signature(64).
    The signature covers the first 40 bytes.
    """

    try:
        body = (
            COMMIT_VERSION.to_bytes(1, "big")
            + milli_time(now_ms)
            + entry.hash()
            + entry.cost().to_bytes(1, "big")
        )
        message = body + ec_address.pub_bytes + ec_address.sign(body)
    except ValueError as exc:
        raise ProtocolCompositionError(f"cannot compose entry commit: {exc}") from exc
    return JSON2Request(method="commit-entry", params={"message": message.hex()})


def compose_entry_reveal(entry: Entry) -> JSON2Request:
    """Build the reveal carrying the full binary entry."""

    try:
        payload = entry.marshal_binary()
    except ValueError as exc:
        raise ProtocolCompositionError(f"cannot compose entry reveal: {exc}") from exc
    return JSON2Request(method="reveal-entry", params={"entry": payload.hex()})
