"""Chain-agnostic anchor records and their v2 signing routine."""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any

from nacl.signing import SigningKey

from anchorsvc.errors import SigningError

ANCHOR_RECORD_V2 = 2


@dataclass(frozen=True)
class ChainTransaction:
    """Where a payload landed on the external chain."""

    address: str
    txid: str
    block_height: int
    block_hash: str
    offset: int = 0

    def to_json(self) -> dict[str, Any]:
        return {
            "Address": self.address,
            "TXID": self.txid,
            "BlockHeight": self.block_height,
            "BlockHash": self.block_hash,
            "Offset": self.offset,
        }


@dataclass(frozen=True)
class AnchorRecord:
    """Signed wrapper describing one anchored directory block."""

    db_height: int
    key_mr: str
    record_height: int
    bitcoin: ChainTransaction | None = None
    ethereum: ChainTransaction | None = None
    anchor_record_ver: int = 1

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "AnchorRecordVer": self.anchor_record_ver,
            "DBHeight": self.db_height,
            "KeyMR": self.key_mr,
            "RecordHeight": self.record_height,
        }
        if self.bitcoin is not None:
            data["Bitcoin"] = self.bitcoin.to_json()
        if self.ethereum is not None:
            data["Ethereum"] = self.ethereum.to_json()
        return data

    def marshal(self) -> bytes:
        return json.dumps(self.to_json(), separators=(",", ":")).encode("utf-8")

    def marshal_and_sign_v2(self, key: SigningKey) -> tuple[bytes, bytes]:
        """Return ``(raw, signature)``: the v2 JSON form and its detached ed25519 signature.

        The record itself is left untouched; the version is only set on the signed copy.
        """

        signed = replace(self, anchor_record_ver=ANCHOR_RECORD_V2)
        try:
            raw = signed.marshal()
            signature = key.sign(raw).signature
        except (TypeError, ValueError, AttributeError) as exc:
            raise SigningError(f"cannot sign anchor record: {exc}") from exc
        return raw, signature
