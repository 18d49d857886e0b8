"""Anchor request model."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

KEY_MR_BYTES = 32


@dataclass(frozen=True)
class DirectoryBlockAnchorInfo:
    """One finalized directory block waiting to be anchored."""

    db_height: int
    key_mr: bytes
    timestamp: int | None = None

    @property
    def key_mr_hex(self) -> str:
        return self.key_mr.hex()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DirectoryBlockAnchorInfo:
        """Build a request from ``{"db_height": int, "key_mr": hex}``."""

        try:
            height = data["db_height"]
            key_mr = bytes.fromhex(data["key_mr"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"invalid anchor request: {exc}") from exc
        if not _is_int(height):
            raise ValueError(f"db_height must be an integer, got {height!r}")
        if not 0 <= height <= 0xFFFFFFFF:
            raise ValueError(f"db_height out of range: {height}")
        if len(key_mr) != KEY_MR_BYTES:
            raise ValueError(f"key_mr must be {KEY_MR_BYTES} bytes, got {len(key_mr)}")
        timestamp = data.get("timestamp")
        if timestamp is not None and not _is_int(timestamp):
            raise ValueError(f"timestamp must be an integer, got {timestamp!r}")
        return cls(db_height=height, key_mr=key_mr, timestamp=timestamp)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
