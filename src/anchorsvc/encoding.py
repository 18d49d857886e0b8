"""Canonical on-chain payload: marker, 6-byte block height, hash."""

from __future__ import annotations

from anchorsvc.errors import InvalidHeight

HEIGHT_MARKER = b"Fa"
HEIGHT_BYTES = 6
MAX_HEIGHT = (1 << (8 * HEIGHT_BYTES)) - 1


def prepend_block_height(height: int, digest: bytes) -> bytes:
    """Return ``b"Fa" + height(6 bytes, big-endian) + digest``.

    The directory block height starts at 0 for the genesis block. Heights
    that need more than 48 bits raise :class:`InvalidHeight`.
    """

    if height < 0 or height & MAX_HEIGHT != height:
        raise InvalidHeight(f"bad block height: {height}")
    wide = height.to_bytes(8, "big")
    return HEIGHT_MARKER + wide[8 - HEIGHT_BYTES :] + bytes(digest)


def split_block_height(payload: bytes) -> tuple[int, bytes]:
    """Inverse of :func:`prepend_block_height`, used by chain scanners."""

    header_len = len(HEIGHT_MARKER) + HEIGHT_BYTES
    if len(payload) < header_len or not payload.startswith(HEIGHT_MARKER):
        raise ValueError("payload is not an anchor payload")
    height = int.from_bytes(payload[len(HEIGHT_MARKER) : header_len], "big")
    return height, payload[header_len:]
