from __future__ import annotations

import hashlib

import pytest

from anchorsvc.factom.entry import Entry, new_entry
from conftest import CHAIN_ID


def test_new_entry_sets_fields_verbatim() -> None:
    entry = new_entry(CHAIN_ID, b"sig", b"content")

    assert entry.chain_id == CHAIN_ID
    assert entry.ext_ids == (b"sig",)
    assert entry.content == b"content"


def test_marshal_binary_layout() -> None:
    entry = new_entry(CHAIN_ID, b"\x01\x02\x03", b"hello")
    data = entry.marshal_binary()

    assert data[0] == 0
    assert data[1:33] == bytes.fromhex(CHAIN_ID)
    assert data[33:35] == (2 + 3).to_bytes(2, "big")
    assert data[35:37] == (3).to_bytes(2, "big")
    assert data[37:40] == b"\x01\x02\x03"
    assert data[40:] == b"hello"


def test_multiple_ext_ids_are_length_prefixed() -> None:
    entry = Entry(chain_id=CHAIN_ID, ext_ids=(b"a", b"bc"), content=b"")
    data = entry.marshal_binary()

    assert data[33:35] == (2 + 1 + 2 + 2).to_bytes(2, "big")
    assert data[35:] == b"\x00\x01a\x00\x02bc"


def test_hash_is_sha256_of_sha512_and_data() -> None:
    entry = new_entry(CHAIN_ID, b"sig", b"payload")
    data = entry.marshal_binary()

    assert entry.hash() == hashlib.sha256(hashlib.sha512(data).digest() + data).digest()


@pytest.mark.parametrize(
    ("content_size", "cost"),
    [(0, 1), (1024 - 5, 1), (1024 - 4, 2), (4000, 4), (10240 - 5, 10)],
)
def test_cost_is_rounded_up_per_kilobyte(content_size: int, cost: int) -> None:
    # ext id "sig" adds 5 payload bytes: 2-byte length prefix plus 3 bytes
    entry = new_entry(CHAIN_ID, b"sig", b"x" * content_size)

    assert entry.cost() == cost


def test_cost_rejects_entries_over_10kb() -> None:
    entry = new_entry(CHAIN_ID, b"sig", b"x" * 10240)

    with pytest.raises(ValueError, match="10KB"):
        entry.cost()
