from __future__ import annotations

import pytest

from anchorsvc.types import DirectoryBlockAnchorInfo


def test_from_mapping_parses_hex_key_mr() -> None:
    info = DirectoryBlockAnchorInfo.from_mapping({"db_height": 12, "key_mr": "ab" * 32, "timestamp": 1700000000})

    assert info.db_height == 12
    assert info.key_mr == b"\xab" * 32
    assert info.key_mr_hex == "ab" * 32
    assert info.timestamp == 1700000000


@pytest.mark.parametrize(
    "data",
    [
        {"key_mr": "ab" * 32},
        {"db_height": 1},
        {"db_height": "x", "key_mr": "ab" * 32},
        {"db_height": 1, "key_mr": "zz"},
        {"db_height": 1, "key_mr": "ab" * 31},
        {"db_height": -1, "key_mr": "ab" * 32},
        {"db_height": 1 << 32, "key_mr": "ab" * 32},
        {"db_height": "7", "key_mr": "ab" * 32},
        {"db_height": True, "key_mr": "ab" * 32},
        {"db_height": 7.0, "key_mr": "ab" * 32},
        {"db_height": 1, "key_mr": "ab" * 32, "timestamp": "1700000000"},
    ],
)
def test_from_mapping_rejects_bad_requests(data: dict) -> None:
    with pytest.raises(ValueError):
        DirectoryBlockAnchorInfo.from_mapping(data)
