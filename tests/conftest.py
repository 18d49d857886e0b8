from __future__ import annotations

import pytest
from nacl.signing import SigningKey

from anchorsvc.config import AnchorKeys
from anchorsvc.factom.keys import ECAddress

EC_SEED = bytes(range(32))
SIG_SEED = bytes(range(32, 64))
CHAIN_ID = "df3ade9eec4b08d5379cc64270c30ea7315d8a8a1a69efe2b98a60ecdd69e604"


@pytest.fixture
def ec_address() -> ECAddress:
    return ECAddress(EC_SEED)


@pytest.fixture
def sig_key() -> SigningKey:
    return SigningKey(SIG_SEED)


@pytest.fixture
def chain_id() -> str:
    return CHAIN_ID


@pytest.fixture
def anchor_keys(ec_address: ECAddress, sig_key: SigningKey) -> AnchorKeys:
    return AnchorKeys(ec_address=ec_address, sig_key=sig_key, chain_id=CHAIN_ID)


@pytest.fixture
def anchor_env(monkeypatch: pytest.MonkeyPatch, tmp_path, ec_address: ECAddress) -> dict[str, str]:
    monkeypatch.chdir(tmp_path)
    env = {
        "ANCHOR_SERVER_EC_KEY": ec_address.private_address(),
        "ANCHOR_SIG_KEY": SIG_SEED.hex(),
        "ANCHOR_ANCHOR_CHAIN_ID": CHAIN_ID,
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env
