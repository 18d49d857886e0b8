"""Configuration management for the anchor service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any

from nacl.signing import SigningKey
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from anchorsvc.errors import StartupConfigError
from anchorsvc.factom.keys import ECAddress, chain_id_from_hex, private_key_from_hex


class AnchorTarget(IntEnum):
    BITCOIN = 0
    ETHEREUM = 1


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="ANCHOR_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Intermediary ledger
    server_ec_key: str = Field(..., description="Entry Credit private address (Es...) paying for commits")
    sig_key: str = Field(..., description="Hex ed25519 key signing anchor records")
    anchor_chain_id: str = Field(..., description="Chain id receiving anchor records")
    factom_addr: str = Field(default="localhost:8088", description="factomd host:port")
    reveal_delay_seconds: float = Field(default=2.0, ge=0, description="Wait between commit and reveal")
    http_timeout_seconds: float = Field(default=30.0, gt=0, description="HTTP timeout")

    # Dispatch
    anchor_to: int = Field(default=0, description="0 = Bitcoin, 1 = Ethereum")
    failure_threshold: int = Field(default=10, ge=1, description="Failures before the service quits")

    # Bitcoin
    btc_rpc_url: str = Field(default="http://localhost:8332", description="bitcoind JSON-RPC endpoint")
    btc_rpc_user: str | None = Field(default=None, description="bitcoind RPC user")
    btc_rpc_password: str | None = Field(default=None, description="bitcoind RPC password")
    btc_address: str = Field(default="", description="Wallet address reported in anchor records")
    btc_confirmations: int = Field(default=1, ge=0, description="Confirmations to wait for")
    btc_poll_seconds: float = Field(default=30.0, gt=0, description="Confirmation poll interval")
    btc_confirm_timeout_seconds: float = Field(default=3600.0, gt=0, description="Give up waiting after")

    # Ethereum
    eth_rpc_url: str = Field(default="http://localhost:8545", description="Ethereum JSON-RPC endpoint")
    eth_private_key: str | None = Field(default=None, description="Hex key of the anchoring account")
    eth_chain_id: int = Field(default=1, description="Network chain id")
    eth_gas: int = Field(default=30_000, description="Gas limit")
    eth_gas_price_gwei: str = Field(default="20", description="Gas price in gwei")
    eth_receipt_timeout_seconds: float = Field(default=300.0, gt=0, description="Receipt wait timeout")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")

    def anchor_target(self) -> AnchorTarget:
        try:
            return AnchorTarget(self.anchor_to)
        except ValueError as exc:
            raise StartupConfigError(
                f"anchor_to={self.anchor_to} is not supported, use 0 (bitcoin) or 1 (ethereum)"
            ) from exc


@dataclass(frozen=True)
class AnchorKeys:
    """Parsed key material; read-only after startup."""

    ec_address: ECAddress
    sig_key: SigningKey
    chain_id: str


def load_settings(env_file: Path | None = None, **overrides: Any) -> Settings:
    """Load settings from the environment and an optional ``.env`` file."""

    try:
        if env_file is not None:
            return Settings(_env_file=env_file, **overrides)
        return Settings(**overrides)
    except ValidationError as exc:
        raise StartupConfigError(f"invalid configuration: {exc}") from exc


def load_anchor_keys(settings: Settings) -> AnchorKeys:
    """Parse the EC key, signature key and chain id. Any error is fatal at startup."""

    try:
        ec_address = ECAddress.from_private_address(settings.server_ec_key)
    except ValueError as exc:
        raise StartupConfigError(f"cannot parse server EC key: {exc}") from exc
    try:
        sig_key = private_key_from_hex(settings.sig_key)
    except ValueError as exc:
        raise StartupConfigError(f"cannot parse signature key: {exc}") from exc
    try:
        chain_id = chain_id_from_hex(settings.anchor_chain_id)
    except ValueError as exc:
        raise StartupConfigError(f"cannot parse anchor chain id: {exc}") from exc
    return AnchorKeys(ec_address=ec_address, sig_key=sig_key, chain_id=chain_id)
