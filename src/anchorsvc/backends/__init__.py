"""Chain backends and backend selection."""

from __future__ import annotations

from loguru import logger

from anchorsvc.backends.base import AnchorPlacer, ChainWriter
from anchorsvc.backends.btc import BitcoinRPC, BitcoinWriter
from anchorsvc.backends.eth import EthereumWriter
from anchorsvc.bus import BusProtocol
from anchorsvc.config import AnchorTarget, Settings
from anchorsvc.errors import BackendError, StartupConfigError
from anchorsvc.factom.submitter import EntrySubmitter


def build_chain_writer(settings: Settings) -> ChainWriter:
    """Pick the chain writer selected by ``anchor_to``."""

    target = settings.anchor_target()
    if target is AnchorTarget.BITCOIN:
        logger.info("anchor.backend selected=bitcoin rpc={}", settings.btc_rpc_url)
        rpc = BitcoinRPC(
            settings.btc_rpc_url,
            user=settings.btc_rpc_user,
            password=settings.btc_rpc_password,
            timeout_seconds=settings.http_timeout_seconds,
        )
        return BitcoinWriter(
            rpc,
            address=settings.btc_address,
            confirmations=settings.btc_confirmations,
            poll_seconds=settings.btc_poll_seconds,
            confirm_timeout_seconds=settings.btc_confirm_timeout_seconds,
        )

    logger.info("anchor.backend selected=ethereum rpc={}", settings.eth_rpc_url)
    if not settings.eth_private_key:
        raise StartupConfigError("eth_private_key is required when anchoring to ethereum")
    try:
        return EthereumWriter(
            settings.eth_rpc_url,
            settings.eth_private_key,
            chain_id=settings.eth_chain_id,
            gas=settings.eth_gas,
            gas_price_gwei=settings.eth_gas_price_gwei,
            receipt_timeout_seconds=settings.eth_receipt_timeout_seconds,
        )
    except BackendError as exc:
        raise StartupConfigError(str(exc)) from exc


def build_anchor_backend(settings: Settings, submitter: EntrySubmitter, bus: BusProtocol) -> AnchorPlacer:
    return AnchorPlacer(build_chain_writer(settings), submitter, bus)


__all__ = [
    "AnchorPlacer",
    "BitcoinRPC",
    "BitcoinWriter",
    "ChainWriter",
    "EthereumWriter",
    "build_anchor_backend",
    "build_chain_writer",
]
