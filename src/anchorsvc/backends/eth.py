"""Ethereum backend: zero-value self-send carrying the payload as calldata."""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from anchorsvc.errors import BackendError
from anchorsvc.record import ChainTransaction


class EthereumWriter:
    """Embed payloads in the ``data`` field of a signed self-send."""

    chain = "ethereum"

    def __init__(
        self,
        rpc_url: str,
        private_key: str,
        *,
        chain_id: int = 1,
        gas: int = 30_000,
        gas_price_gwei: str = "20",
        receipt_timeout_seconds: float = 300.0,
        web3: Any = None,
    ) -> None:
        from eth_account import Account

        try:
            self._account = Account.from_key(private_key)
        except (ValueError, TypeError) as exc:
            raise BackendError(f"invalid ethereum private key: {exc}") from exc
        if web3 is None:
            from web3 import HTTPProvider, Web3

            web3 = Web3(HTTPProvider(rpc_url))
        self.w3 = web3
        self.chain_id = chain_id
        self.gas = gas
        self.gas_price_gwei = gas_price_gwei
        self.receipt_timeout_seconds = receipt_timeout_seconds
        # Nonces are assigned locally since placements may overlap; a nonce only
        # counts as used once its transaction was accepted by the node.
        self._nonce_lock = asyncio.Lock()
        self._next_nonce: int | None = None

    @property
    def address(self) -> str:
        return self._account.address

    async def embed(self, payload: bytes) -> ChainTransaction:
        try:
            async with self._nonce_lock:
                nonce = await asyncio.to_thread(self._pending_nonce)
                tx_hash = await asyncio.to_thread(self._send, payload, nonce)
                self._next_nonce = nonce + 1
            logger.info("anchor.ethereum.sent txid={}", _hex(tx_hash))
            receipt = await asyncio.to_thread(
                self.w3.eth.wait_for_transaction_receipt, tx_hash, timeout=self.receipt_timeout_seconds
            )
        except BackendError:
            raise
        except Exception as exc:
            raise BackendError(f"ethereum anchor failed: {exc}") from exc
        if receipt["status"] != 1:
            raise BackendError(f"ethereum transaction {_hex(tx_hash)} reverted")
        return ChainTransaction(
            address=self.address,
            txid=_hex(tx_hash),
            block_height=int(receipt["blockNumber"]),
            block_hash=_hex(receipt["blockHash"]),
            offset=0,
        )

    def _pending_nonce(self) -> int:
        chain_nonce = self.w3.eth.get_transaction_count(self.address, "pending")
        if self._next_nonce is None:
            return chain_nonce
        return max(chain_nonce, self._next_nonce)

    def _send(self, payload: bytes, nonce: int) -> Any:
        tx = {
            "to": self.address,
            "value": 0,
            "gas": self.gas,
            "gasPrice": self.w3.to_wei(self.gas_price_gwei, "gwei"),
            "nonce": nonce,
            "chainId": self.chain_id,
            "data": payload,
        }
        signed = self._account.sign_transaction(tx)
        return self.w3.eth.send_raw_transaction(signed.raw_transaction)

    async def aclose(self) -> None:
        return None


def _hex(value: Any) -> str:
    text = value.hex() if isinstance(value, (bytes, bytearray)) else str(value)
    return text if text.startswith("0x") else f"0x{text}"
