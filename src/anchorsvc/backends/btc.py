"""Bitcoin backend: OP_RETURN transactions through the bitcoind wallet RPC."""

from __future__ import annotations

import asyncio
import itertools
from typing import Any

import httpx
from loguru import logger

from anchorsvc.errors import BackendError
from anchorsvc.record import ChainTransaction


class BitcoinRPC:
    """Minimal async JSON-RPC client for bitcoind."""

    def __init__(
        self,
        url: str,
        *,
        user: str | None = None,
        password: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.url = url
        self._auth = httpx.BasicAuth(user, password or "") if user else None
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._ids = itertools.count(1)

    async def call(self, method: str, *params: Any) -> Any:
        payload = {"jsonrpc": "1.0", "id": next(self._ids), "method": method, "params": list(params)}
        try:
            resp = await self._client.post(self.url, json=payload, auth=self._auth)
        except httpx.HTTPError as exc:
            raise BackendError(f"bitcoind {method} failed: {exc}") from exc
        try:
            body = resp.json()
        except ValueError as exc:
            raise BackendError(f"bitcoind {method} returned status {resp.status_code} without json") from exc
        error = body.get("error") if isinstance(body, dict) else None
        if error:
            raise BackendError(f"bitcoind {method} error: {error}")
        if resp.status_code >= 300:
            raise BackendError(f"bitcoind {method} returned status {resp.status_code}")
        return body.get("result")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class BitcoinWriter:
    """Embed payloads as a data output of a wallet-funded transaction."""

    chain = "bitcoin"

    def __init__(
        self,
        rpc: BitcoinRPC,
        *,
        address: str = "",
        confirmations: int = 1,
        poll_seconds: float = 30.0,
        confirm_timeout_seconds: float = 3600.0,
    ) -> None:
        self.rpc = rpc
        self.address = address
        self.confirmations = confirmations
        self.poll_seconds = poll_seconds
        self.confirm_timeout_seconds = confirm_timeout_seconds

    async def embed(self, payload: bytes) -> ChainTransaction:
        raw = await self.rpc.call("createrawtransaction", [], [{"data": payload.hex()}])
        funded = await self.rpc.call("fundrawtransaction", raw)
        signed = await self.rpc.call("signrawtransactionwithwallet", funded["hex"])
        if not signed.get("complete"):
            raise BackendError(f"wallet could not sign anchor transaction: {signed.get('errors')}")
        txid = await self.rpc.call("sendrawtransaction", signed["hex"])
        logger.info("anchor.bitcoin.sent txid={}", txid)
        info = await self._wait_confirmed(txid)
        return ChainTransaction(
            address=self.address,
            txid=txid,
            block_height=int(info.get("blockheight", 0)),
            block_hash=str(info.get("blockhash", "")),
            offset=int(info.get("blockindex", 0)),
        )

    async def _wait_confirmed(self, txid: str) -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.confirm_timeout_seconds
        while True:
            info = await self.rpc.call("gettransaction", txid)
            if int(info.get("confirmations", 0)) >= self.confirmations:
                return info
            if loop.time() >= deadline:
                raise BackendError(f"transaction {txid} not confirmed after {self.confirm_timeout_seconds}s")
            await asyncio.sleep(self.poll_seconds)

    async def aclose(self) -> None:
        await self.rpc.aclose()
