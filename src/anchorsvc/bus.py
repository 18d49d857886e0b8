"""In-process channels between the upstream ledger, the dispatch loop and the placers."""

from __future__ import annotations

import asyncio
from typing import Protocol

from anchorsvc.types import DirectoryBlockAnchorInfo


class BusProtocol(Protocol):
    """Request intake and failure reports, consumed by one dispatch loop."""

    async def publish_request(self, message: DirectoryBlockAnchorInfo) -> None: ...

    async def publish_failure(self, message: DirectoryBlockAnchorInfo) -> None: ...

    async def next_request(self) -> DirectoryBlockAnchorInfo: ...

    async def next_failure(self) -> DirectoryBlockAnchorInfo: ...


class AnchorBus:
    """Unbounded queues: upstream requests in, failed placements back.

    A failure report carries the request whose placement failed.
    """

    def __init__(self) -> None:
        self._requests: asyncio.Queue[DirectoryBlockAnchorInfo] = asyncio.Queue()
        self._failures: asyncio.Queue[DirectoryBlockAnchorInfo] = asyncio.Queue()

    async def publish_request(self, message: DirectoryBlockAnchorInfo) -> None:
        await self._requests.put(message)

    async def publish_failure(self, message: DirectoryBlockAnchorInfo) -> None:
        await self._failures.put(message)

    async def next_request(self) -> DirectoryBlockAnchorInfo:
        return await self._requests.get()

    async def next_failure(self) -> DirectoryBlockAnchorInfo:
        return await self._failures.get()
