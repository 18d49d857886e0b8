"""Placement flow shared by every chain backend."""

from __future__ import annotations

from typing import Protocol

from loguru import logger

from anchorsvc.bus import BusProtocol
from anchorsvc.encoding import prepend_block_height
from anchorsvc.errors import AnchorServiceError
from anchorsvc.factom.submitter import EntrySubmitter
from anchorsvc.record import AnchorRecord, ChainTransaction
from anchorsvc.types import DirectoryBlockAnchorInfo


class ChainWriter(Protocol):
    """Embeds an anchor payload in one external chain."""

    chain: str

    async def embed(self, payload: bytes) -> ChainTransaction: ...

    async def aclose(self) -> None: ...


class AnchorPlacer:
    """Anchor a directory block on ``writer``'s chain, then record it on the anchor chain.

    Failures never propagate: they are logged and reported on the bus.
    """

    def __init__(self, writer: ChainWriter, submitter: EntrySubmitter, bus: BusProtocol) -> None:
        self.writer = writer
        self.submitter = submitter
        self.bus = bus

    @property
    def chain(self) -> str:
        return self.writer.chain

    async def place_anchor(self, message: DirectoryBlockAnchorInfo) -> None:
        try:
            payload = prepend_block_height(message.db_height, message.key_mr)
            tx = await self.writer.embed(payload)
            logger.info("anchor.{}.embedded db_height={} txid={}", self.chain, message.db_height, tx.txid)
            record = AnchorRecord(
                db_height=message.db_height,
                key_mr=message.key_mr_hex,
                record_height=message.db_height,
                **{self.chain: tx},
            )
            await self.submitter.submit(record)
        except AnchorServiceError as exc:
            logger.error("anchor.{}.failed db_height={} error={}", self.chain, message.db_height, exc)
            await self.bus.publish_failure(message)

    async def aclose(self) -> None:
        await self.writer.aclose()
        await self.submitter.aclose()
