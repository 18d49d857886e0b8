"""Anchor dispatch loop."""

from __future__ import annotations

import asyncio
from typing import Protocol

from blinker import Signal
from loguru import logger

from anchorsvc.bus import BusProtocol
from anchorsvc.types import DirectoryBlockAnchorInfo

DEFAULT_FAILURE_THRESHOLD = 10


class Anchor(Protocol):
    """Chain backend capability: embed one directory block and record it."""

    async def place_anchor(self, message: DirectoryBlockAnchorInfo) -> None: ...


class AnchorService:
    """Receive anchor requests, fan them out to the backend and count failures.

    Every request is placed in its own task; the loop never waits for a
    placement. Placers report failures through the bus, and once
    ``failure_threshold`` failures have been seen the service stops taking
    requests and sends ``shutdown_requested`` to whoever owns the process.
    The failure count is never reset.
    """

    def __init__(
        self,
        backend: Anchor,
        bus: BusProtocol,
        *,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
    ) -> None:
        self.backend = backend
        self.bus = bus
        self.failure_threshold = failure_threshold
        self.shutdown_requested = Signal("anchorsvc.shutdown_requested")
        self._failed_times = 0
        self._halted = False
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def failed_times(self) -> int:
        return self._failed_times

    @property
    def halted(self) -> bool:
        return self._halted

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def start(self) -> None:
        """Run until the failure threshold is reached or the task is cancelled."""

        logger.info("anchor.service.start backend={} threshold={}", type(self.backend).__name__, self.failure_threshold)
        request_task: asyncio.Task[DirectoryBlockAnchorInfo] | None = None
        failure_task: asyncio.Task[DirectoryBlockAnchorInfo] | None = None
        try:
            while not self._halted:
                if request_task is None:
                    request_task = asyncio.create_task(self.bus.next_request())
                if failure_task is None:
                    failure_task = asyncio.create_task(self.bus.next_failure())
                done, _ = await asyncio.wait({request_task, failure_task}, return_when=asyncio.FIRST_COMPLETED)

                if failure_task in done:
                    failed = failure_task.result()
                    failure_task = None
                    self._record_failure(failed)

                if request_task in done:
                    message = request_task.result()
                    request_task = None
                    if self._halted:
                        logger.warning("anchor.request.dropped db_height={}", message.db_height)
                        continue
                    self._dispatch(message)
        finally:
            for task in (request_task, failure_task):
                if task is not None:
                    task.cancel()
        logger.info("anchor.service.stopped failures={}", self._failed_times)

    def _dispatch(self, message: DirectoryBlockAnchorInfo) -> None:
        logger.info("anchor.request.received db_height={} key_mr={}", message.db_height, message.key_mr_hex)
        task = asyncio.create_task(self._place(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _place(self, message: DirectoryBlockAnchorInfo) -> None:
        try:
            await self.backend.place_anchor(message)
        except Exception:
            logger.exception("anchor.place.error db_height={}", message.db_height)
            await self.bus.publish_failure(message)

    def _record_failure(self, message: DirectoryBlockAnchorInfo) -> None:
        self._failed_times += 1
        logger.error("anchor.failed time={} db_height={}", self._failed_times, message.db_height)
        if self._failed_times < self.failure_threshold or self._halted:
            return
        logger.critical(
            "anchor.failed.threshold failures={} threshold={} quitting",
            self._failed_times,
            self.failure_threshold,
        )
        self._halted = True
        self.shutdown_requested.send(self, failures=self._failed_times)
