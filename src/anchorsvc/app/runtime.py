"""Application runtime: wires settings, keys, bus, backend and dispatch loop."""

from __future__ import annotations

import asyncio
import json
import os
import signal
import threading
from collections.abc import AsyncIterator
from contextlib import suppress
from typing import Any, TextIO

from loguru import logger

from anchorsvc.backends import AnchorPlacer, build_anchor_backend
from anchorsvc.bus import AnchorBus
from anchorsvc.config import AnchorKeys, Settings
from anchorsvc.factom.submitter import EntrySubmitter
from anchorsvc.service import Anchor, AnchorService
from anchorsvc.types import DirectoryBlockAnchorInfo

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGQUIT)


class AnchorRuntime:
    """Owns the process lifecycle around one :class:`AnchorService`.

    When the service asks for shutdown the runtime sends itself ``SIGQUIT``;
    the handler installed by :meth:`run` then stops the runtime.
    """

    def __init__(
        self,
        settings: Settings,
        keys: AnchorKeys,
        *,
        bus: AnchorBus | None = None,
        backend: Anchor | None = None,
    ) -> None:
        self.settings = settings
        self.keys = keys
        self.bus = bus or AnchorBus()
        self.submitter = EntrySubmitter(
            settings.factom_addr,
            keys.ec_address,
            keys.sig_key,
            keys.chain_id,
            settle_seconds=settings.reveal_delay_seconds,
            timeout_seconds=settings.http_timeout_seconds,
        )
        self.backend = backend or build_anchor_backend(settings, self.submitter, self.bus)
        self.service = AnchorService(self.backend, self.bus, failure_threshold=settings.failure_threshold)
        self.service.shutdown_requested.connect(self._on_shutdown_requested, weak=False)
        self.shutdown_reason: str | None = None
        self._stop = asyncio.Event()

    @property
    def failed(self) -> bool:
        return self.shutdown_reason == "failure_threshold"

    def request_stop(self, reason: str) -> None:
        if self.shutdown_reason is None:
            self.shutdown_reason = reason
        logger.info("anchor.runtime.stop reason={}", reason)
        self._stop.set()

    def _on_shutdown_requested(self, _sender: Any, **kwargs: Any) -> None:
        logger.error("anchor.runtime.shutdown_requested failures={}", kwargs.get("failures"))
        self.shutdown_reason = "failure_threshold"
        os.kill(os.getpid(), signal.SIGQUIT)

    async def run(self, requests: AsyncIterator[DirectoryBlockAnchorInfo] | None = None) -> None:
        """Run the dispatch loop, optionally feeding it from ``requests``, until stopped."""

        loop = asyncio.get_running_loop()
        for sig in STOP_SIGNALS:
            loop.add_signal_handler(sig, self.request_stop, sig.name)
        service_task = asyncio.create_task(self.service.start())
        stop_task = asyncio.create_task(self._stop.wait())
        feed_task = asyncio.create_task(self._feed(requests)) if requests is not None else None
        try:
            await asyncio.wait({service_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
            if service_task.done() and not stop_task.done():
                # Let the SIGQUIT handler run before the handlers are removed.
                with suppress(TimeoutError):
                    await asyncio.wait_for(asyncio.shield(stop_task), timeout=1.0)
        finally:
            pending = [task for task in (service_task, stop_task, feed_task) if task is not None and not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            for sig in STOP_SIGNALS:
                loop.remove_signal_handler(sig)
            await self.aclose()
        if service_task.done() and not service_task.cancelled() and service_task.exception() is not None:
            raise service_task.exception()

    async def _feed(self, requests: AsyncIterator[DirectoryBlockAnchorInfo]) -> None:
        async for message in requests:
            await self.bus.publish_request(message)
        logger.info("anchor.runtime.intake_closed")

    async def aclose(self) -> None:
        if isinstance(self.backend, AnchorPlacer):
            await self.backend.aclose()
        else:
            await self.submitter.aclose()


async def read_requests(stream: TextIO) -> AsyncIterator[DirectoryBlockAnchorInfo]:
    """Yield anchor requests from JSON lines; malformed lines are logged and skipped.

    ``stream`` is read on a daemon thread so a blocked read never holds up shutdown.
    """

    loop = asyncio.get_running_loop()
    lines: asyncio.Queue[str | None] = asyncio.Queue()

    def _push(line: str | None) -> bool:
        try:
            loop.call_soon_threadsafe(lines.put_nowait, line)
        except RuntimeError:
            return False
        return True

    def _pump() -> None:
        for line in stream:
            if not _push(line):
                return
        _push(None)

    threading.Thread(target=_pump, name="anchor-intake", daemon=True).start()
    while (line := await lines.get()) is not None:
        line = line.strip()
        if not line:
            continue
        try:
            yield DirectoryBlockAnchorInfo.from_mapping(json.loads(line))
        except (ValueError, AttributeError) as exc:
            logger.warning("anchor.intake.invalid line={} error={}", line, exc)
