from __future__ import annotations

import asyncio
import io
import json

import pytest

from anchorsvc.app.runtime import AnchorRuntime, read_requests
from anchorsvc.config import AnchorKeys, load_settings
from anchorsvc.types import DirectoryBlockAnchorInfo


class _FailingBackend:
    def __init__(self) -> None:
        self.placed: list[int] = []

    async def place_anchor(self, message: DirectoryBlockAnchorInfo) -> None:
        self.placed.append(message.db_height)
        raise RuntimeError("chain unreachable")


async def _requests(*heights: int):
    for height in heights:
        yield DirectoryBlockAnchorInfo(db_height=height, key_mr=bytes(32))


@pytest.mark.asyncio
async def test_runtime_quits_through_signal_after_threshold(anchor_env: dict[str, str], anchor_keys: AnchorKeys) -> None:
    settings = load_settings(failure_threshold=3)
    backend = _FailingBackend()
    runtime = AnchorRuntime(settings, anchor_keys, backend=backend)

    await asyncio.wait_for(runtime.run(_requests(1, 2, 3, 4)), timeout=5)

    assert runtime.failed
    assert runtime.shutdown_reason == "failure_threshold"
    assert runtime.service.failed_times == 3
    assert runtime.service.halted


@pytest.mark.asyncio
async def test_runtime_stops_on_request(anchor_env: dict[str, str], anchor_keys: AnchorKeys) -> None:
    runtime = AnchorRuntime(load_settings(), anchor_keys, backend=_FailingBackend())
    run = asyncio.create_task(runtime.run())
    await asyncio.sleep(0)

    runtime.request_stop("SIGTERM")
    await asyncio.wait_for(run, timeout=5)

    assert not runtime.failed
    assert runtime.shutdown_reason == "SIGTERM"


@pytest.mark.asyncio
async def test_read_requests_skips_malformed_lines() -> None:
    stream = io.StringIO(
        "\n".join(
            [
                json.dumps({"db_height": 1, "key_mr": "00" * 32}),
                "not json",
                "",
                json.dumps({"db_height": 2}),
                json.dumps([1, 2]),
                json.dumps({"db_height": 3, "key_mr": "ff" * 32}),
            ]
        )
    )

    received = [message async for message in read_requests(stream)]

    assert [message.db_height for message in received] == [1, 3]
    assert received[1].key_mr == b"\xff" * 32
