"""Shared fixtures and a fake browser client for driving SSE streams."""

import asyncio
import contextlib
from pathlib import Path
from typing import Dict, List

import pytest

from soundcast.registry import SubscriberRegistry
from soundcast.stream import event_stream


def parse_frame(frame: str) -> Dict[str, str]:
    """Split one ``event:/data:`` frame back into kind and payload."""
    kind = ""
    data: List[str] = []
    for line in frame.rstrip("\n").split("\n"):
        if line.startswith("event: "):
            kind = line[len("event: "):]
        elif line.startswith("data: "):
            data.append(line[len("data: "):])
    return {"kind": kind, "payload": "\n".join(data)}


class FakeClient:
    """Consumes ``event_stream`` the way the HTTP layer would."""

    def __init__(self, registry: SubscriberRegistry, heartbeat: float = 60.0, leave_after_audio: int = 0):
        self.registry = registry
        self.heartbeat = heartbeat
        self.leave_after_audio = leave_after_audio
        self.events: List[Dict[str, str]] = []
        self.arrivals: List[float] = []
        self.task: asyncio.Task = None

    @property
    def audio(self) -> List[str]:
        return [e["payload"] for e in self.events if e["kind"] == "audio"]

    async def _run(self):
        loop = asyncio.get_running_loop()
        stream = event_stream(self.registry, heartbeat_interval=self.heartbeat)
        async with contextlib.aclosing(stream):
            async for frame in stream:
                event = parse_frame(frame)
                self.events.append(event)
                if event["kind"] == "audio":
                    self.arrivals.append(loop.time())
                    if self.leave_after_audio and len(self.audio) >= self.leave_after_audio:
                        break

    def start(self) -> "FakeClient":
        self.task = asyncio.ensure_future(self._run())
        return self

    async def disconnect(self):
        self.task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self.task


async def wait_until(predicate, timeout: float = 2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


async def connect(registry: SubscriberRegistry, count: int, **kwargs) -> List[FakeClient]:
    clients = [FakeClient(registry, **kwargs).start() for _ in range(count)]
    await wait_until(lambda: len(registry) >= count)
    return clients


@pytest.fixture
def registry() -> SubscriberRegistry:
    return SubscriberRegistry()


@pytest.fixture
def sound_files(tmp_path: Path) -> List[Path]:
    """Three small fake mp3 files with distinct contents."""
    paths = []
    for i, name in enumerate(["A.mp3", "B.mp3", "C.mp3"]):
        path = tmp_path / name
        path.write_bytes(b"ID3" + bytes([i]) * (64 + i) + b"\x00\xff\n")
        paths.append(path)
    return paths
