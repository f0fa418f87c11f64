"""Broadcast dispatcher: plays the sound list out to every subscriber."""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

from .models import Event, PlayResult
from .registry import SubscriberRegistry
from .sounds import SoundLoadError, encode_payload, load_sound

logger = logging.getLogger(__name__)

Loader = Callable[[Path], Awaitable[bytes]]


class Broadcaster:
    """Walks a fixed, ordered sound list and fans each clip out.

    Every clip is handed to every subscriber in the current snapshot before
    the next clip is loaded. Calls to :meth:`play` are serialized: a second
    trigger waits for the running one to finish instead of interleaving.

    ``send_timeout`` bounds how long a single subscriber may hold up a
    broadcast; a subscriber that misses it is dropped. ``None`` waits
    forever, so one stalled client stalls everybody.
    """

    def __init__(
        self,
        registry: SubscriberRegistry,
        sounds: Sequence[Path],
        pacing: float = 0.1,
        send_timeout: Optional[float] = 10.0,
        loader: Loader = load_sound,
    ):
        self.registry = registry
        self.sounds = tuple(Path(s) for s in sounds)
        self.pacing = pacing
        self.send_timeout = send_timeout
        self._loader = loader
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def broadcast(self, event: Event) -> int:
        """Deliver *event* to every registered subscriber.

        Returns the number of subscribers that acknowledged it. A client that
        goes away right after the frame was written never acks, so it is not
        counted even though it may have seen the event. Any subscriber that
        is closed or times out is unregistered.
        """
        delivered = 0
        for subscriber in self.registry.snapshot():
            if await subscriber.send(event, timeout=self.send_timeout):
                delivered += 1
                continue
            if subscriber.closed:
                logger.debug("Subscriber %r left during broadcast", subscriber)
            else:
                logger.info("Dropping unresponsive subscriber %r", subscriber)
            self.registry.unregister(subscriber)
        return delivered

    async def play(self) -> PlayResult:
        async with self._lock:
            return await self._play()

    async def _play(self) -> PlayResult:
        result = PlayResult()
        for path in self.sounds:
            try:
                data = await self._loader(path)
            except SoundLoadError as exc:
                logger.warning("Skipping %s: %s", path, exc.cause)
                result.skipped.append(str(path))
                continue

            delivered = await self.broadcast(Event.audio(encode_payload(data)))
            logger.info("Broadcast %s (%d bytes) to %d subscriber(s)", path, len(data), delivered)
            result.dispatched.append(str(path))
            result.deliveries += delivered

            # also runs after the last clip, so /play returns one pacing delay
            # after the final hand-off
            await asyncio.sleep(self.pacing)
        return result
