"""Per-connection SSE loop."""

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional

from .models import Event
from .registry import SubscriberRegistry

logger = logging.getLogger(__name__)

DisconnectCheck = Callable[[], Awaitable[bool]]


async def event_stream(
    registry: SubscriberRegistry,
    heartbeat_interval: float = 15.0,
    is_disconnected: Optional[DisconnectCheck] = None,
) -> AsyncIterator[str]:
    """Yield SSE frames for one client until it goes away.

    The client is registered for exactly as long as this generator runs.
    It ends when the server closes or cancels it (peer disconnect, failed
    write, shutdown), when *is_disconnected* reports the peer gone at a
    heartbeat tick, or when the registry closes the handle.

    A ``heartbeat`` frame goes out right after ``connected`` and then every
    *heartbeat_interval* seconds, regardless of audio traffic.
    """
    loop = asyncio.get_running_loop()
    with registry.subscription() as subscriber:
        try:
            yield Event.connected().to_sse()
            next_beat = loop.time()

            while not subscriber.closed:
                now = loop.time()
                if now >= next_beat:
                    if is_disconnected is not None and await is_disconnected():
                        break
                    yield Event.heartbeat().to_sse()
                    next_beat += heartbeat_interval
                    if next_beat <= now:
                        next_beat = now + heartbeat_interval
                    continue

                try:
                    event = await subscriber.receive(timeout=next_beat - now)
                except asyncio.TimeoutError:
                    continue
                if event is None:
                    break

                yield event.to_sse()
                subscriber.ack()
        finally:
            logger.debug("Stream for %r closing", subscriber)
