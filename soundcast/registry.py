"""Thread-safe registry of connected SSE subscribers.

Each open ``/sse`` connection owns one :class:`Subscriber` handle for its
whole lifetime. The broadcaster reads a snapshot of the registry and hands
events to every handle; the connection picks them up and writes them out.
"""

import asyncio
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .models import Event

logger = logging.getLogger(__name__)


class Subscriber:
    """Single-slot, unbuffered conduit of events for one connection.

    ``send`` is a rendezvous: it returns only once the owning connection has
    taken the event *and* acknowledged writing it, so a sender never runs
    ahead of its slowest receiver.
    """

    def __init__(self) -> None:
        self._slot: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    async def _handoff(self, event: Event) -> None:
        await self._slot.put(event)
        await self._slot.join()

    async def send(self, event: Event, timeout: Optional[float] = None) -> bool:
        """Hand *event* to the receiver.

        Returns False if the handle is (or becomes) closed, or if *timeout*
        seconds pass before the receiver acknowledges.
        """
        if self.closed:
            return False
        handoff = asyncio.ensure_future(self._handoff(event))
        closed = asyncio.ensure_future(self._closed.wait())
        try:
            done, _ = await asyncio.wait(
                {handoff, closed}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (handoff, closed):
                if not task.done():
                    task.cancel()
        return handoff in done and not handoff.cancelled() and handoff.exception() is None

    async def receive(self, timeout: Optional[float] = None) -> Optional[Event]:
        """Wait for the next event, or None once the handle is closed.

        Raises ``asyncio.TimeoutError`` if nothing arrives within *timeout*.
        A returned event must be followed by :meth:`ack`.
        """
        getter = asyncio.ensure_future(self._slot.get())
        closed = asyncio.ensure_future(self._closed.wait())
        try:
            done, _ = await asyncio.wait(
                {getter, closed}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (getter, closed):
                if not task.done():
                    task.cancel()
        if getter in done:
            return getter.result()
        if closed in done:
            return None
        raise asyncio.TimeoutError

    def ack(self) -> None:
        """Mark the last received event as written, releasing the sender."""
        self._slot.task_done()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Subscriber {id(self):#x} {state}>"


class SubscriberRegistry:
    """Set of live subscriber handles (presence = liveness)."""

    def __init__(self) -> None:
        self._subscribers: Dict[Subscriber, bool] = {}
        self._lock = threading.Lock()

    def register(self) -> Subscriber:
        """Create a new handle and add it to the registry."""
        subscriber = Subscriber()
        with self._lock:
            self._subscribers[subscriber] = True
            total = len(self._subscribers)
        logger.info("Subscriber connected (total: %d)", total)
        return subscriber

    def unregister(self, subscriber: Subscriber) -> None:
        """Remove and close *subscriber*. Removing an absent handle is a no-op."""
        with self._lock:
            present = self._subscribers.pop(subscriber, None) is not None
            remaining = len(self._subscribers)
        subscriber.close()
        if present:
            logger.info("Subscriber disconnected (remaining: %d)", remaining)

    def snapshot(self) -> List[Subscriber]:
        """Point-in-time copy of the current members."""
        with self._lock:
            return list(self._subscribers)

    @contextmanager
    def subscription(self) -> Iterator[Subscriber]:
        """Register a handle for the duration of the ``with`` block."""
        subscriber = self.register()
        try:
            yield subscriber
        finally:
            self.unregister(subscriber)

    def close_all(self) -> None:
        for subscriber in self.snapshot():
            self.unregister(subscriber)

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def __contains__(self, subscriber: object) -> bool:
        with self._lock:
            return subscriber in self._subscribers
