"""Data models for the broadcast stream."""

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

EventKind = Literal["connected", "heartbeat", "audio"]

CONNECTED_MESSAGE = "Connected to SSE server"
HEARTBEAT_MESSAGE = "ping"


# ---------- events pushed to subscribers ----------

class Event(BaseModel):
    """A typed message delivered to subscribers. Immutable."""

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    payload: str = ""

    @classmethod
    def connected(cls) -> "Event":
        return cls(kind="connected", payload=CONNECTED_MESSAGE)

    @classmethod
    def heartbeat(cls) -> "Event":
        return cls(kind="heartbeat", payload=HEARTBEAT_MESSAGE)

    @classmethod
    def audio(cls, payload: str) -> "Event":
        return cls(kind="audio", payload=payload)

    def to_sse(self) -> str:
        """Render as a text/event-stream frame.

        Multi-line payloads become one ``data:`` line per line, which the
        browser joins back with ``\\n``.
        """
        lines = "".join(f"data: {line}\n" for line in self.payload.split("\n"))
        return f"event: {self.kind}\n{lines}\n"


# ---------- HTTP responses ----------

class PlayResult(BaseModel):
    status: str = "ok"
    dispatched: List[str] = Field(default_factory=list, description="Sounds broadcast, in order")
    skipped: List[str] = Field(default_factory=list, description="Sounds that failed to load")
    deliveries: int = Field(default=0, description="Total events acknowledged by subscribers")


class HealthStatus(BaseModel):
    status: str = "healthy"
    subscribers: int
    sounds: List[str]
    playing: bool
