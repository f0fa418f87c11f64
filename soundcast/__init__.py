"""Soundcast: push a fixed audio sequence to browsers over SSE."""

from .broadcaster import Broadcaster
from .models import Event, PlayResult
from .registry import Subscriber, SubscriberRegistry

__all__ = ["Broadcaster", "Event", "PlayResult", "Subscriber", "SubscriberRegistry"]
