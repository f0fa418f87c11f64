"""Loading audio clips from disk and encoding them for the text stream."""

import asyncio
import base64
import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class SoundLoadError(Exception):
    """A sound file could not be read."""

    def __init__(self, path: PathLike, cause: Exception):
        super().__init__(f"cannot read {path}: {cause}")
        self.path = str(path)
        self.cause = cause


def read_sound(path: PathLike) -> bytes:
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise SoundLoadError(path, exc) from exc
    logger.debug("Read %s (%d bytes)", path, len(data))
    return data


async def load_sound(path: PathLike) -> bytes:
    """Read *path* without blocking the event loop."""
    return await asyncio.to_thread(read_sound, path)


def encode_payload(data: bytes) -> str:
    """Standard (padded) base64, safe to carry in an SSE ``data:`` line."""
    return base64.b64encode(data).decode("ascii")


def decode_payload(payload: str) -> bytes:
    return base64.b64decode(payload)
