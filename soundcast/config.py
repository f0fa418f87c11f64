"""Centralised configuration.

Everything is driven by environment variables (optionally from a ``.env``
file). The defaults reproduce the stock deployment: port 8080, six clips
under ``sounds/``, 100 ms between clips and a 15 s heartbeat.

Env vars
--------
SOUNDCAST_HOST           Bind host
SOUNDCAST_PORT           Bind port
SOUNDCAST_SOUNDS         Comma-separated, ordered list of audio files
SOUNDCAST_SOUND_DIR      Base directory for relative sound paths
SOUNDCAST_PACING         Seconds to wait between two clips
SOUNDCAST_HEARTBEAT      Seconds between heartbeat frames on a stream
SOUNDCAST_SEND_TIMEOUT   Max seconds one subscriber may hold up a broadcast
                         ("0" or "none" waits forever)
SOUNDCAST_SHUTDOWN_TIMEOUT  Seconds open streams get on shutdown before they
                           are cancelled
SOUNDCAST_CORS_ORIGINS   Comma-separated allowed origins
SOUNDCAST_LOG_LEVEL      Logging level name
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

DEFAULT_SOUNDS: Tuple[str, ...] = (
    "sounds/01.mp3",
    "sounds/02.mp3",
    "sounds/03.mp3",
    "sounds/04.mp3",
    "sounds/05.mp3",
    "sounds/06.mp3",
)


@dataclass
class AppConfig:
    host: str = "0.0.0.0"
    port: int = 8080
    sounds: Tuple[str, ...] = DEFAULT_SOUNDS
    sound_dir: str = "."
    pacing: float = 0.1
    heartbeat_interval: float = 15.0
    send_timeout: Optional[float] = 10.0
    shutdown_timeout: float = 3.0
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    def sound_paths(self) -> Tuple[Path, ...]:
        """Resolve the sound list against ``sound_dir``, keeping its order."""
        base = Path(self.sound_dir)
        return tuple(p if p.is_absolute() else base / p for p in map(Path, self.sounds))


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _optional_seconds(value: str) -> Optional[float]:
    if value.strip().lower() in ("", "0", "none", "off"):
        return None
    return float(value)


def load_config() -> AppConfig:
    sounds = os.getenv("SOUNDCAST_SOUNDS")
    return AppConfig(
        host=os.getenv("SOUNDCAST_HOST", "0.0.0.0"),
        port=int(os.getenv("SOUNDCAST_PORT", "8080")),
        sounds=tuple(_split(sounds)) if sounds else DEFAULT_SOUNDS,
        sound_dir=os.getenv("SOUNDCAST_SOUND_DIR", "."),
        pacing=float(os.getenv("SOUNDCAST_PACING", "0.1")),
        heartbeat_interval=float(os.getenv("SOUNDCAST_HEARTBEAT", "15")),
        send_timeout=_optional_seconds(os.getenv("SOUNDCAST_SEND_TIMEOUT", "10")),
        shutdown_timeout=float(os.getenv("SOUNDCAST_SHUTDOWN_TIMEOUT", "3")),
        cors_origins=_split(os.getenv("SOUNDCAST_CORS_ORIGINS", "*")),
        log_level=os.getenv("SOUNDCAST_LOG_LEVEL", "INFO").upper(),
    )


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> AppConfig:
    global _config
    _config = load_config()
    return _config
