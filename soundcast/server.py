"""FastAPI server: SSE subscriptions plus the ``/play`` trigger.

Clients keep ``GET /sse`` open and receive ``audio`` events (base64 clips);
``POST /play`` streams the configured sound list to all of them.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from starlette.datastructures import Headers

from .broadcaster import Broadcaster
from .config import AppConfig, get_config
from .models import HealthStatus, PlayResult
from .registry import SubscriberRegistry
from .stream import event_stream

logger = logging.getLogger(__name__)

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"}


class PreflightCORSMiddleware(CORSMiddleware):
    """CORS middleware whose preflight answers carry no body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        headers = {
            k: v for k, v in response.headers.items()
            if k not in ("content-length", "content-type")
        }
        return Response(status_code=response.status_code, headers=headers)


def create_app(
    config: Optional[AppConfig] = None,
    registry: Optional[SubscriberRegistry] = None,
    broadcaster: Optional[Broadcaster] = None,
) -> FastAPI:
    cfg = config or get_config()
    registry = registry or SubscriberRegistry()
    broadcaster = broadcaster or Broadcaster(
        registry,
        cfg.sound_paths(),
        pacing=cfg.pacing,
        send_timeout=cfg.send_timeout,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Serving %d sound(s) on port %d", len(broadcaster.sounds), cfg.port)
        yield
        # uvicorn only gets here once open streams are gone (see
        # shutdown_timeout); this releases anything registered outside a stream
        registry.close_all()

    app = FastAPI(
        title="Soundcast",
        description="Broadcasts a fixed audio sequence to connected browsers over SSE",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = cfg
    app.state.registry = registry
    app.state.broadcaster = broadcaster

    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # ── routes ───────────────────────────────────────────────────────────

    @app.get("/sse")
    async def subscribe(request: Request):
        return StreamingResponse(
            event_stream(
                registry,
                heartbeat_interval=cfg.heartbeat_interval,
                is_disconnected=request.is_disconnected,
            ),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    @app.post("/play", response_model=PlayResult)
    async def play():
        result = await broadcaster.play()
        if result.skipped:
            logger.warning("Play finished with %d skipped sound(s)", len(result.skipped))
        return result

    @app.options("/sse")
    @app.options("/play")
    async def preflight():
        return Response(status_code=200)

    @app.get("/health", response_model=HealthStatus)
    async def health_check():
        return HealthStatus(
            subscribers=len(registry),
            sounds=[str(p) for p in broadcaster.sounds],
            playing=broadcaster.busy,
        )

    return app


app = create_app()
