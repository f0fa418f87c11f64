"""Run the soundcast server.

    python main.py

Host, port and the sound list come from the environment (see
``soundcast/config.py``).
"""

import logging

import uvicorn

from soundcast.config import get_config


def main():
    cfg = get_config()
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger(__name__).info("Server starting on %s:%d", cfg.host, cfg.port)
    # SSE streams never finish by themselves; without a graceful-shutdown
    # limit uvicorn waits on them forever and never reaches the lifespan exit
    uvicorn.run(
        "soundcast.server:app",
        host=cfg.host,
        port=cfg.port,
        log_level=cfg.log_level.lower(),
        timeout_graceful_shutdown=cfg.shutdown_timeout,
    )


if __name__ == "__main__":
    main()
