"""Run the pairing service with uvicorn."""
from __future__ import annotations

import logging

import uvicorn

from .core.config import get_settings

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting SpeakBuddies pairing service on port %s", settings.port)
    uvicorn.run("speakbuddies.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
