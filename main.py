"""Entry point: configure logging, start the web server."""

import asyncio
import structlog
from config.logging_config import setup_logging
from web.app import start_web

log = structlog.get_logger(__name__)


async def start() -> None:
    setup_logging()
    log.info("starting_threadline")
    try:
        await start_web()
    finally:
        log.info("shutting_down")


def main() -> None:
    """Run the web server."""
    asyncio.run(start())


if __name__ == "__main__":
    main()
