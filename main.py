"""
workpulse - Main Entry Point

Initializes the store and runs the periodic KPI jobs until interrupted.
"""

import asyncio
import signal

from workpulse.core.config import get_settings
from workpulse.core.logger import logger


async def run() -> None:
    """Run the background scheduler until SIGINT/SIGTERM."""
    settings = get_settings()
    logger.info(f"Starting workpulse in {settings.ENVIRONMENT} mode...")

    from workpulse.infrastructure.local.database import init_db

    await init_db()

    from workpulse.services.background_scheduler import (
        start_background_scheduler,
        stop_background_scheduler,
    )

    await start_background_scheduler()

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops do not support signal handlers
            pass

    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down workpulse...")
        await stop_background_scheduler()


if __name__ == "__main__":
    asyncio.run(run())
