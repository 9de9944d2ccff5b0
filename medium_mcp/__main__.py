"""Entry point: ``python -m medium_mcp`` or the ``medium-mcp`` script."""

import asyncio
import logging
import os
import signal
import sys

from medium_mcp.browser_manager import BrowserManager
from medium_mcp.server import mcp

LOG_LEVEL_ENV = "MEDIUM_MCP_LOG_LEVEL"

logger = logging.getLogger("medium_mcp")


def setup_logging() -> None:
    # stdout carries the MCP stdio protocol, so logs go to stderr
    level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


async def serve() -> None:
    loop = asyncio.get_running_loop()
    server_task = asyncio.ensure_future(mcp.run_async())
    shutting_down = False

    async def shutdown(sig_name: str) -> None:
        nonlocal shutting_down
        if shutting_down:
            return
        shutting_down = True
        logger.info("Received %s, shutting down", sig_name)
        manager = await BrowserManager.get_instance()
        await manager.release()
        server_task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, lambda s=sig: asyncio.ensure_future(shutdown(s.name)))
        except NotImplementedError:
            # Windows event loops have no signal handler support
            pass

    try:
        await server_task
    except asyncio.CancelledError:
        logger.info("Server stopped")


def main() -> None:
    setup_logging()
    logger.info("Starting medium-mcp server")
    asyncio.run(serve())


if __name__ == "__main__":
    main()
