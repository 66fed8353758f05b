"""
Process entrypoint for the JSON-RPC tool gateway.

Loads ``.env``, configures logging, builds the tool registry and transport,
and serves until SIGINT/SIGTERM, then shuts the transport down gracefully.

Usage:
    mcp-gateway                      # serve on MCP_HTTP_HOST:MCP_HTTP_PORT
    MCP_HTTP_PORT=8080 mcp-gateway   # custom port
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

from dotenv import load_dotenv

from src.gateway.config import GatewayConfig
from src.gateway.tools.registry import ToolRegistry
from src.gateway.transport import HttpTransport

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def serve(
    config: GatewayConfig,
    registry: ToolRegistry,
    stop_event: Optional[asyncio.Event] = None,
) -> None:
    stop_event = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # Windows event loops and non-main threads cannot install handlers.
            continue
        installed.append(sig)

    transport = HttpTransport(registry, config)
    try:
        await transport.start()
        logger.info(f"Loaded {len(registry)} tools")
        await stop_event.wait()
    finally:
        logger.info("Shutting down...")
        await transport.stop()
        for sig in installed:
            loop.remove_signal_handler(sig)


def main(registry: Optional[ToolRegistry] = None) -> None:
    load_dotenv()
    config = GatewayConfig.from_env()
    configure_logging(config.log_level)
    logger.info(f"Starting {config.server_name} (HTTP mode)...")
    asyncio.run(serve(config, registry or ToolRegistry()))


if __name__ == "__main__":
    main()
