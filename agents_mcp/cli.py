"""CLI entry point: agents-mcp [--transport stdio|http] [--presets-dir DIR]."""

import argparse
import asyncio
import dataclasses
import logging
import os
import signal
from pathlib import Path

from dotenv import load_dotenv

from .config import Settings

# Load .env early so env vars (AGENT_API_BASE, etc.) are available for arg defaults
load_dotenv()

logger = logging.getLogger("agents_mcp")

TRANSPORTS = ("stdio", "http")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="agents-mcp",
        description="Run one-shot AI agents against any OpenAI-compatible endpoint over MCP",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        default=os.environ.get("AGENTS_MCP_TRANSPORT", "stdio"),
        help="stdio (MCP, default) or http (REST API)",
    )
    parser.add_argument(
        "--host",
        default=os.environ.get("AGENTS_MCP_HOST", "127.0.0.1"),
        help="Bind address for --transport http (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("AGENTS_MCP_PORT", "8080")),
        help="HTTP port for --transport http (default: 8080)",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("AGENTS_MCP_TOKEN", ""),
        help="Bearer auth token for --transport http (default: none)",
    )
    parser.add_argument(
        "--presets-dir",
        default="",
        help="Preset directory (default: $PRESETS_DIR or ~/.agents-mcp/presets)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    return parser.parse_args(argv)


def _build_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.presets_dir:
        settings = dataclasses.replace(
            settings, presets_dir=Path(args.presets_dir).expanduser().resolve()
        )
    return settings


def build_tools(settings: Settings):
    """Create the store, seed bundled presets and wire up the tool surface."""
    from .invoker import AgentInvoker
    from .store import PresetStore
    from .tools import AgentTools

    store = PresetStore(settings.presets_dir)
    store.ensure_dir()
    store.seed_bundled()
    return AgentTools(settings, store, AgentInvoker(settings))


async def _serve_http(tools, args: argparse.Namespace) -> None:
    from .server import PresetHTTPServer

    server = PresetHTTPServer(
        tools=tools,
        host=args.host,
        port=args.port,
        token=args.token or None,
    )

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler():
        logger.info("Received shutdown signal")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    await server.start()
    logger.info(
        "agents-mcp ready  transport=http  port=%s  auth=%s",
        args.port,
        "on" if args.token else "off",
    )

    await stop_event.wait()

    logger.info("Shutting down...")
    await server.stop()


async def _run(args: argparse.Namespace, settings: Settings) -> None:
    tools = build_tools(settings)
    try:
        if args.transport == "http":
            await _serve_http(tools, args)
        else:
            from .mcp_server import build_mcp_server

            mcp = build_mcp_server(tools)
            logger.info("agents-mcp started on stdio | presets: %s", settings.presets_dir)
            await mcp.run_stdio_async()
    finally:
        await tools.invoker.aclose()


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)

    if args.version:
        from importlib.metadata import version as pkg_version
        try:
            v = pkg_version("agents-mcp")
        except Exception:
            v = "dev"
        print(f"agents-mcp {v}")
        return

    # stdout carries the MCP stream, so logs go to stderr (basicConfig default)
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )

    settings = _build_settings(args)
    asyncio.run(_run(args, settings))


if __name__ == "__main__":
    main()
