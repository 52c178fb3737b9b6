# =============================================================================
# main.py  —  Entry Point for the mcp-nws server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py                      # stdio (for agent subprocesses)
#   uv run python main.py -address :8080       # streamable HTTP on all interfaces
#   uv run python main.py -address 127.0.0.1:8080
#
# WHAT HAPPENS:
#   1. .env is loaded (NWS_USER_AGENT, NWS_API_BASE, NWS_TIMEOUT)
#   2. tools/mcp_server.py is imported, which registers the three tools
#   3. ONE transport is chosen from the -address flag and owns the process:
#        - no -address → stdio, every message mirrored to stderr
#        - -address    → the socket is bound first, then the FastMCP HTTP app
#                        is served on it by uvicorn (endpoint path /mcp)
#
# FAILURE:
#   A bind failure, a malformed address or a transport crash is logged and
#   the process exits with status 1.  Listener mode never falls back to stdio.
# =============================================================================

import argparse
import asyncio
import logging
import socket
import sys
from typing import Any, Optional

from dotenv import load_dotenv

# Load .env BEFORE importing core/: core/nws.py reads its settings at import.
load_dotenv()

import pydantic_core
import uvicorn
from fastmcp.server.middleware import CallNext, MiddlewareContext
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.tools.tool import ToolResult

from tools.mcp_server import mcp

logger = logging.getLogger("mcp-nws")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mcp-nws",
        description="US National Weather Service MCP Server",
    )
    parser.add_argument(
        "-address",
        "--address",
        dest="address",
        default="",
        help="Address to listen on. If not set, run MCP Server in STDIO mode.",
    )
    return parser.parse_args(argv)


def parse_address(address: str) -> tuple[str, int]:
    """Split "host:port" into its parts.

    An empty host (":8080") means every interface.  IPv6 hosts must be
    written in brackets ("[::1]:8080"); a bare "::1:8080" is rejected.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address {address!r}: expected host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host or "[" in host or "]" in host:
        raise ValueError(f"invalid listen address {address!r}: IPv6 hosts need brackets")
    host = host or "0.0.0.0"
    port_num = int(port)
    if port_num > 65535:
        raise ValueError(f"invalid listen address {address!r}: port out of range")
    return host, port_num


def bind_listener(address: str) -> socket.socket:
    """Bind and listen on ``address``; raises OSError if it is unavailable."""
    host, port = parse_address(address)
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    return socket.create_server((host, port), family=family)


# =============================================================================
# Transport 1: stdio
# =============================================================================
# stdout carries the protocol, so the copy of every message goes to stderr:
#   request_start  → the message the client sent (with payload)
#   request_result → what the server answered (with payload)
# =============================================================================
class FrameLoggingMiddleware(LoggingMiddleware):
    """LoggingMiddleware that also logs the payload each handler returns."""

    async def on_message(self, context: MiddlewareContext[Any], call_next: CallNext[Any, Any]) -> Any:
        result = await super().on_message(context, call_next)
        if not self.methods or context.method in self.methods:
            self._log_message({
                "event": f"{context.type}_result",
                "method": context.method or "unknown",
                "source": context.source,
                "payload": self._serialize_result(result),
            })
        return result

    def _serialize_result(self, result: Any) -> str:
        if isinstance(result, ToolResult):
            result = {"content": result.content, "structuredContent": result.structured_content}
        payload = pydantic_core.to_json(result, fallback=str).decode()
        if self.max_payload_length and len(payload) > self.max_payload_length:
            payload = payload[: self.max_payload_length] + "..."
        return payload


def frame_logger() -> FrameLoggingMiddleware:
    return FrameLoggingMiddleware(
        logger=logging.getLogger("mcp-nws.frames"),
        include_payloads=True,
        max_payload_length=100_000,
    )


def serve_stdio() -> None:
    mcp.add_middleware(frame_logger())
    mcp.run(transport="stdio", show_banner=False)


# =============================================================================
# Transport 2: streamable HTTP on an already-bound socket
# =============================================================================
def http_server(sock: socket.socket) -> uvicorn.Server:
    """A uvicorn server for the FastMCP HTTP app (endpoint /mcp) on ``sock``."""
    host, port = sock.getsockname()[:2]
    config = uvicorn.Config(mcp.http_app(), host=host, port=port, log_level="info")
    return uvicorn.Server(config)


async def _serve_http(sock: socket.socket) -> None:
    server = http_server(sock)
    await server.serve(sockets=[sock])
    # uvicorn returns quietly when startup (e.g. the app lifespan) fails.
    if not server.started:
        raise RuntimeError("uvicorn failed to start the MCP HTTP app")


def serve_http(sock: socket.socket) -> None:
    asyncio.run(_serve_http(sock))


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)

    if args.address:
        try:
            sock = bind_listener(args.address)
        except (OSError, ValueError) as e:
            logger.critical("HTTP server failed: %s", e)
            sys.exit(1)

        logger.info("MCP handler listening at %s", args.address)
        try:
            serve_http(sock)
        except Exception as e:
            logger.critical("HTTP server failed: %s", e)
            sys.exit(1)
        finally:
            sock.close()
    else:
        try:
            serve_stdio()
        except Exception as e:
            logger.critical("Server failed: %s", e)
            sys.exit(1)
        logger.info("stdio stream closed, shutting down")


# =============================================================================
# Script entry point
# =============================================================================
if __name__ == "__main__":
    main()
