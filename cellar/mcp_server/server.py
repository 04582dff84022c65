"""
Entry point of the cellar MCP server (`cellar-mcp`).

Runs the FastMCP application either over stdio, for desktop assistants that
spawn the server as a subprocess, or over streamable HTTP behind Uvicorn.
Before serving it:
  1. Imports the tool module so tools and resources register themselves.
  2. Loads the configuration. stdio needs USER_AUTH_TOKEN; over HTTP each
     request may bring its own bearer token instead.
  3. Attaches the user-token middleware.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

import uvicorn

from cellar.mcp_server.auth_middleware import UserTokenMiddleware
from cellar.mcp_server.config import load_config
from cellar.mcp_server.mcp_app import mcp
from cellar.mcp_server import tools

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cellar-mcp", description="Wine cellar MCP server")
    parser.add_argument("--transport", choices=("stdio", "http"), default="stdio")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8001)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    # stdout belongs to the protocol on stdio, so logs go to stderr
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(), stream=sys.stderr)

    try:
        config = load_config(require_token=args.transport == "stdio")
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    tools.configure(config)
    mcp.add_middleware(UserTokenMiddleware(config.user_auth_token))

    if args.transport == "stdio":
        logger.info("Celly MCP server running on stdio")
        mcp.run()
        return

    logger.info(f"Celly MCP server listening on {args.host}:{args.port}")
    uvicorn.run(mcp.http_app(transport="http"), host=args.host, port=args.port)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
