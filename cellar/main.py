"""
Entry point for the cellar backend.

Subcommands:
  serve        start the Uvicorn HTTP server with the FastAPI app.
  init-db      create the database tables.
  create-user  register a user and print their first API token.
  issue-token  print a new API token for an existing user.

The database pool is closed on the way out, even after an interruption.
"""

import argparse
import logging
import sys

import anyio
import uvicorn

from cellar.app import auth, config
from cellar.app.api import create_app
from cellar.app.db import close_pool, init_schema

logger = logging.getLogger(__name__)


async def _init_db() -> None:
    try:
        await init_schema()
    finally:
        await close_pool()


async def _create_user(email: str) -> str:
    try:
        user = await auth.create_user(email)
        return await auth.issue_token(user.id)
    finally:
        await close_pool()


async def _issue_token(email: str) -> str:
    try:
        user = await auth.get_user_by_email(email)
        if user is None:
            raise ValueError(f"no user with email {email}")
        return await auth.issue_token(user.id)
    finally:
        await close_pool()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cellar", description="Wine cellar backend")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default=config.API_HOST)
    serve.add_argument("--port", type=int, default=config.API_PORT)

    sub.add_parser("init-db", help="create database tables")

    create = sub.add_parser("create-user", help="create a user and print an API token")
    create.add_argument("email")

    issue = sub.add_parser("issue-token", help="print a new API token for a user")
    issue.add_argument("email")

    return parser


def main(argv=None) -> int:
    logging.basicConfig(level=config.LOG_LEVEL)
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        uvicorn.run(create_app(), host=args.host, port=args.port)
        return 0

    try:
        if args.command == "init-db":
            anyio.run(_init_db)
            print("database schema is up to date")
        elif args.command == "create-user":
            print(anyio.run(_create_user, args.email))
        elif args.command == "issue-token":
            print(anyio.run(_issue_token, args.email))
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass
