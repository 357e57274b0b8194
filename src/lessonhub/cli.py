"""Minimal CLI for lessonhub using argparse."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import TYPE_CHECKING, Optional, Sequence

from lessonhub.exceptions import StoreError

if TYPE_CHECKING:
    from lessonhub.store.mongo import MongoStore


def _open_store(args: argparse.Namespace) -> MongoStore:
    from lessonhub.server.config import Settings
    from lessonhub.store.mongo import MongoStore

    cfg = Settings.from_env(args.properties)
    if not cfg.database_url:
        print("No database configured (set DATABASE_URL or DB_PROPERTIES).", file=sys.stderr)
        sys.exit(2)
    return MongoStore(cfg.database_url, cfg.db_name)


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    from lessonhub.server.config import settings

    uvicorn.run(
        "lessonhub.server.app:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=None,
    )


async def _ensure_indexes(args: argparse.Namespace) -> None:
    store = _open_store(args)
    try:
        await store.ensure_indexes()
    finally:
        await store.close()
    print("Text index on subject/location is in place.")


async def _search(args: argparse.Namespace) -> None:
    from lessonhub.search import resolve_search
    from lessonhub.server.responses import encode_documents

    store = _open_store(args)
    try:
        outcome = await resolve_search(store, args.text)
    finally:
        await store.close()
    print(json.dumps(
        {"stage": outcome.stage, "lessons": encode_documents(outcome.lessons)},
        indent=3,
    ))


async def _lessons(args: argparse.Namespace) -> None:
    from lessonhub.server.responses import encode_documents

    store = _open_store(args)
    try:
        lessons = await store.list_lessons()
    finally:
        await store.close()
    print(json.dumps(encode_documents(lessons), indent=3))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lessonhub",
        description="lessonhub: lesson catalogue and order backend",
    )
    parser.add_argument(
        "--properties", default=None,
        help="Path to db.properties (or DB_PROPERTIES)",
    )

    sub = parser.add_subparsers(dest="command")

    # serve
    p = sub.add_parser("serve", help="Run the HTTP server")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)

    # ensure-indexes
    sub.add_parser("ensure-indexes", help="Create the lessons text index")

    # search
    p = sub.add_parser("search", help="Search lessons")
    p.add_argument("text", help="Search text")

    # lessons
    sub.add_parser("lessons", help="List all lessons")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "serve":
        cmd_serve(args)
        return

    handlers = {
        "ensure-indexes": _ensure_indexes,
        "search": _search,
        "lessons": _lessons,
    }
    try:
        asyncio.run(handlers[args.command](args))
    except (StoreError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
