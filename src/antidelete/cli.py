from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Sequence

DEFAULT_RECORD_LIMIT = 20


def _positive_int(value: str) -> int:
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError("value must be a positive integer")
    return ivalue


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m antidelete",
        description="Recover deleted WhatsApp messages and forward them to the owner.",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    subparsers.add_parser("run", help="Connect to the bridge and start monitoring (default).")

    records_cmd = subparsers.add_parser(
        "records",
        help="Print the most recently recovered messages.",
    )
    records_cmd.add_argument(
        "--limit",
        "-n",
        type=_positive_int,
        default=DEFAULT_RECORD_LIMIT,
        help=f"Number of rows to show (default: {DEFAULT_RECORD_LIMIT}).",
    )
    records_cmd.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Path to the recovery database (defaults to DB_PATH).",
    )
    return parser


def format_row(row) -> str:
    status = " [status]" if row["is_status"] else ""
    body = row["text_content"] or row["media_path"] or "-"
    return f"#{row['id']} {row['timestamp']} {row['chat']} <{row['sender']}> {row['type']}{status}: {body}"


async def _print_records(db: Path | None, limit: int) -> None:
    from antidelete.storage import open_repository

    repo = open_repository(str(db) if db else None)
    try:
        rows = await repo.recent(limit)
    finally:
        repo.conn.close()
    if not rows:
        print("No recovered messages yet.")
        return
    for row in rows:
        print(format_row(row))


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "records":
        asyncio.run(_print_records(args.db, args.limit))
        return

    from antidelete.clients.bridge import run

    run()
