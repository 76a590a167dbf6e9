#!/usr/bin/env python3
"""Terminal front-end for listing and editing stored barcode entries."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable

from barcode_wallet.app_context import build_wallet_context
from barcode_wallet.entry_store import Entry
from barcode_wallet.kv_store import StorageError
from barcode_wallet.logging_utils import configure_logging
from barcode_wallet.settings import load_settings

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_STORAGE_ERROR = 2


def _format_entries(entries: Iterable[Entry]) -> str:
    lines = [f"{entry.id:>4}  {entry.format:<10} {entry.code:<20} {entry.name}" for entry in entries]
    return "\n".join(lines) if lines else "<no entries>"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage the stored barcode list")
    parser.add_argument("--data-path", type=Path, help="Path to the wallet JSON store")
    parser.add_argument("--log-dir", type=Path, help="Directory for the rotating log file")
    parser.add_argument("--json", action="store_true", help="Print entries as JSON")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Show entries in display order")

    add = sub.add_parser("add", help="Append a new entry")
    add.add_argument("--name", required=True)
    add.add_argument("--code", required=True)
    add.add_argument("--format", required=True, dest="code_format")

    show = sub.add_parser("show", help="Show a single entry")
    show.add_argument("id")

    rename = sub.add_parser("rename", help="Change an entry's name")
    rename.add_argument("id")
    rename.add_argument("name")

    for name, help_text in (("remove", "Delete an entry"), ("up", "Move an entry up"), ("down", "Move an entry down")):
        command = sub.add_parser(name, help=help_text)
        command.add_argument("id")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    settings = load_settings(args.data_path)
    configure_logging(debug=settings.debug, retention=settings.log_retention, log_dir=args.log_dir)
    entries = build_wallet_context(settings).entries

    try:
        if args.command == "list":
            current = entries.load()
            if args.json:
                print(json.dumps([entry.to_dict() for entry in current], indent=2, ensure_ascii=False))
            else:
                print(_format_entries(current))
            return EXIT_OK
        if args.command == "add":
            created = entries.create(name=args.name, code=args.code, format=args.code_format)
            print(json.dumps(created.to_dict(), ensure_ascii=False) if args.json else f"Added {created.id}")
            return EXIT_OK
        if args.command == "show":
            found = entries.find_by_id(args.id)
            if found is None:
                print(f"error: no entry with id {args.id}", file=sys.stderr)
                return EXIT_NOT_FOUND
            print(json.dumps(found.to_dict(), indent=2, ensure_ascii=False) if args.json else _format_entries([found]))
            return EXIT_OK

        if args.command == "rename":
            changed = entries.edit(args.id, args.name)
        elif args.command == "remove":
            changed = entries.delete(args.id)
        elif args.command == "up":
            changed = entries.move_up(args.id)
        else:
            changed = entries.move_down(args.id)
    except StorageError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_STORAGE_ERROR

    if not changed:
        print(f"No change: entry {args.id} not found or already at the edge", file=sys.stderr)
        return EXIT_NOT_FOUND
    print(f"Updated {args.id}")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
