#!/usr/bin/env python3
"""Manage a User-Agent pattern file from the command line.

Subcommands:

* ``list`` – print every pattern (defaults included).
* ``add PATTERN`` – add a pattern and rewrite the file; the file is created
  when it does not exist yet.
* ``remove PATTERN`` – remove a pattern and rewrite the file.
* ``check USER_AGENT`` – print the decision; exit status 1 when blocked.

The file defaults to ``UA_BLOCK_FILE`` from the application settings.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

# Ensure the project root is importable when running as a standalone script
BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.append(str(BASE_DIR))

from config import get_settings  # noqa: E402
from uablock.security.blocker import (  # noqa: E402
    FILE_HEADER,
    UserAgentBlocker,
    denial_message,
)


def _open(path: str, create: bool = False) -> UserAgentBlocker:
    if create and not os.path.exists(path):
        Path(path).write_text(FILE_HEADER + "\n", encoding="utf-8")
    return UserAgentBlocker.from_file(path)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Manage blocked User-Agent patterns")
    parser.add_argument(
        "--file",
        help="Pattern file (default: UA_BLOCK_FILE setting)",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="Print all patterns")
    p_add = sub.add_parser("add", help="Add a pattern")
    p_add.add_argument("pattern")
    p_rm = sub.add_parser("remove", help="Remove a pattern")
    p_rm.add_argument("pattern")
    p_check = sub.add_parser("check", help="Check a User-Agent string")
    p_check.add_argument("user_agent")
    args = parser.parse_args(argv)

    path = args.file or get_settings().ua_block_file
    if not path:
        if args.command in ("add", "remove"):
            parser.error("--file or UA_BLOCK_FILE is required to change patterns")
        blocker = UserAgentBlocker()
    else:
        try:
            blocker = _open(path, create=args.command == "add")
        except OSError as exc:
            print(f"cannot read pattern file {path}: {exc}", file=sys.stderr)
            return 2

    if args.command == "list":
        for pattern in blocker.get_patterns():
            print(pattern)
        return 0

    if args.command == "add":
        if blocker.add_pattern(args.pattern):
            print(f"added {args.pattern.strip().lower()}")
        else:
            print(f"not added: {args.pattern!r} is blank or already present")
        return 0

    if args.command == "remove":
        if blocker.remove_pattern(args.pattern):
            print(f"removed {args.pattern.strip().lower()}")
            return 0
        print(f"not found: {args.pattern!r}", file=sys.stderr)
        return 1

    reason = blocker.block_reason(args.user_agent)
    if reason is None:
        print("allowed")
        return 0
    print(denial_message(reason))
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
