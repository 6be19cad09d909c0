# start_app.py
"""Launch the API server behind the User-Agent blocklist."""

from __future__ import annotations

import argparse
import os
import sys

import uvicorn
from dotenv import load_dotenv

import config
from uablock.obs import configure_logging


def main(argv: list[str] | None = None) -> None:
    """Load settings, check the pattern file, then start the API."""

    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--patterns",
        help="Pattern file to load and persist to (overrides UA_BLOCK_FILE)",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument(
        "--port", type=int, default=int(os.getenv("PORT", "8000")), help="Bind port"
    )
    args = parser.parse_args(argv)

    load_dotenv()  # load environment variables from a .env file

    if args.patterns:
        os.environ["UA_BLOCK_FILE"] = args.patterns
    config.get_settings.cache_clear()
    settings = config.get_settings()

    if settings.ua_block_file and not os.path.isfile(settings.ua_block_file):
        print(
            f"pattern file not found: {settings.ua_block_file}",
            file=sys.stderr,
        )
        raise SystemExit(2)

    configure_logging(settings.log_level.upper())

    uvicorn.run(
        "uablock.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
