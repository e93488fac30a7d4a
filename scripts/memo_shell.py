"""Script to run the terminal memo pad against a local data directory."""

from __future__ import annotations

import argparse
import logging
import os
import sys

# Ensure src/ is on sys.path (so imports work when run from a checkout)
SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from memopad.api import MemoApi  # noqa: E402
from memopad.app import App  # noqa: E402
from memopad.console import ConsoleInteraction, Osc52Clipboard, SelectionClipboard, Shell  # noqa: E402
from memopad.storage import FileStorage  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Terminal memo pad.")
    parser.add_argument(
        "--data-dir",
        type=str,
        default=os.environ.get("MEMOPAD_DATA", "data"),
        help="Directory holding memos.json and sessionId.json (default: data)",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=os.environ.get("MEMOPAD_API", "http://127.0.0.1:8000"),
        help="Base URL of the memo proxy server",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not call the proxy server (categories default to Other)",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=10,
        help="Memos per page (default: 10)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    io = ConsoleInteraction()
    api = None if args.offline else MemoApi(args.api_url)
    app = App.create(
        FileStorage(args.data_dir),
        io,
        api=api,
        clipboard=Osc52Clipboard(sys.stdout),
        fallback_clipboard=SelectionClipboard(sys.stdout),
        page_size=args.page_size,
    )
    try:
        Shell(app, io).run()
    finally:
        if api is not None:
            api.close()


if __name__ == "__main__":
    main()
