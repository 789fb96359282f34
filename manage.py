import argparse
import json
import sys
from pathlib import Path

from api_change_ledger.exceptions import LedgerError
from api_change_ledger.models import CHANGE_KINDS, CHANGE_TARGETS, FLAG_TOKENS
from api_change_ledger.processing.builder import seed_ledger
from api_change_ledger.processing.descriptors import load_descriptor
from api_change_ledger.processing.filters import filter_records, reconcile
from api_change_ledger.processing.query_state import decode
from api_change_ledger.processing.store import JsonLedgerStore
from api_change_ledger.processing.sync import clone_or_pull_repo
from api_change_ledger.processing.updater import update_route

from config import (
    LEDGER_PATH,
    LOG_LEVEL,
    MONITOR_CHANGES_DIR,
    MONITOR_REPO_PATH,
    MONITOR_REPO_URL,
    REQUEST_TIMEOUT,
)

import logging

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="API Change Ledger - Data Manager")
    parser.add_argument("--ledger", type=str, default=LEDGER_PATH, help="Path of the ledger JSON document")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync", help="Clone or pull the monitor repository holding the change descriptors.")

    seed_parser = subparsers.add_parser("seed", help="Rebuild the whole ledger from a descriptor tree.")
    seed_parser.add_argument(
        "--source",
        type=str,
        default=None,
        help=f"Descriptor directory (default: <MONITOR_REPO_PATH>/{MONITOR_CHANGES_DIR}).",
    )

    update_parser = subparsers.add_parser("update", help="Replace the changes of a single route.")
    update_parser.add_argument("provider", help="Provider id (e.g. openai).")
    update_parser.add_argument("relative_path", help="Route path ending with the method (e.g. v1/chat/completions/post.json).")
    update_parser.add_argument("source", help="Descriptor file path or http(s) URL.")

    query_parser = subparsers.add_parser("query", help="Print the changes matching a filter.")
    query_parser.add_argument("--providers", type=str, help="Comma-separated provider ids.")
    query_parser.add_argument("--routes", type=str, help="Comma-separated routes (e.g. 'POST /chat/completions').")
    query_parser.add_argument("--change", choices=CHANGE_KINDS)
    query_parser.add_argument("--target", choices=CHANGE_TARGETS)
    query_parser.add_argument("--breaking", choices=FLAG_TOKENS)
    query_parser.add_argument("--doc-only", dest="doc_only", choices=FLAG_TOKENS)
    return parser


def run(args) -> int:
    store = JsonLedgerStore(args.ledger)

    if args.command == "sync":
        if not MONITOR_REPO_URL and not Path(MONITOR_REPO_PATH).is_dir():
            logger.error("MONITOR_REPO_URL is not set and no local copy exists.")
            return 1
        clone_or_pull_repo(MONITOR_REPO_URL, Path(MONITOR_REPO_PATH))

    elif args.command == "seed":
        source = Path(args.source) if args.source else Path(MONITOR_REPO_PATH) / MONITOR_CHANGES_DIR
        if not source.is_dir():
            logger.error(f"Descriptor directory not found at {source}.")
            logger.error("Please run 'python manage.py sync' first or pass --source.")
            return 1
        seed_ledger(source, store)

    elif args.command == "update":
        entries = load_descriptor(args.source, timeout=REQUEST_TIMEOUT)
        result = update_route(store, args.provider, args.relative_path, entries)
        if not result.updated:
            logger.info("No entries in descriptor")

    elif args.command == "query":
        params = {
            key: getattr(args, key)
            for key in ("providers", "routes", "change", "target", "breaking", "doc_only")
            if getattr(args, key)
        }
        ledger = store.read()
        state = reconcile(decode(params), ledger)
        rows = filter_records(ledger, state)
        for record in rows:
            print(json.dumps(record.model_dump(exclude_none=True), ensure_ascii=False))
        logger.info(f"Showing {len(rows)} of {len(ledger)} changes")

    return 0


def main() -> None:
    """Entry point for command-line tasks (sync, seed, update, query)."""
    args = build_parser().parse_args()
    try:
        code = run(args)
    except LedgerError as e:
        logger.error(str(e))
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
