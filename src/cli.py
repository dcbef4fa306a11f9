"""
Command line driver for manual syncs.

Usage:
    python -m src.cli rosters
    python -m src.cli details --offset 50
    python -m src.cli details --all
    python -m src.cli earnings --type teams
"""
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from src.api.handlers import handle_earnings_get, handle_players_get
from src.ingestion.liquipedia_client import LiquipediaClient
from src.storage.storage_interface import get_storage

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sync VCT rosters and earnings from Liquipedia")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("rosters", help="Scrape all team rosters and merge with stored players")

    details = sub.add_parser("details", help="Fetch role and team history for a window of players")
    details.add_argument("--offset", type=int, default=0)
    details.add_argument("--all", action="store_true", help="Keep going until every window is done")

    earnings = sub.add_parser("earnings", help="Scrape prize money statistics")
    earnings.add_argument("--type", choices=["players", "teams"], default=None)

    return parser


def run_details(store, client, offset: int, drain: bool) -> dict:
    """One details window, or every window from offset on when drain is set"""
    while True:
        status, payload = handle_players_get(store, {"type": "details", "offset": str(offset)}, client=client)
        print(json.dumps(payload, ensure_ascii=False))
        if not drain or not payload.get("success") or payload.get("nextOffset") is None:
            return payload
        offset = payload["nextOffset"]


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    store = get_storage()
    client = LiquipediaClient()

    if args.command == "details":
        payload = run_details(store, client, args.offset, args.all)
    else:
        if args.command == "rosters":
            status, payload = handle_players_get(store, {"type": "rosters"}, client=client)
        else:
            query = {"type": args.type} if args.type else {}
            status, payload = handle_earnings_get(store, query, client=client)
        print(json.dumps(payload, ensure_ascii=False))

    if not payload.get("success"):
        logger.error(payload.get("error") or payload.get("message"))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
