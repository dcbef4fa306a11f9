"""
Prize money statistics scraping (players and organizations).

Both statistics pages are heavy parse requests; Liquipedia asks for at least
30 seconds between them, which the "statistics" throttle source enforces.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from src.exceptions import ValidationError
from src.ingestion.liquipedia_client import LiquipediaClient
from src.ingestion.models import EarningsRecord
from src.ingestion.parsers import parse_player_earnings, parse_team_earnings

logger = logging.getLogger(__name__)


EARNINGS_PAGES = {
    "players": ("Portal:Statistics/Player_earnings", parse_player_earnings),
    "teams": ("Portal:Statistics/Organization_Winnings", parse_team_earnings),
}


@dataclass
class EarningsBatch:
    """Records per successfully scraped kind plus the pages that failed"""
    records: Dict[str, List[EarningsRecord]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)


def scrape_earnings(client: LiquipediaClient, kinds: Iterable[str] = ("players", "teams")) -> EarningsBatch:
    kinds = list(kinds)
    unknown = [kind for kind in kinds if kind not in EARNINGS_PAGES]
    if unknown or not kinds:
        raise ValidationError(f"Unknown earnings type(s): {unknown or kinds}")

    batch = EarningsBatch()
    for kind in kinds:
        page, parse = EARNINGS_PAGES[kind]
        try:
            logger.info(f"Fetching {kind} earnings")
            html = client.fetch_page(page, source="statistics")
        except Exception as e:
            logger.error(f"Error fetching {page}: {e}")
            batch.errors.append(f"{page}: {e}")
            continue

        batch.records[kind] = parse(html)

    return batch
