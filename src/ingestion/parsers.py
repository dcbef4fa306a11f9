"""
Liquipedia markup extractors.

Each extractor is a pure function from one page's HTML to typed records. The
selectors below are the whole extraction contract; rows that do not match
them produce no record instead of raising.
"""
import logging
import re
from typing import List, Optional
from urllib.parse import unquote

from bs4 import BeautifulSoup

from src.ingestion.models import EarningsRecord, PlayerDetails, PlayerRecord, TransferEntry

logger = logging.getLogger(__name__)


# Team pages
ROSTER_TABLES = "table.roster-card, table.wikitable"
PLAYER_LINK = "td .inline-player a, td.ID a, td a[href*='/valorant/']"
FLAG_IMAGE = "span.flag img, .flag img"
CAPTAIN_ICON = "i.fa-crown, .fa-crown"
PROFILE_PREFIX = "/valorant/"
NON_PLAYER_MARKERS = (":", "Category", "?")

# Player pages
INFOBOX_ROWS = "div.fo-nttax-infobox > div"
INFOBOX_LABEL = "div.infobox-description"
INFOBOX_HEADER = "div.infobox-header"
ITALIC_STYLE = re.compile(r"font-style\s*:\s*italic", re.IGNORECASE)
EXCLUDED_STATUSES = {"Loan", "Inactive", "Content Creator", "Streamer"}
DATE_SEPARATOR = "—"

# Statistics pages
EARNINGS_TABLES = "table.wikitable"
MIN_EARNINGS_CELLS = 7
CURRENCY_NOISE = re.compile(r"[$€£,\s]")
LEADING_INT = re.compile(r"^-?\d+")


def normalize_team_name(team_id: str) -> str:
    """'KR%C3%9C_Esports' -> 'KRÜ Esports'"""
    return unquote(team_id).replace("_", " ").strip()


def _profile_slug(href: str) -> Optional[str]:
    if PROFILE_PREFIX not in href:
        return None
    slug = href.split(PROFILE_PREFIX, 1)[1]
    if not slug or any(marker in slug for marker in NON_PLAYER_MARKERS):
        return None
    return slug


def parse_roster(html: str, team_name: str, region: str) -> List[PlayerRecord]:
    """
    Extract the players listed on a team page.

    A row counts as a player row when its first profile link has a name of
    at least two characters and points at a player page. The first row seen
    for a slug wins.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    team = normalize_team_name(team_name)
    players: List[PlayerRecord] = []
    seen = set()

    for table in soup.select(ROSTER_TABLES):
        for row in table.find_all("tr"):
            link = row.select_one(PLAYER_LINK)
            if link is None:
                continue

            name = link.get_text().strip()
            if len(name) < 2:
                continue

            slug = _profile_slug(link.get("href") or "")
            if not slug or slug in seen:
                continue

            flag = row.select_one(FLAG_IMAGE)
            country = (flag.get("alt") or "") if flag else ""

            seen.add(slug)
            players.append(PlayerRecord(
                slug=slug,
                name=name,
                country=country,
                team=team,
                region=region,
                is_igl=row.select_one(CAPTAIN_ICON) is not None,
            ))

    return players


def _parse_role(soup: BeautifulSoup) -> str:
    role = ""
    for row in soup.select(INFOBOX_ROWS):
        label = row.select_one(INFOBOX_LABEL)
        if label is None or label.get_text(strip=True) != "Role:":
            continue
        value = label.find_next_sibling("div")
        if value is not None:
            text = value.get_text(strip=True)
            # A later Role: row overrides an earlier one
            if text:
                role = text
    return role


def _tenure_status(team_cell) -> Optional[str]:
    spans = team_cell.find_all("span", style=ITALIC_STYLE)
    if not spans:
        return None
    return "".join(span.get_text() for span in spans).replace("(", "").replace(")", "").strip()


def _parse_history(soup: BeautifulSoup) -> List[TransferEntry]:
    header = next(
        (h for h in soup.select(INFOBOX_HEADER) if h.get_text(strip=True) == "History"),
        None,
    )
    if header is None or header.parent is None:
        return []

    container = header.parent.find_next_sibling()
    table = container.find("table") if container is not None else None
    if table is None:
        return []

    history = []
    for row in table.find_all("tr"):
        cells = row.find_all("td")
        if len(cells) < 2:
            continue

        dates = [d.strip() for d in cells[0].get_text().split(DATE_SEPARATOR)]

        team_cell = cells[1]
        team_link = team_cell.find("a")
        if team_link is None:
            continue
        team = (team_link.get("title") or team_link.get_text()).strip()
        if not team:
            continue

        if _tenure_status(team_cell) in EXCLUDED_STATUSES:
            continue

        history.append(TransferEntry(
            team=team,
            start=dates[0] if dates else "",
            end=dates[1] if len(dates) > 1 and dates[1] else None,
        ))

    return history


def parse_player_details(html: str) -> PlayerDetails:
    """Extract role and team history from a player's infobox"""
    soup = BeautifulSoup(html or "", "html.parser")
    return PlayerDetails(role=_parse_role(soup), transfer_history=_parse_history(soup))


def parse_earnings_amount(text: str) -> Optional[int]:
    """'$12,345' -> 12345. None when no leading integer is present."""
    match = LEADING_INT.match(CURRENCY_NOISE.sub("", text or ""))
    return int(match.group(0)) if match else None


def _earnings_rows(html: str):
    soup = BeautifulSoup(html or "", "html.parser")
    rows = [row for table in soup.select(EARNINGS_TABLES) for row in table.find_all("tr")]
    # Only the page's first row is a header; later tables continue the ranking
    for row in rows[1:]:
        cells = row.find_all("td")
        if len(cells) >= MIN_EARNINGS_CELLS:
            yield cells


def _valid_earnings(name: str, cells) -> Optional[int]:
    earnings = parse_earnings_amount(cells[-1].get_text(strip=True))
    if not name or earnings is None or earnings <= 0:
        return None
    return earnings


def parse_player_earnings(html: str) -> List[EarningsRecord]:
    records = []
    for cells in _earnings_rows(html):
        link = cells[1].select_one(".name a")
        name = link.get_text().strip() if link else ""
        earnings = _valid_earnings(name, cells)
        if earnings is None:
            continue

        flag = cells[1].select_one(".flag img")
        records.append(EarningsRecord(
            name=name,
            earnings=earnings,
            type="player",
            country=(flag.get("alt") or "") if flag else "",
        ))

    logger.info(f"Parsed {len(records)} player earnings rows")
    return records


def parse_team_earnings(html: str) -> List[EarningsRecord]:
    records = []
    for cells in _earnings_rows(html):
        # Team cells may open with a logo-only link
        name = next(
            (a.get_text().strip() for a in cells[1].find_all("a") if a.get_text().strip()),
            "",
        )
        earnings = _valid_earnings(name, cells)
        if earnings is None:
            continue
        records.append(EarningsRecord(name=name, earnings=earnings, type="team"))

    logger.info(f"Parsed {len(records)} team earnings rows")
    return records
