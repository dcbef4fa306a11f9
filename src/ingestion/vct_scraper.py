"""
VCT roster and player-detail scraping.

Rosters: one team page per franchised team, all in one run.
Details: one player page per player. At 1.2s per request the full list does
not fit in one invocation, so it is drained in fixed-size batches driven by
offset/nextOffset.
"""
import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.exceptions import ValidationError
from src.ingestion.liquipedia_client import LiquipediaClient
from src.ingestion.models import PlayerRecord
from src.ingestion.parsers import normalize_team_name, parse_player_details, parse_roster

logger = logging.getLogger(__name__)


DETAILS_BATCH_SIZE = 25

# Liquipedia page ids of the partnered teams, per league
VCT_TEAMS: Dict[str, List[str]] = {
    "Americas": [
        "Sentinels", "Cloud9", "100_Thieves", "NRG_Esports",
        "Evil_Geniuses", "LOUD", "FURIA_Esports", "MIBR",
        "Leviat%C3%A1n", "KR%C3%9C_Esports",
    ],
    "EMEA": [
        "Fnatic", "Team_Liquid", "Team_Heretics", "Karmine_Corp",
        "Team_Vitality", "Natus_Vincere", "BBL_Esports",
        "Gentle_Mates", "FUT_Esports", "Giants_Gaming",
    ],
    "Pacific": [
        "DRX", "T1", "Gen.G", "Paper_Rex",
        "Team_Secret", "Talon_Esports", "Global_Esports",
        "Rex_Regum_Qeon", "DetonatioN_FocusMe", "ZETA_DIVISION",
    ],
    "China": [
        "EDward_Gaming", "Bilibili_Gaming", "FunPlus_Phoenix",
        "JDG_Gaming", "Nova_Esports", "All_Gamers",
        "Trace_Esports", "TYLOO", "Wolves_Esports",
        "Dragon_Ranger_Gaming",
    ],
}


@dataclass
class ScrapeBatch:
    """Players collected in one roster run plus the teams that failed"""
    players: List[PlayerRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass
class DetailBatch:
    """Outcome of one details window"""
    players: List[PlayerRecord]
    updated: int = 0
    errors: List[str] = field(default_factory=list)
    remaining: int = 0
    next_offset: Optional[int] = None


def scrape_rosters(client: LiquipediaClient, catalog: Optional[Dict[str, List[str]]] = None) -> ScrapeBatch:
    """
    Scrape every team of every region, one after the other.

    A failing team is logged and recorded in the batch errors; the run
    continues with the next team.
    """
    catalog = VCT_TEAMS if catalog is None else catalog
    if not isinstance(catalog, dict) or not catalog:
        raise ValidationError("Team catalog must be a non-empty mapping of region to team pages")

    batch = ScrapeBatch()
    for region, teams in catalog.items():
        for team_id in teams:
            team_name = normalize_team_name(team_id)
            try:
                logger.info(f"Scraping {team_name} ({region})")
                html = client.fetch_page(team_id, source="rosters")
                players = parse_roster(html, team_id, region)
            except Exception as e:
                logger.error(f"Error scraping {team_id}: {e}")
                batch.errors.append(f"{team_id}: {e}")
                continue

            if not players:
                logger.warning(f"No players found for {team_name}")
            else:
                logger.info(f"Found {len(players)} players for {team_name}")
            batch.players.extend(players)

    logger.info(f"Roster scrape complete: {len(batch.players)} players, {len(batch.errors)} failed teams")
    return batch


def _apply_details(player: PlayerRecord, role: str, history) -> bool:
    """Overwrite role/history with non-empty scraped values; report whether anything changed"""
    changed = False
    if role and role != player.role:
        player.role = role
        changed = True
    if history and history != player.transfer_history:
        player.transfer_history = history
        changed = True
    return changed


def scrape_details(
    client: LiquipediaClient,
    players: List[PlayerRecord],
    offset: int = 0,
    batch_size: int = DETAILS_BATCH_SIZE,
) -> DetailBatch:
    """
    Enrich players[offset:offset + batch_size] with role and team history.

    Returns the full list (a copy; the input is left untouched) together with
    how many records changed and where the next window starts.
    """
    if offset < 0:
        raise ValidationError(f"offset must be >= 0, got {offset}")
    if batch_size <= 0:
        raise ValidationError(f"batch_size must be > 0, got {batch_size}")

    updated_players = copy.deepcopy(players)
    index_by_slug = {}
    for idx, player in enumerate(updated_players):
        index_by_slug.setdefault(player.slug, idx)

    window = updated_players[offset:offset + batch_size]
    logger.info(f"Fetching details batch at offset {offset} ({len(window)} players)")

    batch = DetailBatch(players=updated_players)
    for player in window:
        if player.manually_edited:
            logger.debug(f"Skipping manually edited player {player.name}")
            continue

        try:
            logger.info(f"Fetching details for {player.name}")
            html = client.fetch_page(player.slug, source="details")
            details = parse_player_details(html)
        except Exception as e:
            logger.error(f"Error fetching details for {player.name}: {e}")
            batch.errors.append(f"{player.name}: {e}")
            continue

        target = updated_players[index_by_slug[player.slug]]
        if _apply_details(target, details.role, details.transfer_history):
            batch.updated += 1

    batch.remaining = max(0, len(updated_players) - (offset + batch_size))
    batch.next_offset = offset + batch_size if batch.remaining > 0 else None
    logger.info(f"Details batch done: {batch.updated} updated, {batch.remaining} remaining")
    return batch
