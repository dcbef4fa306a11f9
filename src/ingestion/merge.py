"""
Reconcile a fresh roster scrape with the stored player list.

The scrape decides which players exist and where they play. Role and team
history come from the details pass or from an admin, so they are carried
over from the stored record. A record with manually_edited set keeps both
fields verbatim no matter what the scrape says.
"""
import copy
import logging
from typing import Dict, Iterable, List

from src.ingestion.models import PlayerRecord

logger = logging.getLogger(__name__)


def dedupe_by_slug(players: Iterable[PlayerRecord]) -> List[PlayerRecord]:
    """Keep the first record of every slug, preserving order"""
    seen = set()
    unique = []
    for player in players:
        if player.slug in seen:
            logger.debug(f"Dropping duplicate slug {player.slug} ({player.team})")
            continue
        seen.add(player.slug)
        unique.append(player)
    return unique


def merge_player(new: PlayerRecord, existing: PlayerRecord) -> PlayerRecord:
    merged = copy.deepcopy(new)
    if existing.manually_edited:
        merged.role = existing.role
        merged.transfer_history = copy.deepcopy(existing.transfer_history)
        merged.manually_edited = True
        return merged

    merged.role = existing.role or new.role
    merged.transfer_history = copy.deepcopy(existing.transfer_history or new.transfer_history)
    merged.manually_edited = False
    return merged


def merge_players(new: List[PlayerRecord], existing: List[PlayerRecord]) -> List[PlayerRecord]:
    """
    Full resync: the result holds exactly the (de-duplicated) new players in
    scrape order. Stored players missing from the scrape are dropped.
    """
    existing_by_slug: Dict[str, PlayerRecord] = {}
    for player in existing:
        existing_by_slug.setdefault(player.slug, player)

    merged = []
    preserved = 0
    for player in dedupe_by_slug(new):
        match = existing_by_slug.get(player.slug)
        if match is None:
            merged.append(copy.deepcopy(player))
            continue
        if match.manually_edited:
            preserved += 1
        merged.append(merge_player(player, match))

    dropped = len(set(existing_by_slug) - {p.slug for p in merged})
    logger.info(
        f"Merged {len(merged)} players ({preserved} manually edited kept, {dropped} no longer rostered)"
    )
    return merged
