"""
Whole-document snapshots: {<field>: [...], updatedAt, count}.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from src.ingestion.models import PlayerRecord
from src.storage.storage_interface import DataStore

logger = logging.getLogger(__name__)


PLAYERS_KEY = "vctPlayers/current"
EARNINGS_KEYS = {
    "players": "earnings/players",
    "teams": "earnings/teams",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _next_timestamp(previous: Optional[str], now: datetime) -> str:
    """now, unless the stored stamp is not older; then one microsecond past it"""
    if previous:
        try:
            last = datetime.fromisoformat(previous)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unparseable updatedAt {previous!r}")
        else:
            if last.tzinfo is None:
                last = last.replace(tzinfo=timezone.utc)
            if now <= last:
                now = last + timedelta(microseconds=1)
    return now.isoformat()


def _serialize(item: Any) -> Any:
    return item.to_dict() if hasattr(item, "to_dict") else item


def save_snapshot(
    store: DataStore,
    key: str,
    field: str,
    items: Sequence[Any],
    clock: Callable[[], datetime] = _utcnow,
) -> Dict[str, Any]:
    """Replace the document at key with a fresh snapshot of items"""
    previous = store.get(key) or {}
    document = {
        field: [_serialize(item) for item in items],
        "updatedAt": _next_timestamp(previous.get("updatedAt"), clock()),
        "count": len(items),
    }
    store.set(key, document)
    logger.info(f"Saved {document['count']} entries to {key}")
    return document


def load_players(store: DataStore) -> Optional[List[PlayerRecord]]:
    """Stored roster, or None when no roster has been saved yet"""
    document = store.get(PLAYERS_KEY)
    if document is None:
        return None
    return [PlayerRecord.from_dict(entry) for entry in document.get("players") or []]
