"""
Request handlers for the players and earnings endpoints.

Handlers are framework-agnostic: they take the parsed query/body and return
(status_code, payload). Authentication, CORS and the HTTP server itself are
wired up by the hosting layer.
"""
import logging
import os
from typing import Any, Dict, Mapping, Optional, Tuple

from src.exceptions import ValidationError
from src.ingestion.earnings_scraper import EARNINGS_PAGES, scrape_earnings
from src.ingestion.liquipedia_client import LiquipediaClient
from src.ingestion.merge import merge_players
from src.ingestion.vct_scraper import DETAILS_BATCH_SIZE, scrape_details, scrape_rosters
from src.storage.snapshots import EARNINGS_KEYS, PLAYERS_KEY, load_players, save_snapshot
from src.storage.storage_interface import DataStore

logger = logging.getLogger(__name__)

Response = Tuple[int, Dict[str, Any]]


def is_development() -> bool:
    return os.getenv("APP_ENV", "production") == "development"


def _error(status: int, message: str) -> Response:
    return status, {"success": False, "error": message}


def _internal_error(context: str, exc: Exception) -> Response:
    logger.error(f"{context}: {exc}", exc_info=True)
    if is_development():
        return _error(500, f"{context}: {exc}")
    return _error(500, "Internal server error")


def _with_errors(payload: Dict[str, Any], errors) -> Dict[str, Any]:
    if errors:
        payload["errors"] = list(errors)
    return payload


def parse_offset(raw: Optional[str]) -> int:
    if raw is None or raw == "":
        return 0
    try:
        offset = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"offset must be an integer, got {raw!r}")
    if offset < 0:
        raise ValidationError(f"offset must be >= 0, got {offset}")
    return offset


def validate_players_body(body: Any) -> list:
    if not isinstance(body, Mapping) or not isinstance(body.get("players"), list):
        raise ValidationError("players must be a list")
    return body["players"]


def _sync_rosters(store: DataStore, client: LiquipediaClient) -> Response:
    batch = scrape_rosters(client)
    if not batch.players and batch.errors:
        # Nothing was scraped, so saving would wipe the stored roster
        logger.error(f"Roster scrape failed for all {len(batch.errors)} teams; keeping stored players")
        return 502, _with_errors({
            "success": False,
            "error": "No team page could be fetched; stored players left unchanged",
        }, batch.errors)

    existing = load_players(store) or []
    merged = merge_players(batch.players, existing)
    save_snapshot(store, PLAYERS_KEY, "players", merged)

    regions = len({p.region for p in merged})
    return 200, _with_errors({
        "success": True,
        "count": len(merged),
        "message": f"{len(merged)} players updated across {regions} regions",
    }, batch.errors)


def _sync_details(store: DataStore, client: LiquipediaClient, offset: int) -> Response:
    existing = load_players(store)
    if existing is None:
        return _error(400, "No player data stored yet. Sync rosters first.")

    batch = scrape_details(client, existing, offset, DETAILS_BATCH_SIZE)
    save_snapshot(store, PLAYERS_KEY, "players", batch.players)

    if batch.remaining > 0:
        message = f"{batch.updated} player details updated. {batch.remaining} remaining."
    else:
        message = f"{batch.updated} player details updated. All details loaded."
    return 200, _with_errors({
        "success": True,
        "updated": batch.updated,
        "remaining": batch.remaining,
        "nextOffset": batch.next_offset,
        "message": message,
    }, batch.errors)


def handle_players_get(
    store: DataStore,
    query: Mapping[str, str],
    client: Optional[LiquipediaClient] = None,
) -> Response:
    """GET /players?type=rosters|details[&offset=N]"""
    sync_type = query.get("type") or "rosters"
    if sync_type not in ("rosters", "details"):
        return _error(400, "type must be 'rosters' or 'details'")

    try:
        offset = parse_offset(query.get("offset")) if sync_type == "details" else 0
    except ValidationError as e:
        return _error(400, str(e))

    client = client or LiquipediaClient()
    try:
        if sync_type == "rosters":
            logger.info("Starting roster scrape")
            return _sync_rosters(store, client)
        return _sync_details(store, client, offset)
    except ValidationError as e:
        return _error(400, str(e))
    except Exception as e:
        return _internal_error("Scraping failed", e)


def handle_players_put(store: DataStore, body: Any) -> Response:
    """PUT /players with {"players": [...]}; stored verbatim"""
    try:
        players = validate_players_body(body)
    except ValidationError as e:
        return _error(400, str(e))

    try:
        save_snapshot(store, PLAYERS_KEY, "players", players)
    except Exception as e:
        return _internal_error("Saving failed", e)

    return 200, {
        "success": True,
        "count": len(players),
        "message": f"{len(players)} players saved",
    }


def handle_earnings_get(
    store: DataStore,
    query: Mapping[str, str],
    client: Optional[LiquipediaClient] = None,
) -> Response:
    """GET /earnings[?type=players|teams]; both kinds when type is absent"""
    kind = query.get("type")
    if kind and kind not in EARNINGS_PAGES:
        return _error(400, "type must be 'players' or 'teams'")
    kinds = [kind] if kind else list(EARNINGS_PAGES)

    client = client or LiquipediaClient()
    try:
        batch = scrape_earnings(client, kinds)
        payload: Dict[str, Any] = {"success": bool(batch.records)}
        for name, records in batch.records.items():
            save_snapshot(store, EARNINGS_KEYS[name], "data", records)
            payload[name] = len(records)
    except ValidationError as e:
        return _error(400, str(e))
    except Exception as e:
        return _internal_error("Earnings scrape failed", e)

    saved = ", ".join(f"{payload[name]} {name}" for name in batch.records)
    payload["message"] = f"Updated {saved}" if saved else "No earnings pages could be fetched"
    return (200 if batch.records else 502), _with_errors(payload, batch.errors)
