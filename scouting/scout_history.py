"""Last-scouted-team history used to pick the comparison partner."""

from __future__ import annotations

import json
import logging
import time

from .constants import SCOUT_HISTORY_KEY
from .errors import StorageError

logger = logging.getLogger(__name__)


def load_history(store) -> dict | None:
    if not store.exists(SCOUT_HISTORY_KEY):
        return None
    try:
        history = json.loads(store.read(SCOUT_HISTORY_KEY))
    except (StorageError, json.JSONDecodeError) as exc:
        logger.warning("[History] Ignoring unreadable scout history: %s", exc)
        return None
    return history if isinstance(history, dict) else None


def save_history(store, scout_name: str, team_number, timestamp: float | None = None) -> None:
    history = {
        "scoutName": scout_name,
        "teamNum": str(team_number),
        "timestamp": int((timestamp if timestamp is not None else time.time()) * 1000),
    }
    try:
        store.write(SCOUT_HISTORY_KEY, json.dumps(history))
    except StorageError as exc:
        logger.error("[History] Error saving scout history: %s", exc)


def previous_team_for(store, scout_name: str, current_team) -> str | None:
    """Return the team this scout finished last, unless it is ``current_team``."""
    history = load_history(store)
    if not history or history.get("scoutName") != scout_name:
        return None
    previous = str(history.get("teamNum") or "").strip()
    if not previous or previous == str(current_team):
        return None
    return previous
