"""Local data reset lifecycle helpers."""

import logging

from .constants import MATCH_KEY_PREFIX, MATCH_KEY_SUFFIX, SCOUT_HISTORY_KEY
from .errors import StorageError

logger = logging.getLogger(__name__)


def clear_all_match_data(store, active_logger: logging.Logger | None = None) -> tuple[int, bool]:
    """Delete every stored match record.

    Settings and schedules are preserved.

    Returns:
        Tuple of (records deleted, True when no deletion failed).
    """
    log = active_logger or logger
    success = True
    deleted = 0
    log.info("[Reset] Clearing local match records")

    for key in store.list(MATCH_KEY_PREFIX):
        if not key.endswith(MATCH_KEY_SUFFIX):
            continue
        try:
            if store.delete(key):
                deleted += 1
        except StorageError as exc:
            success = False
            log.warning("[Reset] Failed deleting %s: %s", key, exc)

    try:
        store.delete(SCOUT_HISTORY_KEY)
    except StorageError as exc:
        success = False
        log.warning("[Reset] Failed deleting scout history: %s", exc)

    if success:
        log.info("[Reset] Cleared data for %s matches", deleted)
    else:
        log.warning("[Reset] Completed with errors after %s deletions", deleted)
    return deleted, success
