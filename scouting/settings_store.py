"""Device settings persistence (scout name, driver station, practice mode)."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass

from .constants import DRIVER_STATIONS, SETTINGS_KEY
from .errors import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoutContext:
    """Device settings passed explicitly into the match lifecycle."""

    scoutName: str = ""
    driverStation: str = ""
    isPracticeMode: bool = False

    @property
    def alliance(self) -> str:
        return self.driverStation[:1]

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_SETTINGS = ScoutContext()


def _coerce(raw: dict) -> ScoutContext:
    station = str(raw.get("driverStation") or "").strip().upper()
    if station and station not in DRIVER_STATIONS:
        logger.warning("[Settings] Ignoring unknown driver station %r", station)
        station = ""
    return ScoutContext(
        scoutName=str(raw.get("scoutName") or ""),
        driverStation=station,
        isPracticeMode=bool(raw.get("isPracticeMode") or False),
    )


def load_settings(store) -> ScoutContext:
    """Load device settings; missing or invalid data yields defaults."""
    if not store.exists(SETTINGS_KEY):
        return DEFAULT_SETTINGS
    try:
        payload = json.loads(store.read(SETTINGS_KEY))
    except (StorageError, json.JSONDecodeError) as exc:
        logger.warning("[Settings] Invalid settings blob; using defaults: %s", exc)
        return DEFAULT_SETTINGS

    section = payload.get("Settings") if isinstance(payload, dict) else None
    if not isinstance(section, dict):
        logger.warning("[Settings] Settings blob missing 'Settings' object")
        return DEFAULT_SETTINGS
    settings = _coerce(section)
    logger.debug("[Settings] Loaded settings station=%s", settings.driverStation)
    return settings


def save_settings(store, updates: dict) -> ScoutContext:
    """Merge ``updates`` over the current settings and persist the result."""
    current = load_settings(store).to_dict()
    for key in ("scoutName", "driverStation", "isPracticeMode"):
        if key in updates:
            current[key] = updates[key]

    station = str(current.get("driverStation") or "").strip().upper()
    if station and station not in DRIVER_STATIONS:
        raise ValueError(
            f"Driver station must be one of {', '.join(DRIVER_STATIONS)}"
        )
    merged = _coerce(current)
    store.write(SETTINGS_KEY, json.dumps({"Settings": merged.to_dict()}, indent=2))
    logger.info(
        "[Settings] Saved settings station=%s practice=%s",
        merged.driverStation,
        merged.isPracticeMode,
    )
    return merged
