"""Match schedule storage, lookup and download.

Two schedule blobs are supported. ``MatchSchedule.json`` holds the FRC API
response (teams under ``teams`` with stations like ``Red1``).
``MatchScheduleCsv.json`` holds a schedule imported from CSV (teams under
``Teams`` with stations like ``R1``) and wins when both exist.
"""

from __future__ import annotations

import json
import logging
import time

import requests

from .constants import (
    API_STATIONS,
    DRIVER_STATIONS,
    FRC_API_BASE_URL,
    SCHEDULE_CSV_KEY,
    SCHEDULE_KEY,
)
from .csv_codec import parse_row
from .errors import StorageError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 10
NETWORK_RETRIES = 3
BACKOFF_BASE_SECONDS = 0.75
MIN_MATCH_NUMBER = 1


def _read_json(store, key: str) -> dict | None:
    if not store.exists(key):
        return None
    try:
        payload = json.loads(store.read(key))
    except (StorageError, json.JSONDecodeError) as exc:
        logger.warning("[Schedule] Could not read %s: %s", key, exc)
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("Schedule"), list):
        logger.warning("[Schedule] %s has no Schedule list", key)
        return None
    return payload


def load_schedule(store) -> tuple[list[dict], str | None]:
    """Return (schedule entries, source) where source is "csv", "api" or None."""
    imported = _read_json(store, SCHEDULE_CSV_KEY)
    if imported is not None:
        return imported["Schedule"], "csv"
    downloaded = _read_json(store, SCHEDULE_KEY)
    if downloaded is not None:
        return downloaded["Schedule"], "api"
    return [], None


def get_event_code(store) -> str | None:
    payload = _read_json(store, SCHEDULE_KEY)
    if payload is None:
        return None
    schedule = payload["Schedule"]
    event_code = payload.get("eventCode")
    if not event_code and schedule and isinstance(schedule[0], dict):
        event_code = schedule[0].get("eventCode")
    return event_code or None


def match_range(store) -> tuple[int, int]:
    """Return (min_match, max_match); max is the number of scheduled matches."""
    schedule, _ = load_schedule(store)
    return MIN_MATCH_NUMBER, len(schedule)


def find_team(store, match_number: int, driver_station: str) -> int | None:
    """Return the team at ``driver_station`` in match ``match_number``, if any."""
    schedule, source = load_schedule(store)
    if source is None or not 1 <= match_number <= len(schedule):
        return None

    entry = schedule[match_number - 1]
    if not isinstance(entry, dict):
        return None
    if source == "csv":
        teams = entry.get("Teams") or []
        wanted = driver_station
    else:
        teams = entry.get("teams") or []
        wanted = API_STATIONS.get(driver_station)

    for team in teams:
        if isinstance(team, dict) and team.get("station") == wanted:
            try:
                return int(team.get("teamNumber"))
            except (TypeError, ValueError):
                logger.warning(
                    "[Schedule] Bad team number %r in match %s",
                    team.get("teamNumber"),
                    match_number,
                )
                return None
    return None


def split_event_code(event_code: str) -> tuple[str, str]:
    """Split ``2026casj`` into ("2026", "casj")."""
    code = str(event_code or "").strip()
    if len(code) < 8 or not code[:4].isdigit():
        raise ValueError(
            "Invalid event code format. Expected format: YYYYevent (e.g., 2024onwat)"
        )
    return code[:4], code[4:]


def fetch_schedule(
    event_code: str,
    username: str,
    password: str,
    base_url: str = FRC_API_BASE_URL,
    session: requests.Session | None = None,
) -> dict:
    """Download the qualification schedule for an event from the FRC API.

    Raises:
        ValueError: For a malformed event code or missing credentials.
        requests.RequestException: When every attempt fails.
    """
    year, event = split_event_code(event_code)
    if not username or not password:
        raise ValueError("FRC API credentials are not configured")

    url = f"{base_url.rstrip('/')}/{year}/schedule/{event}"
    http = session or requests
    last_error = None
    for attempt in range(1, NETWORK_RETRIES + 1):
        try:
            response = http.get(
                url,
                params={"tournamentLevel": "qual"},
                auth=(username, password),
                headers={"Accept": "application/json", "If-Modified-Since": ""},
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            data = response.json()
            if isinstance(data, dict) and isinstance(data.get("Schedule"), list):
                return data
            raise requests.RequestException("Unexpected schedule payload")
        except ValueError as exc:
            last_error = requests.RequestException(f"Invalid JSON: {exc}")
        except requests.RequestException as exc:
            last_error = exc
        logger.warning(
            "[Schedule] Download attempt %s/%s failed: %s",
            attempt,
            NETWORK_RETRIES,
            last_error,
        )
        if attempt < NETWORK_RETRIES:
            time.sleep(BACKOFF_BASE_SECONDS * (2 ** (attempt - 1)))

    raise last_error


def download_schedule(store, event_code: str, username: str, password: str, **kwargs) -> int:
    """Fetch a schedule and store it with its event code; return match count."""
    data = fetch_schedule(event_code, username, password, **kwargs)
    data["eventCode"] = event_code
    store.write(SCHEDULE_KEY, json.dumps(data, indent="\t"))
    logger.info(
        "[Schedule] Saved %s matches for event %s", len(data["Schedule"]), event_code
    )
    return len(data["Schedule"])


def parse_schedule_csv(text: str) -> list[dict]:
    """Parse ``match,R1,R2,R3,B1,B2,B3`` lines into schedule entries.

    A header line is optional. Match numbers must run 1..N without gaps so the
    entry for match N sits at index N-1.

    Raises:
        ValueError: On malformed lines or non-contiguous match numbers.
    """
    entries: dict[int, dict] = {}
    for line_number, line in enumerate(str(text or "").splitlines(), start=1):
        if not line.strip():
            continue
        values = parse_row(line)
        if values is None or len(values) != 1 + len(DRIVER_STATIONS):
            raise ValueError(f"Line {line_number}: expected match plus six teams")
        if line_number == 1 and not values[0].strip().isdigit():
            continue
        try:
            match_number = int(values[0])
            team_numbers = [int(value) for value in values[1:]]
        except ValueError as exc:
            raise ValueError(f"Line {line_number}: numbers expected") from exc
        if match_number in entries:
            raise ValueError(f"Line {line_number}: duplicate match {match_number}")
        entries[match_number] = {
            "matchNumber": match_number,
            "Teams": [
                {"teamNumber": team, "station": station}
                for station, team in zip(DRIVER_STATIONS, team_numbers)
            ],
        }

    if sorted(entries) != list(range(1, len(entries) + 1)):
        raise ValueError("Match numbers must start at 1 with no gaps")
    return [entries[number] for number in sorted(entries)]


def import_schedule_csv(store, text: str) -> int:
    """Store a CSV-imported schedule; return match count."""
    schedule = parse_schedule_csv(text)
    store.write(SCHEDULE_CSV_KEY, json.dumps({"Schedule": schedule}, indent="\t"))
    logger.info("[Schedule] Imported %s matches from CSV", len(schedule))
    return len(schedule)
