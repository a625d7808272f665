"""Positional field layouts for match records.

Rows carry no version tag; the layout is inferred from the field count:

    7         CREATED      pre-game fields only (current layout prefix)
    9, 10     V1           legacy: auto fuel, teleop fuel, questions
    11, 12    V2           current scoring layout
    >= 15     V2_COMPARED  current layout plus the comparison suffix

Any other count is a schema mismatch.
"""

from __future__ import annotations

import enum
import logging

from .constants import COMPARISON_HEADERS, CSV_HEADERS, LEGACY_CSV_HEADERS
from .errors import SchemaMismatchError

logger = logging.getLogger(__name__)


class SchemaVersion(enum.Enum):
    CREATED = "created"
    V1 = "v1"
    V2 = "v2"
    V2_COMPARED = "v2_compared"


PREGAME_FIELD_COUNT = 7
V2_FIELD_COUNT = 12
COMPARED_FIELD_COUNT = 15

COUNTER_FIELDS = ("auto_fuel", "auto_passes", "teleop_fuel", "teleop_passes")

V2_LAYOUT: dict[str, int] = {
    "team_number": 0,
    "match_number": 1,
    "tma_key": 2,
    "driver_station": 3,
    "alliance": 4,
    "scout_name": 5,
    "comment": 6,
    "auto_fuel": 7,
    "auto_passes": 8,
    "teleop_fuel": 9,
    "teleop_passes": 10,
    "questions": 11,
    "comparison_current_team": 12,
    "comparison_previous_team": 13,
    "comparison_result": 14,
}

# Legacy rows keep a pre-game note at index 6 that is not the shared comment.
V1_LAYOUT: dict[str, int] = {
    "team_number": 0,
    "match_number": 1,
    "tma_key": 2,
    "driver_station": 3,
    "alliance": 4,
    "scout_name": 5,
    "auto_fuel": 7,
    "teleop_fuel": 8,
    "questions": 9,
}

LAYOUTS = {
    SchemaVersion.CREATED: V2_LAYOUT,
    SchemaVersion.V1: V1_LAYOUT,
    SchemaVersion.V2: V2_LAYOUT,
    SchemaVersion.V2_COMPARED: V2_LAYOUT,
}

FIELD_DEFAULTS = {name: 0 for name in COUNTER_FIELDS}


def detect_version(field_count: int) -> SchemaVersion | None:
    """Infer the schema version from a row's field count.

    Returns:
        The matching SchemaVersion, or None when the count is not recognised.
    """
    if field_count == PREGAME_FIELD_COUNT:
        return SchemaVersion.CREATED
    if field_count in (9, 10):
        return SchemaVersion.V1
    if field_count in (11, V2_FIELD_COUNT):
        return SchemaVersion.V2
    if field_count >= COMPARED_FIELD_COUNT:
        return SchemaVersion.V2_COMPARED
    return None


def require_version(row: list[str]) -> SchemaVersion:
    """Like detect_version, but raise for an unrecognised layout."""
    version = detect_version(len(row))
    if version is None:
        raise SchemaMismatchError(len(row))
    return version


def field_index(name: str, version: SchemaVersion) -> int | None:
    """Return the position of a logical field, or None if the version lacks it."""
    if name not in V2_LAYOUT:
        raise KeyError(f"Unknown record field: {name}")
    return LAYOUTS[version].get(name)


def default_for(name: str):
    return FIELD_DEFAULTS.get(name, "")


def read_field(row: list[str], name: str, version: SchemaVersion):
    """Read a logical field from a positional row.

    Counters are returned as ints; everything else as the stored string.
    Fields absent from the version (or past the end of a short row) read as
    their default: 0 for counters, "" for text.
    """
    index = field_index(name, version)
    if index is None or index >= len(row):
        return default_for(name)

    raw = row[index]
    if name in FIELD_DEFAULTS:
        try:
            return int(str(raw).strip())
        except ValueError:
            logger.warning(
                "[Schema] Non-numeric %s value %r; using default", name, raw
            )
            return default_for(name)
    return raw


def write_field(row: list[str], name: str, value, version: SchemaVersion) -> list[str]:
    """Return a copy of ``row`` with one logical field replaced.

    The row length never changes.

    Raises:
        KeyError: If the field is not part of the version or the row is too short.
    """
    index = field_index(name, version)
    if index is None or index >= len(row):
        raise KeyError(f"Field {name} is not present in a {version.value} row")

    updated = list(row)
    updated[index] = str(value)
    return updated


def append_comparison(
    row: list[str], current_team, previous_team, result
) -> list[str]:
    """Extend a 12-field row with the three comparison fields."""
    if len(row) != V2_FIELD_COUNT:
        raise ValueError(
            f"Comparison can only be appended to a {V2_FIELD_COUNT}-field row, "
            f"got {len(row)}"
        )
    return list(row) + [str(current_team), str(previous_team), str(result)]


def headers_for(version: SchemaVersion | None, field_count: int) -> list[str]:
    """Return display headers for a row of the given version and length."""
    if version == SchemaVersion.V1:
        return LEGACY_CSV_HEADERS[:field_count]
    headers = list(CSV_HEADERS)
    if version == SchemaVersion.V2_COMPARED:
        headers += COMPARISON_HEADERS
    return headers[:field_count]
