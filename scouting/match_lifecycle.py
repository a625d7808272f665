"""Match record lifecycle: pre-game creation, scoring, comparison and export.

One CSV row per match is stored under ``match{N}.csv``. Each stage reads the
stored row, changes the fields it owns and writes the whole row back:

    Create    writes fields 0-6
    Save      keeps 0-5, rewrites 6 (comment), 7-10 (counters), 11 (questions)
    Compare   rewrites 11 and appends 12-14
    Export    read only

Stages do not lock the record; the last write wins.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from .auto_reminder import AutoPhaseReminder
from .change_tracker import CounterChangeSet
from .constants import (
    ALLOWED_DELTAS,
    AUTO_COUNTERS,
    COMPARISON_RESULTS,
    COUNTER_NAMES,
    MATCH_KEY_PREFIX,
    MATCH_KEY_SUFFIX,
    TELEOP_COUNTERS,
)
from .csv_codec import encode_row, parse_row
from .errors import MatchRangeError, SchemaMismatchError, StorageError
from .export import build_export
from .record_schema import (
    COMPARED_FIELD_COUNT,
    V2_FIELD_COUNT,
    SchemaVersion,
    append_comparison,
    detect_version,
    field_index,
    read_field,
    require_version,
)
from .scout_history import previous_team_for, save_history
from .settings_store import ScoutContext

logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    CREATED = "created"
    SCORING = "scoring"
    COMPARED = "compared"
    EXPORTED = "exported"


def match_key(match_number: int) -> str:
    return f"{MATCH_KEY_PREFIX}{int(match_number)}{MATCH_KEY_SUFFIX}"


def make_tma_key(team_number, alliance: str, match_number) -> str:
    """Team-match-alliance key, e.g. ``254-R3``."""
    return f"{team_number}-{alliance}{match_number}"


def list_match_numbers(store) -> list[int]:
    """Return the match numbers that have a stored record, ascending."""
    numbers = []
    for key in store.list(MATCH_KEY_PREFIX):
        stem = key[len(MATCH_KEY_PREFIX):]
        if not stem.endswith(MATCH_KEY_SUFFIX):
            continue
        stem = stem[: -len(MATCH_KEY_SUFFIX)]
        if stem.isdigit():
            numbers.append(int(stem))
    return sorted(numbers)


def read_record_text(store, match_number: int) -> str | None:
    """Return the stored row text, or None when there is no readable record."""
    key = match_key(match_number)
    if not store.exists(key):
        return None
    try:
        return store.read(key)
    except StorageError as exc:
        logger.warning("[Match] Treating unreadable %s as missing: %s", key, exc)
        return None


def read_record(store, match_number: int) -> list[str] | None:
    """Return the parsed stored row, or None when missing or malformed."""
    text = read_record_text(store, match_number)
    if text is None:
        return None
    values = parse_row(text)
    if values is None:
        logger.error("[Match] Failed to parse stored record for match %s", match_number)
    return values


def create_record(
    store,
    context: ScoutContext,
    team_number,
    match_number,
    comment: str = "",
    match_range: tuple[int, int] | None = None,
) -> str:
    """Write the pre-game row (fields 0-6) for a match and return its text.

    Any existing record for the match is replaced.

    Raises:
        ValueError: If team or match number is missing, or the station is unset.
        MatchRangeError: If the match number is outside ``match_range``.
    """
    if not match_number:
        raise ValueError("Please enter a match number and find your team first")
    match_number = int(match_number)
    if match_range is not None:
        min_match, max_match = match_range
        if not min_match <= match_number <= max_match:
            raise MatchRangeError(match_number, min_match, max_match)

    if not team_number:
        raise ValueError("Please enter a match number and find your team first")
    team_number = int(team_number)

    station = context.driverStation
    if not station:
        raise ValueError("Driver station is not set. Please update Settings.")
    alliance = context.alliance

    row = [
        team_number,
        match_number,
        make_tma_key(team_number, alliance, match_number),
        station,
        alliance,
        context.scoutName,
        comment or "",
    ]
    text = encode_row(row)
    store.write(match_key(match_number), text)
    logger.info(
        "[Pregame] Created record match=%s team=%s station=%s",
        match_number,
        team_number,
        station,
    )
    return text


def normalize_comparison_result(result):
    """Return a valid comparison result (int in -2..2 or "skipped").

    Raises:
        ValueError: For anything else.
    """
    if isinstance(result, bool):
        raise ValueError(f"Invalid comparison result: {result!r}")
    if isinstance(result, str):
        text = result.strip().lower()
        if text == "skipped":
            return "skipped"
        try:
            result = int(text)
        except ValueError as exc:
            raise ValueError(f"Invalid comparison result: {result!r}") from exc
    if result not in COMPARISON_RESULTS:
        raise ValueError(f"Invalid comparison result: {result!r}")
    return result if result == "skipped" else int(result)


@dataclass
class SubmitResult:
    row_text: str
    next_stage: str
    current_team: str
    previous_team: str | None = None


class MatchSession:
    """Working state of one match while it is being scouted.

    Counters, comment and questions live in memory; nothing is written until
    :meth:`save` (or :meth:`submit`).
    """

    def __init__(
        self,
        store,
        match_number: int,
        context: ScoutContext | None = None,
        clock: Callable[[], float] = time.monotonic,
        prompt_comparison: bool = False,
    ):
        self.store = store
        self.match_number = int(match_number)
        self.context = context or ScoutContext()
        self.prompt_comparison = prompt_comparison
        self.counters = {name: 0 for name in COUNTER_NAMES}
        self.comment = ""
        self.questions = ""
        self.changes = CounterChangeSet(clock=clock)
        self.reminder = AutoPhaseReminder(clock=clock)
        self.stage = Stage.SCORING
        self.version: SchemaVersion | None = None
        self.persisted = False
        self.row_text: str | None = None
        self.previous_team: str | None = None
        self.closed = False
        # Index 6 is only rewritten once the comment is edited here.
        self._keep_stored_comment = True

    @classmethod
    def resume(cls, store, match_number: int, **kwargs) -> "MatchSession":
        session = cls(store, match_number, **kwargs)
        session.load()
        return session

    @property
    def key(self) -> str:
        return match_key(self.match_number)

    def load(self) -> bool:
        """Load working state from the stored row.

        Returns:
            True if a record was found and loaded; False leaves zeroed state.
        """
        values = read_record(self.store, self.match_number)
        if values is None:
            logger.info("[Match] No existing data for match %s", self.match_number)
            self.persisted = False
            return False

        version = detect_version(len(values))
        if version is None:
            logger.error("[Match] %s", SchemaMismatchError(len(values)))
            self.persisted = False
            return False

        self.version = version
        self.persisted = True
        for name in COUNTER_NAMES:
            self.counters[name] = max(0, read_field(values, name, version))
        self.comment = read_field(values, "comment", version)
        self.questions = read_field(values, "questions", version)
        if version == SchemaVersion.CREATED:
            self.stage = Stage.CREATED
        elif version == SchemaVersion.V2_COMPARED:
            self.stage = Stage.COMPARED
        logger.info(
            "[Match] Loaded match=%s version=%s fields=%s",
            self.match_number,
            version.value,
            len(values),
        )
        return True

    # --- scoring -----------------------------------------------------

    def update_counter(self, name: str, delta: int) -> bool:
        """Apply ``delta`` to a counter.

        Returns:
            False (and changes nothing) when the result would be negative.

        Raises:
            KeyError: For an unknown counter.
            ValueError: For a delta other than -10, -1, +1 or +10.
        """
        if name not in self.counters:
            raise KeyError(f"Unknown counter: {name}")
        if isinstance(delta, bool) or delta not in ALLOWED_DELTAS:
            raise ValueError(f"Counter step must be one of {ALLOWED_DELTAS}")

        new_value = self.counters[name] + delta
        if new_value < 0:
            return False

        self.counters[name] = new_value
        self.changes.record(name, delta)
        if name in AUTO_COUNTERS:
            self.reminder.touch_auto()
        elif name in TELEOP_COUNTERS:
            self.reminder.touch_teleop()
        return True

    def set_comment(self, text: str | None) -> None:
        self.comment = text or ""
        self._keep_stored_comment = False

    def set_questions(self, text: str | None) -> None:
        self.questions = text or ""

    def collapse_auto(self) -> None:
        self.reminder.collapse_auto()

    # --- persistence -------------------------------------------------

    def save(self) -> str | None:
        """Rewrite the stored row with the in-memory scoring state.

        The stored row is read fresh so pre-game fields edited elsewhere are
        kept. An existing comparison suffix is kept as well.

        Returns:
            The written row text, or None when the stored row is missing,
            unreadable or could not be written.
        """
        values = read_record(self.store, self.match_number)
        if values is None:
            logger.error(
                "[Match] Cannot save match %s: no readable base record",
                self.match_number,
            )
            return None
        try:
            version = require_version(values)
        except SchemaMismatchError as exc:
            logger.error("[Match] Cannot save match %s: %s", self.match_number, exc)
            return None

        comment = self.comment
        if self._keep_stored_comment and len(values) > 6:
            comment = values[6]

        if self._keep_stored_comment:
            self.comment = comment

        new_row = list(values[:6]) + [
            comment,
            self.counters["auto_fuel"],
            self.counters["auto_passes"],
            self.counters["teleop_fuel"],
            self.counters["teleop_passes"],
            self.questions,
        ]
        if version == SchemaVersion.V2_COMPARED:
            new_row += values[V2_FIELD_COUNT:]

        text = encode_row(new_row)
        try:
            self.store.write(self.key, text)
        except StorageError as exc:
            logger.error("[Match] Error saving match %s: %s", self.match_number, exc)
            return None

        self.row_text = text
        self.persisted = True
        self.version = detect_version(len(new_row))
        if self.stage == Stage.CREATED:
            self.stage = Stage.SCORING
        logger.info(
            "[Match] Saved match=%s fields=%s", self.match_number, len(new_row)
        )
        return text

    def submit(self) -> SubmitResult | None:
        """Save, then decide whether the comparison stage comes next."""
        text = self.save()
        if text is None:
            return None

        values = parse_row(text)
        if not values:
            logger.error(
                "[Match] Saved row for match %s could not be read back",
                self.match_number,
            )
            return None
        current_team = values[0]
        already_compared = len(values) >= COMPARED_FIELD_COUNT
        previous = None
        if self.prompt_comparison and not already_compared:
            previous = previous_team_for(
                self.store, self.context.scoutName, current_team
            )

        self.previous_team = previous
        if previous is not None:
            next_stage = "comparison"
        else:
            next_stage = "export"
            save_history(self.store, self.context.scoutName, current_team)

        logger.info(
            "[Match] Submitted match=%s next=%s", self.match_number, next_stage
        )
        return SubmitResult(
            row_text=text,
            next_stage=next_stage,
            current_team=current_team,
            previous_team=previous,
        )

    def compare(
        self,
        result,
        current_team=None,
        previous_team=None,
        row_text: str | None = None,
    ) -> str | None:
        """Append the comparison result to the submitted row and store it.

        Re-comparing an already compared row replaces its suffix.

        Raises:
            ValueError: For an invalid result or a missing previous team.
        """
        result = normalize_comparison_result(result)
        text = row_text if row_text is not None else self.row_text
        if text is None:
            text = read_record_text(self.store, self.match_number)

        values = parse_row(text) if text else None
        if values is None:
            logger.error(
                "[Compare] No parsable record for match %s", self.match_number
            )
            return None
        if len(values) >= COMPARED_FIELD_COUNT:
            values = values[:V2_FIELD_COUNT]
        if len(values) != V2_FIELD_COUNT:
            logger.error(
                "[Compare] Match %s row has %s fields; expected %s",
                self.match_number,
                len(values),
                V2_FIELD_COUNT,
            )
            return None

        current_team = current_team if current_team is not None else values[0]
        previous_team = previous_team if previous_team is not None else self.previous_team
        if previous_team is None:
            raise ValueError("No previous team to compare against")

        values[field_index("questions", SchemaVersion.V2)] = self.questions
        extended = append_comparison(values, current_team, previous_team, result)
        new_text = encode_row(extended)
        try:
            self.store.write(self.key, new_text)
        except StorageError as exc:
            logger.error("[Compare] Error saving match %s: %s", self.match_number, exc)
            return None

        save_history(self.store, self.context.scoutName, current_team)
        self.row_text = new_text
        self.version = SchemaVersion.V2_COMPARED
        self.stage = Stage.COMPARED
        logger.info(
            "[Compare] Match=%s %s vs %s result=%s",
            self.match_number,
            current_team,
            previous_team,
            result,
        )
        return new_text

    def export(self) -> dict | None:
        """Return the QR payload and display table for the stored row."""
        text = read_record_text(self.store, self.match_number) or self.row_text
        if not text or parse_row(text) is None:
            return None
        self.stage = Stage.EXPORTED
        return build_export(text)

    def close(self) -> None:
        """Leave the match: cancel all display timers and the reminder."""
        self.changes.cancel_all()
        self.reminder.cancel()
        self.closed = True

    def snapshot(self) -> dict:
        return {
            "match_number": self.match_number,
            "stage": self.stage.value,
            "persisted": self.persisted,
            "schema_version": self.version.value if self.version else None,
            "counters": dict(self.counters),
            "recent_changes": self.changes.snapshot(),
            "comment": self.comment,
            "questions": self.questions,
            "auto_reminder": self.reminder.is_signalling(),
        }


class SessionRegistry:
    """Open match sessions for this device, keyed by match number."""

    def __init__(self, store, clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.clock = clock
        self._sessions: dict[int, MatchSession] = {}
        self._lock = threading.Lock()

    def get(self, match_number: int) -> MatchSession | None:
        return self._sessions.get(int(match_number))

    def open(
        self, match_number: int, context: ScoutContext, prompt_comparison: bool = False
    ) -> MatchSession:
        """Return the open session for a match, resuming it from storage if needed."""
        match_number = int(match_number)
        with self._lock:
            session = self._sessions.get(match_number)
            if session is None or session.closed:
                session = MatchSession.resume(
                    self.store,
                    match_number,
                    context=context,
                    clock=self.clock,
                    prompt_comparison=prompt_comparison,
                )
                self._sessions[match_number] = session
            else:
                session.context = context
                session.prompt_comparison = prompt_comparison
            return session

    def close(self, match_number: int) -> bool:
        with self._lock:
            session = self._sessions.pop(int(match_number), None)
        if session is None:
            return False
        session.close()
        return True

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()
