"""Exception types for scouting record handling."""


class ScoutingError(Exception):
    """Base class for scouting app errors."""


class CsvParseError(ScoutingError, ValueError):
    """CSV text does not match the record grammar."""

    def __init__(self, message: str, position: int | None = None):
        super().__init__(message)
        self.position = position


class SchemaMismatchError(ScoutingError, ValueError):
    """A stored row has a field count no schema version recognises."""

    def __init__(self, field_count: int):
        super().__init__(f"Unrecognised record layout with {field_count} fields")
        self.field_count = field_count


class MatchRangeError(ScoutingError, ValueError):
    """Match number is outside the loaded schedule."""

    def __init__(self, match_number: int, min_match: int, max_match: int):
        super().__init__(
            f"Invalid match number. Please enter a match number between "
            f"{min_match} and {max_match}"
        )
        self.match_number = match_number
        self.min_match = min_match
        self.max_match = max_match


class StorageError(ScoutingError, OSError):
    """A blob could not be read or written."""

    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key
