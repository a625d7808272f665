"""Core modules for the fuel scouting app."""

from .constants import (
    CONFIG_FILE,
    CSV_HEADERS,
    COMPARISON_HEADERS,
    DATA_DIR,
    LOG_DIR,
)
from .config import load_config, save_config, get_data_dir
from .csv_codec import parse_row, escape_field, encode_row
from .errors import (
    CsvParseError,
    MatchRangeError,
    SchemaMismatchError,
    ScoutingError,
    StorageError,
)
from .record_schema import (
    SchemaVersion,
    detect_version,
    read_field,
    write_field,
    append_comparison,
)
from .change_tracker import ChangeTracker, CounterChangeSet
from .auto_reminder import AutoPhaseReminder
from .storage import FileBlobStore
from .settings_store import ScoutContext, load_settings, save_settings
from .match_lifecycle import (
    MatchSession,
    SessionRegistry,
    Stage,
    create_record,
    list_match_numbers,
    read_record,
)
from .data_lifecycle import clear_all_match_data
from .version_check import CURRENT_VERSION

__all__ = [
    # Constants
    "CONFIG_FILE",
    "CSV_HEADERS",
    "COMPARISON_HEADERS",
    "DATA_DIR",
    "LOG_DIR",
    # Config
    "load_config",
    "save_config",
    "get_data_dir",
    # CSV Codec
    "parse_row",
    "escape_field",
    "encode_row",
    # Errors
    "CsvParseError",
    "MatchRangeError",
    "SchemaMismatchError",
    "ScoutingError",
    "StorageError",
    # Record Schema
    "SchemaVersion",
    "detect_version",
    "read_field",
    "write_field",
    "append_comparison",
    # Trackers
    "ChangeTracker",
    "CounterChangeSet",
    "AutoPhaseReminder",
    # Storage
    "FileBlobStore",
    "ScoutContext",
    "load_settings",
    "save_settings",
    # Match Lifecycle
    "MatchSession",
    "SessionRegistry",
    "Stage",
    "create_record",
    "list_match_numbers",
    "read_record",
    "clear_all_match_data",
    # Version
    "CURRENT_VERSION",
]
