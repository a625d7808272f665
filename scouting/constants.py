"""Constants and file paths used throughout the application."""

from pathlib import Path

# Base directories
BASE_DIR = Path(__file__).resolve().parent.parent
CONFIG_DIR = BASE_DIR / "config"
DATA_DIR = BASE_DIR / "data"
LOG_DIR = BASE_DIR / "logs"

CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Blob keys inside the data directory
SETTINGS_KEY = "ScoutingAppSettings.json"
SCHEDULE_KEY = "MatchSchedule.json"
SCHEDULE_CSV_KEY = "MatchScheduleCsv.json"
SCOUT_HISTORY_KEY = "scoutHistory.json"
MATCH_KEY_PREFIX = "match"
MATCH_KEY_SUFFIX = ".csv"

# Scoring
COUNTER_NAMES = ("auto_fuel", "auto_passes", "teleop_fuel", "teleop_passes")
AUTO_COUNTERS = ("auto_fuel", "auto_passes")
TELEOP_COUNTERS = ("teleop_fuel", "teleop_passes")
ALLOWED_DELTAS = (-10, -1, 1, 10)
COMPARISON_RESULTS = (2, 1, 0, -1, -2, "skipped")

# Timers (seconds)
CHANGE_DISPLAY_SECONDS = 10.0
AUTO_REMINDER_SECONDS = 20.0

# Stations as written by the device vs. the FRC API schedule
DRIVER_STATIONS = ("R1", "R2", "R3", "B1", "B2", "B3")
API_STATIONS = {
    "R1": "Red1",
    "R2": "Red2",
    "R3": "Red3",
    "B1": "Blue1",
    "B2": "Blue2",
    "B3": "Blue3",
}

FRC_API_BASE_URL = "https://frc-api.firstinspires.org/v3.0"

# Display headers, in row order
CSV_HEADERS = [
    "Team Number",
    "Match Number",
    "TMA Key",
    "Driver Station",
    "Alliance",
    "Scout Name",
    "Comments",
    "Auto Fuel Scored",
    "Auto Passes",
    "TeleOp Fuel Scored",
    "TeleOp Passes",
    "Questions/Clarifications",
]
COMPARISON_HEADERS = [
    "Comparison Current Team",
    "Comparison Previous Team",
    "Comparison Result",
]
LEGACY_CSV_HEADERS = [
    "Team Number",
    "Match Number",
    "TMA Key",
    "Driver Station",
    "Alliance",
    "Scout Name",
    "Pre-Game Comment",
    "Auto Fuel Scored",
    "TeleOp Fuel Scored",
    "Questions/Clarifications",
]
