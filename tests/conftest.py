"""Shared fixtures for the scouting tests."""

import json
import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from scouting.constants import SCHEDULE_KEY, SETTINGS_KEY
from scouting.settings_store import ScoutContext
from scouting.storage import FileBlobStore


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def api_schedule(match_count, teams_by_match=None):
    """Build an FRC API style schedule payload."""
    teams_by_match = teams_by_match or {}
    schedule = []
    for number in range(1, match_count + 1):
        teams = teams_by_match.get(number, (254, 1678, 971, 118, 148, 2056))
        schedule.append(
            {
                "matchNumber": number,
                "teams": [
                    {"teamNumber": team, "station": station}
                    for station, team in zip(
                        ("Red1", "Red2", "Red3", "Blue1", "Blue2", "Blue3"), teams
                    )
                ],
            }
        )
    return {"Schedule": schedule, "eventCode": "2026casj"}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    return FileBlobStore(tmp_path / "data")


@pytest.fixture
def context():
    return ScoutContext(scoutName="Ann", driverStation="R1")


@pytest.fixture
def scheduled_store(store):
    """Store holding a five-match downloaded schedule."""
    store.write(SCHEDULE_KEY, json.dumps(api_schedule(5)))
    return store


@pytest.fixture
def app(tmp_path, clock):
    from main import create_app

    config_file = tmp_path / "config.yaml"
    config_file.write_text("comparison:\n  enabled: true\n", encoding="utf-8")
    flask_app = create_app(
        config_file=config_file, data_dir=tmp_path / "data", clock=clock
    )
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_store(app):
    return app.config["SCOUTING_STORE"]


def write_settings(store, **settings):
    payload = {"scoutName": "Ann", "driverStation": "R1", "isPracticeMode": False}
    payload.update(settings)
    store.write(SETTINGS_KEY, json.dumps({"Settings": payload}))
