"""Tests for storage, settings, schedules, scout history and config."""

import json

import pytest
import requests

from conftest import api_schedule
from scouting import schedule as schedule_module
from scouting.config import get_data_dir, load_config, save_config
from scouting.constants import SCHEDULE_CSV_KEY, SCHEDULE_KEY, SETTINGS_KEY
from scouting.errors import StorageError
from scouting.schedule import (
    download_schedule,
    fetch_schedule,
    find_team,
    get_event_code,
    import_schedule_csv,
    load_schedule,
    match_range,
    parse_schedule_csv,
    split_event_code,
)
from scouting.scout_history import load_history, previous_team_for, save_history
from scouting.settings_store import DEFAULT_SETTINGS, load_settings, save_settings

SCHEDULE_CSV = """match,R1,R2,R3,B1,B2,B3
1,254,1678,971,118,148,2056
2,604,649,8,1323,5940,199
"""


class TestFileBlobStore:
    def test_write_read_list_delete(self, store):
        store.write("match2.csv", "a")
        store.write("match10.csv", "b")
        store.write("other.json", "{}")
        assert store.read("match2.csv") == "a"
        assert store.list("match") == ["match10.csv", "match2.csv"]
        assert store.delete("match2.csv") is True
        assert store.delete("match2.csv") is False

    def test_missing_blob(self, store):
        assert not store.exists("match1.csv")
        with pytest.raises(StorageError):
            store.read("match1.csv")

    @pytest.mark.parametrize("key", ["../escape.csv", "", "a/b.csv", ".."])
    def test_rejects_unsafe_keys(self, store, key):
        with pytest.raises(StorageError):
            store.write(key, "x")

    def test_list_before_first_write(self, store):
        assert store.list() == []


class TestSettings:
    def test_defaults_when_missing(self, store):
        assert load_settings(store) == DEFAULT_SETTINGS

    def test_save_merges_and_persists(self, store):
        save_settings(store, {"scoutName": "Ann", "driverStation": "b2"})
        settings = save_settings(store, {"isPracticeMode": True})
        assert settings.scoutName == "Ann"
        assert settings.driverStation == "B2"
        assert settings.alliance == "B"
        assert settings.isPracticeMode is True
        stored = json.loads(store.read(SETTINGS_KEY))
        assert stored["Settings"]["driverStation"] == "B2"

    def test_invalid_station(self, store):
        with pytest.raises(ValueError):
            save_settings(store, {"driverStation": "G1"})

    def test_invalid_blob_gives_defaults(self, store):
        store.write(SETTINGS_KEY, "not json")
        assert load_settings(store) == DEFAULT_SETTINGS
        store.write(SETTINGS_KEY, json.dumps({"scoutName": "flat"}))
        assert load_settings(store) == DEFAULT_SETTINGS


class TestSchedule:
    def test_no_schedule(self, store):
        assert load_schedule(store) == ([], None)
        assert match_range(store) == (1, 0)
        assert find_team(store, 1, "R1") is None

    def test_api_schedule_lookup(self, scheduled_store):
        assert match_range(scheduled_store) == (1, 5)
        assert find_team(scheduled_store, 1, "R1") == 254
        assert find_team(scheduled_store, 5, "B3") == 2056
        assert find_team(scheduled_store, 6, "R1") is None
        assert get_event_code(scheduled_store) == "2026casj"

    def test_csv_schedule_takes_precedence(self, scheduled_store):
        assert import_schedule_csv(scheduled_store, SCHEDULE_CSV) == 2
        schedule, source = load_schedule(scheduled_store)
        assert source == "csv"
        assert match_range(scheduled_store) == (1, 2)
        assert find_team(scheduled_store, 2, "R3") == 8
        stored = json.loads(scheduled_store.read(SCHEDULE_CSV_KEY))
        assert stored["Schedule"][0]["Teams"][0] == {"teamNumber": 254, "station": "R1"}

    def test_parse_without_header(self):
        entries = parse_schedule_csv("1,1,2,3,4,5,6")
        assert entries[0]["matchNumber"] == 1
        assert [team["teamNumber"] for team in entries[0]["Teams"]] == [1, 2, 3, 4, 5, 6]

    @pytest.mark.parametrize(
        "text",
        [
            "1,1,2,3,4,5,6\n3,1,2,3,4,5,6",
            "1,1,2,3,4,5,6\n1,1,2,3,4,5,6",
            "1,1,2,3",
            "1,a,2,3,4,5,6",
        ],
    )
    def test_parse_rejects(self, text):
        with pytest.raises(ValueError):
            parse_schedule_csv(text)

    @pytest.mark.parametrize("code", ["casj", "26casj", "abcdcasj"])
    def test_split_event_code_rejects(self, code):
        with pytest.raises(ValueError):
            split_event_code(code)

    def test_split_event_code(self):
        assert split_event_code("2026casj") == ("2026", "casj")


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"status {self.status}")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class TestFetchSchedule:
    @pytest.fixture(autouse=True)
    def no_sleep(self, monkeypatch):
        monkeypatch.setattr(schedule_module.time, "sleep", lambda seconds: None)

    def test_request_shape(self):
        session = FakeSession([FakeResponse(api_schedule(2))])
        data = fetch_schedule("2026casj", "user", "key", session=session)
        assert len(data["Schedule"]) == 2
        url, kwargs = session.calls[0]
        assert url == "https://frc-api.firstinspires.org/v3.0/2026/schedule/casj"
        assert kwargs["params"] == {"tournamentLevel": "qual"}
        assert kwargs["auth"] == ("user", "key")

    def test_retries_then_succeeds(self):
        session = FakeSession(
            [
                requests.ConnectionError("offline"),
                FakeResponse(ValueError("bad json")),
                FakeResponse(api_schedule(1)),
            ]
        )
        assert fetch_schedule("2026casj", "user", "key", session=session)["Schedule"]
        assert len(session.calls) == 3

    def test_gives_up_after_retries(self):
        session = FakeSession([FakeResponse({}, status=401)] * 3)
        with pytest.raises(requests.RequestException):
            fetch_schedule("2026casj", "user", "key", session=session)
        assert len(session.calls) == 3

    def test_missing_credentials(self):
        with pytest.raises(ValueError):
            fetch_schedule("2026casj", "", "", session=FakeSession([]))

    def test_download_stores_event_code(self, store):
        payload = api_schedule(3)
        del payload["eventCode"]
        session = FakeSession([FakeResponse(payload)])
        assert download_schedule(store, "2026casj", "user", "key", session=session) == 3
        assert json.loads(store.read(SCHEDULE_KEY))["eventCode"] == "2026casj"
        assert get_event_code(store) == "2026casj"


class TestScoutHistory:
    def test_round_trip(self, store):
        assert load_history(store) is None
        save_history(store, "Ann", 254, timestamp=12.5)
        assert load_history(store) == {"scoutName": "Ann", "teamNum": "254", "timestamp": 12500}

    def test_previous_team(self, store):
        save_history(store, "Ann", 118)
        assert previous_team_for(store, "Ann", 254) == "118"
        assert previous_team_for(store, "Ann", "118") is None
        assert previous_team_for(store, "Bea", 254) is None


class TestConfig:
    def test_defaults_when_missing(self, tmp_path, monkeypatch):
        monkeypatch.delenv("FRC_API_USERNAME", raising=False)
        monkeypatch.delenv("FRC_API_PASSWORD", raising=False)
        config = load_config(tmp_path / "missing.yaml")
        assert config["comparison"]["enabled"] is True
        assert config["frc_api"]["base_url"] == "https://frc-api.firstinspires.org/v3.0"
        assert config["frc_api"]["username"] == ""

    def test_env_overrides_credentials(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "frc_api:\n  username: file-user\n  password: file-key\n", encoding="utf-8"
        )
        monkeypatch.setenv("FRC_API_USERNAME", "env-user")
        monkeypatch.delenv("FRC_API_PASSWORD", raising=False)
        config = load_config(config_file)
        assert config["frc_api"]["username"] == "env-user"
        assert config["frc_api"]["password"] == "file-key"

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("event: [unclosed", encoding="utf-8")
        assert load_config(config_file)["event"] == {"code": ""}

    def test_save_and_reload(self, tmp_path, monkeypatch):
        monkeypatch.delenv("FRC_API_USERNAME", raising=False)
        monkeypatch.delenv("FRC_API_PASSWORD", raising=False)
        config_file = tmp_path / "config.yaml"
        config = load_config(config_file)
        config["event"]["code"] = "2026casj"
        config["comparison"]["enabled"] = False
        config["storage"]["data_dir"] = str(tmp_path / "records")
        save_config(config, config_file)

        reloaded = load_config(config_file)
        assert reloaded["event"]["code"] == "2026casj"
        assert reloaded["comparison"]["enabled"] is False
        assert get_data_dir(reloaded) == tmp_path / "records"
