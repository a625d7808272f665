"""Device settings and match schedule route registrations."""

from __future__ import annotations

import requests
from flask import Flask, jsonify, request

from scouting.config import save_config
from scouting.errors import StorageError
from scouting.schedule import (
    download_schedule,
    find_team,
    get_event_code,
    import_schedule_csv,
    load_schedule,
    match_range,
    split_event_code,
)
from scouting.settings_store import load_settings, save_settings


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_settings_routes(app: Flask) -> None:
    """Register settings, schedule and app config routes."""

    @app.route("/api/settings", methods=["GET"])
    def get_settings():
        store = app.config["SCOUTING_STORE"]
        return jsonify(load_settings(store).to_dict())

    @app.route("/api/settings", methods=["POST"])
    def update_settings():
        """Merge submitted settings over the stored ones."""
        store = app.config["SCOUTING_STORE"]
        data = _json_body()
        updates = {
            key: data[key]
            for key in ("scoutName", "driverStation", "isPracticeMode")
            if key in data
        }
        try:
            settings = save_settings(store, updates)
        except ValueError as exc:
            return jsonify({"success": False, "error": str(exc)}), 400
        except StorageError as exc:
            app.logger.error("[Settings] Error saving settings: %s", exc)
            return jsonify({"success": False, "error": "Failed to save settings."}), 500
        return jsonify({"success": True, "settings": settings.to_dict()})

    @app.route("/api/schedule", methods=["GET"])
    def schedule_info():
        store = app.config["SCOUTING_STORE"]
        schedule, source = load_schedule(store)
        min_match, max_match = match_range(store)
        return jsonify(
            {
                "source": source,
                "event_code": get_event_code(store),
                "matches": len(schedule),
                "min_match": min_match,
                "max_match": max_match,
            }
        )

    @app.route("/api/schedule/team", methods=["GET"])
    def schedule_team():
        """Find this device's team for a match number."""
        store = app.config["SCOUTING_STORE"]
        settings = load_settings(store)
        match_number = request.args.get("match", type=int)
        if not match_number:
            return jsonify({"success": False, "error": "Please enter a match number"}), 400

        min_match, max_match = match_range(store)
        if not min_match <= match_number <= max_match:
            return (
                jsonify(
                    {
                        "success": False,
                        "error": (
                            "Invalid match number. Please enter a match number "
                            f"between {min_match} and {max_match}"
                        ),
                    }
                ),
                400,
            )
        team = find_team(store, match_number, settings.driverStation)
        if team is None:
            return jsonify({"success": False, "error": "Team not found for station"}), 404
        return jsonify({"success": True, "match_number": match_number, "team_number": team})

    @app.route("/api/schedule/download", methods=["POST"])
    def schedule_download():
        """Download the qualification schedule from the FRC API."""
        store = app.config["SCOUTING_STORE"]
        app_cfg = app.config["SCOUTING_CONFIG"]
        data = _json_body()
        event_code = str(data.get("event_code") or app_cfg["event"].get("code") or "").strip()
        if not event_code:
            return jsonify({"success": False, "error": "Please enter an event code."}), 400

        api = app_cfg["frc_api"]
        try:
            count = download_schedule(
                store,
                event_code,
                api.get("username"),
                api.get("password"),
                base_url=api.get("base_url"),
            )
        except ValueError as exc:
            return jsonify({"success": False, "error": str(exc)}), 400
        except requests.RequestException as exc:
            app.logger.error("[Schedule] Download error: %s", exc)
            return (
                jsonify(
                    {
                        "success": False,
                        "error": (
                            "Failed to download match schedule. Please check the "
                            "event code and try again."
                        ),
                    }
                ),
                502,
            )
        except StorageError as exc:
            app.logger.error("[Schedule] Could not store schedule: %s", exc)
            return jsonify({"success": False, "error": "Failed to save schedule."}), 500

        return jsonify({"success": True, "event_code": event_code, "matches": count})

    @app.route("/api/schedule/import", methods=["POST"])
    def schedule_import():
        """Import a schedule from CSV text (request body or ``schedule`` field)."""
        store = app.config["SCOUTING_STORE"]
        data = _json_body()
        text = data.get("schedule") if data else request.get_data(as_text=True)
        if not text:
            return jsonify({"success": False, "error": "No schedule provided."}), 400
        try:
            count = import_schedule_csv(store, str(text))
        except ValueError as exc:
            return jsonify({"success": False, "error": str(exc)}), 400
        except StorageError as exc:
            app.logger.error("[Schedule] Could not store imported schedule: %s", exc)
            return jsonify({"success": False, "error": "Failed to save schedule."}), 500
        return jsonify({"success": True, "matches": count})

    @app.route("/api/config", methods=["GET"])
    def get_app_config():
        app_cfg = app.config["SCOUTING_CONFIG"]
        api = app_cfg["frc_api"]
        return jsonify(
            {
                "event_code": app_cfg["event"].get("code") or "",
                "comparison_enabled": app_cfg["comparison"]["enabled"],
                "frc_api_base_url": api.get("base_url"),
                "frc_api_credentials": bool(api.get("username") and api.get("password")),
            }
        )

    @app.route("/api/config", methods=["POST"])
    def update_app_config():
        """Update the event code and comparison prompt, then write config.yaml."""
        app_cfg = app.config["SCOUTING_CONFIG"]
        data = _json_body()

        event_code = app_cfg["event"].get("code") or ""
        if "event_code" in data:
            event_code = str(data.get("event_code") or "").strip()
            if event_code:
                try:
                    split_event_code(event_code)
                except ValueError as exc:
                    return jsonify({"success": False, "error": str(exc)}), 400

        comparison_enabled = app_cfg["comparison"]["enabled"]
        if "comparison_enabled" in data:
            comparison_enabled = bool(data.get("comparison_enabled"))

        app_cfg["event"]["code"] = event_code
        app_cfg["comparison"]["enabled"] = comparison_enabled
        try:
            save_config(app_cfg, app.config["SCOUTING_CONFIG_FILE"])
        except OSError as exc:
            app.logger.error("[Config] Error saving config: %s", exc)
            return jsonify({"success": False, "error": "Failed to save config."}), 500

        return jsonify(
            {
                "success": True,
                "event_code": event_code,
                "comparison_enabled": comparison_enabled,
            }
        )
