"""Pre-game, match scoring, comparison and export route registrations."""

from __future__ import annotations

from flask import Flask, current_app, jsonify, request

from scouting.data_lifecycle import clear_all_match_data
from scouting.errors import MatchRangeError, StorageError
from scouting.match_lifecycle import (
    MatchSession,
    create_record,
    list_match_numbers,
)
from scouting.schedule import find_team, match_range
from scouting.settings_store import load_settings


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _int_or_none(value) -> int | None:
    """Parse a positive integer from JSON/form input; None when absent or invalid."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if number > 0 else None


def _error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def _open_session(match_number: int) -> MatchSession:
    store = current_app.config["SCOUTING_STORE"]
    sessions = current_app.config["SCOUTING_SESSIONS"]
    app_cfg = current_app.config["SCOUTING_CONFIG"]
    return sessions.open(
        match_number,
        load_settings(store),
        prompt_comparison=app_cfg["comparison"]["enabled"],
    )


def register_match_routes(app: Flask) -> None:
    """Register match lifecycle routes."""

    @app.route("/api/pregame", methods=["POST"])
    def submit_pregame():
        """Create the pre-game record for a match."""
        store = app.config["SCOUTING_STORE"]
        data = _json_body()
        context = load_settings(store)

        match_number = _int_or_none(data.get("match_number"))
        if match_number is None:
            return _error("Please enter a match number", 400)

        min_match, max_match = match_range(store)
        team_number = _int_or_none(data.get("team_number"))
        if team_number is None and context.driverStation:
            team_number = find_team(store, match_number, context.driverStation)
        bounds = (min_match, max_match)
        if context.isPracticeMode and not max_match:
            # Practice matches may run without a schedule.
            bounds = None

        try:
            text = create_record(
                store,
                context,
                team_number,
                match_number,
                comment=str(data.get("comment") or ""),
                match_range=bounds,
            )
        except MatchRangeError as exc:
            app.logger.warning("[Pregame] %s", exc)
            return _error(str(exc), 400)
        except ValueError as exc:
            app.logger.warning("[Pregame] Rejected pre-game submit: %s", exc)
            return _error(str(exc), 400)
        except StorageError as exc:
            app.logger.error("[Pregame] Failed to write record: %s", exc)
            return _error(
                "Error starting match. Please check your settings and try again.", 500
            )

        # A fresh pre-game row replaces whatever was being scouted before.
        app.config["SCOUTING_SESSIONS"].close(match_number)
        return (
            jsonify(
                {
                    "success": True,
                    "match_number": match_number,
                    "team_number": team_number,
                    "row": text,
                }
            ),
            201,
        )

    @app.route("/api/matches", methods=["GET"])
    def list_matches():
        store = app.config["SCOUTING_STORE"]
        return jsonify({"matches": list_match_numbers(store)})

    @app.route("/api/matches", methods=["DELETE"])
    def clear_matches():
        """Delete every stored match record."""
        store = app.config["SCOUTING_STORE"]
        app.config["SCOUTING_SESSIONS"].close_all()
        deleted, ok = clear_all_match_data(store, app.logger)
        if not ok:
            return _error("Failed to clear match data", 500)
        return jsonify(
            {
                "success": True,
                "deleted": deleted,
                "message": f"Cleared data for {deleted} matches",
            }
        )

    @app.route("/api/match/<int:match_number>", methods=["GET"])
    def load_match(match_number: int):
        """Resume a match: load stored counters and notes into working state."""
        session = _open_session(match_number)
        return jsonify(session.snapshot())

    @app.route("/api/match/<int:match_number>/counter", methods=["POST"])
    def update_counter(match_number: int):
        data = _json_body()
        session = _open_session(match_number)
        counter = str(data.get("counter") or "")
        try:
            delta = int(data.get("delta"))
        except (TypeError, ValueError):
            return _error("delta must be an integer", 400)

        try:
            accepted = session.update_counter(counter, delta)
        except KeyError:
            return _error(f"Unknown counter: {counter}", 400)
        except ValueError as exc:
            return _error(str(exc), 400)

        return jsonify(
            {"success": True, "accepted": accepted, "state": session.snapshot()}
        )

    @app.route("/api/match/<int:match_number>/notes", methods=["POST"])
    def update_notes(match_number: int):
        data = _json_body()
        session = _open_session(match_number)
        if "comment" in data:
            session.set_comment(data.get("comment"))
        if "questions" in data:
            session.set_questions(data.get("questions"))
        return jsonify({"success": True, "state": session.snapshot()})

    @app.route("/api/match/<int:match_number>/auto-collapse", methods=["POST"])
    def collapse_auto(match_number: int):
        session = _open_session(match_number)
        session.collapse_auto()
        return jsonify({"success": True, "state": session.snapshot()})

    @app.route("/api/match/<int:match_number>/save", methods=["POST"])
    def save_match(match_number: int):
        """Persist working state (back navigation)."""
        session = _open_session(match_number)
        text = session.save()
        if text is None:
            return _error(
                "Unable to save match data. Start the match from Pre-Game first.", 409
            )
        return jsonify({"success": True, "row": text})

    @app.route("/api/match/<int:match_number>/submit", methods=["POST"])
    def submit_match(match_number: int):
        session = _open_session(match_number)
        result = session.submit()
        if result is None:
            return _error(
                "Unable to save match data. Start the match from Pre-Game first.", 409
            )
        app.logger.info(
            "[Submit] match=%s next=%s", match_number, result.next_stage
        )
        return jsonify(
            {
                "success": True,
                "row": result.row_text,
                "next_stage": result.next_stage,
                "current_team": result.current_team,
                "previous_team": result.previous_team,
            }
        )

    @app.route("/api/match/<int:match_number>/compare", methods=["POST"])
    def compare_match(match_number: int):
        """Record how this team compared to the scout's previous team."""
        data = _json_body()
        session = _open_session(match_number)
        if "questions" in data:
            session.set_questions(data.get("questions"))

        try:
            text = session.compare(
                data.get("result"),
                current_team=data.get("current_team"),
                previous_team=data.get("previous_team"),
                row_text=data.get("row"),
            )
        except ValueError as exc:
            return _error(str(exc), 400)

        if text is None:
            return _error("Unable to save comparison for this match.", 409)
        return jsonify({"success": True, "row": text, "next_stage": "export"})

    @app.route("/api/match/<int:match_number>/export", methods=["GET"])
    def export_match(match_number: int):
        """QR payload and human-readable table for a finished record."""
        session = _open_session(match_number)
        export = session.export()
        if export is None:
            return _error(f"No data found for match {match_number}", 404)
        return jsonify(export)

    @app.route("/api/match/<int:match_number>/close", methods=["POST"])
    def close_match(match_number: int):
        closed = app.config["SCOUTING_SESSIONS"].close(match_number)
        return jsonify({"success": True, "closed": closed})
