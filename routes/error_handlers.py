"""Error handler registrations."""

from __future__ import annotations

from flask import Flask, jsonify, request


def register_error_handlers(app: Flask) -> None:
    """Register common HTTP error handlers."""

    @app.errorhandler(400)
    def handle_bad_request(error):
        app.logger.warning("[HTTP 400] path=%s error=%s", request.path, error)
        return (
            jsonify(
                {
                    "success": False,
                    "error": "The request could not be processed. Please check your inputs.",
                }
            ),
            400,
        )

    @app.errorhandler(404)
    def handle_not_found(error):
        app.logger.warning("[HTTP 404] path=%s error=%s", request.path, error)
        return jsonify({"success": False, "error": "Not found."}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        app.logger.warning("[HTTP 405] path=%s method=%s", request.path, request.method)
        return jsonify({"success": False, "error": "Method not allowed."}), 405

    @app.errorhandler(500)
    def handle_server_error(error):
        app.logger.exception("[HTTP 500] path=%s error=%s", request.path, error)
        return (
            jsonify({"success": False, "error": "Something went wrong. Please try again."}),
            500,
        )
