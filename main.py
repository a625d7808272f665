import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import Flask

from routes import (
    register_api_routes,
    register_error_handlers,
    register_match_routes,
    register_settings_routes,
)
from scouting import CURRENT_VERSION, FileBlobStore, SessionRegistry, load_config, get_data_dir
from scouting.constants import LOG_DIR

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level=logging.INFO, log_dir: Path | None = LOG_DIR) -> None:
    """Log to stderr and, when a log directory is given, to a rotating file."""
    root = logging.getLogger()
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(getattr(h, "_scouting_handler", False) for h in root.handlers):
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(formatter)
        stream._scouting_handler = True
        root.addHandler(stream)

        if log_dir is not None:
            try:
                log_dir.mkdir(parents=True, exist_ok=True)
                file_handler = RotatingFileHandler(
                    log_dir / "scouting.log",
                    maxBytes=1_000_000,
                    backupCount=3,
                    encoding="utf-8",
                )
            except OSError as exc:
                root.warning("Could not open log file in %s: %s", log_dir, exc)
            else:
                file_handler.setFormatter(formatter)
                file_handler._scouting_handler = True
                root.addHandler(file_handler)


def create_app(config_file=None, data_dir=None, clock=None) -> Flask:
    """Build the Flask app around a blob store and a session registry."""
    app = Flask(__name__)
    app_cfg = load_config(config_file)
    store = FileBlobStore(data_dir or get_data_dir(app_cfg))

    app.config["SCOUTING_CONFIG"] = app_cfg
    app.config["SCOUTING_CONFIG_FILE"] = config_file
    app.config["SCOUTING_STORE"] = store
    app.config["SCOUTING_SESSIONS"] = SessionRegistry(store, clock=clock or time.monotonic)

    register_api_routes(app)
    register_match_routes(app)
    register_settings_routes(app)
    register_error_handlers(app)

    app.logger.info("[App] Fuel scouting v%s using data dir %s", CURRENT_VERSION, store.root)
    return app


if __name__ == "__main__":
    configure_logging()
    app = create_app()

    # Check for --production flag
    production_mode = "--production" in sys.argv
    if production_mode:
        from waitress import serve

        print("Starting in production mode (Waitress)...")
        print("Serving on http://127.0.0.1:8080")
        serve(app, host="0.0.0.0", port=8080)
    else:
        app.run(debug=True, host="127.0.0.1", port=5000)
