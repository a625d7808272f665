"""Application configuration loading and saving."""

import logging
import os
from pathlib import Path

import yaml

from .constants import CONFIG_FILE, DATA_DIR, FRC_API_BASE_URL
from .storage import _atomic_write_text

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict = {
    "event": {"code": ""},
    "frc_api": {"base_url": FRC_API_BASE_URL, "username": "", "password": ""},
    "comparison": {"enabled": True},
    "storage": {"data_dir": ""},
}


def _section(cfg: dict, name: str) -> dict:
    value = cfg.get(name, {}) or {}
    if not isinstance(value, dict):
        logger.warning("[Config] %s config was not an object; using defaults", name)
        value = {}
    merged = dict(DEFAULT_CONFIG[name])
    merged.update(value)
    return merged


def load_config(config_file: Path | None = None) -> dict:
    """Load app configuration from config.yaml, filling in defaults.

    Expected YAML structure:
        event:
          code: "2026casj"
        frc_api:
          base_url: "https://frc-api.firstinspires.org/v3.0"
          username: ""
          password: ""
        comparison:
          enabled: true
        storage:
          data_dir: ""

    FRC_API_USERNAME / FRC_API_PASSWORD environment variables override the
    credentials in the file.
    """
    path = Path(config_file or CONFIG_FILE)
    cfg: dict = {}
    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as f:
                cfg = yaml.safe_load(f) or {}
            logger.debug("[Config] Loaded configuration from %s", path)
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("[Config] Failed to load config (%s): %s", path, exc)
            cfg = {}
        if not isinstance(cfg, dict):
            logger.warning("[Config] Config root was not an object; using defaults")
            cfg = {}

    config = {name: _section(cfg, name) for name in DEFAULT_CONFIG}

    api = config["frc_api"]
    api["username"] = os.environ.get("FRC_API_USERNAME") or api.get("username") or ""
    api["password"] = os.environ.get("FRC_API_PASSWORD") or api.get("password") or ""
    config["comparison"]["enabled"] = bool(config["comparison"].get("enabled"))
    return config


def get_data_dir(config: dict) -> Path:
    raw = str((config.get("storage") or {}).get("data_dir") or "").strip()
    return Path(raw).expanduser() if raw else DATA_DIR


def save_config(config: dict, config_file: Path | None = None) -> None:
    """Persist configuration to config.yaml (credentials from env are not written)."""
    path = Path(config_file or CONFIG_FILE)
    payload = {name: dict(config.get(name) or DEFAULT_CONFIG[name]) for name in DEFAULT_CONFIG}
    if os.environ.get("FRC_API_USERNAME"):
        payload["frc_api"]["username"] = ""
    if os.environ.get("FRC_API_PASSWORD"):
        payload["frc_api"]["password"] = ""

    _atomic_write_text(path, yaml.safe_dump(payload, sort_keys=False))
    logger.info(
        "[Config] Saved configuration: event=%s comparison=%s",
        payload["event"].get("code") or "",
        payload["comparison"].get("enabled"),
    )
