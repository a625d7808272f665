"""Application version lookup."""

import logging
import tomllib
from pathlib import Path

logger = logging.getLogger(__name__)

PYPROJECT_PATH = Path(__file__).resolve().parent.parent / "pyproject.toml"


def read_version(pyproject_path: Path = PYPROJECT_PATH) -> str:
    """Return the project version, or "0.0.0" when pyproject.toml is unavailable."""
    try:
        with open(pyproject_path, "rb") as f:
            return tomllib.load(f)["project"]["version"]
    except (OSError, KeyError, tomllib.TOMLDecodeError) as exc:
        logger.warning("[Version] Could not read version from %s: %s", pyproject_path, exc)
        return "0.0.0"


CURRENT_VERSION = read_version()
