"""Key-addressed blob storage for records, settings and schedules."""

from __future__ import annotations

import logging
import os
import re
import tempfile
import threading
from pathlib import Path

from .errors import StorageError

logger = logging.getLogger(__name__)
SAFE_KEY_RE = re.compile(r"^[A-Za-z0-9._-]+$")


def _atomic_write_text(file_path: Path, content: str) -> None:
    """Write text to a temp file and atomically replace destination."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=file_path.parent,
        delete=False,
        prefix=f".{file_path.name}.",
        suffix=".tmp",
        newline="",
    ) as handle:
        handle.write(content)
        handle.flush()
        os.fsync(handle.fileno())
        temp_path = Path(handle.name)
    temp_path.replace(file_path)


class FileBlobStore:
    """Blob store backed by one flat directory.

    Keys are bare filenames (``match12.csv``); anything that could escape the
    directory is rejected.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self._write_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"FileBlobStore({str(self.root)!r})"

    def _resolve(self, key: str) -> Path:
        name = str(key or "").strip()
        if not name or not SAFE_KEY_RE.match(name) or name in {".", ".."}:
            raise StorageError(str(key), "invalid blob key")
        return self.root / name

    def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    def read(self, key: str) -> str:
        """Return the text stored under ``key``.

        Raises:
            StorageError: If the blob is missing or unreadable.
        """
        path = self._resolve(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise StorageError(key, "no such blob") from exc
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("[Storage] Failed reading %s: %s", path, exc)
            raise StorageError(key, str(exc)) from exc

    def write(self, key: str, text: str) -> None:
        path = self._resolve(key)
        with self._write_lock:
            try:
                _atomic_write_text(path, text)
            except OSError as exc:
                logger.error("[Storage] Failed writing %s: %s", path, exc)
                raise StorageError(key, str(exc)) from exc
        logger.debug("[Storage] Wrote %s (%s chars)", key, len(text))

    def list(self, prefix: str = "") -> list[str]:
        """Return sorted keys starting with ``prefix``."""
        if not self.root.exists():
            return []
        return sorted(
            item.name
            for item in self.root.iterdir()
            if item.is_file()
            and item.name.startswith(prefix)
            and not item.name.startswith(".")
        )

    def delete(self, key: str) -> bool:
        """Delete a blob; return False when it did not exist."""
        path = self._resolve(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("[Storage] Failed deleting %s: %s", path, exc)
            raise StorageError(key, str(exc)) from exc
        return True
