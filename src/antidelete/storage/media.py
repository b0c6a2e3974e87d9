"""On-disk storage for recovered media files."""

from __future__ import annotations

import re
import time
from pathlib import Path

_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def safe_sender(sender: str) -> str:
    return _UNSAFE.sub("_", str(sender))


class MediaStore:
    """Writes media blobs as ``<epoch_ms>_<sender>.<ext>`` under ``directory``."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, sender: str, ext: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        stem = f"{int(time.time() * 1000)}_{safe_sender(sender)}"
        path = self.directory / f"{stem}.{ext}"
        # Two recoveries from one sender can land in the same millisecond.
        n = 1
        while path.exists():
            path = self.directory / f"{stem}_{n}.{ext}"
            n += 1
        return path

    def save(self, data: bytes, sender: str, ext: str) -> str:
        """Write ``data`` and return the file path."""
        path = self._path(sender, ext)
        path.write_bytes(data)
        return str(path)
