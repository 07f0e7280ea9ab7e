from __future__ import annotations

import logging
import os
from pathlib import Path

LOGGER = logging.getLogger(__name__)


class FileStore:
    """Whole-file access to the externally observable device state.

    Writes are plain overwrites; a crash mid-write may leave a truncated
    file behind.
    """

    def __init__(self, mode: int = 0o644) -> None:
        self._mode = mode

    def read(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def read_text(self, path: Path) -> str:
        return self.read(path).decode("utf-8", errors="replace")

    def write(self, path: Path, data: bytes) -> None:
        fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self._mode)
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        LOGGER.debug("Wrote %d bytes to %s", len(data), path)

    def stat_mtime(self, path: Path) -> int:
        """Modification time in nanoseconds."""
        return os.stat(str(path)).st_mtime_ns
