"""Storage abstraction for player stats and finished-game history.

Both documents are JSON lists stored under a data directory. Files are
written atomically with owner-only permissions (0o600) inside an
owner-only directory (0o700). Reads never raise for bad content: a
missing file is an empty list, and an unreadable or malformed file is
logged and treated as empty so a corrupt file cannot take the session
down.
"""

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

import structlog

logger = structlog.get_logger()

# Owner-only directory permissions for the data directory.
_DATA_DIR_MODE = 0o700

# Owner-only file permissions for data files.
_DATA_FILE_MODE = 0o600

STATS_FILENAME = "player_stats.json"
HISTORY_FILENAME = "game_history.json"

JsonRecords = list[dict[str, Any]]


class StatsStorage(Protocol):
    """Protocol for persisting aggregate player stats and game history."""

    def load_stats(self) -> JsonRecords: ...

    def save_stats(self, records: JsonRecords) -> None: ...

    def load_history(self) -> JsonRecords: ...

    def save_history(self, records: JsonRecords) -> None: ...


class LocalStatsStorage:
    """Reads and writes stats and history as JSON files on the local filesystem."""

    def __init__(self, data_dir: str) -> None:
        self._data_dir = Path(data_dir).resolve()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def load_stats(self) -> JsonRecords:
        return self._read_records(STATS_FILENAME)

    def save_stats(self, records: JsonRecords) -> None:
        self._write_records(STATS_FILENAME, records)

    def load_history(self) -> JsonRecords:
        return self._read_records(HISTORY_FILENAME)

    def save_history(self, records: JsonRecords) -> None:
        self._write_records(HISTORY_FILENAME, records)

    def _read_records(self, filename: str) -> JsonRecords:
        path = self._data_dir / filename
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.exception("failed to read storage file, using empty data", path=str(path))
            return []
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            logger.error("malformed storage file, using empty data", path=str(path))
            return []
        return data

    def _write_records(self, filename: str, records: JsonRecords) -> None:
        """Write records atomically via temp-file-then-rename.

        Creates the data directory lazily on first write.
        """
        target = self._data_dir / filename
        self._data_dir.mkdir(mode=_DATA_DIR_MODE, parents=True, exist_ok=True)
        self._data_dir.chmod(_DATA_DIR_MODE)

        content = json.dumps(records, ensure_ascii=False, indent=2).encode("utf-8")

        fd, tmp_path = tempfile.mkstemp(dir=str(self._data_dir), suffix=".tmp", prefix=f".{target.stem}_")
        fd_owned = True
        try:
            with os.fdopen(fd, "wb") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _DATA_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(target)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
        logger.info("saved storage file", path=str(target), records=len(records))


class InMemoryStatsStorage:
    """Keeps stats and history in memory. Used for ephemeral sessions and tests."""

    def __init__(self, stats: JsonRecords | None = None, history: JsonRecords | None = None) -> None:
        self._stats: JsonRecords = list(stats or [])
        self._history: JsonRecords = list(history or [])

    def load_stats(self) -> JsonRecords:
        return list(self._stats)

    def save_stats(self, records: JsonRecords) -> None:
        self._stats = list(records)

    def load_history(self) -> JsonRecords:
        return list(self._history)

    def save_history(self, records: JsonRecords) -> None:
        self._history = list(records)
