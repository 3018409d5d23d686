"""
High-score records, kept as a small JSON document.

Records are grouped by key: the mode name for human sessions and
"<mode>_ai" for AI sessions. Each group keeps its best 10 entries, sorted
descending for score and lines and ascending for time.
"""

from __future__ import annotations

import json
import logging
import pathlib
from typing import Any

logger = logging.getLogger(__name__)

MAX_RECORDS_PER_KEY = 10

# Record field per mode, and whether larger values rank higher.
METRIC_FIELDS: dict[str, str] = {
    "normal": "score",
    "sprint1m": "lines",
    "time10": "time",
    "time20": "time",
    "time40": "time",
    "time100": "time",
}


def record_key(mode: str, is_ai: bool) -> str:
    return f"{mode}_ai" if is_ai else mode


def format_time(milliseconds: int | float) -> str:
    """Format milliseconds as mm:ss.mmm."""
    total_ms = int(milliseconds)
    minutes, rest = divmod(total_ms, 60_000)
    seconds, ms = divmod(rest, 1000)
    return f"{minutes:02d}:{seconds:02d}.{ms:03d}"


def format_metric(record: dict[str, Any]) -> str:
    field = METRIC_FIELDS.get(record.get("mode", ""))
    if field == "score":
        return f"{record['score']:,} pts"
    if field == "lines":
        return f"{record['lines']} lines"
    if field == "time":
        return format_time(record["time"])
    return "-"


class RecordStore:
    """JSON-backed leaderboard.

    Attributes:
        path: Location of the JSON file.
        records: Mapping of record key -> ranked list of record dicts.
    """

    def __init__(self, path: str | pathlib.Path, limit: int = MAX_RECORDS_PER_KEY) -> None:
        self.path = pathlib.Path(path).expanduser()
        self.limit = limit
        self.records: dict[str, list[dict[str, Any]]] = self._load()

    def _load(self) -> dict[str, list[dict[str, Any]]]:
        """Read the file, dropping anything that is not a usable record.

        A missing file is an empty store. An unreadable or malformed file is
        also treated as empty, with a warning, so a bad file never blocks a
        session from ending.
        """
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable records file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring records file %s: expected an object", self.path)
            return {}

        records: dict[str, list[dict[str, Any]]] = {}
        for key, entries in data.items():
            if not isinstance(entries, list):
                continue
            valid = [e for e in entries if self._is_valid(e)]
            if len(valid) != len(entries):
                logger.warning("Skipped %d malformed records under %r", len(entries) - len(valid), key)
            records[key] = valid
        return records

    @staticmethod
    def _is_valid(entry: Any) -> bool:
        if not isinstance(entry, dict):
            return False
        field = METRIC_FIELDS.get(entry.get("mode"))
        return field is not None and isinstance(entry.get(field), (int, float))

    def save(self) -> bool:
        """Write the store to disk.

        Returns:
            False if the file could not be written; the in-memory records
            are kept either way.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.records, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not write records file %s: %s", self.path, e)
            return False
        return True

    def add(self, record: dict[str, Any]) -> int | None:
        """Insert a record, re-rank its group, truncate, and persist.

        Args:
            record: Dict with "mode", "is_ai", "date" and the mode's metric.

        Returns:
            The 1-based rank of the new record, or None if it fell off the
            end of the leaderboard.
        """
        mode = record["mode"]
        field = METRIC_FIELDS[mode]
        key = record_key(mode, bool(record.get("is_ai")))

        entries = self.records.setdefault(key, [])
        entries.append(record)
        entries.sort(key=lambda r: r[field], reverse=(field != "time"))
        del entries[self.limit:]
        self.save()

        rank = next((i + 1 for i, r in enumerate(entries) if r is record), None)
        logger.info("Recorded %s=%s for %s (rank %s)", field, record[field], key, rank)
        return rank

    def top(self, mode: str, is_ai: bool = False) -> list[dict[str, Any]]:
        return list(self.records.get(record_key(mode, is_ai), []))

    def best(self, mode: str, is_ai: bool = False) -> dict[str, Any] | None:
        entries = self.records.get(record_key(mode, is_ai))
        return entries[0] if entries else None
