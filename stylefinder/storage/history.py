"""Append-only JSON-lines log of searches, keyed by user and timestamp."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class SearchRecord:
    """One stored search."""

    user_id: str
    occasion: str
    season: str
    formality: str
    specific_needs: str
    preferences: dict[str, Any] = field(default_factory=dict)
    terms: list[str] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class SearchHistory:
    """Appends search records to a single JSON-lines file."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def append(self, record: SearchRecord) -> None:
        """Write ``record`` as one line at the end of the log."""

        line = json.dumps(asdict(record), ensure_ascii=False)
        async with self._lock:
            await asyncio.to_thread(self._append_line, self._path, line)

    async def read(self, user_id: str) -> list[SearchRecord]:
        """Return all records stored for ``user_id``, oldest first."""

        async with self._lock:
            if not self._path.exists():
                return []
            data = await asyncio.to_thread(self._path.read_text, encoding="utf-8")

        records: list[SearchRecord] = []
        for line in data.splitlines():
            if not line.strip():
                continue
            payload = json.loads(line)
            if payload.get("user_id") == user_id:
                records.append(SearchRecord(**payload))
        return records

    @staticmethod
    def _append_line(path: Path, line: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")
