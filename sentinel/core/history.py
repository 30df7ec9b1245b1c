"""
Analysis history for Sentinel
Bounded, newest-first list of past analyses with optional JSON persistence
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from .model import HistoryEntry

DEFAULT_HISTORY_LIMIT = 10


class HistoryStore:
    """Keeps the last ``limit`` analyses; persists to ``path`` when one is given."""

    def __init__(self, path: Optional[str] = None, limit: int = DEFAULT_HISTORY_LIMIT):
        self.path = Path(path) if path else None
        self.limit = limit
        self.logger = logging.getLogger(__name__)
        self._entries: List[HistoryEntry] = self._load()

    def _load(self) -> List[HistoryEntry]:
        if not self.path or not self.path.exists():
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            return [HistoryEntry.from_dict(item) for item in raw][:self.limit]
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.logger.warning(f"Ignoring unreadable history file {self.path}: {e}")
            return []

    def _save(self) -> None:
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump([entry.to_dict() for entry in self._entries], f, indent=2, ensure_ascii=False)

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, entry: HistoryEntry) -> None:
        self._entries = ([entry] + self._entries)[:self.limit]
        self._save()

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        return next((entry for entry in self._entries if entry.id == entry_id), None)

    def clear(self) -> None:
        self._entries = []
        self._save()
