"""Caller-owned trade notes that override generated annotations.

The analytics core never writes notes. It only accepts a lookup callable
(trade id -> note or None) when building export rows.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Protocol

import structlog

from src.shell.contract import Trade

log = structlog.get_logger()

NOTES_STORAGE_KEY = "dashboard.notes.v1"

NoteLookup = Callable[[str], "str | None"]


class NoteStore(Protocol):
    def get(self, trade_id: str) -> str | None: ...

    def set(self, trade_id: str, text: str) -> None: ...

    def delete(self, trade_id: str) -> None: ...

    def lookup(self) -> NoteLookup: ...


class InMemoryNoteStore:
    """Dict-backed store. Setting blank text removes the note."""

    def __init__(self, notes: dict[str, str] | None = None) -> None:
        self._notes: dict[str, str] = dict(notes or {})

    def get(self, trade_id: str) -> str | None:
        return self._notes.get(trade_id)

    def set(self, trade_id: str, text: str) -> None:
        trimmed = text.strip()
        if not trimmed:
            self.delete(trade_id)
            return
        self._notes[trade_id] = trimmed

    def delete(self, trade_id: str) -> None:
        self._notes.pop(trade_id, None)

    def lookup(self) -> NoteLookup:
        return self.get

    def as_dict(self) -> dict[str, str]:
        return dict(self._notes)


class JsonFileNoteStore(InMemoryNoteStore):
    """Local key-value file: {"dashboard.notes.v1": {trade_id: note}}.

    A missing or unreadable file starts an empty store. Every change is
    written straight back.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        super().__init__(self._load())

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text())
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            log.warning("notes.load_failed", path=str(self._path), error=str(e))
            return {}
        notes = data.get(NOTES_STORAGE_KEY, {}) if isinstance(data, dict) else {}
        if not isinstance(notes, dict):
            log.warning("notes.load_failed", path=str(self._path), error="notes entry is not an object")
            return {}
        return {str(k): str(v) for k, v in notes.items()}

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps({NOTES_STORAGE_KEY: self._notes}, indent=2, sort_keys=True))

    def set(self, trade_id: str, text: str) -> None:
        super().set(trade_id, text)
        self._save()

    def delete(self, trade_id: str) -> None:
        super().delete(trade_id)
        self._save()


def resolve_note(trade: Trade, lookup: NoteLookup | None = None) -> str:
    """Caller override if present, otherwise the trade's own annotation."""
    if lookup is not None:
        override = lookup(trade.id)
        if override is not None:
            return override
    return trade.annotation
