"""
Shared pytest fixtures for daily-review tests.

Provides an in-memory note repository (no filesystem, read counting)
and helpers for building dated notes in a temporary vault.
"""

import asyncio
import os
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Optional

import pytest

from dailyreview.types import Note

TODAY = date(2026, 3, 15)


def mtime_for(days_ago: int, today: date = TODAY) -> float:
    """Local-noon timestamp `days_ago` days before today."""
    return datetime.combine(today - timedelta(days=days_ago), time(12, 0)).timestamp()


class MemoryRepository:
    """
    In-memory note repository for testing.

    Records every content read so tests can check that content is only
    read when needed. Notes flagged unreadable raise OSError on read.
    Setting `gate` to an asyncio.Event holds read_async() until it is set.
    """

    def __init__(self):
        self._notes: dict[str, tuple[float, str, bool]] = {}
        self.reads: list[str] = []
        self.gate: Optional[asyncio.Event] = None

    def add(self, path: str, text: str = "", days_ago: int = 0, unreadable: bool = False) -> Note:
        mtime = mtime_for(days_ago)
        self._notes[path] = (mtime, text, unreadable)
        return Note(path, mtime=mtime)

    def remove(self, path: str) -> None:
        del self._notes[path]

    def list_notes(self) -> list[Note]:
        return [Note(p, mtime=m) for p, (m, _, _) in self._notes.items()]

    def get(self, path: str) -> Optional[Note]:
        if path not in self._notes:
            return None
        return Note(path, mtime=self._notes[path][0])

    def exists(self, path: str) -> bool:
        return path in self._notes

    def read(self, note: Note) -> str:
        self.reads.append(note.path)
        if note.path not in self._notes:
            raise FileNotFoundError(note.path)
        _, text, unreadable = self._notes[note.path]
        if unreadable:
            raise PermissionError(f"Cannot read {note.path}")
        return text

    async def read_async(self, note: Note) -> str:
        if self.gate is not None:
            await self.gate.wait()
        return self.read(note)

    def last_modified(self, note: Note) -> float:
        return self._notes[note.path][0]

    def list_folders(self) -> list[str]:
        folders = set()
        for path in self._notes:
            parts = path.split("/")[:-1]
            for i in range(1, len(parts) + 1):
                folders.add("/".join(parts[:i]))
        return sorted(folders)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def repo():
    """Create a fresh, empty MemoryRepository."""
    return MemoryRepository()


@pytest.fixture
def vault(tmp_path):
    """An empty vault directory on disk."""
    path = tmp_path / "vault"
    path.mkdir()
    return path


def write_note(vault: Path, rel: str, text: str = "", days_ago: int = 0) -> Path:
    """Write a note into a vault and set its modification time."""
    path = vault / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    ts = mtime_for(days_ago)
    os.utime(path, (ts, ts))
    return path
