"""
Note repositories: where notes come from and how their content is read.

The selection core only talks to the NoteRepository protocol, so tests
and other hosts can supply their own implementation.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Protocol, runtime_checkable

from .types import Note

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"


@runtime_checkable
class NoteRepository(Protocol):
    """
    Source of notes for review.

    Example implementation:
        class ListRepository:
            def list_notes(self):
                return [Note("a.md", mtime=0.0)]

            def read(self, note):
                return "# A"
    """

    def list_notes(self) -> list[Note]:
        """All notes, in no guaranteed order."""
        ...

    def get(self, path: str) -> Optional[Note]:
        """Look up a note by path. Returns None if it no longer exists."""
        ...

    def exists(self, path: str) -> bool:
        ...

    def read(self, note: Note) -> str:
        """
        Read the full text of a note.

        Raises:
            OSError: If the note can't be read
        """
        ...

    async def read_async(self, note: Note) -> str:
        """Coroutine form of read(), used by the review navigator."""
        ...

    def last_modified(self, note: Note) -> float:
        ...

    def list_folders(self) -> list[str]:
        """All folder paths in the vault, sorted."""
        ...


def _is_hidden(parts: Iterable[str]) -> bool:
    return any(part.startswith(".") for part in parts)


class VaultRepository:
    """
    Markdown notes in a directory tree on the local filesystem.

    Paths are vault-relative with forward slashes. Hidden files and
    folders (names starting with '.') are skipped, which keeps the
    default state directory out of the review.
    """

    def __init__(self, root: Path, ignore: Iterable[Path] = ()):
        self.root = Path(root).expanduser().resolve()
        self._ignore = [Path(p).expanduser().resolve() for p in ignore]

    def _resolve(self, path: str) -> Path:
        resolved = (self.root / path).resolve()
        # Refuse paths that escape the vault
        resolved.relative_to(self.root)
        return resolved

    def _ignored(self, path: Path) -> bool:
        return any(path == p or p in path.parents for p in self._ignore)

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def list_notes(self) -> list[Note]:
        notes = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            current = Path(dirpath)
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith(".") and not self._ignored(current / d)
            )
            for name in sorted(filenames):
                if name.startswith(".") or not name.endswith(NOTE_SUFFIX):
                    continue
                full = current / name
                try:
                    mtime = full.stat().st_mtime
                except OSError as e:
                    logger.debug("Skipping unreadable note %s: %s", full, e)
                    continue
                notes.append(Note(self._relative(full), mtime=mtime))
        return notes

    def get(self, path: str) -> Optional[Note]:
        try:
            full = self._resolve(path)
            if not full.is_file() or _is_hidden(Path(path).parts):
                return None
            return Note(self._relative(full), mtime=full.stat().st_mtime)
        except (OSError, ValueError):
            return None

    def exists(self, path: str) -> bool:
        return self.get(path) is not None

    def read(self, note: Note) -> str:
        try:
            full = self._resolve(note.path)
        except ValueError:
            raise OSError(f"Note is outside the vault: {note.path}")
        try:
            return full.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise OSError(f"Note is not valid UTF-8: {note.path}") from e

    async def read_async(self, note: Note) -> str:
        return await asyncio.to_thread(self.read, note)

    def last_modified(self, note: Note) -> float:
        return self._resolve(note.path).stat().st_mtime

    def list_folders(self) -> list[str]:
        folders = []
        for dirpath, dirnames, _ in os.walk(self.root):
            current = Path(dirpath)
            dirnames[:] = [
                d for d in dirnames
                if not d.startswith(".") and not self._ignored(current / d)
            ]
            for d in dirnames:
                folders.append(self._relative(current / d))
        return sorted(folders)
