"""
Walking through a review session.

The navigator holds its own copy of the session's note list and an
index into it. Navigation wraps around and skips notes marked done.
Once every note is done the review is COMPLETE and stays that way.

Content reads are asynchronous. Each read is stamped with the index it
was issued for; if the reader has moved on by the time it finishes,
the result is dropped rather than shown.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Union

from .repository import NoteRepository
from .tags import extract_tags
from .types import Note

logger = logging.getLogger(__name__)

CONTENT_UNAVAILABLE = "Failed to load note content."


class Signal(Enum):
    COMPLETE = "complete"


COMPLETE = Signal.COMPLETE


@dataclass
class NoteView:
    """What the presentation layer needs to show one note."""
    note: Note
    position: int  # 1-based
    total: int
    content: str
    tags: list[str] = field(default_factory=list)
    available: bool = True
    done: bool = False


class ReviewNavigator:
    """Cursor over an ordered list of notes with optional done-tracking."""

    def __init__(
        self,
        notes: Iterable[Note],
        current_path: Optional[str] = None,
        done_paths: Iterable[str] = (),
    ):
        self._notes: list[Note] = list(notes)
        self._done: set[str] = {p for p in done_paths if any(n.path == p for n in self._notes)}
        self.index = 0
        if current_path is not None:
            for i, note in enumerate(self._notes):
                if note.path == current_path:
                    self.index = i
                    break
        if not self.is_complete and self._notes[self.index].path in self._done:
            self.next()

    @property
    def notes(self) -> list[Note]:
        return list(self._notes)

    @property
    def total(self) -> int:
        return len(self._notes)

    @property
    def done_paths(self) -> list[str]:
        return [n.path for n in self._notes if n.path in self._done]

    @property
    def remaining(self) -> int:
        return sum(1 for n in self._notes if n.path not in self._done)

    @property
    def is_complete(self) -> bool:
        return self.remaining == 0

    @property
    def current(self) -> Union[Note, Signal]:
        if self.is_complete:
            return COMPLETE
        return self._notes[self.index]

    def is_done(self, note: Note) -> bool:
        return note.path in self._done

    # -------------------------------------------------------------------------
    # Movement
    # -------------------------------------------------------------------------

    def _step(self, delta: int) -> Union[Note, Signal]:
        if self.is_complete:
            return COMPLETE
        n = len(self._notes)
        i = self.index
        # At most n steps: the scan ends back on the start if nothing else is open
        for _ in range(n):
            i = (i + delta) % n
            if self._notes[i].path not in self._done:
                self.index = i
                return self._notes[i]
        return COMPLETE

    def next(self) -> Union[Note, Signal]:
        return self._step(1)

    def previous(self) -> Union[Note, Signal]:
        return self._step(-1)

    def advance(self, direction: int) -> Union[Note, Signal]:
        """Move forward for a positive direction, backward otherwise."""
        return self.next() if direction >= 0 else self.previous()

    def mark_current_done(self) -> Union[Note, Signal]:
        """Mark the current note done and move to the next open one."""
        if self.is_complete:
            return COMPLETE
        self._done.add(self._notes[self.index].path)
        return self.next()

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def begin_read(self) -> int:
        """Stamp a content read with the index it is for."""
        return self.index

    def is_stale(self, stamp: int) -> bool:
        """True if the reader moved away since the read was stamped."""
        return stamp != self.index

    async def load_current(self, repository: NoteRepository) -> Union[NoteView, Signal, None]:
        """
        Read the current note for display.

        Returns:
            NoteView, COMPLETE when nothing is left, or None if the
            reader navigated away while the read was in flight
        """
        current = self.current
        if current is COMPLETE:
            return COMPLETE
        stamp = self.begin_read()
        try:
            content = await repository.read_async(current)
            available = True
        except OSError as e:
            logger.warning("Failed to read note %s: %s", current.path, e)
            content = CONTENT_UNAVAILABLE
            available = False

        if self.is_stale(stamp):
            logger.debug("Dropping stale read of %s", current.path)
            return None

        return NoteView(
            note=current,
            position=stamp + 1,
            total=self.total,
            content=content,
            tags=sorted(extract_tags(content)) if available else [],
            available=available,
            done=self.is_done(current),
        )
