"""
Core API for daily review.

DailyReview ties the pieces together:
- start_review(): reuse today's session or select a new one
- advance() / mark_current_done(): move through the session
- load_current(): read the current note for display

Progress is written to the state file as it happens, so a review can be
picked up again later the same day.
"""

import logging
import random
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union

from .config import ReviewConfig
from .folders import suggest_folders
from .logging_config import configure_ops_log
from .navigator import COMPLETE, NoteView, ReviewNavigator, Signal
from .repository import NoteRepository, VaultRepository
from .session import SessionManager, config_fingerprint, session_status
from .tags import extract_tags
from .types import Note, ReviewSettings, Session, day_key

logger = logging.getLogger(__name__)


class DailyReview:
    """
    Review controller for one vault.

    Settings are passed explicitly or read from the state file; nothing
    is held in module-level state.
    """

    def __init__(
        self,
        vault: Optional[Path] = None,
        state_dir: Optional[Path] = None,
        repository: Optional[NoteRepository] = None,
        today: Optional[date] = None,
        rng: Optional[random.Random] = None,
        ops_log: bool = True,
    ):
        """
        Args:
            vault: Directory of markdown notes (default: DAILY_REVIEW_VAULT or cwd)
            state_dir: Where the state file lives (default: <vault>/.daily-review)
            repository: Note source; defaults to the vault on disk
            today: Fixed reference day; defaults to the local date at each call
            rng: Random source for shuffle mode
            ops_log: Attach the rotating operations log in the state directory
        """
        self.config = ReviewConfig.resolve(vault, state_dir)
        self.repository = repository or VaultRepository(
            self.config.vault, ignore=[self.config.state_dir],
        )
        self._today = today
        self._rng = rng
        self._sessions = SessionManager(self.config.state_path, self.repository)
        self._navigator: Optional[ReviewNavigator] = None
        self._ops_handler = configure_ops_log(self.config.state_dir) if ops_log else None

    def close(self) -> None:
        """Detach the operations log handler."""
        if self._ops_handler is not None:
            logging.getLogger("dailyreview").removeHandler(self._ops_handler)
            self._ops_handler.close()
            self._ops_handler = None

    def __enter__(self) -> "DailyReview":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def today(self) -> date:
        return self._today or date.today()

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> ReviewSettings:
        return self._sessions.settings

    def update_settings(self, **changes: Any) -> ReviewSettings:
        """
        Change and persist settings. Values are normalized.

        Example:
            review.update_settings(review_count=5, exclude_folders=["Archive"])
        """
        settings = replace(self.settings, **changes).normalized()
        self._navigator = None
        return self._sessions.update_settings(settings)

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    @property
    def session(self) -> Optional[Session]:
        return self._sessions.session

    def session_status(self, settings: Optional[ReviewSettings] = None) -> str:
        """'absent', 'valid' or 'stale' for the stored session."""
        settings = (settings or self.settings).normalized()
        status = session_status(
            self.session, day_key(self.today), config_fingerprint(settings),
        )
        return status.value

    def start_review(self, settings: Optional[ReviewSettings] = None) -> list[Note]:
        """
        Open today's review.

        Reuses the stored session when it is still valid, otherwise
        selects a new set. Returns the ordered notes; an empty list means
        nothing matched and no session was created.
        """
        settings = (settings or self.settings).normalized()
        session = self._sessions.ensure_session(settings, self.today, rng=self._rng)
        if session is None:
            self._navigator = None
            return []

        notes = [n for n in (self.repository.get(p) for p in session.note_paths) if n is not None]
        self._navigator = ReviewNavigator(
            notes,
            current_path=session.current_note_path,
            done_paths=session.done_paths,
        )
        current = self._navigator.current
        if isinstance(current, Note):
            self.persist_position(current.path)
        return notes

    def reset(self) -> None:
        """Discard today's session; the next start selects again."""
        self._sessions.clear()
        self._navigator = None

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    @property
    def navigator(self) -> ReviewNavigator:
        if self._navigator is None:
            raise ValueError("No review in progress; call start_review() first")
        return self._navigator

    @property
    def current(self) -> Union[Note, Signal]:
        return self.navigator.current

    def advance(self, direction: int = 1) -> Union[Note, Signal]:
        """Move to the next (direction >= 0) or previous open note."""
        result = self.navigator.advance(direction)
        if isinstance(result, Note):
            self.persist_position(result.path)
        return result

    def mark_current_done(self) -> Union[Note, Signal]:
        """Mark the current note reviewed and move on. Returns COMPLETE when none are left."""
        current = self.navigator.current
        if current is COMPLETE:
            return COMPLETE
        self._sessions.mark_done(current.path)
        result = self.navigator.mark_current_done()
        if isinstance(result, Note):
            self.persist_position(result.path)
        else:
            logger.info("Review complete for %s", day_key(self.today))
        return result

    def persist_position(self, path: str) -> None:
        self._sessions.update_position(path)

    async def load_current(self) -> Union[NoteView, Signal, None]:
        """Read the current note. None means the reader moved on meanwhile."""
        return await self.navigator.load_current(self.repository)

    # -------------------------------------------------------------------------
    # Helpers for the presentation layer
    # -------------------------------------------------------------------------

    def note_tags(self, path: str) -> set[str]:
        """
        Tags of a single note.

        Raises:
            ValueError: If the note doesn't exist
            OSError: If it can't be read
        """
        note = self.repository.get(path)
        if note is None:
            raise ValueError(f"Note not found: {path}")
        return extract_tags(self.repository.read(note))

    def folder_suggestions(self, query: str) -> list[str]:
        return suggest_folders(query, self.repository.list_folders())
