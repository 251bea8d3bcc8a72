"""
Session continuity: keep one day's review set stable and resumable.

A stored session is either valid for today or discarded whole. It is
never patched across a day change or a settings change. The only
in-place changes are position updates, done-marks, and repairs when
notes disappear from the vault.
"""

import json
import logging
import random
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .repository import NoteRepository
from .sampler import select_for_review
from .state import ReviewState, load_state, save_state
from .types import ReviewSettings, SelectionMode, Session, TimeRange, day_key

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    ABSENT = "absent"
    VALID = "valid"
    STALE = "stale"


def config_fingerprint(settings: ReviewSettings) -> str:
    """
    Deterministic serialization of the settings that affect selection.

    List order doesn't matter: lists are sorted before serializing.
    """
    s = settings.normalized()
    key: dict[str, Any] = {
        "reviewCount": s.review_count,
        "recentDays": s.recent_days,
        "timeRange": TimeRange(s.time_range).value,
        "includeFolders": sorted(s.include_folders),
        "excludeFolders": sorted(s.exclude_folders),
        "includeTags": sorted({t.casefold() for t in s.include_tags}),
        "excludeTags": sorted({t.casefold() for t in s.exclude_tags}),
        "includeSubfolders": s.include_subfolders,
        "selectionMode": SelectionMode(s.selection_mode).value,
    }
    return json.dumps(key, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def _well_formed_paths(paths: Any) -> bool:
    return (
        isinstance(paths, list)
        and len(paths) > 0
        and all(isinstance(p, str) and p for p in paths)
    )


def is_valid_session_for_today(
    session: Optional[Session],
    today_key: str,
    fingerprint: str,
) -> bool:
    """True only if the session is for today, matches the settings, and lists notes."""
    if session is None:
        return False
    if session.date != today_key:
        return False
    if session.config_key != fingerprint:
        return False
    return _well_formed_paths(session.note_paths)


def session_status(session: Optional[Session], today_key: str, fingerprint: str) -> SessionStatus:
    if session is None:
        return SessionStatus.ABSENT
    if is_valid_session_for_today(session, today_key, fingerprint):
        return SessionStatus.VALID
    return SessionStatus.STALE


class SessionManager:
    """
    Owns the persisted review state and the session lifecycle.

    Every change is written to the state file before the call returns.
    """

    def __init__(self, state_path: Path, repository: NoteRepository):
        """
        Args:
            state_path: Path to the TOML state file
            repository: Note source used for selection and repair
        """
        self.state_path = state_path
        self.repository = repository
        self.state: ReviewState = load_state(state_path)

    @property
    def settings(self) -> ReviewSettings:
        return self.state.settings

    @property
    def session(self) -> Optional[Session]:
        return self.state.session

    def save(self) -> None:
        save_state(self.state_path, self.state)

    def update_settings(self, settings: ReviewSettings) -> ReviewSettings:
        """Persist new settings. A now-mismatched session is discarded on next start."""
        self.state.settings = settings.normalized()
        self.save()
        return self.state.settings

    def clear(self) -> None:
        """Forget the current session."""
        self.state.session = None
        self.save()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def ensure_session(
        self,
        settings: ReviewSettings,
        today: date,
        rng: Optional[random.Random] = None,
    ) -> Optional[Session]:
        """
        Return today's session, creating or repairing it as needed.

        Returns None when no notes match the settings; no session is
        stored in that case.
        """
        settings = settings.normalized()
        today_key = day_key(today)
        fingerprint = config_fingerprint(settings)
        session = self.state.session

        status = session_status(session, today_key, fingerprint)
        if status is SessionStatus.VALID:
            repaired = self.repair(session)
            if repaired is not None:
                return repaired
            logger.info("All notes of today's session are gone; selecting again")
        elif status is SessionStatus.STALE:
            logger.info("Discarding stale session from %s", session.date)

        return self._create(settings, today, fingerprint, rng)

    def _create(
        self,
        settings: ReviewSettings,
        today: date,
        fingerprint: str,
        rng: Optional[random.Random],
    ) -> Optional[Session]:
        today_key = day_key(today)
        notes = select_for_review(
            self.repository.list_notes(), settings, today_key, self.repository, today, rng=rng,
        )
        if not notes:
            logger.info("No notes match the review criteria")
            if self.state.session is not None:
                self.clear()
            return None

        paths = [n.path for n in notes]
        self.state.session = Session(
            date=today_key,
            config_key=fingerprint,
            note_paths=paths,
            current_note_path=paths[0],
        )
        self.save()
        logger.info("Started review session for %s with %d notes", today_key, len(paths))
        return self.state.session

    def repair(self, session: Session) -> Optional[Session]:
        """
        Drop notes that no longer exist and re-anchor the position.

        The day and fingerprint stamp are kept. The state file is only
        rewritten if something changed. Returns None if no notes remain.
        """
        remaining = [p for p in session.note_paths if self.repository.exists(p)]
        if not remaining:
            return None

        current = session.current_note_path
        if current not in remaining:
            current = remaining[0]
        done = [p for p in session.done_paths if p in remaining]

        if (
            remaining == session.note_paths
            and current == session.current_note_path
            and done == session.done_paths
        ):
            return session

        dropped = len(session.note_paths) - len(remaining)
        if dropped:
            logger.info("Dropped %d missing notes from today's session", dropped)
        repaired = Session(
            date=session.date,
            config_key=session.config_key,
            note_paths=remaining,
            current_note_path=current,
            done_paths=done,
        )
        self.state.session = repaired
        self.save()
        return repaired

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def _require_member(self, path: str) -> Session:
        session = self.state.session
        if session is None:
            raise ValueError("No active review session")
        if path not in session.note_paths:
            raise ValueError(f"Note is not part of the current session: {path!r}")
        return session

    def update_position(self, path: str) -> None:
        """
        Record the note being reviewed.

        Raises:
            ValueError: If there is no session or path is not in it
        """
        session = self._require_member(path)
        if session.current_note_path == path:
            return
        session.current_note_path = path
        self.save()

    def mark_done(self, path: str) -> None:
        """
        Record a note as reviewed.

        Raises:
            ValueError: If there is no session or path is not in it
        """
        session = self._require_member(path)
        if path in session.done_paths:
            return
        session.done_paths.append(path)
        self.save()
