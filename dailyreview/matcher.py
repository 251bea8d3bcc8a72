"""
Criteria matching: does a single note qualify for review?

Each criterion is its own predicate. is_candidate() runs the cheap
path and date checks first and only reads note content when a tag
filter is active.
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from .repository import NoteRepository
from .tags import extract_tags
from .types import Note, ReviewSettings, TimeRange, normalize_folder_path

logger = logging.getLogger(__name__)

_ISO_DATE_TITLE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


# -----------------------------------------------------------------------------
# Folders
# -----------------------------------------------------------------------------

def in_folder_list(path: str, folders: Iterable[str]) -> bool:
    """
    True if path is one of the folders or lies inside one of them.

    Matching is by whole path segment: folder "Notes" matches
    "Notes/a.md" but not "Notes2/a.md".
    """
    normalized = normalize_folder_path(path)
    for folder in folders:
        folder_path = normalize_folder_path(folder)
        if not folder_path:
            continue
        if normalized == folder_path or normalized.startswith(folder_path + "/"):
            return True
    return False


def is_included_folder(note: Note, settings: ReviewSettings) -> bool:
    """Empty include list admits everything."""
    if not settings.include_folders:
        return True
    if settings.include_subfolders:
        return in_folder_list(note.path, settings.include_folders)
    parent = normalize_folder_path(note.folder)
    return any(parent == normalize_folder_path(f) for f in settings.include_folders)


def is_excluded_folder(note: Note, settings: ReviewSettings) -> bool:
    return in_folder_list(note.path, settings.exclude_folders)


# -----------------------------------------------------------------------------
# Dates
# -----------------------------------------------------------------------------

def effective_day(note: Note) -> date:
    """
    The calendar day a note belongs to.

    A note titled like an ISO date (2026-01-15.md) belongs to that day;
    otherwise its last-modified time in local time, truncated to the day.
    """
    match = _ISO_DATE_TITLE_RE.match(note.title)
    if match:
        year, month, day = (int(g) for g in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            pass
    return datetime.fromtimestamp(note.mtime).date()


def window_cutoff(today: date, days: int) -> date:
    """First day of a trailing window of `days` days ending today."""
    return today - timedelta(days=max(1, days) - 1)


def is_recent(note: Note, settings: ReviewSettings, today: date) -> bool:
    """True if the note falls within the last recent_days days (today counts as one)."""
    return effective_day(note) >= window_cutoff(today, settings.recent_days)


def in_time_range(note: Note, settings: ReviewSettings, today: date) -> bool:
    """True if the note falls within the time-range bucket. ALL disables the check."""
    days = TimeRange(settings.time_range).days
    if days is None:
        return True
    return effective_day(note) >= window_cutoff(today, days)


# -----------------------------------------------------------------------------
# Tags
# -----------------------------------------------------------------------------

def passes_tag_filters(tags: Iterable[str], settings: ReviewSettings) -> bool:
    """
    Exclude tags disqualify; a non-empty include list needs at least one hit.

    Comparison is case-insensitive.
    """
    folded = {t.casefold() for t in tags}
    if any(t.casefold() in folded for t in settings.exclude_tags):
        return False
    if settings.include_tags:
        return any(t.casefold() in folded for t in settings.include_tags)
    return True


def note_tags(note: Note, repository: NoteRepository) -> Optional[set[str]]:
    """Read and extract a note's tags. Returns None if the note can't be read."""
    try:
        return extract_tags(repository.read(note))
    except OSError as e:
        logger.warning("Could not read %s for tag filtering: %s", note.path, e)
        return None


def matches_tags(note: Note, settings: ReviewSettings, repository: NoteRepository) -> bool:
    """Tag predicate for one note. Reads content only when a tag filter is set."""
    if not settings.has_tag_filters:
        return True
    tags = note_tags(note, repository)
    if tags is None:
        return False
    return passes_tag_filters(tags, settings)


# -----------------------------------------------------------------------------
# Combined
# -----------------------------------------------------------------------------

def is_structural_candidate(note: Note, settings: ReviewSettings, today: date) -> bool:
    """Folder and time-range checks only; never reads content."""
    return (
        is_included_folder(note, settings)
        and not is_excluded_folder(note, settings)
        and in_time_range(note, settings, today)
    )


def is_candidate(
    note: Note,
    settings: ReviewSettings,
    repository: NoteRepository,
    today: date,
) -> bool:
    """Full check: structural predicates first, then the tag predicate."""
    if not is_structural_candidate(note, settings, today):
        return False
    return matches_tags(note, settings, repository)
