"""
Choosing and ordering the notes of a review session.

Two strategies, picked by ReviewSettings.selection_mode:

DAILY
    Each candidate is ordered by a 32-bit FNV-1a hash of
    "<day key>:<path>", ties broken by path. The same day, vault and
    settings always give the same list, so a lost session can be
    rebuilt exactly. Recent notes fill the session first; older notes
    only top it up.

SHUFFLE
    Candidates that pass the folder/date checks are shuffled, and tag
    filters are evaluated over a buffer of twice the review count. This
    bounds the number of content reads when tag filters are sparse, at
    the cost of sometimes returning fewer notes than requested.
"""

import logging
import random
from datetime import date
from itertools import chain
from typing import Iterable, Optional

from .matcher import is_recent, is_structural_candidate, matches_tags
from .repository import NoteRepository
from .types import Note, ReviewSettings, SelectionMode

logger = logging.getLogger(__name__)

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619

# Shuffle mode evaluates tag filters over this many candidates per requested note
SHUFFLE_BUFFER_FACTOR = 2


def hash_with_seed(seed: str, value: str) -> int:
    """
    32-bit FNV-1a hash of "seed:value".

    Hashes UTF-16 code units, so paths outside the BMP hash the same
    way they would in a JavaScript host sharing the vault.
    """
    data = f"{seed}:{value}".encode("utf-16-le")
    h = FNV_OFFSET_BASIS
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return h


def sort_by_daily_seed(notes: Iterable[Note], day_key: str) -> list[Note]:
    """Order notes by seeded hash ascending, then by path."""
    return sorted(notes, key=lambda n: (hash_with_seed(day_key, n.path), n.path))


def _take_matching(
    ordered: Iterable[Note],
    settings: ReviewSettings,
    repository: NoteRepository,
    limit: int,
) -> list[Note]:
    selected: list[Note] = []
    for note in ordered:
        if len(selected) >= limit:
            break
        if matches_tags(note, settings, repository):
            selected.append(note)
    return selected


def select_daily(
    notes: Iterable[Note],
    settings: ReviewSettings,
    day_key: str,
    repository: NoteRepository,
    today: date,
) -> list[Note]:
    """Seeded order with recent notes first."""
    candidates = [n for n in notes if is_structural_candidate(n, settings, today)]
    ordered = sort_by_daily_seed(candidates, day_key)

    recent = [n for n in ordered if is_recent(n, settings, today)]
    older = [n for n in ordered if not is_recent(n, settings, today)]
    logger.debug(
        "Daily selection for %s: %d candidates (%d recent, %d older)",
        day_key, len(ordered), len(recent), len(older),
    )
    return _take_matching(chain(recent, older), settings, repository, settings.review_count)


def select_shuffled(
    notes: Iterable[Note],
    settings: ReviewSettings,
    repository: NoteRepository,
    today: date,
    rng: Optional[random.Random] = None,
) -> list[Note]:
    """Random order, tag filters checked against a bounded buffer."""
    rng = rng or random.Random()
    candidates = [n for n in notes if is_structural_candidate(n, settings, today)]
    rng.shuffle(candidates)
    buffer = candidates[:SHUFFLE_BUFFER_FACTOR * settings.review_count]
    selected = _take_matching(buffer, settings, repository, settings.review_count)
    if len(selected) < settings.review_count and len(candidates) > len(buffer):
        logger.info(
            "Shuffle buffer exhausted: %d of %d notes matched tag filters",
            len(selected), settings.review_count,
        )
    return selected


def select_for_review(
    notes: Iterable[Note],
    settings: ReviewSettings,
    day_key: str,
    repository: NoteRepository,
    today: date,
    rng: Optional[random.Random] = None,
) -> list[Note]:
    """
    Choose at most settings.review_count notes for a session.

    Args:
        notes: Every note in the repository
        settings: Normalized review settings
        day_key: Calendar-day key (YYYY-MM-DD) seeding the daily order
        repository: Used to read content when tag filters are active
        today: Reference day for date checks
        rng: Random source for shuffle mode

    Returns:
        Ordered list of selected notes
    """
    if SelectionMode(settings.selection_mode) is SelectionMode.SHUFFLE:
        return select_shuffled(notes, settings, repository, today, rng=rng)
    return select_daily(notes, settings, day_key, repository, today)
