"""
Daily review: a stable, resumable daily selection of notes to revisit.

Quick start:
    from dailyreview import DailyReview

    review = DailyReview(vault="~/notes")
    notes = review.start_review()
    review.advance(1)
"""

from .api import DailyReview
from .navigator import COMPLETE, NoteView, ReviewNavigator
from .repository import NoteRepository, VaultRepository
from .sampler import select_for_review
from .session import SessionManager, config_fingerprint, is_valid_session_for_today
from .tags import extract_tags
from .types import Note, ReviewSettings, SelectionMode, Session, TimeRange

__version__ = "0.1.0"
__all__ = [
    "COMPLETE",
    "DailyReview",
    "Note",
    "NoteRepository",
    "NoteView",
    "ReviewNavigator",
    "ReviewSettings",
    "SelectionMode",
    "Session",
    "SessionManager",
    "TimeRange",
    "VaultRepository",
    "config_fingerprint",
    "extract_tags",
    "is_valid_session_for_today",
    "select_for_review",
]
