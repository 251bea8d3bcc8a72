"""
Data types for daily review.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Optional


DEFAULT_REVIEW_COUNT = 10
DEFAULT_RECENT_DAYS = 7


class TimeRange(str, Enum):
    """Named date buckets that restrict which notes may be selected."""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    ALL = "all"

    @property
    def days(self) -> Optional[int]:
        """Length of the bucket in days, or None for no restriction."""
        return _TIME_RANGE_DAYS[self]


_TIME_RANGE_DAYS = {
    TimeRange.TODAY: 1,
    TimeRange.WEEK: 7,
    TimeRange.MONTH: 30,
    TimeRange.QUARTER: 90,
    TimeRange.ALL: None,
}


class SelectionMode(str, Enum):
    """How candidates are ordered before the review count is applied."""
    DAILY = "daily"      # seeded by the calendar day, reproducible
    SHUFFLE = "shuffle"  # random, with a bounded tag-evaluation buffer


def day_key(day: date) -> str:
    """Calendar-day key used to seed ordering and stamp sessions: YYYY-MM-DD."""
    return day.isoformat()


def normalize_folder_path(path: str) -> str:
    """Normalize a vault folder path: forward slashes, no outer slashes or spaces."""
    return path.replace("\\", "/").strip().strip("/")


def normalize_tag(tag: str) -> str:
    """Trim a tag and make sure it carries exactly one leading '#'."""
    tag = tag.strip()
    if not tag:
        return ""
    return tag if tag.startswith("#") else f"#{tag}"


def _dedupe(values) -> list[str]:
    seen: set[str] = set()
    result = []
    for v in values:
        if v and v not in seen:
            seen.add(v)
            result.append(v)
    return result


def _coerce_count(value: Any, default: int) -> int:
    """Coerce a count setting to an int >= 1. Unparseable values use the default."""
    if isinstance(value, bool):
        return default
    try:
        num = int(value)
    except (TypeError, ValueError):
        return default
    return max(1, num)


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    try:
        return list(value)
    except TypeError:
        return []


@dataclass(frozen=True)
class Note:
    """
    A markdown note in the vault.

    The core only holds references; content is read on demand
    through the repository.

    Attributes:
        path: Vault-relative POSIX path, used as the note identifier
        mtime: Last-modified POSIX timestamp
    """
    path: str
    mtime: float = 0.0

    @property
    def title(self) -> str:
        """Basename without the extension."""
        name = self.path.rsplit("/", 1)[-1]
        if "." in name:
            name = name.rsplit(".", 1)[0]
        return name

    @property
    def folder(self) -> str:
        """Parent folder path, empty for notes at the vault root."""
        return self.path.rsplit("/", 1)[0] if "/" in self.path else ""


@dataclass(frozen=True)
class ReviewSettings:
    """
    Criteria for choosing the notes of a review session.

    Instances are plain values: pass them into each operation rather
    than mutating shared state. Call normalized() after building from
    untrusted input.
    """
    review_count: int = DEFAULT_REVIEW_COUNT
    recent_days: int = DEFAULT_RECENT_DAYS
    time_range: TimeRange = TimeRange.ALL
    include_folders: tuple[str, ...] = ()
    exclude_folders: tuple[str, ...] = ()
    include_tags: tuple[str, ...] = ()
    exclude_tags: tuple[str, ...] = ()
    include_subfolders: bool = True
    selection_mode: SelectionMode = SelectionMode.DAILY

    def normalized(self) -> "ReviewSettings":
        """Return a copy with counts coerced to >= 1 and lists cleaned up."""
        try:
            time_range = TimeRange(self.time_range)
        except ValueError:
            time_range = TimeRange.ALL
        try:
            mode = SelectionMode(self.selection_mode)
        except ValueError:
            mode = SelectionMode.DAILY
        return replace(
            self,
            review_count=_coerce_count(self.review_count, DEFAULT_REVIEW_COUNT),
            recent_days=_coerce_count(self.recent_days, DEFAULT_RECENT_DAYS),
            time_range=time_range,
            include_folders=tuple(_dedupe(normalize_folder_path(str(f)) for f in _as_list(self.include_folders))),
            exclude_folders=tuple(_dedupe(normalize_folder_path(str(f)) for f in _as_list(self.exclude_folders))),
            include_tags=tuple(_dedupe(normalize_tag(str(t)) for t in _as_list(self.include_tags))),
            exclude_tags=tuple(_dedupe(normalize_tag(str(t)) for t in _as_list(self.exclude_tags))),
            include_subfolders=bool(self.include_subfolders),
            selection_mode=mode,
        )

    @property
    def has_tag_filters(self) -> bool:
        return bool(self.include_tags or self.exclude_tags)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the persisted (camelCase) field names."""
        return {
            "reviewCount": self.review_count,
            "recentDays": self.recent_days,
            "timeRange": TimeRange(self.time_range).value,
            "includeFolders": list(self.include_folders),
            "excludeFolders": list(self.exclude_folders),
            "includeTags": list(self.include_tags),
            "excludeTags": list(self.exclude_tags),
            "includeSubfolders": self.include_subfolders,
            "selectionMode": SelectionMode(self.selection_mode).value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReviewSettings":
        """Build normalized settings from a persisted record. Unknown keys are ignored."""
        defaults = cls()
        return cls(
            review_count=data.get("reviewCount", defaults.review_count),
            recent_days=data.get("recentDays", defaults.recent_days),
            time_range=data.get("timeRange", defaults.time_range),
            include_folders=data.get("includeFolders", ()),
            exclude_folders=data.get("excludeFolders", ()),
            include_tags=data.get("includeTags", ()),
            exclude_tags=data.get("excludeTags", ()),
            include_subfolders=data.get("includeSubfolders", True),
            selection_mode=data.get("selectionMode", defaults.selection_mode),
        ).normalized()


@dataclass
class Session:
    """
    One calendar day's selected notes and the reviewer's position.

    note_paths is typed loosely on load so that a malformed record can be
    detected by the validity check instead of failing to parse.
    """
    date: str
    config_key: str
    note_paths: list[str]
    current_note_path: Optional[str] = None
    done_paths: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "date": self.date,
            "configKey": self.config_key,
            "notePaths": list(self.note_paths),
            "donePaths": list(self.done_paths),
        }
        # TOML has no null; an absent key means no position yet
        if self.current_note_path is not None:
            d["currentNotePath"] = self.current_note_path
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        done = data.get("donePaths", [])
        return cls(
            date=str(data.get("date", "")),
            config_key=str(data.get("configKey", "")),
            note_paths=data.get("notePaths"),
            current_note_path=data.get("currentNotePath"),
            done_paths=[p for p in done if isinstance(p, str)] if isinstance(done, list) else [],
        )
