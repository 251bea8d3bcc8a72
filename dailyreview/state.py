"""
Persisted review state: settings plus today's session.

Stored as a TOML file in the state directory. The record has gone
through several shapes; load_state() identifies the shape once and
runs migrate_state() to bring it to the current version before anything
else looks at it.

Versions:
    0  settings only, keys at the top level (no wrapper, no version)
    1  {settings, session}, no version key
    2  version key; session carries donePaths
"""

import logging
import os
import tempfile
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomli_w

from .types import ReviewSettings, Session

logger = logging.getLogger(__name__)

STATE_FILENAME = "daily-review.toml"
STATE_VERSION = 2


@dataclass
class ReviewState:
    """Everything that survives between review invocations."""
    settings: ReviewSettings = field(default_factory=ReviewSettings)
    session: Optional[Session] = None


class InvalidStateError(ValueError):
    """The state record is damaged and can't be migrated."""


def detect_version(data: dict[str, Any]) -> int:
    """
    Identify the schema version of a raw persisted record.

    Raises:
        InvalidStateError: If the version key is not a non-negative integer
    """
    if "version" in data:
        version = data["version"]
        if isinstance(version, bool) or not isinstance(version, int) or version < 0:
            raise InvalidStateError(f"Invalid state version: {version!r}")
        return version
    if "settings" in data and isinstance(data["settings"], dict):
        return 1
    return 0


def _v0_to_v1(data: dict[str, Any]) -> dict[str, Any]:
    return {"settings": dict(data), "session": None}


def _v1_to_v2(data: dict[str, Any]) -> dict[str, Any]:
    session = data.get("session")
    if isinstance(session, dict):
        session = dict(session)
        session.setdefault("donePaths", [])
    else:
        session = None
    return {"version": 2, "settings": data.get("settings", {}), "session": session}


_MIGRATIONS = {
    0: _v0_to_v1,
    1: _v1_to_v2,
}


def migrate_state(data: dict[str, Any]) -> dict[str, Any]:
    """
    Upgrade a raw persisted record to STATE_VERSION.

    Raises:
        ValueError: If the record is newer than this version understands
    """
    version = detect_version(data)
    if version > STATE_VERSION:
        raise ValueError(f"State version {version} is newer than supported ({STATE_VERSION})")
    while version < STATE_VERSION:
        logger.info("Migrating review state from version %d", version)
        data = _MIGRATIONS[version](data)
        version += 1
    return data


def state_from_dict(data: dict[str, Any]) -> ReviewState:
    """Build a ReviewState from a record of any supported version."""
    data = migrate_state(data)
    settings_data = data.get("settings")
    settings = ReviewSettings.from_dict(settings_data if isinstance(settings_data, dict) else {})
    session_data = data.get("session")
    session = Session.from_dict(session_data) if isinstance(session_data, dict) else None
    return ReviewState(settings=settings, session=session)


def state_to_dict(state: ReviewState) -> dict[str, Any]:
    d: dict[str, Any] = {
        "version": STATE_VERSION,
        "settings": state.settings.to_dict(),
    }
    if state.session is not None:
        d["session"] = state.session.to_dict()
    return d


def load_state(path: Path) -> ReviewState:
    """
    Load review state from a TOML file.

    A missing, unreadable or damaged file gives default settings and no
    session.

    Raises:
        ValueError: If the file was written by a newer version
    """
    if not path.exists():
        return ReviewState()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring unreadable review state %s: %s", path, e)
        return ReviewState()
    try:
        return state_from_dict(data)
    except InvalidStateError as e:
        logger.warning("Ignoring damaged review state %s: %s", path, e)
        return ReviewState()


def save_state(path: Path, state: ReviewState) -> None:
    """
    Write review state, replacing the file atomically.

    Creates the directory if it doesn't exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            tomli_w.dump(state_to_dict(state), f)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
