"""
Configuration for where notes and review state live.

The vault is the directory of markdown notes. The state directory holds
the TOML state file (settings and today's session) and the logs.
Review settings themselves are part of the state file, see state.py.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .state import STATE_FILENAME

VAULT_ENV = "DAILY_REVIEW_VAULT"
STATE_DIR_ENV = "DAILY_REVIEW_STATE"
STATE_DIRNAME = ".daily-review"


def get_vault_path(override: Optional[Path] = None) -> Path:
    """
    Resolve the vault directory.

    Priority:
    1. Explicit override (e.g. --vault)
    2. DAILY_REVIEW_VAULT environment variable
    3. Current working directory
    """
    if override is not None:
        return Path(override).expanduser().resolve()
    env = os.environ.get(VAULT_ENV)
    if env:
        return Path(env).expanduser().resolve()
    return Path.cwd().resolve()


def get_state_dir(vault: Path, override: Optional[Path] = None) -> Path:
    """State directory: override, then DAILY_REVIEW_STATE, then <vault>/.daily-review."""
    if override is not None:
        return Path(override).expanduser().resolve()
    env = os.environ.get(STATE_DIR_ENV)
    if env:
        return Path(env).expanduser().resolve()
    return vault / STATE_DIRNAME


@dataclass
class ReviewConfig:
    """Resolved locations for one vault."""
    vault: Path
    state_dir: Path

    @property
    def state_path(self) -> Path:
        """Path to the TOML state file."""
        return self.state_dir / STATE_FILENAME

    @classmethod
    def resolve(
        cls,
        vault: Optional[Path] = None,
        state_dir: Optional[Path] = None,
    ) -> "ReviewConfig":
        vault_path = get_vault_path(vault)
        return cls(vault=vault_path, state_dir=get_state_dir(vault_path, state_dir))
