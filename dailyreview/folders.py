"""
Folder-path suggestions for building include/exclude lists.

Suggestions always start with "/" (browse from the vault root):

- empty query: the first folders of the vault
- query ending in "/": direct children of that folder, or if it has
  none, everything below it, shallowest first
- anything else: folders containing the query, case-insensitive
"""

from typing import Iterable

from .types import normalize_folder_path

SUGGESTION_LIMIT = 12
ROOT = "/"


def _depth(folder: str) -> int:
    return len(folder.split("/"))


def suggest_folders(query: str, folders: Iterable[str], limit: int = SUGGESTION_LIMIT) -> list[str]:
    """Return up to `limit` suggestions for a partially typed folder path."""
    all_folders = sorted({normalize_folder_path(f) for f in folders} - {""})
    raw = query.replace("\\", "/").strip()
    normalized = normalize_folder_path(raw)
    room = max(0, limit - 1)

    if not raw:
        return [ROOT, *all_folders[:room]]

    if raw.endswith("/"):
        prefix = f"{normalized}/" if normalized else ""
        below = [f for f in all_folders if f.startswith(prefix) and len(f) > len(prefix)]
        children = [f for f in below if "/" not in f[len(prefix):]]
        if children:
            return [ROOT, *children[:room]]
        base_depth = _depth(normalized) if normalized else 0
        below.sort(key=lambda f: (_depth(f) - base_depth, f))
        return [ROOT, *below[:room]]

    needle = normalized.lower()
    return [ROOT, *[f for f in all_folders if needle in f.lower()][:room]]
