"""
Tag extraction from note text.

Tags come from two places, merged into one set:

- Inline markers: ``#name`` where ``#`` is not preceded by a word
  character and ``name`` is letters, digits, ``_`` or ``-``.
- The ``tags`` key of a leading ``---`` metadata block.

The metadata block is read with PyYAML, plus a best-effort line scanner
for the two common shapes (``tags: ["#a", "b"]`` and a ``- value`` list
under ``tags:``). The scanner recovers values YAML reads as comments
(``- #a``) and still works when the block is not valid YAML. Anything
that doesn't parse contributes no tags; extraction never raises.
"""

import logging
import re

import yaml

from .types import normalize_tag

logger = logging.getLogger(__name__)

_INLINE_TAG_RE = re.compile(r"(?<!\w)#([\w-]+)")

# Leading metadata block; unterminated blocks simply don't match
_METADATA_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

_BRACKET_TAGS_RE = re.compile(r"^tags:\s*\[(.*)\]\s*$", re.MULTILINE)
_QUOTED_RE = re.compile(r"\"([^\"]*)\"|'([^']*)'")
_LIST_HEADER_RE = re.compile(r"^tags:\s*$")
_LIST_ITEM_RE = re.compile(r"^\s*-\s+(.+?)\s*$")
_TOP_LEVEL_KEY_RE = re.compile(r"^[^\s#-][^:]*:")


def extract_tags(text: str) -> set[str]:
    """Return the set of ``#tags`` found inline and in the metadata block."""
    tags = {f"#{m.group(1)}" for m in _INLINE_TAG_RE.finditer(text)}
    tags.update(extract_metadata_tags(text))
    return tags


def extract_metadata_block(text: str) -> str | None:
    """Return the body of the leading ``---`` block, or None if there isn't one."""
    match = _METADATA_RE.match(text)
    return match.group(1) if match else None


def extract_metadata_tags(text: str) -> set[str]:
    """Tags declared under the ``tags`` key of the metadata block, '#'-prefixed."""
    body = extract_metadata_block(text)
    if body is None:
        return set()
    values = _yaml_tag_values(body) + _scan_tag_values(body)
    return {t for t in (normalize_tag(v) for v in values) if t and t != "#"}


def _yaml_tag_values(body: str) -> list[str]:
    try:
        data = yaml.safe_load(body)
    except yaml.YAMLError as e:
        logger.debug("Metadata block is not valid YAML: %s", e)
        return []
    if not isinstance(data, dict):
        return []
    raw = data.get("tags")
    if isinstance(raw, str):
        return [v for v in re.split(r"[,\s]+", raw) if v]
    if isinstance(raw, list):
        # None entries are '- #tag' lines that YAML read as comments
        return [str(v) for v in raw if isinstance(v, (str, int, float))]
    return []


def _scan_tag_values(body: str) -> list[str]:
    values: list[str] = []

    for match in _BRACKET_TAGS_RE.finditer(body):
        for quoted in _QUOTED_RE.finditer(match.group(1)):
            values.append(quoted.group(1) if quoted.group(1) is not None else quoted.group(2))

    in_list = False
    for line in body.splitlines():
        if _LIST_HEADER_RE.match(line):
            in_list = True
            continue
        if not in_list or not line.strip():
            continue
        item = _LIST_ITEM_RE.match(line)
        if item:
            values.append(item.group(1).strip("\"'"))
        elif _TOP_LEVEL_KEY_RE.match(line):
            in_list = False
    return values
