"""
World Info Service

Imports world books (lorebooks) from JSON and selects the lore entries
whose trigger keys appear in the conversation.

Import accepts the legacy shapes found in the wild:
- trigger keys under ``keys`` or ``key``, as a string or a list
- ``entries`` as a list or as a dict keyed by uid
- ``constant`` entries with no explicit ``enabled`` flag import disabled
- ``order`` as the priority, else the entry's position
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from tavern_engine.errors import WorldBookParseError
from tavern_engine.models import LorebookEntry, WorldBook

logger = logging.getLogger(__name__)

DEFAULT_WORLD_BOOK_NAME = "World Book"


def _normalize_keys(raw: Any) -> List[str]:
    """Turn a key field (string, list or missing) into trimmed, non-empty strings."""
    if raw is None:
        return []
    items = raw if isinstance(raw, list) else [raw]
    keys = []
    for item in items:
        if item is None:
            continue
        key = str(item).strip()
        if key:
            keys.append(key)
    return keys


def _parse_priority(raw: Any) -> int:
    """Entry order as an exact integer; fractional and boolean orders are rejected."""
    if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
        raise ValueError(f"order must be an integer, got {raw!r}")
    return int(raw)


def _entry_from_source(source: Dict[str, Any], index: int) -> LorebookEntry:
    raw_keys = source.get("keys")
    if raw_keys is None:
        raw_keys = source.get("key")

    enabled = source.get("enabled")
    if enabled is None:
        enabled = not source.get("constant", False)

    priority = source.get("order")
    if priority is None:
        priority = index

    content = source.get("content")
    comment = source.get("comment")

    return LorebookEntry(
        keys=_normalize_keys(raw_keys),
        content="" if content is None else str(content),
        enabled=bool(enabled),
        priority=_parse_priority(priority),
        comment=None if comment is None else str(comment),
    )


def _strip_json_suffix(filename: Optional[str]) -> Optional[str]:
    if not filename:
        return None
    if filename.lower().endswith(".json"):
        return filename[:-len(".json")]
    return filename


def import_world_book(text: str, filename: Optional[str] = None) -> WorldBook:
    """
    Import a world book from JSON text.

    Args:
        text: UTF-8 JSON text
        filename: Source filename, used for the name when the JSON has none

    Returns:
        Normalized WorldBook with the parsed JSON kept as ``raw``

    Raises:
        WorldBookParseError: If the text is not a JSON object with usable entries
    """
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise WorldBookParseError(f"World book is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise WorldBookParseError("World book JSON must be an object")

    raw_entries = parsed.get("entries") or []
    if isinstance(raw_entries, dict):
        raw_entries = list(raw_entries.values())
    if not isinstance(raw_entries, list):
        raise WorldBookParseError("World book 'entries' must be a list or object")

    try:
        entries = [
            _entry_from_source(source, index)
            for index, source in enumerate(raw_entries)
            if isinstance(source, dict)
        ]
    except (TypeError, ValueError) as e:
        raise WorldBookParseError(f"Invalid world book entry: {e}") from e

    name = parsed.get("name") or _strip_json_suffix(filename) or DEFAULT_WORLD_BOOK_NAME

    world_book = WorldBook(name=str(name), entries=entries, raw=parsed)
    logger.info(f"Imported world book '{world_book.name}' with {len(entries)} entries")
    return world_book


def select_lore(world_book: Optional[WorldBook], source_text: str) -> List[str]:
    """
    Select lore texts triggered by the conversation.

    An entry triggers when it is enabled, has non-blank content, and any of
    its keys occurs in ``source_text`` (case-insensitive substring match).
    Triggered entries are ordered by ascending priority, ties keeping their
    world book order, and duplicate texts are kept only at their first
    position.

    Args:
        world_book: Active world book, or None
        source_text: Conversation text to scan

    Returns:
        Trimmed lore texts in insertion order
    """
    if world_book is None:
        return []

    haystack = source_text.lower()
    triggered = [
        entry for entry in world_book.entries
        if entry.enabled
        and entry.content.strip()
        and any(key.lower() in haystack for key in entry.keys)
    ]
    triggered.sort(key=lambda entry: entry.priority)

    lore = list(dict.fromkeys(entry.content.strip() for entry in triggered))
    if lore:
        logger.debug(f"Triggered {len(lore)} lore entries from '{world_book.name}'")
    return lore


def trigger_source_text(contents: Iterable[str]) -> str:
    """Join message contents (oldest first) into the text scanned for keys."""
    return "\n".join(contents)
