"""Chat preset import and export."""

import json
import logging
from typing import Any, Dict, Optional

from tavern_engine.errors import PresetParseError
from tavern_engine.models import ChatPreset, DEFAULT_CONTEXT_TEMPLATE, DEFAULT_MAX_CONTEXT_TOKENS

logger = logging.getLogger(__name__)

DEFAULT_PRESET_NAME = "Preset"

# (record field, camelCase key, snake_case key)
_FIELD_KEYS = (
    ("context_template", "contextTemplate", "context_template"),
    ("post_history_instructions", "postHistoryInstructions", "post_history_instructions"),
    ("stop_sequences", "stopSequences", "stop_sequences"),
    ("max_context_tokens", "maxContextTokens", "max_context_tokens"),
)


def _lookup(parsed: Dict[str, Any], camel: str, snake: str) -> Any:
    value = parsed.get(camel)
    if value is None:
        value = parsed.get(snake)
    return value


def import_preset(text: str, filename: Optional[str] = None) -> ChatPreset:
    """
    Import a chat preset from JSON text.

    Missing fields get defaults: the standard context template, no
    post-history instructions, no stop sequences and a 4096 token ceiling.
    Keys may be camelCase (``contextTemplate``) or snake_case.

    Raises:
        PresetParseError: If the text is not a JSON object or a field has
            the wrong type
    """
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise PresetParseError(f"Preset is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise PresetParseError("Preset JSON must be an object")

    values = {field: _lookup(parsed, camel, snake) for field, camel, snake in _FIELD_KEYS}

    stop_sequences = values["stop_sequences"]
    if not isinstance(stop_sequences, list):
        stop_sequences = []

    template = values["context_template"]
    post_history = values["post_history_instructions"]
    max_tokens = values["max_context_tokens"]

    name = parsed.get("name")
    if name is None and filename:
        name = filename[:-len(".json")] if filename.lower().endswith(".json") else filename

    try:
        preset = ChatPreset(
            name=str(name) if name else DEFAULT_PRESET_NAME,
            context_template=DEFAULT_CONTEXT_TEMPLATE if template is None else str(template),
            post_history_instructions="" if post_history is None else str(post_history),
            stop_sequences=[str(s) for s in stop_sequences],
            max_context_tokens=DEFAULT_MAX_CONTEXT_TOKENS if max_tokens is None else int(max_tokens),
        )
    except (TypeError, ValueError) as e:
        raise PresetParseError(f"Invalid preset field: {e}") from e

    logger.info(f"Imported preset '{preset.name}' (max_context_tokens={preset.max_context_tokens})")
    return preset


def export_preset(preset: ChatPreset) -> str:
    """Serialize a preset to indented JSON with camelCase keys."""
    payload = {
        "id": preset.id,
        "name": preset.name,
        "contextTemplate": preset.context_template,
        "postHistoryInstructions": preset.post_history_instructions,
        "stopSequences": list(preset.stop_sequences),
        "maxContextTokens": preset.max_context_tokens,
    }
    return json.dumps(payload, ensure_ascii=False, indent=2)
