"""Domain records shared by importers, the context assembler and adapters."""

from .character import CharacterProfile
from .conversation import ChatMessage, MessageRole
from .preset import ChatPreset, DEFAULT_CONTEXT_TEMPLATE, DEFAULT_MAX_CONTEXT_TOKENS
from .world_book import LorebookEntry, WorldBook
from .ids import generate_id

__all__ = [
    "CharacterProfile",
    "ChatMessage",
    "MessageRole",
    "ChatPreset",
    "DEFAULT_CONTEXT_TEMPLATE",
    "DEFAULT_MAX_CONTEXT_TOKENS",
    "LorebookEntry",
    "WorldBook",
    "generate_id",
]
