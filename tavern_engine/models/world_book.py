"""World book (lorebook) records."""

from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .ids import generate_id


class LorebookEntry(BaseModel):
    """
    One keyword-triggered lore snippet.
    
    ``keys`` are matched case-insensitively as substrings of the chat text.
    An empty key list is valid and means the entry never triggers.
    Lower ``priority`` values are inserted first.
    """
    model_config = ConfigDict(frozen=True)
    
    id: str = Field(default_factory=lambda: generate_id("lore"))
    keys: List[str] = Field(default_factory=list)
    content: str = ""
    enabled: bool = True
    priority: int = 0
    comment: Optional[str] = None


class WorldBook(BaseModel):
    """Ordered collection of lore entries plus the source record."""
    model_config = ConfigDict(frozen=True)
    
    id: str = Field(default_factory=lambda: generate_id("wb"))
    name: str = "World Book"
    entries: List[LorebookEntry] = Field(default_factory=list)
    raw: Any = None
