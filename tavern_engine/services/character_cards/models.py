"""
Character Card Data Models
=========================

Pydantic models for the SillyTavern character card schema
(``chara_card_v2`` / ``chara_card_v3``).

These models validate and project card data; the importer keeps the
original dict alongside so unknown fields survive a re-export.
"""

from enum import Enum
from typing import Optional, Dict, List, Any
from pydantic import BaseModel, ConfigDict


class SillyTavernSpec(str, Enum):
    """SillyTavern card specification versions."""
    V2 = "chara_card_v2"
    V3 = "chara_card_v3"


class SillyTavernCardData(BaseModel):
    """
    SillyTavern V2 card data structure.

    Text fields are optional because real-world cards often carry
    ``null`` for fields the author left empty. Only ``name`` is required.
    """
    model_config = ConfigDict(extra="allow")

    name: str
    description: Optional[str] = None
    personality: Optional[str] = None
    scenario: Optional[str] = None
    first_mes: Optional[str] = None
    mes_example: Optional[str] = None

    creator_notes: Optional[str] = None
    system_prompt: Optional[str] = None
    post_history_instructions: Optional[str] = None
    alternate_greetings: Optional[List[Any]] = None
    character_book: Optional[Dict[str, Any]] = None

    tags: Optional[List[Any]] = None
    creator: Optional[str] = None
    character_version: Optional[str] = None
    extensions: Optional[Dict[str, Any]] = None


class SillyTavernCard(BaseModel):
    """Complete SillyTavern V2 character card structure."""
    model_config = ConfigDict(extra="allow")

    spec: Any = SillyTavernSpec.V2.value
    spec_version: Any = "2.0"
    data: SillyTavernCardData
