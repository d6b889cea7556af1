"""Normalized character profile."""

from typing import Any, Dict
from pydantic import BaseModel, ConfigDict, Field

from .ids import generate_id


class CharacterProfile(BaseModel):
    """
    Character record projected from a character card.
    
    Only the fields the prompt builder needs are lifted out of the card.
    ``raw_card`` keeps the source card untouched so it can be exported again
    without losing anything the projection dropped.
    """
    model_config = ConfigDict(frozen=True)
    
    id: str = Field(default_factory=lambda: generate_id("char"))
    name: str = "Unknown"
    description: str = ""
    personality: str = ""
    scenario: str = ""
    first_message: str = ""
    examples: str = ""
    system_prompt: str = ""
    post_history_instructions: str = ""
    raw_card: Dict[str, Any] = Field(default_factory=dict)
