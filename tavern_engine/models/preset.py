"""Chat preset record."""

from typing import List
from pydantic import BaseModel, ConfigDict, Field

from .ids import generate_id

DEFAULT_CONTEXT_TEMPLATE = (
    "{{description}}\n"
    "{{personality}}\n"
    "Scenario: {{scenario}}\n"
    "User: {{user}}\n"
    "Character: {{char}}"
)
DEFAULT_MAX_CONTEXT_TOKENS = 4096


class ChatPreset(BaseModel):
    """Reusable prompt template, stop sequences and context ceiling."""
    model_config = ConfigDict(frozen=True)
    
    id: str = Field(default_factory=lambda: generate_id("preset"))
    name: str = "Default"
    context_template: str = DEFAULT_CONTEXT_TEMPLATE
    post_history_instructions: str = ""
    stop_sequences: List[str] = Field(default_factory=list)
    max_context_tokens: int = DEFAULT_MAX_CONTEXT_TOKENS
