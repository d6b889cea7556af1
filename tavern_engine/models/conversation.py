"""Chat message records."""

import enum
import time
from pydantic import BaseModel, ConfigDict, Field

from .ids import generate_id


class MessageRole(str, enum.Enum):
    """Message role types."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


def _now_ms() -> int:
    return int(time.time() * 1000)


class ChatMessage(BaseModel):
    """
    A single chat message.
    
    Messages are immutable once appended; their position in the history
    list is the only ordering key.
    """
    model_config = ConfigDict(frozen=True, use_enum_values=False)
    
    id: str = Field(default_factory=lambda: generate_id("msg"))
    role: MessageRole = MessageRole.USER
    content: str = ""
    created_at: int = Field(default_factory=_now_ms)
