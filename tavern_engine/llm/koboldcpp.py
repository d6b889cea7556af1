"""KoboldCpp native generate API client."""

from typing import Any, Dict, List, Sequence

from tavern_engine.config.models import LLMConfig
from tavern_engine.models import ChatMessage, MessageRole
from .base import BaseLLMClient, GenerationInput


def flatten_prompt(system_prompt: str, history: Sequence[ChatMessage]) -> str:
    """
    Render system prompt and history as one completion prompt.
    
    Each turn becomes a ``User:`` or ``Assistant:`` line and the prompt
    ends with an open ``Assistant:`` turn for the model to complete.
    """
    lines: List[str] = [system_prompt]
    for message in history:
        speaker = "Assistant" if message.role == MessageRole.ASSISTANT else "User"
        lines.append(f"{speaker}: {message.content}")
    lines.append("Assistant:")
    return "\n".join(lines)


class KoboldCppLLMClient(BaseLLMClient):
    """
    Client for KoboldCpp's ``/api/v1/generate`` endpoint.
    
    KoboldCpp serves the model it was started with, so no model name is
    sent and no API key is needed.
    """
    
    provider = "koboldcpp"
    
    def endpoint(self, config: LLMConfig) -> str:
        return f"{config.base_url.rstrip('/')}/api/v1/generate"
    
    def build_payload(self, request: GenerationInput) -> Dict[str, Any]:
        return {
            "prompt": flatten_prompt(request.system_prompt, request.history),
            "stop_sequence": list(request.stop_sequences),
            "temperature": request.config.temperature,
        }
    
    def extract_text(self, data: Dict[str, Any]) -> str:
        results = data.get("results") or [{}]
        return results[0].get("text") or ""
