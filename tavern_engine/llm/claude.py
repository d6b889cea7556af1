"""Anthropic Messages API client."""

from typing import Any, Dict

from tavern_engine.config.models import LLMConfig
from .base import BaseLLMClient, GenerationInput, chat_role

ANTHROPIC_VERSION = "2023-06-01"


class ClaudeLLMClient(BaseLLMClient):
    """
    Client for the ``/v1/messages`` endpoint.
    
    The system prompt travels in the top-level ``system`` field rather than
    as a message, and ``max_tokens`` is mandatory.
    """
    
    provider = "claude"
    
    def endpoint(self, config: LLMConfig) -> str:
        return f"{config.base_url.rstrip('/')}/v1/messages"
    
    def headers(self, config: LLMConfig) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": config.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
    
    def build_payload(self, request: GenerationInput) -> Dict[str, Any]:
        return {
            "model": request.config.model,
            "temperature": request.config.temperature,
            "stop_sequences": list(request.stop_sequences),
            "system": request.system_prompt,
            "max_tokens": request.config.max_response_tokens,
            "messages": [
                {"role": chat_role(message), "content": message.content}
                for message in request.history
            ],
        }
    
    def extract_text(self, data: Dict[str, Any]) -> str:
        for block in data.get("content") or []:
            if block.get("type") == "text":
                return block.get("text") or ""
        return ""
