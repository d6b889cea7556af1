"""OpenAI chat completions client."""

from typing import Any, Dict

from tavern_engine.config.models import LLMConfig
from .base import BaseLLMClient, GenerationInput, chat_role


class OpenAILLMClient(BaseLLMClient):
    """Client for OpenAI and OpenAI-compatible ``/v1/chat/completions`` APIs."""
    
    provider = "openai"
    
    def endpoint(self, config: LLMConfig) -> str:
        return f"{config.base_url.rstrip('/')}/v1/chat/completions"
    
    def headers(self, config: LLMConfig) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.api_key}",
        }
    
    def build_payload(self, request: GenerationInput) -> Dict[str, Any]:
        messages = [{"role": "system", "content": request.system_prompt}]
        messages.extend(
            {"role": chat_role(message), "content": message.content}
            for message in request.history
        )
        return {
            "model": request.config.model,
            "temperature": request.config.temperature,
            "stop": list(request.stop_sequences),
            "messages": messages,
        }
    
    def extract_text(self, data: Dict[str, Any]) -> str:
        choices = data.get("choices") or [{}]
        message = choices[0].get("message") or {}
        return message.get("content") or ""
