"""Base abstract class for LLM providers."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from tavern_engine.config.models import LLMConfig
from tavern_engine.models import ChatMessage, MessageRole

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base exception for LLM operations."""
    pass


class GenerationInput(BaseModel):
    """Everything a provider needs for one generation."""
    model_config = ConfigDict(frozen=True)
    
    config: LLMConfig
    system_prompt: str = ""
    history: List[ChatMessage] = Field(default_factory=list)
    stop_sequences: List[str] = Field(default_factory=list)


def chat_role(message: ChatMessage) -> str:
    """Providers only see user/assistant turns; anything else is sent as user."""
    return "assistant" if message.role == MessageRole.ASSISTANT else "user"


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM provider clients.
    
    Subclasses describe one HTTP request (endpoint, headers, body) and how
    to pull the generated text out of the response; the request itself and
    error mapping live here.
    """
    
    provider: str = ""
    
    def __init__(self, timeout: float = 120, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize LLM client.
        
        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests to mock the provider)
        """
        self.timeout = timeout
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)
    
    @abstractmethod
    def endpoint(self, config: LLMConfig) -> str:
        """Full URL of the generation endpoint."""
        pass
    
    def headers(self, config: LLMConfig) -> Dict[str, str]:
        """Request headers."""
        return {"Content-Type": "application/json"}
    
    @abstractmethod
    def build_payload(self, request: GenerationInput) -> Dict[str, Any]:
        """JSON body for the generation request."""
        pass
    
    @abstractmethod
    def extract_text(self, data: Dict[str, Any]) -> str:
        """Generated text from the decoded JSON response."""
        pass
    
    async def generate(self, request: GenerationInput) -> str:
        """
        Generate a completion for an assembled context.
        
        Args:
            request: Config, system prompt, history window and stop sequences
            
        Returns:
            Generated text (may be empty)
            
        Raises:
            LLMError: On transport errors, non-2xx status or undecodable body
        """
        url = self.endpoint(request.config)
        payload = self.build_payload(request)
        
        logger.debug(
            f"{self.provider} request: url={url}, history={len(request.history)}, "
            f"stop={len(request.stop_sequences)}"
        )
        
        try:
            response = await self.client.post(url, json=payload, headers=self.headers(request.config))
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"{self.provider} error response ({e.response.status_code}): {e.response.text}")
            raise LLMError(f"{self.provider} request failed: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise LLMError(f"HTTP error during {self.provider} generation: {e}") from e
        except ValueError as e:
            raise LLMError(f"Invalid JSON from {self.provider}: {e}") from e
        
        if not isinstance(data, dict):
            raise LLMError(f"Unexpected {self.provider} response shape: {type(data).__name__}")
        
        try:
            content = self.extract_text(data)
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            raise LLMError(f"Malformed {self.provider} response: {e}") from e
        if not isinstance(content, str):
            raise LLMError(f"Unexpected {self.provider} content type: {type(content).__name__}")
        if not content.strip():
            logger.warning(f"[{self.provider.upper()}] Empty response content")
        return content
    
    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
