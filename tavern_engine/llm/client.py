"""LLM client factory."""

from typing import Optional, TYPE_CHECKING

import httpx

from .base import BaseLLMClient
from .claude import ClaudeLLMClient
from .koboldcpp import KoboldCppLLMClient
from .openai import OpenAILLMClient

if TYPE_CHECKING:
    from tavern_engine.config.models import LLMConfig

PROVIDERS = {
    OpenAILLMClient.provider: OpenAILLMClient,
    ClaudeLLMClient.provider: ClaudeLLMClient,
    KoboldCppLLMClient.provider: KoboldCppLLMClient,
}


def create_llm_client(
    config: "LLMConfig",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BaseLLMClient:
    """
    Factory function to create appropriate LLM client based on provider.
    
    Args:
        config: LLM configuration with provider type and settings
        transport: Optional httpx transport override
        
    Returns:
        Provider-specific LLM client instance
        
    Raises:
        ValueError: If provider is unknown
    """
    provider = config.provider.lower()
    client_class = PROVIDERS.get(provider)
    if client_class is None:
        raise ValueError(f"No adapter for provider: {config.provider}")
    return client_class(timeout=config.timeout_seconds, transport=transport)
