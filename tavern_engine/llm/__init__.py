"""LLM provider adapters."""

from .base import BaseLLMClient, GenerationInput, LLMError
from .claude import ClaudeLLMClient
from .client import create_llm_client
from .koboldcpp import KoboldCppLLMClient
from .openai import OpenAILLMClient

__all__ = [
    "BaseLLMClient",
    "ClaudeLLMClient",
    "GenerationInput",
    "KoboldCppLLMClient",
    "LLMError",
    "OpenAILLMClient",
    "create_llm_client",
]
