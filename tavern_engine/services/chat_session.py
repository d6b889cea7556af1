"""
Chat Session

Holds the state of one chat (active character, world book, preset and the
message list) and runs a send turn: append the user message, assemble the
context, call the provider and append the reply.

Each session owns its own state; nothing is shared between sessions.
"""

import logging
from typing import List, Optional

from tavern_engine.config.models import LLMConfig
from tavern_engine.llm.base import BaseLLMClient, GenerationInput
from tavern_engine.models import CharacterProfile, ChatMessage, ChatPreset, MessageRole, WorldBook
from tavern_engine.services.prompt_assembly import ContextResult, PromptAssemblyService

logger = logging.getLogger(__name__)

EMPTY_REPLY_PLACEHOLDER = "(empty reply)"
PROVIDERS_WITHOUT_API_KEY = {"koboldcpp"}


class SessionConfigError(Exception):
    """LLM settings are incomplete for sending a message."""
    pass


def validate_llm_config(config: LLMConfig) -> None:
    """
    Check the settings a send needs.

    Raises:
        SessionConfigError: Missing base URL or model, or missing API key
            for a provider that requires one
    """
    if not config.base_url.strip():
        raise SessionConfigError("Base URL is required.")
    if not config.model.strip():
        raise SessionConfigError("Model name is required.")
    if config.provider not in PROVIDERS_WITHOUT_API_KEY and not config.api_key.strip():
        raise SessionConfigError(f"An API key is required for provider '{config.provider}'.")


class ChatSession:
    """One chat conversation with its own history."""

    def __init__(
        self,
        user_name: str,
        preset: ChatPreset,
        llm_config: LLMConfig,
        llm_client: BaseLLMClient,
        character: Optional[CharacterProfile] = None,
        world_book: Optional[WorldBook] = None,
        assembler: Optional[PromptAssemblyService] = None,
    ):
        self.user_name = user_name
        self.preset = preset
        self.llm_config = llm_config
        self.llm_client = llm_client
        self.character = character
        self.world_book = world_book
        self.assembler = assembler or PromptAssemblyService()
        self.messages: List[ChatMessage] = []
        self.last_context: Optional[ContextResult] = None

    def build_context(self) -> ContextResult:
        """Assemble the context for the current history."""
        return self.assembler.build_context(
            user_name=self.user_name,
            preset=self.preset,
            messages=self.messages,
            character=self.character,
            world_book=self.world_book,
        )

    async def send(self, text: str) -> ChatMessage:
        """
        Send a user message and append the model's reply.

        The user message stays in the history even if generation fails.

        Args:
            text: User message content

        Returns:
            The appended assistant message

        Raises:
            SessionConfigError: LLM settings incomplete (nothing is appended)
            LLMError: Provider request failed
        """
        validate_llm_config(self.llm_config)

        self.messages.append(ChatMessage(role=MessageRole.USER, content=text))

        context = self.build_context()
        output = await self.llm_client.generate(GenerationInput(
            config=self.llm_config,
            system_prompt=context.system_prompt,
            history=context.history,
            stop_sequences=self.preset.stop_sequences,
        ))

        reply = ChatMessage(role=MessageRole.ASSISTANT, content=output or EMPTY_REPLY_PLACEHOLDER)
        self.messages.append(reply)
        self.last_context = context

        logger.info(
            f"Turn complete: prompt_tokens={context.total_tokens}, "
            f"history={len(context.history)}, lore={len(context.lore_inserted)}"
        )
        return reply

    def clear(self) -> None:
        """Drop all messages."""
        self.messages = []
        self.last_context = None
