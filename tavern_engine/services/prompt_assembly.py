"""
Prompt Assembly Service

Assembles the system prompt and history window sent to the LLM:
- Character system prompt
- Preset context template rendered with character/user variables
- World book lore triggered by the conversation
- Post-history instructions
- Conversation history truncated to the token budget

Assembly is a pure function of its inputs. Results are never cached since
history and the active character/world book change between turns.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from tavern_engine.models import CharacterProfile, ChatMessage, ChatPreset, WorldBook
from tavern_engine.services.template_engine import apply_template
from tavern_engine.services.token_counter import TokenCounter
from tavern_engine.services.world_info import select_lore, trigger_source_text

logger = logging.getLogger(__name__)

DEFAULT_CHARACTER_NAME = "Assistant"
MIN_HISTORY_TOKENS = 512
PART_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class ContextResult:
    """Assembled prompt for one generation."""
    system_prompt: str
    history: List[ChatMessage] = field(default_factory=list)
    lore_inserted: List[str] = field(default_factory=list)
    total_tokens: int = 0


def build_template_variables(user_name: str, character: Optional[CharacterProfile]) -> dict:
    """Variables available to context templates."""
    return {
        "user": user_name,
        "char": character.name if character else DEFAULT_CHARACTER_NAME,
        "description": character.description if character else "",
        "personality": character.personality if character else "",
        "scenario": character.scenario if character else "",
    }


def compose_system_prompt(
    character: Optional[CharacterProfile],
    rendered_template: str,
    lore: Sequence[str],
    preset: ChatPreset,
) -> str:
    """
    Join prompt parts in fixed order, skipping empty ones.

    Order: character system prompt, rendered template, lore, post-history
    instructions (the character's own, else the preset's).
    """
    post_history = ""
    if character and character.post_history_instructions:
        post_history = character.post_history_instructions
    elif preset.post_history_instructions:
        post_history = preset.post_history_instructions

    parts = [
        character.system_prompt if character else "",
        rendered_template,
        *lore,
        post_history,
    ]
    return PART_SEPARATOR.join(part.strip() for part in parts if part and part.strip())


class PromptAssemblyService:
    """
    Builds ContextResults for chat generation.

    Token Budget:
    - System prompt is always included in full
    - History gets ``max_context_tokens - system_prompt_tokens`` but never
      less than ``min_history_tokens``
    - History is filled newest-first and stops at the first message that
      does not fit, so the window is always a recent suffix of the chat
    """

    def __init__(
        self,
        token_counter: Optional[TokenCounter] = None,
        min_history_tokens: int = MIN_HISTORY_TOKENS,
    ):
        """
        Initialize prompt assembly service.

        Args:
            token_counter: Counter used for all estimates
            min_history_tokens: Floor for the history budget
        """
        self.token_counter = token_counter or TokenCounter()
        self.min_history_tokens = min_history_tokens

    def build_context(
        self,
        user_name: str,
        preset: ChatPreset,
        messages: Sequence[ChatMessage],
        character: Optional[CharacterProfile] = None,
        world_book: Optional[WorldBook] = None,
    ) -> ContextResult:
        """
        Assemble the prompt for the next generation.

        Args:
            user_name: Name substituted for ``{{user}}``
            preset: Active chat preset
            messages: Full chronological chat history
            character: Active character, if any
            world_book: Active world book, if any

        Returns:
            ContextResult with system prompt, history window, triggered
            lore and the total token estimate
        """
        variables = build_template_variables(user_name, character)
        rendered_template = apply_template(preset.context_template, variables).strip()

        source_text = trigger_source_text(message.content for message in messages)
        lore = select_lore(world_book, source_text)

        system_prompt = compose_system_prompt(character, rendered_template, lore, preset)
        system_tokens = self.token_counter.count_tokens(system_prompt)

        budget = max(self.min_history_tokens, preset.max_context_tokens - system_tokens)
        history, history_tokens = self.token_counter.truncate_to_budget(messages, budget)

        result = ContextResult(
            system_prompt=system_prompt,
            history=history,
            lore_inserted=lore,
            total_tokens=system_tokens + history_tokens,
        )

        logger.debug(
            f"Context built: system={system_tokens} tokens, "
            f"history={len(history)}/{len(messages)} messages ({history_tokens} tokens, budget {budget}), "
            f"lore={len(lore)}, total={result.total_tokens}"
        )
        return result


def build_context(
    user_name: str,
    preset: ChatPreset,
    messages: Sequence[ChatMessage],
    character: Optional[CharacterProfile] = None,
    world_book: Optional[WorldBook] = None,
) -> ContextResult:
    """Assemble a context with the default service settings."""
    return PromptAssemblyService().build_context(
        user_name=user_name,
        preset=preset,
        messages=messages,
        character=character,
        world_book=world_book,
    )
