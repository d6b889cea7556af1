"""
Token Counter Service

Approximate token counting for context window management.

An exact tokenizer is not needed for budget decisions: text is charged one
token per four characters (rounded up), with whitespace-only text free and
any other text costing at least one token.
"""

import logging
import math
from typing import Iterable, List, Optional, Sequence

from tavern_engine.models import ChatMessage

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4


def estimate_tokens(text: Optional[str]) -> int:
    """
    Estimate tokens in text.
    
    Args:
        text: Text to estimate
        
    Returns:
        0 for empty/blank text, else ``max(1, ceil(len(text) / 4))``
    """
    if not text or not text.strip():
        return 0
    return max(1, math.ceil(len(text) / CHARS_PER_TOKEN))


def estimate_messages_tokens(messages: Iterable[ChatMessage]) -> int:
    """Sum of estimated tokens over message contents."""
    return sum(estimate_tokens(message.content) for message in messages)


class TokenCounter:
    """
    Counts tokens using the length-based estimate.
    
    Stateless; instances exist so callers can inject a different counter
    (e.g. in tests) without touching module globals.
    """
    
    def count_tokens(self, text: Optional[str]) -> int:
        """Count tokens in a single text."""
        return estimate_tokens(text)
    
    def fits_in_context(
        self,
        texts: Sequence[str],
        context_window: int,
        reserve_tokens: int = 0
    ) -> tuple[bool, int]:
        """
        Check if texts fit within context window.
        
        Returns:
            (fits: bool, total_tokens: int)
        """
        total = sum(self.count_tokens(t) for t in texts)
        available = context_window - reserve_tokens
        
        return (total <= available, total)
    
    def truncate_to_budget(
        self,
        messages: Sequence[ChatMessage],
        token_budget: int,
    ) -> tuple[List[ChatMessage], int]:
        """
        Keep the most recent messages that fit within the budget.
        
        Walks from newest to oldest and stops at the first message that
        does not fit; older messages are never considered after that.
        
        Args:
            messages: Chronological message history
            token_budget: Maximum tokens the kept messages may use
            
        Returns:
            (kept messages in chronological order, tokens used)
        """
        kept: List[ChatMessage] = []
        remaining = token_budget
        
        for message in reversed(messages):
            cost = self.count_tokens(message.content)
            if cost > remaining:
                break
            kept.append(message)
            remaining -= cost
        
        kept.reverse()
        
        if len(kept) < len(messages):
            logger.debug(
                f"History truncated: kept {len(kept)}/{len(messages)} messages "
                f"within {token_budget} token budget"
            )
        
        return kept, token_budget - remaining
