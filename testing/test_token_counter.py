"""Tests for token estimation and budget truncation."""

from tavern_engine.models import ChatMessage
from tavern_engine.services.token_counter import (
    TokenCounter,
    estimate_messages_tokens,
    estimate_tokens,
)


def _msg(content: str) -> ChatMessage:
    return ChatMessage(content=content)


class TestEstimateTokens:
    """Length-based estimate."""

    def test_blank_is_free(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("   \n\t ") == 0
        assert estimate_tokens(None) == 0

    def test_minimum_one(self):
        assert estimate_tokens("a") == 1
        assert estimate_tokens("abcd") == 1

    def test_rounds_up(self):
        assert estimate_tokens("abcde") == 2
        assert estimate_tokens("x" * 80) == 20
        assert estimate_tokens("x" * 81) == 21

    def test_whitespace_counts_when_text_present(self):
        assert estimate_tokens("  a  ") == 2

    def test_messages_sum(self):
        assert estimate_messages_tokens([_msg("x" * 8), _msg(""), _msg("y")]) == 3


class TestTruncateToBudget:
    """Greedy newest-first truncation."""

    def test_keeps_recent_suffix_in_order(self):
        messages = [_msg(f"{i}" * 40) for i in range(5)]  # 10 tokens each
        kept, used = TokenCounter().truncate_to_budget(messages, 25)
        assert kept == messages[-2:]
        assert used == 20

    def test_stops_at_first_misfit(self):
        """A smaller, older message is not pulled in after a large one fails."""
        messages = [_msg("a"), _msg("b" * 400), _msg("c" * 40)]
        kept, used = TokenCounter().truncate_to_budget(messages, 20)
        assert kept == [messages[2]]
        assert used == 10

    def test_everything_fits(self):
        messages = [_msg("hi"), _msg("there")]
        kept, used = TokenCounter().truncate_to_budget(messages, 100)
        assert kept == messages
        assert used == 3

    def test_blank_messages_are_free(self):
        messages = [_msg(""), _msg("x" * 40)]
        kept, _ = TokenCounter().truncate_to_budget(messages, 10)
        assert kept == messages

    def test_fits_in_context(self):
        fits, total = TokenCounter().fits_in_context(["x" * 40, "y" * 40], context_window=30, reserve_tokens=10)
        assert fits is True
        assert total == 20
