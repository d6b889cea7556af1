"""Tests for ChatSession send flow."""

import asyncio

import pytest

from tavern_engine.config.models import LLMConfig
from tavern_engine.llm import LLMError
from tavern_engine.models import CharacterProfile, ChatPreset, MessageRole
from tavern_engine.services.chat_session import ChatSession, SessionConfigError, validate_llm_config


class FakeLLMClient:
    """Stands in for a provider adapter and records generation inputs."""

    def __init__(self, reply="Hello, traveler.", error=None):
        self.reply = reply
        self.error = error
        self.requests = []

    async def generate(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.reply


def _session(client, config=None, preset=None):
    return ChatSession(
        user_name="Ann",
        preset=preset or ChatPreset(stop_sequences=["\nAnn:"]),
        llm_config=config or LLMConfig(api_key="sk-test"),
        llm_client=client,
        character=CharacterProfile(name="Seraphina", system_prompt="You are Seraphina."),
    )


class TestValidateConfig:
    """Settings checks before sending."""

    def test_api_key_required(self):
        with pytest.raises(SessionConfigError, match="API key"):
            validate_llm_config(LLMConfig(provider="claude"))

    def test_koboldcpp_needs_no_key(self):
        validate_llm_config(LLMConfig(provider="koboldcpp", base_url="http://localhost:5001"))

    def test_model_required(self):
        with pytest.raises(SessionConfigError, match="Model"):
            validate_llm_config(LLMConfig(api_key="k", model="  "))


class TestSend:
    """One full turn."""

    def test_reply_appended(self):
        client = FakeLLMClient()
        session = _session(client)

        reply = asyncio.run(session.send("Hi"))

        assert reply.role == MessageRole.ASSISTANT
        assert reply.content == "Hello, traveler."
        assert [m.role for m in session.messages] == [MessageRole.USER, MessageRole.ASSISTANT]
        assert session.messages[0].content == "Hi"

    def test_generation_input(self):
        client = FakeLLMClient()
        session = _session(client)
        asyncio.run(session.send("Hi"))

        request = client.requests[0]
        assert request.system_prompt.startswith("You are Seraphina.")
        assert [m.content for m in request.history] == ["Hi"]
        assert request.stop_sequences == ["\nAnn:"]
        assert request.config.api_key == "sk-test"
        assert session.last_context.system_prompt == request.system_prompt

    def test_history_grows_across_turns(self):
        client = FakeLLMClient()
        session = _session(client)
        asyncio.run(session.send("One"))
        asyncio.run(session.send("Two"))

        assert [m.content for m in client.requests[1].history] == ["One", "Hello, traveler.", "Two"]
        assert len(session.messages) == 4

    def test_empty_reply_placeholder(self):
        session = _session(FakeLLMClient(reply=""))
        assert asyncio.run(session.send("Hi")).content == "(empty reply)"

    def test_invalid_config_appends_nothing(self):
        client = FakeLLMClient()
        session = _session(client, config=LLMConfig())
        with pytest.raises(SessionConfigError):
            asyncio.run(session.send("Hi"))
        assert session.messages == []
        assert client.requests == []

    def test_provider_failure_keeps_user_message(self):
        session = _session(FakeLLMClient(error=LLMError("down")))
        with pytest.raises(LLMError):
            asyncio.run(session.send("Hi"))
        assert [m.content for m in session.messages] == ["Hi"]
        assert session.last_context is None

    def test_clear(self):
        session = _session(FakeLLMClient())
        asyncio.run(session.send("Hi"))
        session.clear()
        assert session.messages == []
        assert session.last_context is None
