from __future__ import annotations

from typing import Any

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from wa_relay.history import ConversationStore
from wa_relay.replies import (
    FALLBACK_GENERIC,
    FALLBACK_GREETING,
    FALLBACK_THANKS,
    CompletionReplyGenerator,
    GreetingReplyGenerator,
    clamp_reply,
    fallback_reply,
    is_greeting,
)


class FakeModel:
    """Fake model that records messages and returns a fixed answer."""

    def __init__(self, content: Any = "dummy answer") -> None:
        self.content = content
        self.called_messages: list[list[Any]] = []

    def invoke(self, messages: list[Any]) -> Any:
        self.called_messages.append(messages)
        return type("Response", (), {"content": self.content})()


class FailingModel:
    def invoke(self, messages: list[Any]) -> Any:
        raise TimeoutError("simulated completion timeout")


def _use_model(monkeypatch: pytest.MonkeyPatch, model: Any) -> None:
    monkeypatch.setattr("wa_relay.llm.get_model", lambda: model)


# --- clamp_reply ---


def test_clamp_keeps_short_text() -> None:
    assert clamp_reply("short", 1000) == "short"


def test_clamp_keeps_text_exactly_at_the_cap() -> None:
    text = "x" * 1000
    assert clamp_reply(text, 1000) == text


def test_clamp_truncates_with_ellipsis() -> None:
    out = clamp_reply("word " * 400, 1000)
    assert len(out) <= 1000
    assert out.endswith("...")


def test_clamp_with_tiny_budget() -> None:
    assert clamp_reply("abcdef", 2) == "ab"


# --- greeting rule ---


@pytest.mark.parametrize("text", ["Hi there", "HELLO", "hey!", "oh hi"])
def test_is_greeting(text: str) -> None:
    assert is_greeting(text)


@pytest.mark.parametrize("text", ["What time is it?", "ok", "Good morning"])
def test_is_not_greeting(text: str) -> None:
    assert not is_greeting(text)


def test_greeting_generator() -> None:
    generator = GreetingReplyGenerator()
    assert generator.generate("918928417703", "Hi there") == "hello"
    assert generator.generate("918928417703", "what is the price?") is None


# --- fallback ---


def test_fallback_reply_selection() -> None:
    assert fallback_reply("Hello bot") == FALLBACK_GREETING
    assert fallback_reply("hi") == FALLBACK_GREETING
    assert fallback_reply("Thank you so much") == FALLBACK_THANKS
    assert fallback_reply("What is the weather?") == FALLBACK_GENERIC


# --- completion generator ---


def test_completion_sends_system_prompt_and_user_text(monkeypatch: pytest.MonkeyPatch) -> None:
    model = FakeModel("  Sure, here you go.  ")
    _use_model(monkeypatch, model)
    generator = CompletionReplyGenerator(ConversationStore(), system_prompt="Be brief.")

    reply = generator.generate("918928417703", "Tell me a joke")

    assert reply == "Sure, here you go."
    messages = model.called_messages[0]
    assert len(messages) == 2
    assert isinstance(messages[0], SystemMessage)
    assert messages[0].content == "Be brief."
    assert isinstance(messages[1], HumanMessage)
    assert messages[1].content == "Tell me a joke"


def test_completion_without_system_prompt(monkeypatch: pytest.MonkeyPatch) -> None:
    model = FakeModel()
    _use_model(monkeypatch, model)
    generator = CompletionReplyGenerator(ConversationStore(), system_prompt="")

    generator.generate("a", "hello")

    assert [type(m) for m in model.called_messages[0]] == [HumanMessage]


def test_completion_includes_previous_turns(monkeypatch: pytest.MonkeyPatch) -> None:
    model = FakeModel("answer")
    _use_model(monkeypatch, model)
    store = ConversationStore()
    generator = CompletionReplyGenerator(store, system_prompt="Be brief.")

    generator.generate("a", "first question")
    generator.generate("a", "second question")

    second_call = model.called_messages[1]
    assert [type(m) for m in second_call] == [
        SystemMessage,
        HumanMessage,
        AIMessage,
        HumanMessage,
    ]
    assert second_call[1].content == "first question"
    assert second_call[2].content == "answer"
    assert len(store.window("a")) == 4


def test_completion_history_is_per_sender(monkeypatch: pytest.MonkeyPatch) -> None:
    model = FakeModel()
    _use_model(monkeypatch, model)
    generator = CompletionReplyGenerator(ConversationStore(), system_prompt=None)

    generator.generate("a", "from a")
    generator.generate("b", "from b")

    assert len(model.called_messages[1]) == 1


def test_completion_reply_is_clamped(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_model(monkeypatch, FakeModel("a" * 5000))
    generator = CompletionReplyGenerator(ConversationStore(), max_chars=300)

    reply = generator.generate("a", "write an essay")

    assert len(reply) == 300
    assert reply.endswith("...")


def test_completion_failure_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_model(monkeypatch, FailingModel())
    store = ConversationStore()
    generator = CompletionReplyGenerator(store)

    assert generator.generate("a", "Hi there") == FALLBACK_GREETING
    assert generator.generate("a", "thanks!") == FALLBACK_THANKS
    assert generator.generate("a", "why?") == FALLBACK_GENERIC
    # Failed exchanges are not remembered
    assert store.window("a") == []


def test_empty_completion_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_model(monkeypatch, FakeModel("   "))
    generator = CompletionReplyGenerator(ConversationStore())

    assert generator.generate("a", "what?") == FALLBACK_GENERIC


def test_completion_content_blocks_are_joined(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_model(monkeypatch, FakeModel([{"type": "text", "text": "Hello "}, {"text": "there"}]))
    generator = CompletionReplyGenerator(ConversationStore())

    assert generator.generate("a", "hey") == "Hello there"


def test_window_never_starts_with_an_assistant_turn(monkeypatch: pytest.MonkeyPatch) -> None:
    model = FakeModel("answer")
    _use_model(monkeypatch, model)
    # Odd cap: after two exchanges the window is [a1, q2, a2]
    store = ConversationStore(max_turns=3)
    generator = CompletionReplyGenerator(store, system_prompt=None)

    generator.generate("a", "q1")
    generator.generate("a", "q2")
    generator.generate("a", "q3")

    third_call = model.called_messages[2]
    assert [type(m) for m in third_call] == [HumanMessage, AIMessage, HumanMessage]
    assert [m.content for m in third_call] == ["q2", "answer", "q3"]
