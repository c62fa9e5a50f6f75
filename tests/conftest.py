"""Shared fixtures for tavern-context tests."""

from __future__ import annotations

import pytest

from tavern_context.models import Character, ChatMessage, Persona, ScoredMemory
from tavern_context.registry import get_default_registry
from tavern_context.tokens import get_estimator


def make_messages(
    count: int, content_chars: int = 35, role: str | None = None
) -> list[ChatMessage]:
    """Build messages of fixed size, alternating user/assistant unless *role* is given.

    With the default ratio a 35-char ``user`` message costs 16 tokens
    (10 content + 2 role + 4 overhead).
    """
    messages: list[ChatMessage] = []
    for i in range(count):
        msg_role = role or ("user" if i % 2 == 0 else "assistant")
        body = f"{i:03d}" + "a" * max(0, content_chars - 3)
        messages.append(ChatMessage(role=msg_role, content=body))
    return messages


def make_memory(
    text: str = "Aria fears deep water.",
    *,
    score: float = 0.5,
    importance: float = 0.5,
    summary: str = "",
) -> ScoredMemory:
    """Build a ScoredMemory with sensible test defaults."""
    return ScoredMemory(content=text, summary=summary, score=score, importance=importance)


@pytest.fixture(autouse=True)
def _clear_caches() -> None:
    """Reset cached singletons so tests never share registry/estimator state."""
    get_default_registry.cache_clear()
    get_estimator.cache_clear()


@pytest.fixture
def character() -> Character:
    """Return a fully populated character."""
    return Character(
        name="Aria",
        description="A wandering bard with a silver lute.",
        personality="Warm, witty and a little reckless.",
        scenario="A rainy night in a crowded tavern.",
        example_dialogues="Aria: Another song, friend?",
        system_prompt="You write vivid, immersive prose.",
    )


@pytest.fixture
def persona() -> Persona:
    """Return a fully populated persona."""
    return Persona(
        name="Sam",
        description="A tired traveler looking for shelter.",
        personality_traits="curious, cautious",
    )
