"""Tests for tavern_context.context.builder."""

from __future__ import annotations

import logging

import pytest

from tavern_context.context.builder import SUMMARIZE_SUGGESTION, build_context
from tavern_context.exceptions import TokenBudgetExceededError
from tavern_context.formatters import MEMORY_HEADER, SUMMARY_HEADER
from tavern_context.models import Character, ChatMessage, Persona
from tavern_context.tokens import count_messages_tokens, estimate_tokens
from tests.conftest import make_memory, make_messages

CLAUDE = "claude-sonnet-4-5-20250929"


class TestBuildContextAssembly:
    """Message layout of the assembled request."""

    def test_system_history_then_new_message(self, character: Character) -> None:
        history = make_messages(4)
        built = build_context(character, history, "Hello there!", "anthropic", CLAUDE)
        assert built.messages[0].role == "system"
        assert built.messages[1:-1] == history
        assert built.messages[-1] == ChatMessage(role="user", content="Hello there!")
        assert built.messages_included == 4
        assert built.messages_truncated is False
        assert built.warnings == []

    def test_system_message_holds_prompt_memories_and_summary(
        self, character: Character, persona: Persona
    ) -> None:
        built = build_context(
            character,
            [],
            "Hi",
            "anthropic",
            CLAUDE,
            persona=persona,
            memories=[make_memory("Sam owes Aria a song.")],
            summary="They met at the tavern door.",
        )
        system = built.messages[0].content
        assert system.startswith(built.system_prompt)
        assert system.index(MEMORY_HEADER) < system.index(SUMMARY_HEADER)
        assert "- Sam owes Aria a song." in system
        assert "You are talking to Sam." in system
        assert built.memories_included == 1
        assert built.included_summary is True

    def test_sections_separated_by_blank_lines(self, character: Character) -> None:
        built = build_context(
            character, [], "Hi", "anthropic", CLAUDE, memories=[make_memory()], summary="S."
        )
        system = built.messages[0].content
        assert f"\n\n{MEMORY_HEADER}\n" in system
        assert f"\n\n{SUMMARY_HEADER}\n" in system

    def test_no_memories_or_summary(self, character: Character) -> None:
        built = build_context(character, [], "Hi", "anthropic", CLAUDE)
        assert built.messages[0].content == built.system_prompt
        assert built.memories_included == 0
        assert built.included_summary is False
        assert built.token_usage.memories == 0
        assert built.token_usage.summary == 0

    def test_overrides_are_applied(self, character: Character) -> None:
        built = build_context(
            character,
            [],
            "Hi",
            "anthropic",
            CLAUDE,
            system_prompt_override="OVERRIDE",
            scenario="A sunny market.",
        )
        assert built.system_prompt.startswith("OVERRIDE")
        assert "Scenario:\nA sunny market." in built.system_prompt
        assert character.scenario not in built.system_prompt

    def test_as_dicts(self, character: Character) -> None:
        built = build_context(character, make_messages(2), "Hi", "anthropic", CLAUDE)
        payload = built.as_dicts()
        assert payload[-1] == {"role": "user", "content": "Hi"}
        assert [m["role"] for m in payload] == ["system", "user", "assistant", "user"]

    def test_accepts_mapping_history(self, character: Character) -> None:
        history = [
            {"role": "user", "content": "Earlier"},
            {"role": "assistant", "content": "Yes"},
        ]
        built = build_context(character, history, "Now", "anthropic", CLAUDE)
        assert built.messages[1] == ChatMessage(role="user", content="Earlier")


class TestBuildContextBudgets:
    """Every category stays within its share of the window."""

    def test_usage_within_input_limit(self, character: Character) -> None:
        memories = [make_memory(f"Memory number {i}.", score=i / 20) for i in range(20)]
        built = build_context(
            character,
            make_messages(30),
            "Hi",
            "ollama",
            "phi3:mini",
            memories=memories,
            summary="A long summary. " * 200,
        )
        usage = built.token_usage
        assert usage.memories <= built.budget.memory_budget
        assert usage.summary <= built.budget.summary_budget
        assert usage.system_prompt <= built.budget.system_prompt_budget
        assert usage.recent_messages <= built.budget.recent_messages_budget
        assert usage.total <= built.budget.input_limit

    def test_token_usage_breakdown(self, character: Character) -> None:
        built = build_context(character, [], "Hi", "anthropic", CLAUDE)
        assert built.token_usage.system_prompt == estimate_tokens(built.system_prompt)
        # "Hi" (1) + "user" (2) + overhead (4)
        assert built.token_usage.new_message == 7
        # "system" (2) + overhead (4) + conversation overhead (3)
        assert built.token_usage.framing == 9
        assert built.token_usage.total == built.token_usage.system_prompt + 7 + 9

    def test_usage_total_matches_payload_cost(
        self, character: Character, persona: Persona
    ) -> None:
        built = build_context(
            character,
            make_messages(12),
            "Hi",
            "anthropic",
            CLAUDE,
            persona=persona,
            memories=[make_memory(), make_memory("Sam owes Aria a song.")],
            summary="They met at the tavern door.",
        )
        assert built.token_usage.total == count_messages_tokens(built.messages, "anthropic")

    def test_payload_with_system_wrapping_fits_input_limit(self, character: Character) -> None:
        history = [ChatMessage(role="user", content="a") for _ in range(2000)]
        built = build_context(
            character, history, "b" * 7000, "ollama", "phi3:mini", strict=True
        )
        assert built.messages_truncated is True
        assert count_messages_tokens(built.messages, "ollama") <= built.budget.input_limit

    def test_max_memories_limits_candidates(self, character: Character) -> None:
        memories = [make_memory(f"Memory {i}.", score=1 - i / 100) for i in range(15)]
        built = build_context(
            character, [], "Hi", "anthropic", CLAUDE, memories=memories, max_memories=3
        )
        assert built.memories_included == 3
        assert "Memory 0." in built.messages[0].content
        assert "Memory 3." not in built.messages[0].content

    def test_negative_max_memories_rejected(self, character: Character) -> None:
        with pytest.raises(ValueError, match="max_memories"):
            build_context(character, [], "Hi", "anthropic", CLAUDE, max_memories=-1)

    def test_oversized_system_prompt_truncated_with_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        character = Character(name="Verbose", description="lore " * 2000)
        with caplog.at_level(logging.WARNING, logger="tavern_context.context.builder"):
            built = build_context(character, [], "Hi", "ollama", "phi3:mini")
        assert built.system_prompt.endswith("...")
        assert estimate_tokens(built.system_prompt) <= built.budget.system_prompt_budget
        assert built.warnings[0].startswith("System prompt (")
        assert "Truncating" in caplog.text


class TestBuildContextTruncation:
    def test_long_history_suggests_summary(self, character: Character) -> None:
        history = make_messages(60, content_chars=350)
        built = build_context(character, history, "Hi", "ollama", "phi3:mini")
        assert built.messages_truncated is True
        assert built.messages_included < 60
        assert SUMMARIZE_SUGGESTION in built.warnings

    def test_token_heavy_short_history_suggests_summary(self, character: Character) -> None:
        history = make_messages(10, content_chars=1400)
        built = build_context(character, history, "Hi", "ollama", "phi3:mini")
        assert built.messages_truncated is True
        # Only 10 messages, but about 4000 tokens against a 4096 token window.
        assert SUMMARIZE_SUGGESTION in built.warnings

    def test_untruncated_history_no_suggestion(self, character: Character) -> None:
        built = build_context(character, make_messages(60), "Hi", "anthropic", CLAUDE)
        assert built.messages_truncated is False
        assert SUMMARIZE_SUGGESTION not in built.warnings

    def test_strict_raises_when_newest_message_overflows(self, character: Character) -> None:
        history = [ChatMessage(role="user", content="a" * 35_000)]
        with pytest.raises(TokenBudgetExceededError) as exc_info:
            build_context(character, history, "Hi", "ollama", "phi3:mini", strict=True)
        assert exc_info.value.used_tokens > exc_info.value.budget_tokens
        assert exc_info.value.budget_tokens == 4096 - 512

    def test_non_strict_keeps_oversized_newest_message(self, character: Character) -> None:
        history = [ChatMessage(role="user", content="a" * 35_000)]
        built = build_context(character, history, "Hi", "ollama", "phi3:mini")
        assert built.messages_included == 1
        assert built.messages_truncated is False
