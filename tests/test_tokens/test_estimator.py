"""Tests for tavern_context.tokens.estimator."""

from __future__ import annotations

import pytest

from tavern_context.models import ChatMessage, Provider
from tavern_context.protocols.tokenizer import Tokenizer
from tavern_context.tokens.estimator import (
    CONVERSATION_OVERHEAD_TOKENS,
    MESSAGE_OVERHEAD_TOKENS,
    CharRatioEstimator,
    calculate_available_response_tokens,
    chars_per_token,
    count_message_tokens,
    count_messages_tokens,
    estimate_tokens,
    exceeds_token_limit,
    format_token_count,
    get_default_estimator,
    get_estimator,
    quick_estimate_tokens,
    truncate_to_token_limit,
)

LONG_TEXT = "word " * 100

# ---------------------------------------------------------------------------
# estimate_tokens
# ---------------------------------------------------------------------------


class TestEstimateTokens:
    """Character-ratio estimate."""

    def test_empty_string_is_zero(self) -> None:
        assert estimate_tokens("") == 0
        assert estimate_tokens("", Provider.GOOGLE) == 0

    def test_rounds_up(self) -> None:
        # 5 chars / 3.5 = 1.43 -> 2
        assert estimate_tokens("hello") == 2

    def test_exact_multiple(self) -> None:
        assert estimate_tokens("a" * 35) == 10

    def test_google_packs_more_chars_per_token(self) -> None:
        text = "a" * 38
        assert estimate_tokens(text) == 11
        assert estimate_tokens(text, Provider.GOOGLE) == 10

    def test_provider_accepts_strings(self) -> None:
        assert estimate_tokens("a" * 38, "Google") == 10

    def test_unknown_provider_uses_default_ratio(self) -> None:
        assert estimate_tokens("a" * 38, "no-such-provider") == 11

    def test_non_decreasing_in_length(self) -> None:
        previous = 0
        for length in range(0, 300):
            current = estimate_tokens("x" * length)
            assert current >= previous
            previous = current

    def test_non_decreasing_for_google(self) -> None:
        counts = [estimate_tokens("x" * n, Provider.GOOGLE) for n in range(200)]
        assert counts == sorted(counts)


class TestCharsPerToken:
    def test_default_ratio(self) -> None:
        assert chars_per_token() == 3.5
        assert chars_per_token(Provider.ANTHROPIC) == 3.5

    def test_google_ratio(self) -> None:
        assert chars_per_token(Provider.GOOGLE) == 3.8


class TestQuickEstimate:
    def test_empty(self) -> None:
        assert quick_estimate_tokens("") == 0

    def test_four_chars_per_token(self) -> None:
        assert quick_estimate_tokens("abcd") == 1
        assert quick_estimate_tokens("abcde") == 2


# ---------------------------------------------------------------------------
# message counting
# ---------------------------------------------------------------------------


class TestCountMessageTokens:
    """Per-message cost: content + role + overhead."""

    def test_chat_message(self) -> None:
        message = ChatMessage(role="user", content="a" * 35)
        # 10 content + 2 role + 4 overhead
        assert count_message_tokens(message) == 16

    def test_mapping_message(self) -> None:
        assert count_message_tokens({"role": "user", "content": "a" * 35}) == 16

    def test_empty_message_costs_overhead_plus_role(self) -> None:
        assert count_message_tokens(ChatMessage(role="", content="")) == MESSAGE_OVERHEAD_TOKENS

    def test_longer_role_costs_more(self) -> None:
        short = count_message_tokens(ChatMessage(role="user", content="hi"))
        long = count_message_tokens(ChatMessage(role="assistant", content="hi"))
        assert long > short


class TestCountMessagesTokens:
    """Whole-conversation cost."""

    def test_empty_list_is_zero(self) -> None:
        assert count_messages_tokens([]) == 0

    def test_adds_conversation_overhead_once(self) -> None:
        message = ChatMessage(role="user", content="a" * 35)
        assert count_messages_tokens([message]) == 16 + CONVERSATION_OVERHEAD_TOKENS
        assert count_messages_tokens([message, message]) == 32 + CONVERSATION_OVERHEAD_TOKENS

    def test_total_exceeds_first_message_alone(self) -> None:
        messages = [
            ChatMessage(role="user", content="hello"),
            ChatMessage(role="assistant", content=""),
        ]
        assert count_messages_tokens(messages) > count_message_tokens(messages[0])

    def test_accepts_generators(self) -> None:
        messages = (ChatMessage(role="user", content="a" * 35) for _ in range(3))
        assert count_messages_tokens(messages) == 48 + CONVERSATION_OVERHEAD_TOKENS


# ---------------------------------------------------------------------------
# formatting and limits
# ---------------------------------------------------------------------------


class TestFormatTokenCount:
    def test_small_counts_as_is(self) -> None:
        assert format_token_count(500) == "500"
        assert format_token_count(0) == "0"
        assert format_token_count(999) == "999"

    def test_thousands(self) -> None:
        assert format_token_count(1500) == "1.5k"
        assert format_token_count(1000) == "1.0k"

    def test_millions(self) -> None:
        assert format_token_count(1_500_000) == "1.5M"


class TestLimits:
    def test_exceeds_token_limit(self) -> None:
        assert exceeds_token_limit("a" * 36, 10) is True
        assert exceeds_token_limit("a" * 35, 10) is False

    def test_available_response_tokens(self) -> None:
        assert calculate_available_response_tokens(8192, 2000) == 6192

    def test_available_response_tokens_has_minimum(self) -> None:
        assert calculate_available_response_tokens(8192, 8000) == 1000
        assert calculate_available_response_tokens(8192, 8000, min_response_tokens=50) == 192


# ---------------------------------------------------------------------------
# truncate_to_token_limit
# ---------------------------------------------------------------------------


class TestTruncateToTokenLimit:
    """Budget-respecting truncation with an ellipsis marker."""

    def test_text_within_limit_unchanged(self) -> None:
        assert truncate_to_token_limit("Short text.", 100) == "Short text."

    def test_empty_string_unchanged(self) -> None:
        assert truncate_to_token_limit("", 5) == ""
        assert truncate_to_token_limit("", 0) == ""

    def test_long_text_shorter_and_ends_with_marker(self) -> None:
        result = truncate_to_token_limit(LONG_TEXT, 10)
        assert len(result) < len(LONG_TEXT)
        assert result.endswith("...")

    def test_result_fits_limit(self) -> None:
        for limit in range(1, 60):
            result = truncate_to_token_limit(LONG_TEXT, limit)
            assert estimate_tokens(result) <= limit

    def test_result_fits_limit_for_google(self) -> None:
        for limit in range(1, 60):
            result = truncate_to_token_limit(LONG_TEXT, limit, Provider.GOOGLE)
            assert estimate_tokens(result, Provider.GOOGLE) <= limit

    def test_backs_off_to_word_boundary(self) -> None:
        result = truncate_to_token_limit(LONG_TEXT, 10)
        assert result == "word word word word word word..."

    def test_no_word_boundary_hard_cut(self) -> None:
        result = truncate_to_token_limit("a" * 100, 10)
        assert result == "a" * 32 + "..."

    def test_tiny_limit_returns_marker_alone(self) -> None:
        assert truncate_to_token_limit(LONG_TEXT, 1) == "..."

    def test_zero_limit_returns_empty(self) -> None:
        assert truncate_to_token_limit(LONG_TEXT, 0) == ""

    def test_negative_limit_returns_empty(self) -> None:
        assert truncate_to_token_limit(LONG_TEXT, -5) == ""

    def test_marker_over_limit_returns_empty_without_marker(self) -> None:
        # " [truncated]" alone costs 4 tokens
        assert truncate_to_token_limit(LONG_TEXT, 2, marker=" [truncated]") == ""

    def test_custom_marker(self) -> None:
        result = truncate_to_token_limit(LONG_TEXT, 10, marker=" [cut]")
        assert result.endswith(" [cut]")
        assert estimate_tokens(result) <= 10


# ---------------------------------------------------------------------------
# CharRatioEstimator and the Tokenizer protocol
# ---------------------------------------------------------------------------


class TestCharRatioEstimator:
    def test_satisfies_tokenizer_protocol(self) -> None:
        assert isinstance(CharRatioEstimator(), Tokenizer)

    def test_shared_estimators_satisfy_protocol(self) -> None:
        tokenizer: Tokenizer = get_estimator(Provider.GOOGLE)
        assert isinstance(tokenizer, Tokenizer)
        assert tokenizer.count_tokens("") == 0
        assert tokenizer.truncate_to_tokens("short", 10) == "short"

    def test_count_tokens_matches_function(self) -> None:
        estimator = CharRatioEstimator(Provider.GOOGLE)
        assert estimator.count_tokens("a" * 38) == estimate_tokens("a" * 38, Provider.GOOGLE)

    def test_truncate_to_tokens(self) -> None:
        estimator = CharRatioEstimator()
        result = estimator.truncate_to_tokens(LONG_TEXT, 10)
        assert estimator.count_tokens(result) <= 10
        assert result.endswith("...")

    def test_custom_marker(self) -> None:
        estimator = CharRatioEstimator(marker="~")
        assert estimator.truncate_to_tokens(LONG_TEXT, 10).endswith("~")

    def test_properties(self) -> None:
        estimator = CharRatioEstimator("google")
        assert estimator.provider is Provider.GOOGLE
        assert estimator.chars_per_token == pytest.approx(3.8)

    def test_repr(self) -> None:
        assert repr(CharRatioEstimator("openai")) == "CharRatioEstimator(provider='openai')"


class TestGetEstimator:
    def test_default_estimator_is_cached(self) -> None:
        assert get_default_estimator() is get_default_estimator()

    def test_per_provider_instances(self) -> None:
        assert get_estimator(Provider.GOOGLE) is get_estimator(Provider.GOOGLE)
        assert get_estimator(Provider.GOOGLE) is not get_default_estimator()

    def test_cache_clear_creates_new_instance(self) -> None:
        first = get_default_estimator()
        get_estimator.cache_clear()
        assert get_default_estimator() is not first
