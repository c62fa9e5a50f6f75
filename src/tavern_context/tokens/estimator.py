"""Character-ratio token estimation.

Token counts here are approximate: text length divided by a per-provider
characters-per-token ratio, rounded up.
"""

from __future__ import annotations

import functools
import math
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from tavern_context.models.chat import ChatMessage
from tavern_context.models.provider import Provider

DEFAULT_CHARS_PER_TOKEN = 3.5

CHARS_PER_TOKEN: Mapping[Provider, float] = MappingProxyType(
    {
        Provider.ANTHROPIC: 3.5,
        Provider.OPENAI: 3.5,
        # SentencePiece packs slightly more text per token.
        Provider.GOOGLE: 3.8,
        Provider.GROK: 3.5,
        Provider.OLLAMA: 3.5,
        Provider.OPENROUTER: 3.5,
        Provider.OPENAI_COMPATIBLE: 3.5,
        Provider.GAB_AI: 3.5,
        Provider.UNKNOWN: DEFAULT_CHARS_PER_TOKEN,
    }
)

MESSAGE_OVERHEAD_TOKENS = 4
"""Role markers and wrapping tokens added to every message."""

CONVERSATION_OVERHEAD_TOKENS = 3
"""Start/end markers added once per conversation."""

ELLIPSIS = "..."

MessageLike = ChatMessage | Mapping[str, str]


def chars_per_token(provider: Provider | str | None = None) -> float:
    """Return the characters-per-token ratio used for *provider*."""
    return CHARS_PER_TOKEN.get(Provider.parse(provider), DEFAULT_CHARS_PER_TOKEN)


def estimate_tokens(text: str, provider: Provider | str | None = None) -> int:
    """Estimate the token cost of *text*.

    Returns ``0`` for the empty string and is non-decreasing in text length
    for a fixed provider.
    """
    if not text:
        return 0
    return math.ceil(len(text) / chars_per_token(provider))


def quick_estimate_tokens(text: str) -> int:
    """Provider-agnostic 4 chars/token estimate for live UI feedback."""
    if not text:
        return 0
    return math.ceil(len(text) / 4)


def _role_and_content(message: MessageLike) -> tuple[str, str]:
    if isinstance(message, ChatMessage):
        return message.role, message.content
    return str(message.get("role") or ""), str(message.get("content") or "")


def count_message_tokens(message: MessageLike, provider: Provider | str | None = None) -> int:
    """Estimate the cost of one message: content, role label and wrapping overhead."""
    role, content = _role_and_content(message)
    return (
        estimate_tokens(content, provider)
        + estimate_tokens(role, provider)
        + MESSAGE_OVERHEAD_TOKENS
    )


def count_messages_tokens(
    messages: Iterable[MessageLike], provider: Provider | str | None = None
) -> int:
    """Estimate the cost of a whole conversation.

    An empty conversation costs nothing; otherwise the per-conversation
    overhead is added once on top of the per-message costs.
    """
    total = 0
    count = 0
    for message in messages:
        total += count_message_tokens(message, provider)
        count += 1
    if count == 0:
        return 0
    return total + CONVERSATION_OVERHEAD_TOKENS


def calculate_available_response_tokens(
    context_limit: int, used_tokens: int, min_response_tokens: int = 1000
) -> int:
    """Tokens left for the response, never less than *min_response_tokens*."""
    return max(min_response_tokens, context_limit - used_tokens)


def format_token_count(tokens: int) -> str:
    """Format a token count for display, e.g. ``"500"``, ``"1.5k"``, ``"1.5M"``."""
    if tokens >= 1_000_000:
        return f"{tokens / 1_000_000:.1f}M"
    if tokens >= 1000:
        return f"{tokens / 1000:.1f}k"
    return str(tokens)


def exceeds_token_limit(text: str, limit: int, provider: Provider | str | None = None) -> bool:
    """Return ``True`` when the estimated cost of *text* is above *limit*."""
    return estimate_tokens(text, provider) > limit


def truncate_to_token_limit(
    text: str,
    limit_tokens: int,
    provider: Provider | str | None = None,
    marker: str = ELLIPSIS,
) -> str:
    """Cut *text* so its estimate fits *limit_tokens*, appending *marker*.

    Text that already fits (including ``""``) is returned unchanged. A
    truncated result is always shorter than the input and backs off to the
    last space when that keeps at least 80% of the slice. It ends with
    *marker* except when even the marker does not fit *limit_tokens*: if no
    character fits beside the marker, the marker alone is returned when it
    fits, otherwise ``""``.
    """
    if estimate_tokens(text, provider) <= limit_tokens:
        return text

    limit_tokens = max(0, limit_tokens)
    ratio = chars_per_token(provider)
    char_budget = math.floor(limit_tokens * ratio) - len(marker)
    # Guard against float rounding pushing the estimate one token over.
    while char_budget > 0 and math.ceil((char_budget + len(marker)) / ratio) > limit_tokens:
        char_budget -= 1

    if char_budget <= 0:
        return marker if estimate_tokens(marker, provider) <= limit_tokens else ""

    truncated = text[:char_budget]
    last_space = truncated.rfind(" ")
    if last_space > char_budget * 0.8:
        truncated = truncated[:last_space]
    return truncated + marker


class CharRatioEstimator:
    """Tokenizer backed by the character-ratio heuristic for one provider.

    Implements the :class:`~tavern_context.protocols.tokenizer.Tokenizer`
    protocol via structural subtyping, so it can stand in wherever a real
    tokenizer would be accepted.
    """

    __slots__ = ("_marker", "_provider")

    def __init__(self, provider: Provider | str | None = None, marker: str = ELLIPSIS) -> None:
        self._provider = Provider.parse(provider)
        self._marker = marker

    @property
    def provider(self) -> Provider:
        return self._provider

    @property
    def chars_per_token(self) -> float:
        return chars_per_token(self._provider)

    def count_tokens(self, text: str) -> int:
        """Estimate the number of tokens in a text string."""
        return estimate_tokens(text, self._provider)

    def truncate_to_tokens(self, text: str, max_tokens: int) -> str:
        """Truncate text to fit within a token limit, appending the marker."""
        return truncate_to_token_limit(text, max_tokens, self._provider, self._marker)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self._provider.value!r})"


@functools.cache
def get_estimator(provider: Provider = Provider.UNKNOWN) -> CharRatioEstimator:
    """Get the shared estimator for *provider*.

    Call ``get_estimator.cache_clear()`` to reset (useful in tests).
    """
    return CharRatioEstimator(provider)


def get_default_estimator() -> CharRatioEstimator:
    """Get the shared estimator using the default ratio."""
    return get_estimator(Provider.UNKNOWN)
