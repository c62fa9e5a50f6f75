"""Token estimation utilities."""

from .estimator import (
    CHARS_PER_TOKEN,
    CONVERSATION_OVERHEAD_TOKENS,
    DEFAULT_CHARS_PER_TOKEN,
    ELLIPSIS,
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

__all__ = [
    "CHARS_PER_TOKEN",
    "CONVERSATION_OVERHEAD_TOKENS",
    "DEFAULT_CHARS_PER_TOKEN",
    "ELLIPSIS",
    "MESSAGE_OVERHEAD_TOKENS",
    "CharRatioEstimator",
    "calculate_available_response_tokens",
    "chars_per_token",
    "count_message_tokens",
    "count_messages_tokens",
    "estimate_tokens",
    "exceeds_token_limit",
    "format_token_count",
    "get_default_estimator",
    "get_estimator",
    "quick_estimate_tokens",
    "truncate_to_token_limit",
]
