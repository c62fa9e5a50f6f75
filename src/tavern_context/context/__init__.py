"""History selection and full request assembly."""

from .builder import DEFAULT_MAX_MEMORIES, SUMMARIZE_SUGGESTION, build_context
from .selector import (
    DEFAULT_TOKENS_PER_MESSAGE,
    MAX_RECENT_MESSAGES,
    MIN_RECENT_MESSAGES,
    calculate_recent_message_count,
    select_recent_messages,
)

__all__ = [
    "DEFAULT_MAX_MEMORIES",
    "DEFAULT_TOKENS_PER_MESSAGE",
    "MAX_RECENT_MESSAGES",
    "MIN_RECENT_MESSAGES",
    "SUMMARIZE_SUGGESTION",
    "build_context",
    "calculate_recent_message_count",
    "select_recent_messages",
]
