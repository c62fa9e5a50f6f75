"""Context usage monitoring."""

from .usage import (
    DEFAULT_USAGE_THRESHOLDS,
    UsageThresholds,
    get_context_status,
    get_context_usage_percent,
    get_context_warning_level,
    should_summarize_conversation,
    will_exceed_context_limit,
)

__all__ = [
    "DEFAULT_USAGE_THRESHOLDS",
    "UsageThresholds",
    "get_context_status",
    "get_context_usage_percent",
    "get_context_warning_level",
    "should_summarize_conversation",
    "will_exceed_context_limit",
]
