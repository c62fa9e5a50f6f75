"""tavern-context: context budget management for roleplay chat requests.

Token Estimation:
    estimate_tokens, quick_estimate_tokens, count_message_tokens,
    count_messages_tokens, truncate_to_token_limit, exceeds_token_limit,
    format_token_count, calculate_available_response_tokens,
    CharRatioEstimator, get_default_estimator

Model Capacity:
    ModelCapacityRegistry, get_default_registry, get_model_context_limit,
    get_model_capacity, get_safe_input_limit, has_extended_context

Budget Allocation:
    AllocationPolicy, ShareRule, DEFAULT_ALLOCATION_POLICY,
    get_recommended_context_allocation, calculate_context_budget

Context Assembly:
    calculate_recent_message_count, select_recent_messages,
    format_memories_for_context, format_summary_for_context,
    build_system_prompt, build_context

Usage Monitoring:
    UsageThresholds, get_context_usage_percent, get_context_warning_level,
    get_context_status, will_exceed_context_limit, should_summarize_conversation

Protocols (extension points):
    Tokenizer

Models & Types:
    Provider, ModelCapacity, ContextBudget, ContextAllocation, ChatMessage,
    ScoredMemory, Character, Persona, ContextLevel, ContextStatus,
    MessageSelection, MemoryContext, SummaryContext, LimitCheck, TokenUsage,
    BuiltContext, MessageDict

Exceptions:
    TavernContextError, CapacityConfigError, TokenBudgetExceededError
"""

from importlib.metadata import PackageNotFoundError, version

from tavern_context.budget import (
    DEFAULT_ALLOCATION_POLICY,
    AllocationPolicy,
    ShareRule,
    calculate_context_budget,
    get_recommended_context_allocation,
)
from tavern_context.context import (
    build_context,
    calculate_recent_message_count,
    select_recent_messages,
)
from tavern_context.exceptions import (
    CapacityConfigError,
    TavernContextError,
    TokenBudgetExceededError,
)
from tavern_context.formatters import (
    build_system_prompt,
    format_memories_for_context,
    format_summary_for_context,
)
from tavern_context.models import (
    BuiltContext,
    Character,
    ChatMessage,
    ContextAllocation,
    ContextBudget,
    ContextLevel,
    ContextStatus,
    LimitCheck,
    MemoryContext,
    MessageDict,
    MessageSelection,
    ModelCapacity,
    Persona,
    Provider,
    ScoredMemory,
    SummaryContext,
    TokenUsage,
)
from tavern_context.monitor import (
    UsageThresholds,
    get_context_status,
    get_context_usage_percent,
    get_context_warning_level,
    should_summarize_conversation,
    will_exceed_context_limit,
)
from tavern_context.protocols import Tokenizer
from tavern_context.registry import (
    ModelCapacityRegistry,
    get_default_registry,
    get_model_capacity,
    get_model_context_limit,
    get_safe_input_limit,
    has_extended_context,
)
from tavern_context.tokens import (
    CharRatioEstimator,
    calculate_available_response_tokens,
    count_message_tokens,
    count_messages_tokens,
    estimate_tokens,
    exceeds_token_limit,
    format_token_count,
    get_default_estimator,
    quick_estimate_tokens,
    truncate_to_token_limit,
)

try:
    __version__ = version("tavern-context")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "DEFAULT_ALLOCATION_POLICY",
    "AllocationPolicy",
    "BuiltContext",
    "CapacityConfigError",
    "CharRatioEstimator",
    "ChatMessage",
    "Character",
    "ContextAllocation",
    "ContextBudget",
    "ContextLevel",
    "ContextStatus",
    "LimitCheck",
    "MemoryContext",
    "MessageDict",
    "MessageSelection",
    "ModelCapacity",
    "ModelCapacityRegistry",
    "Persona",
    "Provider",
    "ScoredMemory",
    "ShareRule",
    "SummaryContext",
    "TavernContextError",
    "TokenBudgetExceededError",
    "TokenUsage",
    "Tokenizer",
    "UsageThresholds",
    "__version__",
    "build_context",
    "build_system_prompt",
    "calculate_available_response_tokens",
    "calculate_context_budget",
    "calculate_recent_message_count",
    "count_message_tokens",
    "count_messages_tokens",
    "estimate_tokens",
    "exceeds_token_limit",
    "format_memories_for_context",
    "format_summary_for_context",
    "format_token_count",
    "get_context_status",
    "get_context_usage_percent",
    "get_context_warning_level",
    "get_default_estimator",
    "get_default_registry",
    "get_model_capacity",
    "get_model_context_limit",
    "get_recommended_context_allocation",
    "get_safe_input_limit",
    "has_extended_context",
    "quick_estimate_tokens",
    "select_recent_messages",
    "should_summarize_conversation",
    "truncate_to_token_limit",
    "will_exceed_context_limit",
]
