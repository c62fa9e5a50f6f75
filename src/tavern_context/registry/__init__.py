"""Model capacity lookup."""

from .capacity import (
    DEFAULT_RESPONSE_RESERVE,
    EXTENDED_CONTEXT_THRESHOLD,
    GLOBAL_DEFAULT_CONTEXT,
    MIN_CONTEXT_TOKENS,
    MODEL_CONTEXT_LIMITS,
    PROVIDER_DEFAULT_CONTEXT,
    CapacityOverrides,
    ModelCapacityRegistry,
    get_default_registry,
    get_model_capacity,
    get_model_context_limit,
    get_safe_input_limit,
    has_extended_context,
)

__all__ = [
    "DEFAULT_RESPONSE_RESERVE",
    "EXTENDED_CONTEXT_THRESHOLD",
    "GLOBAL_DEFAULT_CONTEXT",
    "MIN_CONTEXT_TOKENS",
    "MODEL_CONTEXT_LIMITS",
    "PROVIDER_DEFAULT_CONTEXT",
    "CapacityOverrides",
    "ModelCapacityRegistry",
    "get_default_registry",
    "get_model_capacity",
    "get_model_context_limit",
    "get_safe_input_limit",
    "has_extended_context",
]
