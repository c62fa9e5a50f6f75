"""Context budget allocation."""

from .allocator import (
    DEFAULT_ALLOCATION_POLICY,
    AllocationPolicy,
    ShareRule,
    calculate_context_budget,
    get_recommended_context_allocation,
)

__all__ = [
    "DEFAULT_ALLOCATION_POLICY",
    "AllocationPolicy",
    "ShareRule",
    "calculate_context_budget",
    "get_recommended_context_allocation",
]
