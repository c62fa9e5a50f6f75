"""Content formatters that render context blocks within their budgets."""

from .memories import MEMORY_HEADER, format_memories_for_context, rank_memories
from .prompt import CLOSING_INSTRUCTIONS, build_system_prompt
from .summary import SUMMARY_HEADER, format_summary_for_context

__all__ = [
    "CLOSING_INSTRUCTIONS",
    "MEMORY_HEADER",
    "SUMMARY_HEADER",
    "build_system_prompt",
    "format_memories_for_context",
    "format_summary_for_context",
    "rank_memories",
]
