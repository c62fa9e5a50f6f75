"""Core data models for tavern-context."""

from .budget import ContextAllocation, ContextBudget
from .capacity import ModelCapacity
from .chat import Character, ChatMessage, Persona, ScoredMemory
from .provider import Provider
from .results import (
    BuiltContext,
    ContextLevel,
    ContextStatus,
    LimitCheck,
    MemoryContext,
    MessageDict,
    MessageSelection,
    SummaryContext,
    TokenUsage,
)

__all__ = [
    "BuiltContext",
    "Character",
    "ChatMessage",
    "ContextAllocation",
    "ContextBudget",
    "ContextLevel",
    "ContextStatus",
    "LimitCheck",
    "MemoryContext",
    "MessageDict",
    "MessageSelection",
    "ModelCapacity",
    "Persona",
    "Provider",
    "ScoredMemory",
    "SummaryContext",
    "TokenUsage",
]
