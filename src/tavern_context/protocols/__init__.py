"""Protocol definitions for tavern-context's pluggable pieces."""

from .tokenizer import Tokenizer

__all__ = ["Tokenizer"]
