"""Shared math utilities for tavern-context."""

from __future__ import annotations


def clamp_int(value: int, lo: int, hi: int) -> int:
    """Clamp an integer to [lo, hi]."""
    return max(lo, min(hi, value))
