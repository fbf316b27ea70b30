"""Pydantic model layer for snapcodec.

This module provides the SerializableModel class and field helpers for
declaring models whose encoding is derived from their annotations.
"""

from __future__ import annotations

from .base import SerializableModel
from .fields import FixedFloat, FixedInt

__all__ = [
    "SerializableModel",
    "FixedInt",
    "FixedFloat",
]
