"""Utility functions for snapcodec.

Sizing helpers live in :mod:`snapcodec.utils.sizing`; they depend on the codec
and are exported from the top-level package.
"""

from __future__ import annotations

from .diff import first_difference

__all__ = [
    "first_difference",
]
