"""Framing utilities for snapcodec.

This module provides the marker-byte framing shared by the encoder and the
decoder.
"""

from __future__ import annotations

from .marker import MARKER_SIZE, check_marker, frame, marker_for

__all__ = [
    "MARKER_SIZE",
    "marker_for",
    "frame",
    "check_marker",
]
