"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from typing import Callable

import pytest

from snapcodec import Encoder


@pytest.fixture
def encoder() -> Encoder:
    """Fresh encoder for a test."""
    return Encoder()


@pytest.fixture
def native() -> Callable[..., bytes]:
    """Native-order bytes of an integer, as ctypes lays them out."""

    def to_bytes(value: int, size: int, signed: bool = False) -> bytes:
        return value.to_bytes(size, sys.byteorder, signed=signed)

    return to_bytes


@pytest.fixture
def count_frame(native: Callable[..., bytes]) -> Callable[[int], bytes]:
    """Build the 9-byte frame of an 8-byte element count."""

    def build(count: int) -> bytes:
        return b"\x08" + native(count, 8)

    return build
