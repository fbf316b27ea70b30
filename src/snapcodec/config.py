"""Configuration for encoders and decoders.

This module provides configuration dataclasses. They are plain values: an
encoder or decoder copies what it needs at construction time, so one config
can be shared by many instances.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional


@dataclass
class EncoderConfig:
    """Configuration for an Encoder.

    Attributes:
        break_offset: Byte position no write may cross (default None, disabled).
            Any write whose completion would push the buffer past this offset
            raises BreakOffsetError without writing anything. Used to simulate
            truncated writes in tests.
    """

    break_offset: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.break_offset is not None and self.break_offset < 0:
            raise ValueError(f"break_offset must be non-negative, got {self.break_offset}")


@dataclass
class DecoderConfig:
    """Configuration for a Decoder.

    Attributes:
        factories: Zero-argument callables keyed by type, preloaded into each
            decoder's factory registry. Each decoder gets its own copy, so
            later ``register_factory`` calls stay local to that decoder.
    """

    factories: Dict[type, Callable[[], Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        for tp, factory in self.factories.items():
            if not callable(factory):
                raise ValueError(f"Factory for {tp!r} must be callable")
