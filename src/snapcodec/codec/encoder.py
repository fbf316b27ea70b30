"""Binary encoder.

This module provides the Encoder class that turns typed values into a flat,
append-only byte buffer. Every raw byte run is framed with a marker byte (see
:mod:`snapcodec.framing.marker`); typed writes dispatch per type as described
in :mod:`snapcodec.codec.dispatch`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sized
from typing import Any, Optional

from ..config import EncoderConfig
from ..exceptions import BreakOffsetError, EncodeError
from ..framing.marker import MARKER_SIZE, marker_for
from ..utils.diff import first_difference
from . import schema
from .atomic import Atomic
from .dispatch import Strategy, encoder_strategy, free_serializer
from .scalars import raw_ctype, to_raw, u8, u64
from .strings import unit_codec

logger = logging.getLogger(__name__)


class Encoder:
    """Accumulates framed values into a growable byte buffer.

    Example:
        >>> encoder = Encoder()
        >>> encoder.write(True)
        >>> encoder.write(42, i32)
        >>> encoder.write_optional("eax", str)
        >>> data = encoder.to_bytes()
    """

    def __init__(self, config: EncoderConfig | None = None, *, break_offset: int | None = None) -> None:
        """Initialize an empty encoder.

        Args:
            config: Encoder configuration
            break_offset: Shortcut for ``EncoderConfig(break_offset=...)``; wins over ``config``
        """
        config = config or EncoderConfig()
        self._buffer = bytearray()
        self._break_offset: Optional[int] = config.break_offset
        if break_offset is not None:
            self.set_break_offset(break_offset)

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        return f"Encoder(size={len(self._buffer)}, break_offset={self._break_offset})"

    # Primitive path

    def write_data(self, data: bytes | bytearray | memoryview) -> None:
        """Write one frame: the marker byte, then the raw bytes.

        Args:
            data: Any bytes-like object

        Raises:
            BreakOffsetError: If the frame would cross the break offset. Nothing
                is written in that case.
        """
        view = memoryview(data).cast("B")
        length = view.nbytes
        size = len(self._buffer)

        if (
            self._break_offset is not None
            and size <= self._break_offset
            and size + length + MARKER_SIZE > self._break_offset
        ):
            logger.debug("Break offset %d reached at size %d", self._break_offset, size)
            raise BreakOffsetError(
                f"Break offset reached: writing {length + MARKER_SIZE} bytes at offset {size} "
                f"would cross {self._break_offset}"
            )

        self._buffer.append(marker_for(length))
        self._buffer += view

    def write_encoder(self, other: Encoder) -> None:
        """Embed another encoder's whole buffer as a single frame.

        An encoder may embed itself; its current contents are copied first.
        """
        self.write_data(bytes(other._buffer) if other is self else other._buffer)

    # Typed path

    def write(self, value: Any, tp: Any = None) -> None:
        """Write a value using the strategy resolved for its type.

        Args:
            value: Value to encode
            tp: Wire type. Defaults to ``type(value)``. May be a ctypes scalar
                (``write(42, i32)``), a typing annotation
                (``write([1, 2], list[u16])``) or a :class:`TypeSpec`.

        Raises:
            UnsupportedTypeError: If the type has no encoding strategy
            EncodeError: If the value does not fit its wire type
            BreakOffsetError: If the break offset is crossed
        """
        if isinstance(value, Encoder) and tp in (None, Encoder):
            self.write_encoder(value)
            return

        if tp is None:
            tp = type(value)

        if schema.is_annotation(tp):
            self._write_spec(value, schema.type_spec(tp))
            return

        strategy = encoder_strategy(tp)
        if strategy is Strategy.BOOL:
            self.write_data(to_raw(1 if value else 0, u8))
        elif strategy is Strategy.STRING:
            self.write_string(value, tp)
        elif strategy is Strategy.MEMBER:
            value.serialize(self)
        elif strategy is Strategy.FUNCTION:
            free_serializer(tp)(value, self)
        else:
            self.write_data(to_raw(value, raw_ctype(tp)))

    def _write_spec(self, value: Any, spec: schema.TypeSpec) -> None:
        if spec.kind == schema.VALUE:
            self.write(value, spec.python_type)
        elif spec.kind == schema.OPTIONAL:
            self.write_optional(value, spec.args[0])
        elif spec.kind == schema.VECTOR:
            self.write_vector(value, spec.args[0])
        elif spec.kind == schema.LIST:
            self.write_list(value, spec.args[0])
        elif spec.kind == schema.MAP:
            self.write_map(value, spec.args[0], spec.args[1])
        else:
            raise EncodeError(f"Unknown type spec kind: {spec.kind}")

    # Derived writers

    def write_atomic(self, cell: Atomic[Any], tp: Any = None) -> None:
        """Write the current value of an atomic cell as a plain value."""
        self.write(cell.load(), tp if tp is not None else cell.value_type)

    def write_optional(self, value: Any, tp: Any = None) -> None:
        """Write a presence flag, then the value unless it is None."""
        self.write(value is not None)
        if value is not None:
            self.write(value, tp)

    def write_span(self, values: Sized, tp: Any = None) -> None:
        """Write an 8-byte element count followed by each element."""
        self.write(len(values), u64)
        for value in values:
            self.write(value, tp)

    def write_vector(self, values: Sized, tp: Any = None) -> None:
        self.write_span(values, tp)

    def write_list(self, values: Iterable[Any], tp: Any = None) -> None:
        """Write a node-based sequence (e.g. ``deque``); no random access is used."""
        if not isinstance(values, Sized):
            values = list(values)
        self.write(len(values), u64)
        for value in values:
            self.write(value, tp)

    def write_string(self, value: str | bytes, kind: Any = None) -> None:
        """Write a string as an 8-byte unit count followed by one frame per unit.

        Args:
            value: String to write
            kind: String kind (``str``, ``bytes``, ``WideString``, ``U16String``);
                defaults to ``type(value)``
        """
        codec = unit_codec(kind if kind is not None else type(value))
        units = memoryview(codec.to_units(value))
        size = codec.unit_size

        self.write(len(units) // size, u64)
        for start in range(0, len(units), size):
            self.write_data(units[start : start + size])

    def write_map(self, mapping: Mapping[Any, Any], key_tp: Any = None, value_tp: Any = None) -> None:
        """Write an 8-byte entry count, then each key and value in iteration order."""
        self.write(len(mapping), u64)
        for key, value in mapping.items():
            self.write(key, key_tp)
            self.write(value, value_tp)

    # Buffer access

    def get_buffer(self) -> memoryview:
        """Return a read-only view of the buffer.

        While the view is alive the buffer cannot grow; release it before
        writing again.
        """
        return memoryview(self._buffer).toreadonly()

    def to_bytes(self) -> bytes:
        """Return a copy of the buffer."""
        return bytes(self._buffer)

    def move_buffer(self) -> bytearray:
        """Hand the buffer over to the caller and leave the encoder empty."""
        buffer, self._buffer = self._buffer, bytearray()
        return buffer

    def set_break_offset(self, break_offset: int) -> None:
        """Make any write that would cross ``break_offset`` fail."""
        if break_offset < 0:
            raise ValueError(f"break_offset must be non-negative, got {break_offset}")
        self._break_offset = break_offset

    # Diagnostics

    def get_diff(self, other: Encoder) -> int | None:
        """Return the first offset where the two buffers differ.

        If one buffer is a strict prefix of the other, the length of the shorter
        buffer is returned. None means the buffers are byte-identical.
        """
        return first_difference(self._buffer, other._buffer)

    def print_diff(self, other: Encoder) -> int | None:
        """Log the first difference against another encoder, if any."""
        diff = self.get_diff(other)
        if diff is not None:
            logger.warning("Diff at %d", diff)
        return diff
