"""Binary decoder.

This module provides the Decoder class that rebuilds typed values from a
buffer produced by :class:`~snapcodec.codec.encoder.Encoder`. The decoder
borrows a read-only view of the caller's buffer and reads it front to back;
the sequence of reads must match the sequence of writes in type and order.

A decoder that raised an error is left in a failed state and must be
discarded: every later read raises :class:`DecoderFailedError`.
"""

from __future__ import annotations

import collections
import ctypes
import logging
from collections.abc import MutableMapping
from typing import Any, Callable, Deque, Dict, List, Optional, TypeVar

from ..config import DecoderConfig
from ..exceptions import (
    BoundsError,
    ConstructionError,
    DecodeError,
    DecoderFailedError,
    UnsupportedTypeError,
)
from ..framing.marker import MARKER_SIZE, check_marker
from . import schema
from .atomic import Atomic
from .dispatch import Construction, Strategy, construction, decoder_strategy, free_deserializer
from .encoder import Encoder
from .scalars import fill_raw, from_raw, is_raw_copyable, raw_ctype, u8, u64
from .strings import unit_codec

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Decoder:
    """Reads framed values from a borrowed buffer.

    Example:
        >>> decoder = Decoder(encoder)
        >>> decoder.read(bool)
        True
        >>> decoder.read(i32)
        42
        >>> decoder.read_optional(str)
        'eax'
    """

    def __init__(self, source: Any, config: DecoderConfig | None = None) -> None:
        """Initialize a decoder over ``source``.

        Args:
            source: Encoder, bytes, bytearray, memoryview or any C-contiguous
                buffer. It is not copied; it must stay unmodified while the
                decoder is in use.
            config: Decoder configuration (preloaded factories)
        """
        config = config or DecoderConfig()
        if isinstance(source, Encoder):
            source = source.get_buffer()
        self._view = memoryview(source).cast("B").toreadonly()
        self._offset = 0
        self._failed = False
        self._factories: Dict[type, Callable[[], Any]] = dict(config.factories)

    def __repr__(self) -> str:
        return f"Decoder(offset={self._offset}, size={self._view.nbytes}, failed={self._failed})"

    @property
    def failed(self) -> bool:
        """True once a read has failed; the decoder is unusable from then on."""
        return self._failed

    def _fail(self, error: DecodeError) -> DecodeError:
        self._failed = True
        return error

    # Primitive path

    def read_data(self, length: int) -> memoryview:
        """Read one frame of ``length`` payload bytes.

        Returns:
            Read-only view into the source (no copy)

        Raises:
            BoundsError: If fewer than ``length`` + 1 bytes remain
            FramingCorruptionError: If the marker byte does not match
            DecoderFailedError: If an earlier read failed
        """
        if self._failed:
            raise DecoderFailedError("Decoder is unusable after a failed read")
        if length < 0:
            raise ValueError(f"Read length must be non-negative, got {length}")

        if self._offset + length + MARKER_SIZE > self._view.nbytes:
            raise self._fail(
                BoundsError(
                    f"Out of bounds read: need {length + MARKER_SIZE} bytes at offset "
                    f"{self._offset}, have {self._view.nbytes - self._offset}"
                )
            )

        try:
            check_marker(self._view[self._offset], length, self._offset)
        except DecodeError as e:
            raise self._fail(e) from None

        start = self._offset + MARKER_SIZE
        self._offset = start + length
        return self._view[start : self._offset]

    def read_raw(self, dest: bytearray | memoryview, length: int) -> None:
        """Copy one frame of ``length`` bytes into a writable buffer."""
        data = self.read_data(length)
        memoryview(dest).cast("B")[:length] = data

    def read_embedded(self, length: int) -> Decoder:
        """Read a frame written by ``Encoder.write_encoder`` as a sub-decoder.

        The sub-decoder shares this decoder's factories.
        """
        sub = Decoder(self.read_data(length))
        sub._factories = dict(self._factories)
        return sub

    # Typed path

    def register_factory(self, tp: type[T], factory: Callable[[], T]) -> None:
        """Register a zero-argument callable producing fresh ``tp`` instances.

        Only used for types that have neither ``from_decoder`` nor a no-argument
        constructor. Registration is local to this decoder.
        """
        if not callable(factory):
            raise TypeError(f"Factory for {tp.__name__} must be callable")
        self._factories[tp] = factory
        logger.debug("Registered factory for %s", tp.__qualname__)

    def read(self, tp: Any) -> Any:
        """Construct a value of ``tp`` and fill it from the buffer.

        Args:
            tp: Type to read. May be a ctypes scalar, a typing annotation or a
                :class:`TypeSpec`.

        Returns:
            The decoded value. Simple ctypes scalars come back as Python values.

        Raises:
            UnsupportedTypeError: If the type has no decoding strategy
            ConstructionError: If no instance of ``tp`` can be created
            DecodeError: If the data is truncated or corrupted
        """
        if schema.is_annotation(tp):
            return self._read_spec(schema.type_spec(tp))

        how = construction(tp)
        if how is Construction.SELF_DECODING:
            # Remaining fields: free deserializer, else raw copy
            obj = tp.from_decoder(self)
            deserialize = free_deserializer(tp)
            if deserialize is not None:
                deserialize(obj, self)
            elif is_raw_copyable(tp):
                fill_raw(obj, self.read_data(ctypes.sizeof(raw_ctype(tp))))
            return obj

        strategy = decoder_strategy(tp)
        if strategy is Strategy.BOOL:
            return from_raw(self.read_data(1), u8) != 0
        if strategy is Strategy.STRING:
            return self.read_string(tp)
        if strategy is Strategy.RAW:
            ctype = raw_ctype(tp)
            return from_raw(self.read_data(ctypes.sizeof(ctype)), ctype)

        obj = self._construct(tp, how)
        self.read_into(obj, tp)
        return obj

    def _construct(self, tp: type, how: Construction) -> Any:
        if how is Construction.DEFAULT:
            return tp()

        factory = self._factories.get(tp)
        if factory is None:
            logger.debug("No factory registered for %s", tp.__qualname__)
            raise self._fail(
                ConstructionError(f"Object construction failed. Missing factory for type: {tp.__qualname__}")
            )
        return factory()

    def read_into(self, obj: Any, tp: Any = None) -> None:
        """Fill an existing object in place.

        Raises:
            UnsupportedTypeError: If the type has no decoding strategy or its
                values are immutable (bool, str, Python scalars)
        """
        if tp is None:
            tp = type(obj)

        strategy = decoder_strategy(tp)
        if strategy is Strategy.MEMBER:
            obj.deserialize(self)
        elif strategy is Strategy.FUNCTION:
            free_deserializer(tp)(obj, self)
        elif strategy is Strategy.RAW and not isinstance(obj, (int, float)):
            fill_raw(obj, self.read_data(ctypes.sizeof(raw_ctype(tp))))
        else:
            raise UnsupportedTypeError(f"{type(obj).__name__} values cannot be filled in place; use read()")

    def _read_spec(self, spec: schema.TypeSpec) -> Any:
        if spec.kind == schema.VALUE:
            return self.read(spec.python_type)
        if spec.kind == schema.OPTIONAL:
            return self.read_optional(spec.args[0])
        if spec.kind == schema.VECTOR:
            return self.read_vector(spec.args[0])
        if spec.kind == schema.LIST:
            return self.read_list(spec.args[0])
        if spec.kind == schema.MAP:
            return self.read_map(spec.args[0], spec.args[1])
        raise DecodeError(f"Unknown type spec kind: {spec.kind}")

    # Derived readers

    def read_atomic(self, cell: Atomic[Any], tp: Any = None) -> None:
        """Read a plain value and store it into an atomic cell."""
        cell.store(self.read(tp if tp is not None else cell.value_type))

    def read_optional(self, tp: Any, factory: Optional[Callable[[], Any]] = None) -> Any:
        """Read a presence flag and, if set, the value.

        Args:
            tp: Type of the value
            factory: Optional zero-argument callable producing the instance to
                fill, for types that cannot be constructed otherwise

        Returns:
            The value, or None if absent
        """
        if not self.read(bool):
            return None
        if factory is None:
            return self.read(tp)
        obj = factory()
        self.read_into(obj, tp)
        return obj

    def _read_count(self) -> int:
        return self.read(u64)

    def read_vector(self, tp: Any, into: Optional[List[Any]] = None) -> List[Any]:
        """Read a count-prefixed sequence; elements keep their encoded order.

        Args:
            tp: Element type
            into: Existing list to clear and fill
        """
        result = into if into is not None else []
        result.clear()
        for _ in range(self._read_count()):
            result.append(self.read(tp))
        return result

    def read_list(self, tp: Any, into: Optional[Deque[Any]] = None) -> Deque[Any]:
        """Read a count-prefixed sequence into a ``deque``."""
        result = into if into is not None else collections.deque()
        result.clear()
        for _ in range(self._read_count()):
            result.append(self.read(tp))
        return result

    def read_string(self, kind: Any = str) -> Any:
        """Read a count-prefixed run of character units.

        Args:
            kind: String kind (``str``, ``bytes``, ``WideString``, ``U16String``)

        Raises:
            DecodeError: If the units are not valid for the kind
        """
        codec = unit_codec(kind)
        count = self._read_count()
        units = bytearray()
        for _ in range(count):
            units += self.read_data(codec.unit_size)
        try:
            return codec.from_units(bytes(units))
        except DecodeError as e:
            raise self._fail(e) from e.__cause__

    def read_map(
        self,
        key_tp: Any,
        value_tp: Any,
        into: Optional[MutableMapping[Any, Any]] = None,
    ) -> MutableMapping[Any, Any]:
        """Read count-prefixed key/value pairs.

        Entries are inserted in encoded order; the final ordering is whatever
        the target mapping does with its keys.

        Args:
            key_tp: Key type
            value_tp: Value type
            into: Existing mapping to clear and fill (defaults to a new dict)
        """
        result = into if into is not None else {}
        result.clear()
        for _ in range(self._read_count()):
            key = self.read(key_tp)
            result[key] = self.read(value_tp)
        return result

    # Introspection

    def get_remaining_size(self) -> int:
        return self._view.nbytes - self._offset

    def get_remaining_data(self) -> memoryview:
        """Return everything left as one unframed blob and move to the end."""
        if self._failed:
            raise DecoderFailedError("Decoder is unusable after a failed read")
        data = self._view[self._offset :]
        self._offset = self._view.nbytes
        return data

    def get_offset(self) -> int:
        return self._offset
