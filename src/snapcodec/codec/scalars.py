"""Raw-copyable scalar and structure types.

A type is raw-copyable when its memory representation can be copied verbatim:
ctypes simple types (except pointer-like ones), arrays of raw-copyable types,
and structures/unions whose fields are all raw-copyable. Values are written in
native byte order.

Python ``float`` is a C double and maps to ``c_double``. Python ``int`` has no
fixed width, so integers always need an explicit scalar type.
"""

from __future__ import annotations

import ctypes
from dataclasses import dataclass
from typing import Any

from ..exceptions import EncodeError, SchemaError

u8 = ctypes.c_uint8
u16 = ctypes.c_uint16
u32 = ctypes.c_uint32
u64 = ctypes.c_uint64
i8 = ctypes.c_int8
i16 = ctypes.c_int16
i32 = ctypes.c_int32
i64 = ctypes.c_int64
f32 = ctypes.c_float
f64 = ctypes.c_double

# ctypes type codes
_POINTER_CODES = frozenset("zZPO")
_SIGNED_CODES = frozenset("bhilq")
_UNSIGNED_CODES = frozenset("BHILQ")

_INTEGER_TYPES: dict[tuple[int, bool], type] = {
    (8, False): u8,
    (16, False): u16,
    (32, False): u32,
    (64, False): u64,
    (8, True): i8,
    (16, True): i16,
    (32, True): i32,
    (64, True): i64,
}

_FLOAT_TYPES: dict[int, type] = {32: f32, 64: f64}

_PYTHON_RAW_TYPES: dict[type, type] = {float: f64}


@dataclass(frozen=True)
class Scalar:
    """Annotation marker giving a Python value its wire type.

    Example:
        >>> class Registers(SerializableModel):
        ...     rip: Annotated[int, Scalar(u64)] = 0
        ...     flags: list[Annotated[int, Scalar(u32)]] = []
    """

    ctype: type

    def __post_init__(self) -> None:
        if not is_raw_copyable(self.ctype):
            raise SchemaError(f"Scalar requires a raw-copyable ctypes type, got {self.ctype!r}")


def integer_type(bits: int, signed: bool = False) -> type:
    """Return the ctypes integer type for a bit width.

    Args:
        bits: Width in bits (8, 16, 32 or 64)
        signed: Whether the integer is signed

    Raises:
        SchemaError: If the width is not supported
    """
    try:
        return _INTEGER_TYPES[(bits, signed)]
    except KeyError:
        raise SchemaError(f"Unsupported integer width: {bits} bits (use 8, 16, 32 or 64)") from None


def float_type(bits: int) -> type:
    """Return the ctypes float type for a bit width (32 or 64)."""
    try:
        return _FLOAT_TYPES[bits]
    except KeyError:
        raise SchemaError(f"Unsupported float width: {bits} bits (use 32 or 64)") from None


def is_simple(tp: Any) -> bool:
    """Return True for ctypes simple (non-aggregate) data types."""
    return isinstance(tp, type) and issubclass(tp, ctypes._SimpleCData)


def is_raw_copyable(tp: Any) -> bool:
    """Check whether a type can be copied as raw bytes.

    Args:
        tp: Type to check

    Returns:
        True for pointer-free ctypes types and ``float``
    """
    if tp in _PYTHON_RAW_TYPES:
        return True
    if not isinstance(tp, type):
        return False
    if issubclass(tp, ctypes._SimpleCData):
        return tp._type_ not in _POINTER_CODES
    if issubclass(tp, ctypes.Array):
        return is_raw_copyable(tp._type_)
    if issubclass(tp, (ctypes.Structure, ctypes.Union)):
        fields = getattr(tp, "_fields_", None)
        if fields is None:
            return False
        return all(is_raw_copyable(field[1]) for field in fields)
    return False


def raw_ctype(tp: type) -> type:
    """Return the ctypes type used to copy values of ``tp``."""
    return _PYTHON_RAW_TYPES.get(tp, tp)


def int_bounds(ctype: type) -> tuple[int, int] | None:
    """Return the inclusive (min, max) range of a ctypes integer type.

    Returns:
        Range tuple, or None if the type is not an integer type
    """
    if not is_simple(ctype):
        return None
    code = ctype._type_
    bits = ctypes.sizeof(ctype) * 8
    if code in _SIGNED_CODES:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    if code in _UNSIGNED_CODES:
        return 0, (1 << bits) - 1
    return None


def to_raw(value: Any, ctype: type) -> bytes:
    """Convert a value to the memory representation of ``ctype``.

    Args:
        value: ctypes instance of ``ctype`` or a Python value convertible to it
        ctype: Raw-copyable ctypes type

    Returns:
        ``ctypes.sizeof(ctype)`` bytes in native byte order

    Raises:
        EncodeError: If the value does not fit or does not match the type
    """
    if isinstance(value, ctype):
        return bytes(value)

    if not is_simple(ctype):
        raise EncodeError(f"Expected {ctype.__name__} instance, got {type(value).__name__}")

    if isinstance(value, ctypes._SimpleCData):
        value = value.value

    bounds = int_bounds(ctype)
    if bounds is not None:
        if not isinstance(value, int):
            raise EncodeError(f"Expected int for {ctype.__name__}, got {type(value).__name__}")
        min_val, max_val = bounds
        if value < min_val or value > max_val:
            raise EncodeError(
                f"Value {value} out of bounds for {ctype.__name__} [{min_val}, {max_val}]"
            )

    try:
        return bytes(ctype(value))
    except TypeError as e:
        raise EncodeError(f"Cannot convert {value!r} to {ctype.__name__}: {e}") from e


def from_raw(data: bytes | memoryview, ctype: type) -> Any:
    """Rebuild a value from its memory representation.

    Simple types come back as Python values; structures and arrays come back
    as ctypes instances.
    """
    obj = ctype.from_buffer_copy(data)
    if is_simple(ctype):
        return obj.value
    return obj


def fill_raw(obj: Any, data: bytes | memoryview) -> None:
    """Overwrite a ctypes instance in place with raw bytes."""
    ctypes.memmove(ctypes.addressof(obj), bytes(data), ctypes.sizeof(obj))
