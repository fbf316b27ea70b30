"""Exception hierarchy for snapcodec.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from SnapcodecError for easy catching of any snapcodec-specific error.

Every error is fail-fast: it is raised where the problem is detected and the
encode/decode operation in progress must be abandoned. Buffers and decoders
involved in a failed operation are not reusable.
"""

from __future__ import annotations


class SnapcodecError(Exception):
    """Base exception for all snapcodec errors."""

    pass


class SchemaError(SnapcodecError):
    """Raised when a type or annotation cannot take part in encoding.

    Examples:
        - An ``int`` field without a fixed width
        - Unsupported Union annotation
        - A type defining both ``from_decoder`` and a member ``deserialize``
    """

    pass


class UnsupportedTypeError(SchemaError, TypeError):
    """Raised when a type satisfies none of the encoding strategies.

    This is a programming error rather than a data error: the type has no
    ``serialize``/``deserialize`` methods, no registered free functions, and is
    not raw-copyable.
    """

    pass


class EncodeError(SnapcodecError):
    """Raised when encoding a value fails.

    Examples:
        - Integer value out of range for its scalar type
        - Value does not match the declared ctypes type
    """

    pass


class BreakOffsetError(EncodeError):
    """Raised when a write would cross the configured break offset."""

    pass


class DecodeError(SnapcodecError):
    """Raised when decoding binary data fails.

    Examples:
        - Truncated data (insufficient bytes)
        - Marker byte does not match the expected length
        - Invalid character units in a string
    """

    pass


class BoundsError(DecodeError):
    """Raised when a read requests more bytes than remain."""

    pass


class FramingCorruptionError(DecodeError):
    """Raised when a frame's marker byte does not match the expected length."""

    pass


class ConstructionError(DecodeError):
    """Raised when a value cannot be constructed during decoding.

    The type has no ``from_decoder`` constructor, cannot be called without
    arguments, and no factory was registered for it on the decoder.
    """

    pass


class DecoderFailedError(DecodeError):
    """Raised when a decoder is used again after a failed read."""

    pass
