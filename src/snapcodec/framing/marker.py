"""Marker-byte framing.

Every raw byte run written by the encoder is preceded by one marker byte equal
to the run's length modulo 256. The marker is not a checksum over the content;
it only catches gross misalignment between the writing and the reading code
(e.g. a field read with the wrong type or size).

The frame structure is:
- [Marker (1 byte) = len(payload) % 256] [Payload]
"""

from __future__ import annotations

from ..exceptions import FramingCorruptionError

MARKER_SIZE = 1


def marker_for(length: int) -> int:
    """Return the marker byte for a payload of ``length`` bytes.

    Args:
        length: Payload length in bytes (non-negative)

    Returns:
        ``length % 256``

    Raises:
        ValueError: If length is negative

    Example:
        >>> marker_for(4)
        4
        >>> marker_for(300)
        44
    """
    if length < 0:
        raise ValueError(f"Frame length must be non-negative, got {length}")
    return length & 0xFF


def frame(payload: bytes | bytearray | memoryview) -> bytes:
    """Frame a payload with its marker byte.

    Args:
        payload: Raw bytes to frame

    Returns:
        Marker byte followed by the payload

    Example:
        >>> frame(b"\\x2a")
        b'\\x01*'
    """
    view = memoryview(payload).cast("B")
    return bytes((marker_for(view.nbytes),)) + view.tobytes()


def check_marker(actual: int, length: int, offset: int = 0) -> None:
    """Validate a marker byte read from a buffer.

    Args:
        actual: Marker byte found in the buffer
        length: Payload length the reader expects
        offset: Position of the marker, used in the error message

    Raises:
        FramingCorruptionError: If the marker does not match ``length % 256``
    """
    expected = marker_for(length)
    if actual != expected:
        raise FramingCorruptionError(
            f"Marker mismatch at offset {offset}: found {actual}, "
            f"expected {expected} for a {length}-byte read"
        )
