"""Buffer comparison utilities.

Used to check that encoding is deterministic: the same logical value encoded
by two independent encoders must produce byte-identical buffers.
"""

from __future__ import annotations

from typing import Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]


def first_difference(a: BytesLike, b: BytesLike) -> Optional[int]:
    """Find the first offset at which two buffers differ.

    Args:
        a: First buffer
        b: Second buffer

    Returns:
        The first differing offset; the length of the shorter buffer if one is
        a strict prefix of the other; None if the buffers are identical.

    Example:
        >>> first_difference(b"abc", b"abd")
        2
        >>> first_difference(b"ab", b"abc")
        2
        >>> first_difference(b"abc", b"abc") is None
        True
    """
    view_a = memoryview(a).cast("B")
    view_b = memoryview(b).cast("B")
    shorter = min(view_a.nbytes, view_b.nbytes)

    if view_a[:shorter] != view_b[:shorter]:
        for i in range(shorter):
            if view_a[i] != view_b[i]:
                return i

    if view_a.nbytes != view_b.nbytes:
        return shorter

    return None
