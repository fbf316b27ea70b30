"""Character-sequence kinds.

Strings are always encoded as a sequence of character units, never through the
raw-copy or container paths. The unit size depends on the kind:

- ``str``: narrow string, UTF-8 code units (1 byte)
- ``bytes`` and ``bytearray``: narrow byte string (1 byte)
- ``WideString``: ``wchar_t`` units (4 bytes UTF-32 on most platforms, 2 bytes UTF-16 on Windows)
- ``U16String``: UTF-16 code units (2 bytes)

Units are stored in native byte order.
"""

from __future__ import annotations

import ctypes
import sys
from dataclasses import dataclass
from typing import Any

from ..exceptions import DecodeError, SchemaError

_ORDER = "le" if sys.byteorder == "little" else "be"


class WideString(str):
    """A ``str`` encoded as ``wchar_t`` units."""

    __slots__ = ()


class U16String(str):
    """A ``str`` encoded as UTF-16 code units."""

    __slots__ = ()


@dataclass(frozen=True)
class UnitCodec:
    """How one string kind maps to character units.

    Attributes:
        kind: Python type produced on decode
        unit_size: Size of one character unit in bytes
        encoding: Python codec name, or None for raw bytes
    """

    kind: type
    unit_size: int
    encoding: str | None

    def to_units(self, value: Any) -> bytes:
        if self.encoding is None:
            return bytes(value)
        return str(value).encode(self.encoding)

    def from_units(self, data: bytes) -> Any:
        if self.encoding is None:
            return data if self.kind is bytes else self.kind(data)
        try:
            text = data.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid {self.kind.__name__} character units: {e}") from e
        return text if self.kind is str else self.kind(text)


_WCHAR_SIZE = ctypes.sizeof(ctypes.c_wchar)

_CODECS: dict[type, UnitCodec] = {
    str: UnitCodec(str, 1, "utf-8"),
    bytes: UnitCodec(bytes, 1, None),
    bytearray: UnitCodec(bytearray, 1, None),
    WideString: UnitCodec(WideString, _WCHAR_SIZE, f"utf-{_WCHAR_SIZE * 8}-{_ORDER}"),
    U16String: UnitCodec(U16String, 2, f"utf-16-{_ORDER}"),
}


def is_string_type(tp: Any) -> bool:
    """Return True if ``tp`` is one of the string kinds (or a subclass)."""
    return isinstance(tp, type) and issubclass(tp, (str, bytes, bytearray))


def unit_codec(kind: type) -> UnitCodec:
    """Return the unit codec for a string kind.

    The most specific kind wins, so a ``WideString`` subclass is still wide.

    Raises:
        SchemaError: If ``kind`` is not a string kind
    """
    for base in kind.__mro__:
        if base in _CODECS:
            return _CODECS[base]
    raise SchemaError(f"{kind.__name__} is not a string kind")
