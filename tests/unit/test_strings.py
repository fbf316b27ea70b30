"""Unit tests for string kinds."""

from __future__ import annotations

import ctypes

import pytest

from snapcodec import DecodeError, Decoder, Encoder, SchemaError, U16String, WideString
from snapcodec.codec.strings import is_string_type, unit_codec


class TestNarrow:
    """Test UTF-8 strings and byte strings."""

    def test_round_trip(self) -> None:
        encoder = Encoder()
        encoder.write("eax")

        assert Decoder(encoder).read(str) == "eax"

    def test_empty(self) -> None:
        encoder = Encoder()
        encoder.write("")

        assert Decoder(encoder).read(str) == ""

    def test_non_ascii_counts_code_units(self, count_frame) -> None:
        encoder = Encoder()
        encoder.write("é")

        # Two UTF-8 code units, each in its own frame
        assert encoder.to_bytes() == count_frame(2) + b"\x01\xc3\x01\xa9"
        assert Decoder(encoder).read(str) == "é"

    def test_bytes(self) -> None:
        encoder = Encoder()
        encoder.write(b"\x00\xff")

        result = Decoder(encoder).read(bytes)

        assert isinstance(result, bytes)
        assert result == b"\x00\xff"

    def test_bytearray(self) -> None:
        encoder = Encoder()
        encoder.write(bytearray(b"\x10\x20"))

        result = Decoder(encoder).read(bytearray)

        assert isinstance(result, bytearray)
        assert result == bytearray(b"\x10\x20")

    def test_invalid_utf8(self, count_frame) -> None:
        decoder = Decoder(count_frame(1) + b"\x01\xff")

        with pytest.raises(DecodeError, match="str"):
            decoder.read(str)

        assert decoder.failed


class TestWide:
    """Test wide and UTF-16 strings."""

    def test_wide_round_trip(self) -> None:
        encoder = Encoder()
        encoder.write(WideString("pc=0x10"))

        result = Decoder(encoder).read(WideString)

        assert isinstance(result, WideString)
        assert result == "pc=0x10"

    def test_wide_unit_size(self, count_frame) -> None:
        size = ctypes.sizeof(ctypes.c_wchar)
        encoder = Encoder()
        encoder.write(WideString("ab"))

        data = encoder.to_bytes()

        assert data[:9] == count_frame(2)
        assert len(data) == 9 + 2 * (1 + size)
        assert data[9] == size

    def test_u16_surrogate_pair(self, count_frame) -> None:
        encoder = Encoder()
        encoder.write(U16String("\U0001F600"))

        assert encoder.to_bytes()[:9] == count_frame(2)

        result = Decoder(encoder).read(U16String)
        assert isinstance(result, U16String)
        assert result == "\U0001F600"

    def test_write_string_with_kind(self) -> None:
        encoder = Encoder()
        encoder.write_string("abc", U16String)

        assert Decoder(encoder).read_string(U16String) == "abc"

    def test_kinds_do_not_mix(self) -> None:
        encoder = Encoder()
        encoder.write(U16String("a"))

        decoder = Decoder(encoder)
        # Count frame matches, unit frame does not
        with pytest.raises(DecodeError):
            decoder.read(str)


class TestUnitCodec:
    """Test string kind lookup."""

    def test_string_types(self) -> None:
        assert is_string_type(str)
        assert is_string_type(WideString)
        assert is_string_type(bytearray)
        assert not is_string_type(int)
        assert not is_string_type("abc")

    def test_subclass_keeps_kind(self) -> None:
        class RegisterName(U16String):
            __slots__ = ()

        assert unit_codec(RegisterName).unit_size == 2

    def test_not_a_string(self) -> None:
        with pytest.raises(SchemaError, match="not a string kind"):
            unit_codec(int)
