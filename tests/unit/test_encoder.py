"""Unit tests for the encoder."""

from __future__ import annotations

import ctypes
import logging
import struct

import pytest

from snapcodec import (
    Atomic,
    BreakOffsetError,
    EncodeError,
    Encoder,
    EncoderConfig,
    UnsupportedTypeError,
    i8,
    i32,
    u8,
    u16,
    u64,
)


class TestPrimitiveWrite:
    """Test framed raw writes."""

    def test_write_data(self, encoder: Encoder) -> None:
        encoder.write_data(b"abc")
        assert encoder.to_bytes() == b"\x03abc"

    def test_write_data_marker_wraps(self, encoder: Encoder) -> None:
        encoder.write_data(b"\x00" * 260)
        data = encoder.to_bytes()

        assert len(data) == 261
        assert data[0] == 4

    def test_write_empty_run(self, encoder: Encoder) -> None:
        encoder.write_data(b"")
        assert encoder.to_bytes() == b"\x00"

    def test_embed_encoder(self, encoder: Encoder) -> None:
        inner = Encoder()
        inner.write(True)

        encoder.write(inner)

        assert encoder.to_bytes() == b"\x02\x01\x01"

    def test_embed_self(self, encoder: Encoder) -> None:
        encoder.write(True)

        encoder.write(encoder)

        assert encoder.to_bytes() == b"\x01\x01" + b"\x02\x01\x01"


class TestTypedWrite:
    """Test typed dispatch for scalars and overrides."""

    def test_bool_true(self, encoder: Encoder) -> None:
        encoder.write(True)
        assert encoder.to_bytes() == b"\x01\x01"

    def test_bool_false(self, encoder: Encoder) -> None:
        encoder.write(False)
        assert encoder.to_bytes() == b"\x01\x00"

    def test_int32(self, encoder: Encoder, native) -> None:
        encoder.write(42, i32)
        assert encoder.to_bytes() == b"\x04" + native(42, 4)

    def test_ctypes_instance(self, encoder: Encoder, native) -> None:
        encoder.write(ctypes.c_int32(42))
        assert encoder.to_bytes() == b"\x04" + native(42, 4)

    def test_negative_int(self, encoder: Encoder, native) -> None:
        encoder.write(-2, i8)
        assert encoder.to_bytes() == b"\x01" + native(-2, 1, signed=True)

    def test_float_is_double(self, encoder: Encoder) -> None:
        encoder.write(1.5)
        assert encoder.to_bytes() == b"\x08" + struct.pack("=d", 1.5)

    def test_structure(self, encoder: Encoder, native) -> None:
        class Pair(ctypes.Structure):
            _fields_ = [("a", ctypes.c_uint16), ("b", ctypes.c_uint16)]

        encoder.write(Pair(1, 2))
        assert encoder.to_bytes() == b"\x04" + native(1, 2) + native(2, 2)

    def test_value_out_of_bounds(self, encoder: Encoder) -> None:
        with pytest.raises(EncodeError, match="out of bounds"):
            encoder.write(256, u8)
        with pytest.raises(EncodeError, match="out of bounds"):
            encoder.write(-1, u16)
        assert len(encoder) == 0

    def test_wrong_value_type(self, encoder: Encoder) -> None:
        with pytest.raises(EncodeError, match="Expected int"):
            encoder.write("7", u8)

    def test_unsized_int(self, encoder: Encoder) -> None:
        with pytest.raises(UnsupportedTypeError, match="fixed width"):
            encoder.write(42)

    def test_unsupported_type(self, encoder: Encoder) -> None:
        class Opaque:
            pass

        with pytest.raises(UnsupportedTypeError, match="Opaque"):
            encoder.write(Opaque())

        # Also a TypeError, as for any programming error
        with pytest.raises(TypeError):
            encoder.write(Opaque())

    def test_pointer_structure_not_raw(self, encoder: Encoder) -> None:
        class Node(ctypes.Structure):
            _fields_ = [("next", ctypes.c_void_p)]

        with pytest.raises(UnsupportedTypeError):
            encoder.write(Node())


class TestDerivedWriters:
    """Test optional, container, string, map and atomic writers."""

    def test_optional_present(self, encoder: Encoder, native) -> None:
        encoder.write_optional(7, i32)
        assert encoder.to_bytes() == b"\x01\x01" + b"\x04" + native(7, 4)

    def test_optional_absent(self, encoder: Encoder) -> None:
        encoder.write_optional(None, i32)
        assert encoder.to_bytes() == b"\x01\x00"

    def test_vector(self, encoder: Encoder, native, count_frame) -> None:
        encoder.write_vector([1, 2, 3], u16)
        expected = count_frame(3) + b"".join(b"\x02" + native(v, 2) for v in (1, 2, 3))
        assert encoder.to_bytes() == expected

    def test_span_equals_vector(self) -> None:
        a = Encoder()
        b = Encoder()
        a.write_span((5, 6), u8)
        b.write_vector([5, 6], u8)
        assert a.get_diff(b) is None

    def test_list_from_generator(self, encoder: Encoder, count_frame) -> None:
        encoder.write_list((v for v in (9, 8)), u8)
        assert encoder.to_bytes() == count_frame(2) + b"\x01\x09\x01\x08"

    def test_string(self, encoder: Encoder, count_frame) -> None:
        encoder.write("abc")
        assert encoder.to_bytes() == count_frame(3) + b"\x01a\x01b\x01c"

    def test_write_string_directly(self, encoder: Encoder, count_frame) -> None:
        encoder.write_string("")
        assert encoder.to_bytes() == count_frame(0)

    def test_map(self, encoder: Encoder, count_frame) -> None:
        encoder.write_map({1: True, 2: False}, u8, bool)
        expected = count_frame(2) + b"\x01\x01\x01\x01" + b"\x01\x02\x01\x00"
        assert encoder.to_bytes() == expected

    def test_annotation_dispatch(self) -> None:
        a = Encoder()
        b = Encoder()
        a.write([1, 2], list[u8])
        b.write_vector([1, 2], u8)
        assert a.to_bytes() == b.to_bytes()

    def test_atomic(self, encoder: Encoder, native) -> None:
        cell = Atomic(5, u64)
        encoder.write_atomic(cell)
        assert encoder.to_bytes() == b"\x08" + native(5, 8)

    def test_atomic_explicit_type(self, encoder: Encoder, native) -> None:
        encoder.write_atomic(Atomic(5), u16)
        assert encoder.to_bytes() == b"\x02" + native(5, 2)


class TestBreakOffset:
    """Test injected write limits."""

    def test_write_crossing_offset_fails(self) -> None:
        encoder = Encoder(break_offset=6)
        encoder.write(42, i32)

        with pytest.raises(BreakOffsetError, match="Break offset"):
            encoder.write(True)

        # No partial write
        assert len(encoder) == 5

    def test_write_ending_at_offset_succeeds(self) -> None:
        encoder = Encoder(break_offset=5)
        encoder.write(42, i32)
        assert len(encoder) == 5

        with pytest.raises(BreakOffsetError):
            encoder.write_data(b"")

    def test_config(self) -> None:
        encoder = Encoder(EncoderConfig(break_offset=1))
        with pytest.raises(BreakOffsetError):
            encoder.write(True)
        assert len(encoder) == 0

    def test_set_break_offset(self, encoder: Encoder) -> None:
        encoder.write(True)
        encoder.set_break_offset(3)

        with pytest.raises(BreakOffsetError):
            encoder.write(False)
        assert len(encoder) == 2

    def test_invalid_offset(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            EncoderConfig(break_offset=-1)
        with pytest.raises(ValueError, match="non-negative"):
            Encoder().set_break_offset(-5)


class TestBufferAccess:
    """Test buffer views and extraction."""

    def test_get_buffer_is_read_only(self, encoder: Encoder) -> None:
        encoder.write(True)
        with encoder.get_buffer() as view:
            assert view.readonly
            assert bytes(view) == b"\x01\x01"

    def test_move_buffer(self, encoder: Encoder) -> None:
        encoder.write(True)

        moved = encoder.move_buffer()

        assert moved == bytearray(b"\x01\x01")
        assert len(encoder) == 0
        assert encoder.move_buffer() == bytearray()

    def test_encoder_usable_after_move(self, encoder: Encoder) -> None:
        encoder.write(True)
        encoder.move_buffer()
        encoder.write(False)
        assert encoder.to_bytes() == b"\x01\x00"


class TestDiff:
    """Test buffer diff diagnostics."""

    def test_identical(self) -> None:
        a = Encoder()
        b = Encoder()
        a.write("abc")
        b.write("abc")
        assert a.get_diff(b) is None

    def test_differing_string(self) -> None:
        a = Encoder()
        b = Encoder()
        a.write("abc")
        b.write("abd")

        # 9-byte count frame, then two-byte frames; 'c' payload at 9 + 2 + 2 + 1
        assert a.get_diff(b) == 14
        assert b.get_diff(a) == 14

    def test_prefix(self) -> None:
        a = Encoder()
        b = Encoder()
        a.write(True)
        b.write(True)
        b.write(False)

        assert a.get_diff(b) == 2
        assert b.get_diff(a) == 2

    def test_print_diff_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        a = Encoder()
        b = Encoder()
        a.write(True)
        b.write(False)

        with caplog.at_level(logging.WARNING, logger="snapcodec"):
            assert a.print_diff(b) == 1

        assert "Diff at 1" in caplog.text

    def test_print_diff_silent_when_equal(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="snapcodec"):
            assert Encoder().print_diff(Encoder()) is None
        assert caplog.text == ""
