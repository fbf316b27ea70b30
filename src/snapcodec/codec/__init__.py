"""Binary codec for snapcodec.

This module provides the Encoder and Decoder together with the dispatch,
scalar and string machinery they share.
"""

from __future__ import annotations

from .atomic import Atomic
from .decoder import Decoder
from .dispatch import deserializer, serializer
from .encoder import Encoder
from .scalars import Scalar, f32, f64, i8, i16, i32, i64, u8, u16, u32, u64
from .schema import FieldSchema, ModelSchema, TypeSpec, type_spec
from .strings import U16String, WideString

__all__ = [
    "Encoder",
    "Decoder",
    "Atomic",
    "serializer",
    "deserializer",
    "Scalar",
    "TypeSpec",
    "type_spec",
    "ModelSchema",
    "FieldSchema",
    "WideString",
    "U16String",
    "u8",
    "u16",
    "u32",
    "u64",
    "i8",
    "i16",
    "i32",
    "i64",
    "f32",
    "f64",
]
