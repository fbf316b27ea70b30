"""snapcodec: Binary Snapshot Codec

A Python library that turns typed in-memory values into a flat byte buffer and
rebuilds equal values from it, without a schema compiler or IDL. Built for
capturing structured state (e.g. an emulated machine's registers and devices)
for snapshots or transfer.

Key Features:
- Per-type dispatch: serialize/deserialize methods, registered free functions,
  or raw copy of ctypes types
- Marker-byte framing that catches misaligned reads
- Optional, sequence, list, map and string adapters
- Factory registry for types that cannot be default-constructed
- Pydantic models that derive their encoding from field annotations

Quick Start:
    >>> from typing import Annotated
    >>> from snapcodec import Decoder, Encoder, Scalar, SerializableModel, u64
    >>>
    >>> class Registers(SerializableModel):
    ...     rip: Annotated[int, Scalar(u64)] = 0
    ...     rsp: Annotated[int, Scalar(u64)] = 0
    >>>
    >>> encoder = Encoder()
    >>> encoder.write(Registers(rip=0x401000, rsp=0x7FFE0000))
    >>> decoded = Decoder(encoder).read(Registers)
"""

from __future__ import annotations

from .codec import (
    Atomic,
    Decoder,
    Encoder,
    FieldSchema,
    ModelSchema,
    Scalar,
    TypeSpec,
    U16String,
    WideString,
    deserializer,
    f32,
    f64,
    i8,
    i16,
    i32,
    i64,
    serializer,
    type_spec,
    u8,
    u16,
    u32,
    u64,
)
from .config import DecoderConfig, EncoderConfig
from .exceptions import (
    BoundsError,
    BreakOffsetError,
    ConstructionError,
    DecodeError,
    DecoderFailedError,
    EncodeError,
    FramingCorruptionError,
    SchemaError,
    SnapcodecError,
    UnsupportedTypeError,
)
from .framing import frame, marker_for
from .models import FixedFloat, FixedInt, SerializableModel
from .utils import first_difference
from .utils.sizing import encoded_size, field_sizes, frame_size

__version__ = "0.1.0"

__all__ = [
    # Core API
    "Encoder",
    "Decoder",
    "serializer",
    "deserializer",
    "Atomic",
    # Configuration
    "EncoderConfig",
    "DecoderConfig",
    # Scalars and strings
    "Scalar",
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
    "WideString",
    "U16String",
    # Schema
    "TypeSpec",
    "type_spec",
    "ModelSchema",
    "FieldSchema",
    # Models
    "SerializableModel",
    "FixedInt",
    "FixedFloat",
    # Exceptions
    "SnapcodecError",
    "SchemaError",
    "UnsupportedTypeError",
    "EncodeError",
    "BreakOffsetError",
    "DecodeError",
    "BoundsError",
    "FramingCorruptionError",
    "ConstructionError",
    "DecoderFailedError",
    # Framing
    "frame",
    "marker_for",
    # Diagnostics and sizing
    "first_difference",
    "encoded_size",
    "frame_size",
    "field_sizes",
    # Version
    "__version__",
]
