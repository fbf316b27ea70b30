"""Field type helpers.

This module provides convenience functions for declaring fixed-width numeric
fields on a SerializableModel.
"""

from __future__ import annotations

from typing import Any, cast

from pydantic import Field
from pydantic.fields import FieldInfo

from ..codec.scalars import int_bounds, integer_type


def FixedInt(*, bits: int, signed: bool = False, **kwargs: Any) -> FieldInfo:
    """Create a fixed-width integer field.

    The field is encoded as a raw integer of ``bits`` width, and pydantic
    validates that values fit that width.

    Args:
        bits: Width in bits (8, 16, 32 or 64)
        signed: Whether the integer is signed (default False)
        **kwargs: Additional Field() arguments (default, description, ...)

    Returns:
        Pydantic FieldInfo suitable for use as a field default/metadata.

    Raises:
        SchemaError: If the width is not supported

    Example:
        >>> class Timer(SerializableModel):
        ...     counter: int = FixedInt(bits=32, default=0)
        ...     delta: Annotated[int, FixedInt(bits=16, signed=True)] = 0
    """
    min_val, max_val = cast("tuple[int, int]", int_bounds(integer_type(bits, signed)))
    return cast(
        FieldInfo,
        Field(ge=min_val, le=max_val, json_schema_extra={"bits": bits, "signed": signed}, **kwargs),
    )


def FixedFloat(*, bits: int = 64, **kwargs: Any) -> FieldInfo:
    """Create a float field encoded as an IEEE 754 single (32) or double (64).

    Args:
        bits: 32 or 64 (default 64)
        **kwargs: Additional Field() arguments

    Returns:
        Pydantic FieldInfo suitable for use as a field default/metadata.

    Raises:
        ValueError: If bits is not 32 or 64
    """
    if bits not in (32, 64):
        raise ValueError("bits must be 32 or 64")

    return cast(FieldInfo, Field(json_schema_extra={"float_bits": bits}, **kwargs))
