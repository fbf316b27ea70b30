"""Encoded size calculation utilities.

This module provides functions to calculate the encoded size of values and
types. Fixed-size types (scalars, raw structures, models made only of such
fields) have a size known without encoding; strings, optionals and containers
do not.
"""

from __future__ import annotations

import ctypes
from typing import Any, Optional

from pydantic import BaseModel

from ..codec import schema
from ..codec.dispatch import Strategy, encoder_strategy
from ..codec.encoder import Encoder
from ..codec.scalars import raw_ctype
from ..exceptions import SchemaError
from ..framing.marker import MARKER_SIZE
from ..models.base import SerializableModel


def _fixed_size(spec: schema.TypeSpec) -> Optional[int]:
    if spec.kind != schema.VALUE:
        return None

    tp = spec.python_type
    if isinstance(tp, type) and issubclass(tp, SerializableModel):
        sizes = [_fixed_size(field.spec) for field in schema.ModelSchema.from_model(tp).fields]
        if any(size is None for size in sizes):
            return None
        return sum(sizes)

    strategy = encoder_strategy(tp)
    if strategy is Strategy.BOOL:
        return MARKER_SIZE + 1
    if strategy is Strategy.RAW:
        return MARKER_SIZE + ctypes.sizeof(raw_ctype(tp))
    return None


def frame_size(tp: Any) -> int:
    """Calculate the encoded size of a fixed-size type in bytes.

    Args:
        tp: Type or annotation (e.g. ``u32``, ``bool``, a model class)

    Returns:
        Size in bytes, marker bytes included

    Raises:
        SchemaError: If the type has no fixed encoded size

    Example:
        >>> frame_size(u32)
        5
        >>> frame_size(bool)
        2
    """
    size = _fixed_size(schema.type_spec(tp))
    if size is None:
        raise SchemaError(f"{tp!r} has no fixed encoded size")
    return size


def encoded_size(value: Any, tp: Any = None) -> int:
    """Calculate the encoded size of a value by encoding it.

    Args:
        value: Value to measure
        tp: Wire type, as for ``Encoder.write``

    Returns:
        Size in bytes
    """
    encoder = Encoder()
    encoder.write(value, tp)
    return len(encoder)


def field_sizes(model_or_class: BaseModel | type[BaseModel]) -> dict[str, Optional[int]]:
    """Get the encoded size of each field of a model.

    Args:
        model_or_class: Model instance or class to analyze

    Returns:
        Dictionary mapping field names to their size in bytes, or None for
        variable-size fields

    Example:
        >>> field_sizes(CpuState)
        {'rip': 9, 'mode': 2, 'halted': 2, 'name': None}
    """
    if isinstance(model_or_class, BaseModel):
        model_class = type(model_or_class)
    else:
        model_class = model_or_class

    return {
        field.name: _fixed_size(field.spec)
        for field in schema.ModelSchema.from_model(model_class).fields
    }
