"""Base model class for annotation-driven serialization.

This module provides the SerializableModel class. Subclasses get
``serialize``/``deserialize`` for free: fields are written and read in
declaration order, each according to its type annotation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from ..codec.schema import ModelSchema

if TYPE_CHECKING:
    from ..codec.decoder import Decoder
    from ..codec.encoder import Encoder


class SerializableModel(BaseModel):
    """Base class for models that encode themselves field by field.

    Integer fields need a fixed width, given either with ``Scalar`` metadata or
    with the ``FixedInt`` field helper. Floats default to 64 bits.

    Example:
        >>> from typing import Annotated, Optional
        >>> class CpuState(SerializableModel):
        ...     rip: Annotated[int, Scalar(u64)] = 0
        ...     mode: int = FixedInt(bits=8, default=0)
        ...     halted: bool = False
        ...     name: Optional[str] = None
        >>> encoder = Encoder()
        >>> encoder.write(CpuState(rip=0x1000))
        >>> Decoder(encoder).read(CpuState).rip
        4096

    Models whose fields all have defaults are default-constructed during
    decoding. Models with required fields need a factory, typically
    ``decoder.register_factory(Model, Model.model_construct)``.
    """

    model_config = ConfigDict(
        # ctypes structures and other serializable classes as field types
        arbitrary_types_allowed=True,
        # Forbid extra fields not defined in schema
        extra="forbid",
    )

    def serialize(self, encoder: Encoder) -> None:
        for field in ModelSchema.from_model(type(self)).fields:
            encoder.write(getattr(self, field.name), field.spec)

    def deserialize(self, decoder: Decoder) -> None:
        for field in ModelSchema.from_model(type(self)).fields:
            setattr(self, field.name, decoder.read(field.spec))
