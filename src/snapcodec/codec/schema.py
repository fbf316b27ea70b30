"""Type specifications from annotations.

This module turns typing annotations (``list[Annotated[int, Scalar(u32)]]``,
``Optional[Registers]``, ``dict[str, float]`` ...) into :class:`TypeSpec`
trees the encoder and decoder can walk, and introspects pydantic models into
an ordered list of field specs.
"""

from __future__ import annotations

import collections
import collections.abc
import functools
import types
from dataclasses import dataclass
from typing import Annotated, Any, List, Optional, Tuple, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from ..exceptions import SchemaError
from .scalars import Scalar, float_type, integer_type

VALUE = "value"
OPTIONAL = "optional"
VECTOR = "vector"
LIST = "list"
MAP = "map"

_SEQUENCE_ORIGINS = (list, collections.abc.Sequence, collections.abc.MutableSequence)
_MAP_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


@dataclass(frozen=True)
class TypeSpec:
    """Wire shape of a value.

    Attributes:
        kind: One of ``value``, ``optional``, ``vector``, ``list``, ``map``
        python_type: Type dispatched on for ``value`` specs
        args: Element specs (one for optional/vector/list, key and value for map)
    """

    kind: str
    python_type: Any = None
    args: Tuple[TypeSpec, ...] = ()

    @classmethod
    def value(cls, python_type: Any) -> TypeSpec:
        return cls(VALUE, python_type)

    @classmethod
    def optional(cls, inner: TypeSpec) -> TypeSpec:
        return cls(OPTIONAL, args=(inner,))

    @classmethod
    def vector(cls, element: TypeSpec) -> TypeSpec:
        return cls(VECTOR, args=(element,))

    @classmethod
    def list(cls, element: TypeSpec) -> TypeSpec:
        return cls(LIST, args=(element,))

    @classmethod
    def map(cls, key: TypeSpec, value: TypeSpec) -> TypeSpec:
        return cls(MAP, args=(key, value))


def is_annotation(tp: Any) -> bool:
    """Return True if ``tp`` needs :func:`type_spec` rather than plain dispatch."""
    return isinstance(tp, TypeSpec) or get_origin(tp) is not None


def _scalar_from_metadata(metadata: Tuple[Any, ...]) -> Optional[type]:
    """Find the wire scalar type declared in annotation metadata."""
    for item in metadata:
        if isinstance(item, Scalar):
            return item.ctype
        extra = item.json_schema_extra if isinstance(item, FieldInfo) else item
        if isinstance(extra, dict):
            if "float_bits" in extra:
                return float_type(int(extra["float_bits"]))
            if "bits" in extra:
                return integer_type(int(extra["bits"]), bool(extra.get("signed", False)))
    return None


def type_spec(annotation: Any, metadata: Tuple[Any, ...] = ()) -> TypeSpec:
    """Build a :class:`TypeSpec` from a typing annotation.

    Args:
        annotation: Type or typing annotation
        metadata: Extra ``Annotated`` metadata (e.g. from a pydantic FieldInfo)

    Returns:
        TypeSpec describing the wire shape

    Raises:
        SchemaError: If the annotation cannot be encoded

    Example:
        >>> type_spec(list[Annotated[int, Scalar(u16)]])
        TypeSpec(kind='vector', python_type=None, args=(TypeSpec(kind='value', ...),))
    """
    if isinstance(annotation, TypeSpec):
        return annotation

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Annotated:
        return type_spec(args[0], tuple(args[1:]) + tuple(metadata))

    # Optional[X] / X | None
    if origin is Union or (hasattr(types, "UnionType") and origin is types.UnionType):
        non_none_args = [arg for arg in args if arg is not type(None)]
        if len(non_none_args) == 1 and len(args) == 2:
            return TypeSpec.optional(type_spec(non_none_args[0], metadata))
        raise SchemaError(f"Only Optional[X] unions are supported, got {annotation}")

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return TypeSpec.vector(type_spec(args[0], metadata))
        raise SchemaError(f"Only variable-length tuple[X, ...] is supported, got {annotation}")

    if origin is collections.deque:
        return TypeSpec.list(type_spec(_single_arg(annotation, args), metadata))

    if origin in _SEQUENCE_ORIGINS:
        return TypeSpec.vector(type_spec(_single_arg(annotation, args), metadata))

    if origin in _MAP_ORIGINS:
        if len(args) != 2:
            raise SchemaError(f"Mapping annotation needs key and value types, got {annotation}")
        return TypeSpec.map(type_spec(args[0], metadata), type_spec(args[1], metadata))

    if origin is not None:
        # User generic such as Cell[int]: dispatch on the class itself
        return TypeSpec.value(origin)

    if annotation in (list, tuple, dict, collections.deque):
        raise SchemaError(f"{annotation.__name__} annotation needs element types")

    scalar = _scalar_from_metadata(metadata)
    if annotation is int:
        if scalar is None:
            raise SchemaError(
                "int fields require a fixed width: use Annotated[int, Scalar(...)] "
                "or FixedInt(bits=...)"
            )
        return TypeSpec.value(scalar)
    if annotation is float and scalar is not None:
        return TypeSpec.value(scalar)

    return TypeSpec.value(annotation)


def _single_arg(annotation: Any, args: Tuple[Any, ...]) -> Any:
    if len(args) != 1:
        raise SchemaError(f"Sequence annotation needs one element type, got {annotation}")
    return args[0]


@dataclass(frozen=True)
class FieldSchema:
    """Schema information for a single model field.

    Attributes:
        name: Field name
        annotation: Annotation as resolved by pydantic
        spec: Wire shape of the field
    """

    name: str
    annotation: Any
    spec: TypeSpec


class ModelSchema:
    """Ordered field specs for a pydantic model.

    Fields are encoded in declaration order.

    Example:
        >>> schema = ModelSchema.from_model(CpuState)
        >>> [field.name for field in schema.fields]
        ['rip', 'rsp', 'flags']
    """

    def __init__(self, model_class: type[BaseModel]) -> None:
        self.model_class = model_class
        self.fields: List[FieldSchema] = []
        self._introspect()

    @classmethod
    def from_model(cls, model_class: type[BaseModel]) -> ModelSchema:
        """Return the (cached) schema of a pydantic model class."""
        return _model_schema(model_class)

    def _introspect(self) -> None:
        for field_name, field_info in self.model_class.model_fields.items():
            self.fields.append(self._extract_field_schema(field_name, field_info))

    def _extract_field_schema(self, name: str, field_info: FieldInfo) -> FieldSchema:
        annotation = field_info.annotation
        if annotation is None:
            raise SchemaError(f"Field {name} has no type annotation")

        metadata = tuple(field_info.metadata)
        if isinstance(field_info.json_schema_extra, dict):
            metadata += (field_info.json_schema_extra,)

        try:
            spec = type_spec(annotation, metadata)
        except SchemaError as e:
            raise SchemaError(f"Field {name}: {e}") from e

        return FieldSchema(name=name, annotation=annotation, spec=spec)


@functools.lru_cache(maxsize=None)
def _model_schema(model_class: type[BaseModel]) -> ModelSchema:
    return ModelSchema(model_class)
