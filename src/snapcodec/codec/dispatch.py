"""Encoding strategy resolution.

Each type is resolved once to one of a fixed set of strategies, tried in this
priority order:

1. Member capability: the type defines both ``serialize(self, encoder)`` and
   ``deserialize(self, decoder)``.
2. Free functions registered with :func:`serializer` / :func:`deserializer`.
3. Raw copy for pointer-free ctypes types (and ``float``).

``bool`` and the string kinds are explicit overrides that win over all three.
A type matching none of them raises :class:`UnsupportedTypeError`.

Results are cached per type. Registering a free function clears the cache.
"""

from __future__ import annotations

import enum
import functools
import inspect
from typing import TYPE_CHECKING, Any, Callable, Protocol, TypeVar, runtime_checkable

from ..exceptions import SchemaError, UnsupportedTypeError
from .scalars import is_raw_copyable
from .strings import is_string_type

if TYPE_CHECKING:
    from .decoder import Decoder
    from .encoder import Encoder

F = TypeVar("F", bound=Callable[..., Any])


class Strategy(enum.Enum):
    """How values of a type are written and read."""

    BOOL = "bool"
    STRING = "string"
    MEMBER = "member"
    FUNCTION = "function"
    RAW = "raw"


class Construction(enum.Enum):
    """How a fresh value is obtained before it is filled during decoding."""

    SELF_DECODING = "self_decoding"
    DEFAULT = "default"
    FACTORY = "factory"


@runtime_checkable
class Serializable(Protocol):
    """Member capability: a type encodes and decodes itself.

    Both methods are required. A type defining only one of them is resolved
    as if it defined neither, so writing and reading always use the same tier.
    """

    def serialize(self, encoder: Encoder) -> None: ...

    def deserialize(self, decoder: Decoder) -> None: ...


@functools.singledispatch
def _serialize_function(value: Any, encoder: Encoder) -> None:
    raise NotImplementedError(type(value).__name__)


@functools.singledispatch
def _deserialize_function(obj: Any, decoder: Decoder) -> None:
    raise NotImplementedError(type(obj).__name__)


def serializer(tp: type) -> Callable[[F], F]:
    """Register a free-standing encode function for ``tp``.

    The function receives the value and the encoder. Registration also applies
    to subclasses of ``tp``.

    Example:
        >>> @serializer(Point)
        ... def write_point(point: Point, encoder: Encoder) -> None:
        ...     encoder.write(point.x, i32)
        ...     encoder.write(point.y, i32)
    """

    def decorator(func: F) -> F:
        _serialize_function.register(tp, func)
        _clear_caches()
        return func

    return decorator


def deserializer(tp: type) -> Callable[[F], F]:
    """Register a free-standing decode function for ``tp``.

    The function receives an existing instance and the decoder, and fills the
    instance in place.
    """

    def decorator(func: F) -> F:
        _deserialize_function.register(tp, func)
        _clear_caches()
        return func

    return decorator


def free_serializer(tp: type) -> Callable[[Any, Encoder], None] | None:
    """Return the free encode function registered for ``tp``, if any."""
    func = _serialize_function.dispatch(tp)
    return None if func is _serialize_function.registry[object] else func


def free_deserializer(tp: type) -> Callable[[Any, Decoder], None] | None:
    """Return the free decode function registered for ``tp``, if any."""
    func = _deserialize_function.dispatch(tp)
    return None if func is _deserialize_function.registry[object] else func


def _clear_caches() -> None:
    encoder_strategy.cache_clear()
    decoder_strategy.cache_clear()


def _unsupported(tp: Any) -> UnsupportedTypeError:
    name = getattr(tp, "__name__", repr(tp))
    if tp is int:
        return UnsupportedTypeError(
            "int has no fixed width: pass a scalar type such as i32, "
            "or annotate the field with Scalar(...) or FixedInt(...)"
        )
    return UnsupportedTypeError(
        f"{name} must implement serialize/deserialize, have registered free "
        f"functions, or be a raw-copyable ctypes type"
    )


@functools.lru_cache(maxsize=None)
def encoder_strategy(tp: Any) -> Strategy:
    """Resolve the strategy used to write values of ``tp``.

    Raises:
        UnsupportedTypeError: If no strategy applies
    """
    if tp is bool:
        return Strategy.BOOL
    if is_string_type(tp):
        return Strategy.STRING
    if isinstance(tp, type) and issubclass(tp, Serializable):
        return Strategy.MEMBER
    if isinstance(tp, type) and free_serializer(tp) is not None:
        return Strategy.FUNCTION
    if is_raw_copyable(tp):
        return Strategy.RAW
    raise _unsupported(tp)


@functools.lru_cache(maxsize=None)
def decoder_strategy(tp: Any) -> Strategy:
    """Resolve the strategy used to fill values of ``tp`` from a decoder.

    Raises:
        UnsupportedTypeError: If no strategy applies
    """
    if tp is bool:
        return Strategy.BOOL
    if is_string_type(tp):
        return Strategy.STRING
    if isinstance(tp, type) and issubclass(tp, Serializable):
        return Strategy.MEMBER
    if isinstance(tp, type) and free_deserializer(tp) is not None:
        return Strategy.FUNCTION
    if is_raw_copyable(tp):
        return Strategy.RAW
    raise _unsupported(tp)


def _default_constructible(tp: type) -> bool:
    try:
        signature = inspect.signature(tp)
    except (TypeError, ValueError):
        # C-implemented types (ctypes structures, builtins) expose no signature
        return True
    required = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
        inspect.Parameter.KEYWORD_ONLY,
    )
    return all(
        param.default is not inspect.Parameter.empty
        for param in signature.parameters.values()
        if param.kind in required
    )


@functools.lru_cache(maxsize=None)
def construction(tp: type) -> Construction:
    """Resolve how a fresh ``tp`` is created during decoding.

    Order: ``from_decoder`` classmethod, then a no-argument call, then the
    decoder's factory registry.

    Raises:
        SchemaError: If the type defines both ``from_decoder`` and the member
            capability (both would consume the same fields)
    """
    if callable(getattr(tp, "from_decoder", None)):
        if issubclass(tp, Serializable):
            raise SchemaError(
                f"{tp.__name__} defines both from_decoder and serialize/deserialize; "
                f"a self-decoding type must leave remaining fields to a free deserializer or raw copy"
            )
        return Construction.SELF_DECODING
    if _default_constructible(tp):
        return Construction.DEFAULT
    return Construction.FACTORY
