"""
Generic decode engine for domdecode.

A Decoder wraps a function from a host node to a Result. Decoders are built
once and evaluated against any number of nodes; they never mutate what they
read and keep no state between calls.

Host nodes may be mappings (JSON-like snapshots, key lookup) or plain objects
(attribute lookup). Indexed collections may be mappings keyed by stringified
integers ({"0": ..., "1": ...}) or ordinary sequences.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from .errors import (
    DecodeError,
    DecodeFailed,
    Failure,
    field_missing,
    type_mismatch,
)

T = TypeVar("T")
U = TypeVar("U")

_MISSING = object()


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful decode."""
    value: T

    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    """Failed decode."""
    error: DecodeError

    def is_ok(self) -> bool:
        return False


Result = Ok[T] | Err


class FieldType(Enum):
    """Expected type tag for a terminal field read."""
    STRING = "string"
    FLOAT = "float"
    INT = "int"
    BOOL = "bool"
    STRING_VALUES = "string values"  # map of strings -> values in insertion order
    ANY = "any"


def coerce(value: Any, as_: FieldType) -> Result:
    """Coerce a raw field value to the requested type. Path is filled in by the caller."""
    if as_ is FieldType.ANY:
        return Ok(value)
    if as_ is FieldType.STRING:
        if isinstance(value, str):
            return Ok(value)
    elif as_ is FieldType.FLOAT:
        # bool is an int subclass; a boolean is never a coordinate
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return Ok(float(value))
    elif as_ is FieldType.INT:
        if isinstance(value, int) and not isinstance(value, bool):
            return Ok(value)
        if isinstance(value, float) and value.is_integer():
            return Ok(int(value))
    elif as_ is FieldType.BOOL:
        if isinstance(value, bool):
            return Ok(value)
    elif as_ is FieldType.STRING_VALUES:
        if isinstance(value, Mapping):
            items = list(value.values())
        elif isinstance(value, Sequence) and not isinstance(value, str):
            items = list(value)
        else:
            items = None
        if items is not None and all(isinstance(item, str) for item in items):
            return Ok(items)
    else:
        raise TypeError(f"Unknown field type: {as_!r}")
    return Err(type_mismatch(as_.value, value))


def lookup(node: Any, name: str) -> Any:
    """Raw field read. Returns _MISSING when the node has no such field."""
    if isinstance(node, Mapping):
        return node.get(name, _MISSING)
    if node is None or isinstance(node, (str, int, float, bool)):
        return _MISSING
    return getattr(node, name, _MISSING)


def lookup_index(collection: Any, i: int) -> Any:
    """Raw indexed read. Returns _MISSING when index `i` is absent."""
    if isinstance(collection, Mapping):
        value = collection.get(str(i), _MISSING)
        if value is _MISSING:
            value = collection.get(i, _MISSING)
        return value
    if isinstance(collection, Sequence) and not isinstance(collection, str):
        return collection[i] if 0 <= i < len(collection) else _MISSING
    return _MISSING


def is_missing(value: Any) -> bool:
    return value is _MISSING


def is_indexed(collection: Any) -> bool:
    """True for values lookup_index can address: mappings and non-string sequences."""
    if isinstance(collection, Mapping):
        return True
    return isinstance(collection, Sequence) and not isinstance(collection, str)


class Decoder(Generic[T]):
    """
    A composable read accessor: node -> Ok(value) | Err(error).

    Decoders are immutable. Every combinator returns a new Decoder.
    """

    __slots__ = ("_run", "name")

    def __init__(self, run: Callable[[Any], Result], name: str = "decoder"):
        self._run = run
        self.name = name

    def decode(self, node: Any) -> Result:
        return self._run(node)

    def __call__(self, node: Any) -> Result:
        return self._run(node)

    def __repr__(self) -> str:
        return f"Decoder({self.name})"

    def map(self, fn: Callable[[T], U]) -> Decoder[U]:
        """Transform a successful result."""
        def run(node: Any) -> Result:
            result = self._run(node)
            if isinstance(result, Err):
                return result
            return Ok(fn(result.value))
        return Decoder(run, f"map({self.name})")

    def and_then(self, fn: Callable[[T], Decoder[U]]) -> Decoder[U]:
        """Choose the next decoder from this one's result, run it on the same node."""
        def run(node: Any) -> Result:
            result = self._run(node)
            if isinstance(result, Err):
                return result
            return fn(result.value).decode(node)
        return Decoder(run, f"and_then({self.name})")

    def or_else(self, fallback: Decoder[T]) -> Decoder[T]:
        return try_or_else(self, fallback)


def succeed(value: T) -> Decoder[T]:
    return Decoder(lambda node: Ok(value), f"succeed({value!r})")


def fail(message: str) -> Decoder[Any]:
    return Decoder(lambda node: Err(Failure(path=(), message=message)), f"fail({message!r})")


def field(name: str, as_: FieldType = FieldType.ANY) -> Decoder[Any]:
    """Read field `name` of the current node and coerce it to `as_`."""
    if not isinstance(as_, FieldType):
        raise TypeError(f"as_ must be a FieldType, got {as_!r}")

    def run(node: Any) -> Result:
        raw = lookup(node, name)
        if raw is _MISSING:
            return Err(field_missing(name))
        result = coerce(raw, as_)
        if isinstance(result, Err):
            return Err(result.error.at(name))
        return result
    return Decoder(run, f"field({name!r}, {as_.value})")


def at(path: Sequence[str] | str, decoder: Decoder[T]) -> Decoder[T]:
    """
    Shift the current node along `path` and run `decoder` there.

    A field holding None counts as missing: there is no node to shift to.
    Failures of `decoder` are reported with `path` prefixed.
    """
    steps = (path,) if isinstance(path, str) else tuple(path)

    def run(node: Any) -> Result:
        current = node
        for depth, step in enumerate(steps):
            current = lookup(current, step)
            if current is _MISSING or current is None:
                return Err(field_missing(*steps[:depth + 1]))
        result = decoder.decode(current)
        if isinstance(result, Err):
            return Err(result.error.at(*steps))
        return result
    return Decoder(run, f"at({'.'.join(steps)}, {decoder.name})")


def index(i: int, decoder: Decoder[T]) -> Decoder[T]:
    """Run `decoder` on entry `i` of the current (indexed) node."""
    if i < 0:
        raise ValueError(f"Index must be non-negative, got {i}")

    def run(collection: Any) -> Result:
        if not is_indexed(collection):
            return Err(type_mismatch("indexed collection", collection))
        item = lookup_index(collection, i)
        if item is _MISSING:
            return Err(field_missing(str(i)))
        result = decoder.decode(item)
        if isinstance(result, Err):
            return Err(result.error.at(str(i)))
        return result
    return Decoder(run, f"index({i}, {decoder.name})")


def null(value: T) -> Decoder[T]:
    """Succeed with `value` when the current value is None, else fail."""
    def run(node: Any) -> Result:
        if node is None:
            return Ok(value)
        return Err(type_mismatch("null", node))
    return Decoder(run, f"null({value!r})")


def nullable(decoder: Decoder[T]) -> Decoder[T | None]:
    return one_of(null(None), decoder)


def try_or_else(primary: Decoder[T], fallback: Decoder[T]) -> Decoder[T]:
    """
    Run `primary`; if it fails, run `fallback` on the same node.
    When both fail, the primary's error is reported.
    """
    def run(node: Any) -> Result:
        first = primary.decode(node)
        if isinstance(first, Ok):
            return first
        second = fallback.decode(node)
        if isinstance(second, Ok):
            return second
        return first
    return Decoder(run, f"try_or_else({primary.name}, {fallback.name})")


def one_of(*decoders: Decoder[T]) -> Decoder[T]:
    """First decoder to succeed wins; the first error is reported if none does."""
    if not decoders:
        raise ValueError("one_of needs at least one decoder")
    combined = decoders[0]
    for decoder in decoders[1:]:
        combined = try_or_else(combined, decoder)
    return combined


def map2(fn: Callable[..., U], a: Decoder[Any], b: Decoder[Any]) -> Decoder[U]:
    return _map_n(fn, a, b)


def map3(
    fn: Callable[..., U],
    a: Decoder[Any],
    b: Decoder[Any],
    c: Decoder[Any],
) -> Decoder[U]:
    return _map_n(fn, a, b, c)


def map4(
    fn: Callable[..., U],
    a: Decoder[Any],
    b: Decoder[Any],
    c: Decoder[Any],
    d: Decoder[Any],
) -> Decoder[U]:
    return _map_n(fn, a, b, c, d)


def _map_n(fn: Callable[..., U], *decoders: Decoder[Any]) -> Decoder[U]:
    """Run every decoder on the same node, in order; the first failure wins."""
    def run(node: Any) -> Result:
        values = []
        for decoder in decoders:
            result = decoder.decode(node)
            if isinstance(result, Err):
                return result
            values.append(result.value)
        return Ok(fn(*values))
    return Decoder(run, f"map{len(decoders)}")


def lazy(thunk: Callable[[], Decoder[T]]) -> Decoder[T]:
    """Defer building a decoder until it is first run (self-referential decoders)."""
    def run(node: Any) -> Result:
        return thunk().decode(node)
    return Decoder(run, "lazy")


def decode_value(decoder: Decoder[T], node: Any) -> Result:
    return decoder.decode(node)


def decode_or_raise(decoder: Decoder[T], node: Any) -> T:
    """Decode `node`, returning the value or raising DecodeFailed."""
    result = decoder.decode(node)
    if isinstance(result, Err):
        raise DecodeFailed(result.error)
    return result.value
