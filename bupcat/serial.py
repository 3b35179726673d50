"""Schema-driven binary serialization of typed objects.

Every encoded object starts with a little-endian ``uint32`` type id, followed
by its fields in schema order. Integers and floats use their fixed widths,
strings are NUL-terminated, and arrays carry a ``uint32`` element count before
their elements.
"""

from __future__ import annotations

import struct
from collections.abc import Mapping
from enum import Enum
from typing import Any, Union

STRING_MAX_LENGTH = 1024
"""Size of a string slot, terminator included."""

_HEADER = struct.Struct("<I")


class SerialError(ValueError):
    """Raised when a value does not fit its schema or data cannot be decoded."""


class Kind(Enum):
    """Primitive field kinds; the value is the ``struct`` format code."""

    INT8 = "b"
    INT16 = "h"
    INT32 = "i"
    INT64 = "q"
    UINT8 = "B"
    UINT16 = "H"
    UINT32 = "I"
    UINT64 = "Q"
    FLOAT = "f"
    DOUBLE = "d"
    STRING = "s"


_CODECS = {kind: struct.Struct("<" + kind.value) for kind in Kind if kind is not Kind.STRING}


class Struct:
    """An ordered group of named fields; its values are mappings."""

    __slots__ = ("fields",)

    def __init__(self, *fields: tuple[str, "Schema"]) -> None:
        names = [name for name, _ in fields]
        if len(set(names)) != len(names):
            raise ValueError("duplicate field name in struct")
        self.fields = tuple(fields)

    def __repr__(self) -> str:
        inner = ", ".join(f"({name!r}, {schema!r})" for name, schema in self.fields)
        return f"Struct({inner})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Struct) and self.fields == other.fields

    def __hash__(self) -> int:
        return hash(self.fields)


class Array:
    """A variable-length sequence of elements of one schema; its values are lists."""

    __slots__ = ("element",)

    def __init__(self, element: "Schema") -> None:
        self.element = element

    def __repr__(self) -> str:
        return f"Array({self.element!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Array) and self.element == other.element

    def __hash__(self) -> int:
        return hash(("array", self.element))


Schema = Union[Kind, Struct, Array]


def _encode_string(value: Any) -> bytes:
    if not isinstance(value, str):
        raise SerialError(f"expected a string, got {type(value).__name__}")
    raw = value.encode("utf-8")
    if b"\0" in raw:
        raise SerialError("string contains a NUL character")
    if len(raw) >= STRING_MAX_LENGTH:
        raise SerialError(f"string longer than {STRING_MAX_LENGTH - 1} bytes")
    return raw + b"\0"


def _encode(schema: Schema, value: Any, out: bytearray) -> None:
    if isinstance(schema, Struct):
        if not isinstance(value, Mapping):
            raise SerialError(f"expected a mapping, got {type(value).__name__}")
        for name, field in schema.fields:
            try:
                item = value[name]
            except KeyError:
                raise SerialError(f"missing field {name!r}") from None
            _encode(field, item, out)
    elif isinstance(schema, Array):
        items = list(value)
        if len(items) > 0xFFFFFFFF:
            raise SerialError("array too long")
        out += _HEADER.pack(len(items))
        for item in items:
            _encode(schema.element, item, out)
    elif schema is Kind.STRING:
        out += _encode_string(value)
    else:
        try:
            out += _CODECS[schema].pack(value)
        except (struct.error, OverflowError, TypeError) as exc:
            raise SerialError(f"cannot encode {value!r} as {schema.name}") from exc


def _size(schema: Schema, value: Any) -> int:
    if isinstance(schema, Struct):
        return sum(_size(field, value[name]) for name, field in schema.fields)
    if isinstance(schema, Array):
        return 4 + sum(_size(schema.element, item) for item in value)
    if schema is Kind.STRING:
        return len(value.encode("utf-8")) + 1
    return _CODECS[schema].size


def _min_size(schema: Schema) -> int:
    if isinstance(schema, Struct):
        return sum(_min_size(field) for _, field in schema.fields)
    if isinstance(schema, Array):
        return 4
    if schema is Kind.STRING:
        return 1
    return _CODECS[schema].size


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def unpack(self, codec: struct.Struct) -> Any:
        if codec.size > self.remaining:
            raise SerialError("data is truncated")
        (value,) = codec.unpack_from(self._data, self._pos)
        self._pos += codec.size
        return value

    def string(self) -> str:
        end = self._data.find(b"\0", self._pos)
        if end < 0:
            raise SerialError("unterminated string")
        raw = self._data[self._pos:end]
        if len(raw) >= STRING_MAX_LENGTH:
            raise SerialError(f"string longer than {STRING_MAX_LENGTH - 1} bytes")
        self._pos = end + 1
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SerialError("string is not valid UTF-8") from exc


def _decode(schema: Schema, reader: _Reader) -> Any:
    if isinstance(schema, Struct):
        return {name: _decode(field, reader) for name, field in schema.fields}
    if isinstance(schema, Array):
        count = reader.unpack(_HEADER)
        if count * _min_size(schema.element) > reader.remaining:
            raise SerialError("array length exceeds the data")
        return [_decode(schema.element, reader) for _ in range(count)]
    if schema is Kind.STRING:
        return reader.string()
    return reader.unpack(_CODECS[schema])


class Registry:
    """Named object schemas, numbered in the order they are registered."""

    def __init__(self) -> None:
        self._names: list[str] = []
        self._schemas: dict[str, Schema] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._names)

    def register(self, name: str, schema: Schema) -> int:
        """Add an object type and return its type id."""
        if name in self._schemas:
            raise ValueError(f"object type {name!r} is already registered")
        self._names.append(name)
        self._schemas[name] = schema
        return len(self._names) - 1

    def type_id(self, name: str) -> int:
        """Return the numeric id of a registered object type."""
        if name not in self._schemas:
            raise KeyError(name)
        return self._names.index(name)

    def serialize(self, name: str, value: Any) -> bytes:
        """Encode ``value`` as an object of type ``name``, header included."""
        type_id = self.type_id(name)
        out = bytearray(_HEADER.pack(type_id))
        _encode(self._schemas[name], value, out)
        return bytes(out)

    def deserialize(self, data: bytes) -> tuple[str, Any]:
        """Decode one object; return its type name and value."""
        reader = _Reader(data)
        type_id = reader.unpack(_HEADER)
        if type_id >= len(self._names):
            raise SerialError(f"unknown object type id {type_id}")
        name = self._names[type_id]
        return name, _decode(self._schemas[name], reader)

    def encoded_size(self, name: str, value: Any) -> int:
        """Return the number of bytes :meth:`serialize` produces for ``value``."""
        return _HEADER.size + _size(self._schemas[name], value)