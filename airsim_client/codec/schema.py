"""Positional schemas shared with the simulator.

The server serialises its structs as msgpack maps whose entries appear in
declaration order. Key names travel on the wire but are not consulted here:
fields are resolved by index against a :class:`Schema`, after the payload
has been checked to be a map with at least as many entries as the schema
declares. Entries beyond the declared count are ignored, which tolerates
servers that append fields.

Every failure surfaces as :class:`~airsim_client.errors.SchemaMismatch` (or
its :class:`~airsim_client.errors.UnknownVariant` subclass); nothing else
escapes a decode.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Sequence, Tuple, Type, TypeVar

from ..errors import SchemaMismatch, UnknownVariant
from ..wire import NUMERIC_KINDS, WireKind, WireValue, to_float32

T = TypeVar("T")
E = TypeVar("E", bound=IntEnum)

Decoder = Callable[[WireValue], T]


@dataclass(frozen=True, slots=True)
class FieldSpec:
    name: str
    kind: str


@dataclass(frozen=True, slots=True)
class Schema:
    """Fixed field order for one domain type."""

    type_name: str
    fields: Tuple[FieldSpec, ...]
    version: int = 1

    @property
    def field_count(self) -> int:
        return len(self.fields)

    def encode(self, values: Sequence[WireValue]) -> WireValue:
        """Build the ordered map for ``values`` given in schema order."""

        if len(values) != self.field_count:
            raise ValueError(
                f"{self.type_name} expects {self.field_count} values, got {len(values)}"
            )
        return WireValue.record(
            (spec.name, value) for spec, value in zip(self.fields, values)
        )

    def read(self, value: WireValue) -> FieldReader:
        """Validate container kind and length, returning a positional reader."""

        if value.kind is not WireKind.MAP:
            raise SchemaMismatch(self.type_name, expected="map", got=value.kind.value)
        pairs = value.pairs
        if len(pairs) < self.field_count:
            raise SchemaMismatch(
                self.type_name,
                expected_fields=self.field_count,
                got_fields=len(pairs),
            )
        return FieldReader(self, tuple(val for _, val in pairs[: self.field_count]))


def define_schema(type_name: str, *fields: Tuple[str, str], version: int = 1) -> Schema:
    return Schema(
        type_name=type_name,
        fields=tuple(FieldSpec(name, kind) for name, kind in fields),
        version=version,
    )


class FieldReader:
    """Reads the values of a validated map by position."""

    __slots__ = ("_schema", "_values")

    def __init__(self, schema: Schema, values: Tuple[WireValue, ...]) -> None:
        self._schema = schema
        self._values = values

    def _get(self, index: int) -> WireValue:
        if not 0 <= index < self._schema.field_count:
            raise IndexError(
                f"{self._schema.type_name} declares {self._schema.field_count} fields"
            )
        return self._values[index]

    def _mismatch(self, index: int, expected_kind: str, value: WireValue) -> SchemaMismatch:
        return SchemaMismatch(
            self._schema.type_name,
            field_index=index,
            expected_kind=expected_kind,
            got=value.kind.value,
        )

    def float32(self, index: int) -> float:
        value = self._get(index)
        if value.kind not in NUMERIC_KINDS:
            raise self._mismatch(index, "float32", value)
        return to_float32(float(value.value))

    def float64(self, index: int) -> float:
        value = self._get(index)
        if value.kind not in NUMERIC_KINDS:
            raise self._mismatch(index, "float64", value)
        return float(value.value)

    def integer(self, index: int) -> int:
        value = self._get(index)
        if value.kind is not WireKind.INT:
            raise self._mismatch(index, "int", value)
        return value.value

    def boolean(self, index: int) -> bool:
        value = self._get(index)
        if value.kind is not WireKind.BOOL:
            raise self._mismatch(index, "bool", value)
        return value.value

    def string(self, index: int) -> str:
        value = self._get(index)
        if value.kind is not WireKind.STR:
            raise self._mismatch(index, "str", value)
        return value.value

    def enum(self, index: int, enum_type: Type[E]) -> E:
        value = self._get(index)
        if value.kind is not WireKind.INT:
            raise self._mismatch(index, enum_type.__name__, value)
        return decode_enum(value, enum_type)

    def nested(self, index: int, decoder: Decoder[T]) -> T:
        """Decode a nested struct, attributing failures to this field."""

        value = self._get(index)
        try:
            return decoder(value)
        except UnknownVariant:
            raise
        except SchemaMismatch as exc:
            raise SchemaMismatch(
                self._schema.type_name,
                field_index=index,
                expected_kind=self._schema.fields[index].kind,
                detail=str(exc),
            ) from exc


def decode_enum(value: WireValue, enum_type: Type[E]) -> E:
    """Map an integer code onto ``enum_type``, rejecting unknown codes."""

    if value.kind is not WireKind.INT:
        raise SchemaMismatch(enum_type.__name__, expected="int", got=value.kind.value)
    try:
        return enum_type(value.value)
    except ValueError:
        raise UnknownVariant(value.value, enum_name=enum_type.__name__) from None


def encode_enum(member: IntEnum) -> WireValue:
    return WireValue.integer(int(member))


def decode_bool(value: WireValue) -> bool:
    if value.kind is not WireKind.BOOL:
        raise SchemaMismatch("bool", expected="bool", got=value.kind.value)
    return value.value


def decode_int(value: WireValue) -> int:
    if value.kind is not WireKind.INT:
        raise SchemaMismatch("int", expected="int", got=value.kind.value)
    return value.value


def decode_float32(value: WireValue) -> float:
    if value.kind not in NUMERIC_KINDS:
        raise SchemaMismatch("float32", expected="number", got=value.kind.value)
    return to_float32(float(value.value))
