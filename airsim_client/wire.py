"""Tagged wire values for the msgpack-rpc dialect spoken by AirSim.

msgpack itself only distinguishes a handful of types once unpacked into
Python objects: single and double precision floats collapse into ``float``
and maps lose their on-the-wire ordering guarantees once they become
``dict``. The server's structs are decoded positionally, so both details
matter. ``WireValue`` keeps them explicit:

* ``FLOAT32`` values are rounded to single precision when constructed and
  packed as msgpack ``float 32``.
* ``MAP`` values hold an ordered tuple of ``(key, value)`` pairs.

Packing walks the tree and emits headers and scalars with two msgpack
packers (double and single precision); unpacking uses an ``Unpacker`` whose
pairs hook builds ordered maps directly.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence, Tuple

import msgpack

_F32 = struct.Struct("<f")


class WireKind(str, Enum):
    """Discriminant for :class:`WireValue`."""

    NIL = "nil"
    BOOL = "bool"
    INT = "int"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STR = "str"
    BYTES = "bytes"
    SEQ = "seq"
    MAP = "map"


NUMERIC_KINDS = frozenset({WireKind.INT, WireKind.FLOAT32, WireKind.FLOAT64})


def to_float32(value: float) -> float:
    """Round ``value`` to the nearest IEEE-754 single precision float.

    Finite values beyond the single precision range saturate to infinity,
    matching a C ``(float)`` cast.
    """

    try:
        return _F32.unpack(_F32.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


@dataclass(frozen=True, slots=True)
class WireValue:
    """One protocol value; ``value`` holds the Python payload for ``kind``."""

    kind: WireKind
    value: Any = None

    @classmethod
    def nil(cls) -> WireValue:
        return cls(WireKind.NIL, None)

    @classmethod
    def boolean(cls, value: bool) -> WireValue:
        return cls(WireKind.BOOL, bool(value))

    @classmethod
    def integer(cls, value: int) -> WireValue:
        return cls(WireKind.INT, int(value))

    @classmethod
    def float32(cls, value: float) -> WireValue:
        return cls(WireKind.FLOAT32, to_float32(float(value)))

    @classmethod
    def float64(cls, value: float) -> WireValue:
        return cls(WireKind.FLOAT64, float(value))

    @classmethod
    def string(cls, value: str) -> WireValue:
        return cls(WireKind.STR, str(value))

    @classmethod
    def binary(cls, value: bytes) -> WireValue:
        return cls(WireKind.BYTES, bytes(value))

    @classmethod
    def sequence(cls, items: Iterable[WireValue]) -> WireValue:
        return cls(WireKind.SEQ, tuple(items))

    @classmethod
    def mapping(cls, pairs: Iterable[Tuple[WireValue, WireValue]]) -> WireValue:
        return cls(WireKind.MAP, tuple((key, val) for key, val in pairs))

    @classmethod
    def record(cls, fields: Iterable[Tuple[str, WireValue]]) -> WireValue:
        """Build an ordered map keyed by field names."""

        return cls.mapping((cls.string(name), val) for name, val in fields)

    @classmethod
    def from_python(cls, obj: Any) -> WireValue:
        """Wrap a plain Python object produced by msgpack (or by hand).

        ``float`` becomes ``FLOAT64``; use :meth:`float32` explicitly for
        single precision cells. ``dict`` keeps its insertion order.
        """

        if isinstance(obj, WireValue):
            return obj
        if obj is None:
            return cls.nil()
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, int):
            return cls.integer(obj)
        if isinstance(obj, float):
            return cls.float64(obj)
        if isinstance(obj, str):
            try:
                obj.encode("utf-8")
            except UnicodeEncodeError:
                # undecodable bytes surrogate-escaped by the unpacker
                return cls.binary(obj.encode("utf-8", "surrogateescape"))
            return cls.string(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls.binary(bytes(obj))
        if isinstance(obj, (list, tuple)):
            return cls.sequence(cls.from_python(item) for item in obj)
        if isinstance(obj, dict):
            return cls.mapping(
                (cls.from_python(key), cls.from_python(val))
                for key, val in obj.items()
            )
        raise TypeError(f"Cannot represent {type(obj).__name__} as a wire value")

    @property
    def is_nil(self) -> bool:
        return self.kind is WireKind.NIL

    @property
    def items(self) -> Tuple[WireValue, ...]:
        """Elements of a ``SEQ`` value."""

        if self.kind is not WireKind.SEQ:
            raise TypeError(f"{self.kind.value} value has no items")
        return self.value

    @property
    def pairs(self) -> Tuple[Tuple[WireValue, WireValue], ...]:
        """Ordered ``(key, value)`` pairs of a ``MAP`` value."""

        if self.kind is not WireKind.MAP:
            raise TypeError(f"{self.kind.value} value has no pairs")
        return self.value

    def to_python(self) -> Any:
        """Convert back to plain Python objects, for diagnostics."""

        if self.kind is WireKind.SEQ:
            return [item.to_python() for item in self.value]
        if self.kind is WireKind.MAP:
            pairs = [(key.to_python(), val.to_python()) for key, val in self.value]
            try:
                return dict(pairs)
            except TypeError:
                return pairs
        return self.value


# ----------------------------------------------------------------------
# msgpack bridging
# ----------------------------------------------------------------------
_PACKER = msgpack.Packer(use_bin_type=True)
_SINGLE_PACKER = msgpack.Packer(use_bin_type=True, use_single_float=True)


def pack(value: WireValue) -> bytes:
    """Serialise ``value`` to msgpack bytes, honouring float widths."""

    chunks: list[bytes] = []
    _pack_into(value, chunks)
    return b"".join(chunks)


def _pack_into(value: WireValue, chunks: list[bytes]) -> None:
    kind = value.kind
    if kind is WireKind.SEQ:
        chunks.append(_PACKER.pack_array_header(len(value.value)))
        for item in value.value:
            _pack_into(item, chunks)
    elif kind is WireKind.MAP:
        chunks.append(_PACKER.pack_map_header(len(value.value)))
        for key, val in value.value:
            _pack_into(key, chunks)
            _pack_into(val, chunks)
    elif kind is WireKind.FLOAT32:
        chunks.append(_SINGLE_PACKER.pack(value.value))
    else:
        chunks.append(_PACKER.pack(value.value))


def _pairs_to_map(pairs: Sequence[Tuple[Any, Any]]) -> WireValue:
    return WireValue.mapping(
        (WireValue.from_python(key), WireValue.from_python(val)) for key, val in pairs
    )


def _ext_to_binary(code: int, data: bytes) -> WireValue:
    return WireValue.binary(data)


def new_unpacker(max_buffer_size: int = 100 * 1024 * 1024) -> msgpack.Unpacker:
    """Streaming unpacker yielding objects convertible by :meth:`WireValue.from_python`.

    Timestamps arrive as integer nanoseconds and other extension types as
    their raw payload bytes, so every unpacked object has a wire kind. A
    ``str`` cell that is not valid UTF-8 keeps its bytes and becomes
    ``BYTES``, so one bad string never desynchronises the stream.
    """

    return msgpack.Unpacker(
        raw=False,
        unicode_errors="surrogateescape",
        strict_map_key=False,
        object_pairs_hook=_pairs_to_map,
        ext_hook=_ext_to_binary,
        timestamp=2,
        max_buffer_size=max_buffer_size,
    )


def unpack(data: bytes) -> WireValue:
    """Decode a single complete msgpack object."""

    obj = msgpack.unpackb(
        data,
        raw=False,
        unicode_errors="surrogateescape",
        strict_map_key=False,
        object_pairs_hook=_pairs_to_map,
        ext_hook=_ext_to_binary,
        timestamp=2,
    )
    return WireValue.from_python(obj)
