"""msgpack-rpc frame construction and classification."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Sequence, Union

from .wire import WireKind, WireValue, pack


class MessageType(IntEnum):
    """Numeric discriminant in slot 0 of every frame."""

    REQUEST = 0
    RESPONSE = 1
    NOTIFICATION = 2


@dataclass(frozen=True, slots=True)
class Response:
    request_id: int
    error: WireValue
    result: WireValue

    @property
    def ok(self) -> bool:
        return self.error.is_nil


@dataclass(frozen=True, slots=True)
class Notification:
    method: str
    params: WireValue


@dataclass(frozen=True, slots=True)
class Request:
    request_id: int
    method: str
    params: WireValue


Frame = Union[Request, Response, Notification]


class FrameError(ValueError):
    """A decoded object is not a well-formed msgpack-rpc frame."""


def encode_request(request_id: int, method: str, params: Sequence[WireValue]) -> bytes:
    """Serialise ``[0, request_id, method, params]``."""

    frame = WireValue.sequence(
        (
            WireValue.integer(MessageType.REQUEST),
            WireValue.integer(request_id),
            WireValue.string(method),
            WireValue.sequence(params),
        )
    )
    return pack(frame)


def encode_response(
    request_id: int, result: WireValue, error: Optional[WireValue] = None
) -> bytes:
    """Serialise ``[1, request_id, error, result]``. Used by test servers."""

    frame = WireValue.sequence(
        (
            WireValue.integer(MessageType.RESPONSE),
            WireValue.integer(request_id),
            error if error is not None else WireValue.nil(),
            result,
        )
    )
    return pack(frame)


def encode_notification(method: str, params: Sequence[WireValue]) -> bytes:
    frame = WireValue.sequence(
        (
            WireValue.integer(MessageType.NOTIFICATION),
            WireValue.string(method),
            WireValue.sequence(params),
        )
    )
    return pack(frame)


def parse_frame(value: WireValue) -> Frame:
    """Classify an unpacked object as a request, response or notification.

    Raises:
        FrameError: If the object is not an array with a known type code and
            the slot count and slot kinds that type requires.
    """

    if value.kind is not WireKind.SEQ or not value.items:
        raise FrameError(f"frame must be a non-empty array, got {value.kind.value}")

    slots = value.items
    type_slot = slots[0]
    if type_slot.kind is not WireKind.INT:
        raise FrameError(f"frame type must be an integer, got {type_slot.kind.value}")

    try:
        message_type = MessageType(type_slot.value)
    except ValueError as exc:
        raise FrameError(f"unknown frame type {type_slot.value}") from exc

    if message_type is MessageType.RESPONSE:
        _expect_len(slots, 4, message_type)
        request_id = _expect_id(slots[1])
        return Response(request_id=request_id, error=slots[2], result=slots[3])

    if message_type is MessageType.REQUEST:
        _expect_len(slots, 4, message_type)
        request_id = _expect_id(slots[1])
        return Request(
            request_id=request_id, method=_expect_method(slots[2]), params=slots[3]
        )

    _expect_len(slots, 3, message_type)
    return Notification(method=_expect_method(slots[1]), params=slots[2])


def _expect_len(slots: Sequence[WireValue], count: int, message_type: MessageType) -> None:
    if len(slots) != count:
        raise FrameError(
            f"{message_type.name.lower()} frame must have {count} slots, got {len(slots)}"
        )


def _expect_id(slot: WireValue) -> int:
    if slot.kind is not WireKind.INT or slot.value < 0:
        raise FrameError(f"request id must be an unsigned integer, got {slot.to_python()!r}")
    return slot.value


def _expect_method(slot: WireValue) -> str:
    if slot.kind is not WireKind.STR:
        raise FrameError(f"method name must be a string, got {slot.kind.value}")
    return slot.value
