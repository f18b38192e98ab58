"""Error types raised by the AirSim transport and codec layers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .wire import WireValue


class AirSimClientError(Exception):
    """Base error for AirSim client failures."""


class ConnectError(AirSimClientError):
    """The stream to the simulator could not be established."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"Could not connect to {address}: {reason}")
        self.address = address
        self.reason = reason


class ConnectionLostError(AirSimClientError):
    """The connection terminated while calls were outstanding, or is unusable."""


class CallTimeoutError(AirSimClientError, TimeoutError):
    """No response arrived for a request within its bound."""

    def __init__(self, method: str, request_id: int, timeout: float) -> None:
        super().__init__(
            f"RPC '{method}' (id={request_id}) timed out after {timeout:.1f}s"
        )
        self.method = method
        self.request_id = request_id
        self.timeout = timeout


class RpcError(AirSimClientError):
    """The server returned a non-nil error slot."""

    def __init__(self, method: str, payload: WireValue) -> None:
        super().__init__(f"RPC '{method}' failed: {payload.to_python()!r}")
        self.method = method
        self.payload = payload


class SchemaMismatch(AirSimClientError):
    """A payload violated the positional schema of a domain type."""

    def __init__(
        self,
        type_name: str,
        *,
        expected: Optional[str] = None,
        got: Optional[str] = None,
        expected_fields: Optional[int] = None,
        got_fields: Optional[int] = None,
        field_index: Optional[int] = None,
        expected_kind: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.type_name = type_name
        self.expected = expected
        self.got = got
        self.expected_fields = expected_fields
        self.got_fields = got_fields
        self.field_index = field_index
        self.expected_kind = expected_kind
        self.detail = detail
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.expected_fields is not None:
            message = (
                f"{self.type_name}: expected {self.expected_fields} fields, "
                f"got {self.got_fields}"
            )
        elif self.field_index is not None:
            message = (
                f"{self.type_name}: field {self.field_index} is not "
                f"{self.expected_kind}"
            )
            if self.got is not None:
                message += f" (got {self.got})"
        else:
            message = f"{self.type_name}: expected {self.expected}, got {self.got}"
        if self.detail:
            message += f": {self.detail}"
        return message


class UnknownVariant(SchemaMismatch):
    """An enum code fell outside the known range."""

    def __init__(self, code: int, *, enum_name: str) -> None:
        self.code = code
        self.enum_name = enum_name
        super().__init__(enum_name, detail=f"unknown variant code {code}")

    def _describe(self) -> str:
        return f"{self.enum_name}: unknown variant code {self.code}"
