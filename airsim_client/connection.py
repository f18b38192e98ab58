"""msgpack-rpc connection to an AirSim server.

One :class:`RpcConnection` owns one TCP stream. Any number of calls may be
in flight at once: each is registered under a fresh request id and parked
on a future, and a single reader task demultiplexes response frames back to
those futures. The pending-call table is only touched from the event loop
that owns the connection, so its three removal paths (response, timeout or
cancellation, connection loss) never interleave.

State machine::

    DISCONNECTED -> CONNECTING -> CONNECTED -> FAULTED
                         |             \\----> CLOSED
                         \\-> DISCONNECTED (connect failed)

``FAULTED`` is entered when the reader stops on an I/O error, EOF or an
undecodable stream; calls then fail immediately without touching the
socket. ``CLOSED`` follows an explicit :meth:`RpcConnection.close`.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Sequence, Tuple

from msgpack import UnpackException

from . import constants
from .codec.schema import decode_bool
from .errors import CallTimeoutError, ConnectError, ConnectionLostError, RpcError
from .logging import WIRE_LOGGER_NAME
from .protocol import FrameError, Notification, Response, encode_request, parse_frame
from .wire import WireValue, new_unpacker

LOGGER = logging.getLogger(__name__)
WIRE_LOGGER = logging.getLogger(WIRE_LOGGER_NAME)

_READ_CHUNK_SIZE = 64 * 1024


class ConnectionState(str, Enum):
    """Current state of the RPC connection."""

    DISCONNECTED = "disconnected"
    """Not connected; the initial state and the state after a failed connect."""

    CONNECTING = "connecting"
    """Opening the TCP stream."""

    CONNECTED = "connected"
    """Stream open and reader running."""

    FAULTED = "faulted"
    """Reader stopped on an I/O error or server close; calls fail fast."""

    CLOSED = "closed"
    """Explicitly closed by the client. Terminal."""


@dataclass(slots=True)
class PendingCall:
    request_id: int
    method: str
    future: asyncio.Future[Response]


def parse_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` (``[v6]:port`` for IPv6 literals)."""

    host, separator, port_text = address.strip().rpartition(":")
    if not separator or not host:
        raise ValueError(f"address must be host:port, got {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"invalid port in address {address!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"port out of range in address {address!r}")
    return host, port


class RpcConnection:
    """Multiplexed msgpack-rpc client over a single stream."""

    def __init__(
        self,
        address: str,
        vehicle_name: str = "",
        *,
        connect_timeout: float = constants.DEFAULT_CONNECT_TIMEOUT_SECONDS,
        call_timeout: float = constants.DEFAULT_CALL_TIMEOUT_SECONDS,
        ping_timeout: float = constants.DEFAULT_PING_TIMEOUT_SECONDS,
    ) -> None:
        self.address = address
        self.vehicle_name = vehicle_name
        self.connect_timeout = connect_timeout
        self.call_timeout = call_timeout
        self.ping_timeout = ping_timeout

        self._state = ConnectionState.DISCONNECTED
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._reader_task: Optional[asyncio.Task[None]] = None
        self._pending: dict[int, PendingCall] = {}
        self._next_id = 0

    @classmethod
    async def connect(
        cls,
        address: str,
        vehicle_name: str = "",
        *,
        connect_timeout: float = constants.DEFAULT_CONNECT_TIMEOUT_SECONDS,
        call_timeout: float = constants.DEFAULT_CALL_TIMEOUT_SECONDS,
        ping_timeout: float = constants.DEFAULT_PING_TIMEOUT_SECONDS,
    ) -> RpcConnection:
        """Open a connection to ``address``.

        Raises:
            ConnectError: If the address is invalid, the server refuses the
                connection, or ``connect_timeout`` elapses.
        """

        connection = cls(
            address,
            vehicle_name,
            connect_timeout=connect_timeout,
            call_timeout=call_timeout,
            ping_timeout=ping_timeout,
        )
        await connection.open()
        return connection

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def pending_request_ids(self) -> FrozenSet[int]:
        """Request ids currently awaiting a response."""
        return frozenset(self._pending)

    async def open(self) -> None:
        if self._state is not ConnectionState.DISCONNECTED:
            raise RuntimeError(f"Connection is already {self._state.value}")

        try:
            host, port = parse_address(self.address)
        except ValueError as exc:
            raise ConnectError(self.address, str(exc)) from exc

        self._state = ConnectionState.CONNECTING
        LOGGER.info("Connecting to AirSim at %s", self.address)

        try:
            async with asyncio.timeout(self.connect_timeout):
                reader, writer = await asyncio.open_connection(host, port)
        except TimeoutError as exc:
            self._state = ConnectionState.DISCONNECTED
            raise ConnectError(
                self.address, f"timed out after {self.connect_timeout:.1f}s"
            ) from exc
        except OSError as exc:
            self._state = ConnectionState.DISCONNECTED
            raise ConnectError(self.address, str(exc) or type(exc).__name__) from exc

        self._reader = reader
        self._writer = writer
        self._state = ConnectionState.CONNECTED
        self._reader_task = asyncio.create_task(
            self._read_loop(), name=f"airsim-rpc-reader[{self.address}]"
        )
        LOGGER.info("Connected to AirSim at %s", self.address)

    async def call(
        self,
        method: str,
        params: Sequence[WireValue] = (),
        *,
        timeout: Optional[float] = None,
    ) -> WireValue:
        """Send a request and wait for its result.

        Args:
            method: Server method name.
            params: Positional parameters, already encoded.
            timeout: Seconds to wait for the response (default: ``call_timeout``).

        Raises:
            RpcError: If the server answered with a non-nil error slot.
            CallTimeoutError: If no response arrived within ``timeout``.
            ConnectionLostError: If the connection is not usable or drops
                before the response arrives.
        """

        if self._state is not ConnectionState.CONNECTED or self._writer is None:
            raise ConnectionLostError(
                f"Cannot call '{method}': connection to {self.address} is {self._state.value}"
            )

        bound = self.call_timeout if timeout is None else timeout
        request_id = self._allocate_id()
        future: asyncio.Future[Response] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = PendingCall(request_id, method, future)

        try:
            frame = encode_request(request_id, method, params)
            WIRE_LOGGER.debug("-> %s id=%d (%d bytes)", method, request_id, len(frame))
            try:
                self._writer.write(frame)
                await self._writer.drain()
            except OSError as exc:
                self._pending.pop(request_id, None)
                self._mark_faulted(exc)
                raise ConnectionLostError(
                    f"Failed to send '{method}' (id={request_id}): {exc}"
                ) from exc

            try:
                async with asyncio.timeout(bound):
                    response = await future
            except TimeoutError:
                LOGGER.warning(
                    "RPC '%s' (id=%d) timed out after %.1fs", method, request_id, bound
                )
                raise CallTimeoutError(method, request_id, bound) from None
        finally:
            self._pending.pop(request_id, None)

        if not response.ok:
            raise RpcError(method, response.error)
        return response.result

    async def ping(self) -> bool:
        """Return the server's answer to ``ping`` within ``ping_timeout``."""

        result = await self.call("ping", (), timeout=self.ping_timeout)
        return decode_bool(result)

    async def confirm_connection(self) -> bool:
        connected = await self.ping()
        if connected:
            LOGGER.info("AirSim at %s confirmed the connection", self.address)
        else:
            LOGGER.warning("AirSim at %s answered ping with false", self.address)
        return connected

    async def close(self) -> None:
        """Close the stream and fail any outstanding calls."""

        if self._state is ConnectionState.CLOSED:
            return

        self._state = ConnectionState.CLOSED

        if self._reader_task is not None:
            self._reader_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader_task
            self._reader_task = None

        self._fail_pending(f"Connection to {self.address} was closed")

        if self._writer is not None:
            self._writer.close()
            with contextlib.suppress(OSError):
                await self._writer.wait_closed()
            self._writer = None
        self._reader = None
        LOGGER.info("Closed AirSim connection to %s", self.address)

    async def __aenter__(self) -> RpcConnection:
        if self._state is ConnectionState.DISCONNECTED:
            await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _allocate_id(self) -> int:
        request_id = self._next_id
        while request_id in self._pending:
            request_id = (request_id + 1) & constants.MAX_REQUEST_ID
        self._next_id = (request_id + 1) & constants.MAX_REQUEST_ID
        return request_id

    async def _read_loop(self) -> None:
        reader = self._reader
        if reader is None:
            raise RuntimeError(f"Connection to {self.address} has no open stream")
        unpacker = new_unpacker()
        reason: Optional[BaseException] = None

        try:
            while True:
                chunk = await reader.read(_READ_CHUNK_SIZE)
                if not chunk:
                    LOGGER.info("AirSim at %s closed the connection", self.address)
                    break
                unpacker.feed(chunk)
                for obj in unpacker:
                    self._dispatch(WireValue.from_python(obj))
        except asyncio.CancelledError:
            raise
        except OSError as exc:
            reason = exc
            LOGGER.warning("AirSim connection read failed: %s", exc)
        except (ValueError, UnpackException) as exc:
            reason = exc
            LOGGER.error("Undecodable data from AirSim at %s: %s", self.address, exc)

        self._mark_faulted(reason)

    def _dispatch(self, value: WireValue) -> None:
        try:
            frame = parse_frame(value)
        except FrameError as exc:
            LOGGER.warning("Ignoring malformed frame from AirSim: %s", exc)
            return

        if isinstance(frame, Response):
            pending = self._pending.pop(frame.request_id, None)
            if pending is None:
                LOGGER.info(
                    "Dropping response for unknown request id %d (timed out or spurious)",
                    frame.request_id,
                )
                return
            WIRE_LOGGER.debug("<- %s id=%d", pending.method, frame.request_id)
            if not pending.future.done():
                pending.future.set_result(frame)
        elif isinstance(frame, Notification):
            WIRE_LOGGER.debug("Ignoring notification '%s'", frame.method)
        else:
            WIRE_LOGGER.debug(
                "Ignoring server request '%s' (id=%d)", frame.method, frame.request_id
            )

    def _mark_faulted(self, reason: Optional[BaseException]) -> None:
        if self._state is ConnectionState.CONNECTED:
            self._state = ConnectionState.FAULTED
            if self._writer is not None:
                self._writer.close()

        detail = f": {reason}" if reason is not None else ""
        self._fail_pending(f"Connection to {self.address} lost{detail}")

    def _fail_pending(self, message: str) -> None:
        pending = list(self._pending.values())
        self._pending.clear()
        for call in pending:
            if not call.future.done():
                call.future.set_exception(
                    ConnectionLostError(f"{message} (method={call.method}, id={call.request_id})")
                )
