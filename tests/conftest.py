import asyncio
import contextlib
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

import pytest_asyncio

from airsim_client.protocol import Request, encode_response, parse_frame
from airsim_client.wire import WireValue, new_unpacker

NO_REPLY = object()


class ServerError:
    """Handler return value that produces a non-nil error slot."""

    def __init__(self, message: str) -> None:
        self.message = message


HandlerResult = Union[WireValue, ServerError, object]
Handler = Callable[[Request], Union[HandlerResult, Awaitable[HandlerResult]]]


class StubAirSimServer:
    """In-process msgpack-rpc server answering from per-method handlers.

    Each request is answered from its own task, so a slow handler does not
    hold back responses to later requests.
    """

    NO_REPLY = NO_REPLY

    def __init__(self) -> None:
        self.handlers: dict[str, Handler] = {}
        self.requests: list[Request] = []
        self._writers: list[asyncio.StreamWriter] = []
        self._tasks: set[asyncio.Task[Any]] = set()
        self._server: Optional[asyncio.Server] = None
        self.port: Optional[int] = None

    @property
    def address(self) -> str:
        return f"127.0.0.1:{self.port}"

    def on(self, method: str, handler: Handler) -> None:
        self.handlers[method] = handler

    def reply(self, method: str, value: WireValue) -> None:
        self.handlers[method] = lambda request: value

    @staticmethod
    def error(message: str) -> ServerError:
        return ServerError(message)

    async def start(self, port: int) -> None:
        self._server = await asyncio.start_server(self._handle_client, "127.0.0.1", port)
        self.port = port

    async def stop(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.drop_clients()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()

    async def drop_clients(self) -> None:
        for writer in self._writers:
            writer.close()
            with contextlib.suppress(OSError):
                await writer.wait_closed()
        self._writers.clear()

    async def send_raw(self, data: bytes) -> None:
        for writer in self._writers:
            writer.write(data)
            await writer.drain()

    async def wait_for_requests(self, count: int, timeout: float = 2.0) -> None:
        async with asyncio.timeout(timeout):
            while len(self.requests) < count:
                await asyncio.sleep(0.01)

    async def _handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self._writers.append(writer)
        unpacker = new_unpacker()
        try:
            while True:
                chunk = await reader.read(65536)
                if not chunk:
                    break
                unpacker.feed(chunk)
                for obj in unpacker:
                    frame = parse_frame(WireValue.from_python(obj))
                    if isinstance(frame, Request):
                        self.requests.append(frame)
                        task = asyncio.create_task(self._respond(frame, writer))
                        self._tasks.add(task)
                        task.add_done_callback(self._tasks.discard)
        except ConnectionError:
            pass
        finally:
            writer.close()

    async def _respond(self, request: Request, writer: asyncio.StreamWriter) -> None:
        handler = self.handlers.get(request.method)
        if handler is None:
            result: HandlerResult = ServerError(
                f"rpclib: server could not find function '{request.method}'"
            )
        else:
            result = handler(request)
            if inspect.isawaitable(result):
                result = await result

        if result is NO_REPLY or writer.is_closing():
            return
        if isinstance(result, ServerError):
            frame = encode_response(
                request.request_id, WireValue.nil(), error=WireValue.string(result.message)
            )
        else:
            frame = encode_response(request.request_id, result)
        writer.write(frame)
        with contextlib.suppress(ConnectionError):
            await writer.drain()


@pytest_asyncio.fixture
async def airsim_server(unused_tcp_port_factory):
    server = StubAirSimServer()
    await server.start(unused_tcp_port_factory())
    try:
        yield server
    finally:
        await server.stop()
