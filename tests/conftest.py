from __future__ import annotations

import gzip
import json
import re
import socket
import threading
import time
import typing
import zlib

import pytest
from uvicorn.config import Config
from uvicorn.server import Server

Message = typing.Dict[str, typing.Any]
Receive = typing.Callable[[], typing.Awaitable[Message]]
Send = typing.Callable[
    [typing.Dict[str, typing.Any]], typing.Coroutine[None, None, None]
]
Scope = typing.Dict[str, typing.Any]


# ---------------------------------------------------------------------------
# ASGI app
# ---------------------------------------------------------------------------


async def app(scope: Scope, receive: Receive, send: Send) -> None:
    assert scope["type"] == "http"
    path = scope["path"]

    if path == "/json":
        await json_response(scope, receive, send)
    elif path == "/stream":
        await json_stream(scope, receive, send)
    elif path == "/gzip":
        await compressed(scope, receive, send, "gzip", gzip.compress)
    elif path == "/deflate":
        await compressed(scope, receive, send, "deflate", raw_deflate)
    elif path == "/html":
        await html(scope, receive, send)
    else:
        await echo(scope, receive, send)


def raw_deflate(data: bytes) -> bytes:
    obj = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    return obj.compress(data) + obj.flush()


async def json_response(scope: Scope, receive: Receive, send: Send) -> None:
    payload = json.dumps({"message": "Hello", "numbers": list(range(10))}).encode()
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [
                [b"content-type", b"application/json; charset=utf-8"],
                [b"content-length", str(len(payload)).encode()],
            ],
        }
    )
    await send({"type": "http.response.body", "body": payload})


async def json_stream(scope: Scope, receive: Receive, send: Send) -> None:
    # No content-length, several body messages: uvicorn frames this as chunked.
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [[b"content-type", b"application/json"]],
        }
    )
    for part in (b'{"id": 1}\n{"id"', b': 2}\n[1, 2', b", 3]\n"):
        await send({"type": "http.response.body", "body": part, "more_body": True})
    await send({"type": "http.response.body", "body": b""})


async def compressed(
    scope: Scope,
    receive: Receive,
    send: Send,
    encoding: str,
    compress: typing.Callable[[bytes], bytes],
) -> None:
    payload = compress(json.dumps({"encoding": encoding}).encode())
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [
                [b"content-type", b"application/json"],
                [b"content-encoding", encoding.encode()],
                [b"content-length", str(len(payload)).encode()],
            ],
        }
    )
    await send({"type": "http.response.body", "body": payload})


async def html(scope: Scope, receive: Receive, send: Send) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [
                [b"content-type", b"text/html"],
                [b"content-length", b"13"],
            ],
        }
    )
    await send({"type": "http.response.body", "body": b"<html></html>"})


async def echo(scope: Scope, receive: Receive, send: Send) -> None:
    body = b""
    more_body = True
    while more_body:
        message = await receive()
        body += message.get("body", b"")
        more_body = message.get("more_body", False)

    payload = json.dumps(
        {
            "method": scope["method"],
            "path": scope["path"],
            "query": scope["query_string"].decode(),
            "headers": {
                name.decode(): value.decode() for name, value in scope["headers"]
            },
            "body": body.decode(),
        }
    ).encode()
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [
                [b"content-type", b"application/json"],
                [b"content-length", str(len(payload)).encode()],
            ],
        }
    )
    await send({"type": "http.response.body", "body": payload})


# ---------------------------------------------------------------------------
# Servers
# ---------------------------------------------------------------------------


def _find_free_port() -> int:
    """Find a free TCP port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestServer(Server):
    def install_signal_handlers(self) -> None:
        pass  # Cannot install signal handlers outside main thread

    @property
    def url(self) -> str:
        return f"http://{self.config.host}:{self.config.port}"


@pytest.fixture(scope="session")
def server() -> typing.Iterator[TestServer]:
    config = Config(
        app=app,
        lifespan="off",
        loop="asyncio",
        host="127.0.0.1",
        port=_find_free_port(),
        log_level="warning",
    )
    srv = TestServer(config=config)
    thread = threading.Thread(target=srv.run, daemon=True)
    thread.start()
    while not srv.started:
        time.sleep(1e-3)
    yield srv
    srv.should_exit = True
    thread.join(timeout=5)


class RawServer:
    """Accepts a single connection, records the request and replays canned
    response bytes, pausing between parts so they arrive in separate reads."""

    def __init__(self, parts: typing.Sequence[bytes], delay: float = 0.0) -> None:
        self._parts = parts
        self._delay = delay
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(1)
        self.port: int = self._sock.getsockname()[1]
        self.url = f"http://127.0.0.1:{self.port}"
        self.request = b""
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        conn, _ = self._sock.accept()
        with conn:
            data = b""
            while b"\r\n\r\n" not in data:
                chunk = conn.recv(65536)
                if not chunk:
                    break
                data += chunk
            head, _, body = data.partition(b"\r\n\r\n")
            match = re.search(rb"\r\nContent-Length: (\d+)", head)
            length = int(match.group(1)) if match else 0
            while len(body) < length:
                chunk = conn.recv(65536)
                if not chunk:
                    break
                body += chunk
            self.request = head + b"\r\n\r\n" + body
            for part in self._parts:
                conn.sendall(part)
                if self._delay:
                    time.sleep(self._delay)

    def wait(self) -> bytes:
        self._thread.join(timeout=5)
        return self.request

    def close(self) -> None:
        self._sock.close()


@pytest.fixture
def raw_server() -> typing.Iterator[typing.Callable[..., RawServer]]:
    servers: list[RawServer] = []

    def start(*parts: bytes, delay: float = 0.0) -> RawServer:
        srv = RawServer(parts, delay=delay)
        servers.append(srv)
        return srv

    yield start
    for srv in servers:
        srv.close()
