from __future__ import annotations

import io
import logging
import socket
import typing

from ._exceptions import RemoteProtocolError

logger = logging.getLogger("httpjsonstream.transport")

# Longest status/header/chunk-size line we are willing to buffer.
MAX_LINE_SIZE = 64 * 1024


class Transport(typing.Protocol):
    """What the response pipeline needs from a byte stream."""

    def write(self, data: bytes) -> None: ...

    def readline(self) -> bytes: ...

    def read(self, size: int) -> bytes: ...

    def read_some(self, size: int) -> bytes: ...

    def at_eof(self) -> bool: ...

    def close(self) -> None: ...


class SocketTransport:
    """A blocking TCP connection with a buffered reader on top.

    Exclusively owned by one in-flight request and closed when it finishes.
    """

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._reader = typing.cast(io.BufferedReader, sock.makefile("rb"))
        self._closed = False

    @classmethod
    def connect(
        cls, host: str, port: int, timeout: float | None = None
    ) -> SocketTransport:
        logger.debug("Connecting to %s:%d", host, port)
        sock = socket.create_connection((host, port), timeout=timeout)
        return cls(sock)

    def write(self, data: bytes) -> None:
        self._sock.sendall(data)

    def readline(self) -> bytes:
        line = self._reader.readline(MAX_LINE_SIZE)
        if len(line) == MAX_LINE_SIZE and not line.endswith(b"\n"):
            raise RemoteProtocolError(f"Line longer than {MAX_LINE_SIZE} bytes received")
        return line

    def read(self, size: int) -> bytes:
        """Block until ``size`` bytes arrive or the peer closes."""
        return self._reader.read(size)

    def read_some(self, size: int) -> bytes:
        """Return whatever is available, at most ``size`` bytes, blocking only
        if nothing is buffered yet."""
        return self._reader.read1(size)

    def at_eof(self) -> bool:
        return not self._reader.peek(1)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._reader.close()
        finally:
            self._sock.close()
        logger.debug("Connection closed")

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self) -> SocketTransport:
        return self

    def __exit__(self, *args: typing.Any) -> None:
        self.close()
