from __future__ import annotations

import io
import typing


class MemoryTransport:
    """In-memory stand-in for a socket: replays canned response bytes and
    records what was written."""

    def __init__(self, response: bytes = b"", max_read: int | None = None) -> None:
        self._reader = io.BufferedReader(io.BytesIO(response))
        self.max_read = max_read
        self.written = bytearray()
        self.closed = False
        self.connected_to: tuple[str, int, float | None] | None = None

    def factory(self, host: str, port: int, timeout: float | None) -> MemoryTransport:
        self.connected_to = (host, port, timeout)
        return self

    def write(self, data: bytes) -> None:
        if self.closed:
            raise OSError("write to closed transport")
        self.written += data

    def readline(self) -> bytes:
        return self._reader.readline()

    def read(self, size: int) -> bytes:
        return self._reader.read(size)

    def read_some(self, size: int) -> bytes:
        if self.max_read is not None:
            size = min(size, self.max_read)
        return self._reader.read1(size)

    def at_eof(self) -> bool:
        return not self._reader.peek(1)

    def close(self) -> None:
        self.closed = True

    def unread(self) -> bytes:
        """Everything the client left on the wire."""
        return self._reader.read()


def http_response(
    body: bytes = b"",
    headers: typing.Sequence[tuple[str, str]] = (("Content-Type", "application/json"),),
    status: str = "200 OK",
) -> bytes:
    head = [f"HTTP/1.1 {status}"]
    head.extend(f"{name}: {value}" for name, value in headers)
    return ("\r\n".join(head) + "\r\n\r\n").encode("latin-1") + body


def chunked(*parts: bytes) -> bytes:
    framed = b"".join(b"%x\r\n%s\r\n" % (len(part), part) for part in parts)
    return framed + b"0\r\n\r\n"
