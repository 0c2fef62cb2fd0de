from __future__ import annotations

import enum
import logging
import typing

from ._exceptions import InvalidChunkLength, RemoteProtocolError
from ._transport import Transport

logger = logging.getLogger("httpjsonstream.chunked")


class ChunkState(enum.Enum):
    AWAITING_SIZE = "awaiting-size"
    AWAITING_DATA = "awaiting-data"
    DONE = "done"


def parse_chunk_size(line: bytes) -> int:
    """Parse a chunk-size line, ignoring any ``;name=value`` extensions."""
    digits = line.split(b";", 1)[0].strip()
    try:
        size = int(digits, 16)
    except ValueError:
        raise InvalidChunkLength(line) from None
    if not digits.isalnum():
        raise InvalidChunkLength(line)
    return size


class ChunkDecoder:
    """Strips chunked transfer framing off a transport.

    Iterating yields the chunk payloads as they are read, possibly split into
    more than one piece when a chunk arrives in several reads. Iteration ends
    at the zero-size terminator chunk, or quietly when the peer closes the
    connection between chunks.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self.state = ChunkState.AWAITING_SIZE
        self.remaining = 0

    @property
    def done(self) -> bool:
        return self.state is ChunkState.DONE

    def __iter__(self) -> typing.Iterator[bytes]:
        while self.state is not ChunkState.DONE:
            if self.state is ChunkState.AWAITING_SIZE:
                self._read_size()
            else:
                yield from self._read_data()

    def _read_size(self) -> None:
        if self._transport.at_eof():
            logger.debug("Connection closed before the terminating chunk")
            self.state = ChunkState.DONE
            return
        line = self._transport.readline()
        if not line.strip():
            # CRLF trailing the previous chunk's data.
            return
        size = parse_chunk_size(line)
        logger.debug("Chunk of %d bytes", size)
        if size == 0:
            self.state = ChunkState.DONE
        else:
            self.remaining = size
            self.state = ChunkState.AWAITING_DATA

    def _read_data(self) -> typing.Iterator[bytes]:
        data = self._transport.read_some(self.remaining)
        if data:
            self.remaining -= len(data)
            yield data
        if self.remaining:
            # Short read: block for exactly the rest of the chunk.
            rest = self._transport.read(self.remaining)
            self.remaining -= len(rest)
            if self.remaining:
                raise RemoteProtocolError(
                    f"Connection closed with {self.remaining} bytes of the chunk outstanding"
                )
            yield rest
        self.state = ChunkState.AWAITING_SIZE
