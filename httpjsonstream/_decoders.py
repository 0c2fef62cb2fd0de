"""
Content decoders and the stream readers that drive them.

Each decoder inflates bytes incrementally (``decompress``/``flush``). A
:class:`StreamReader` owns the read-inflate-parse loop for a non-chunked body:
it pulls blocks off the transport, runs them through its decoder and feeds
the result to the JSON parser.
"""

from __future__ import annotations

import bz2
import logging
import typing
import zlib

from ._config import DEFAULT_BLOCK_SIZE, Codecs
from ._exceptions import DecodingError
from ._parser import JSONParser
from ._transport import Transport

logger = logging.getLogger("httpjsonstream.decoders")


class ContentDecoder:
    """The identity coding: bytes pass through untouched."""

    encoding = "identity"

    def decompress(self, data: bytes) -> bytes:
        return data

    def flush(self) -> bytes:
        return b""


class GzipDecoder(ContentDecoder):
    encoding = "gzip"

    def __init__(self) -> None:
        self._obj = zlib.decompressobj(16 + zlib.MAX_WBITS)

    def decompress(self, data: bytes) -> bytes:
        ret = bytearray()
        while data:
            try:
                ret += self._obj.decompress(data)
            except zlib.error as exc:
                raise DecodingError(str(exc)) from exc
            data = self._obj.unused_data
            if data:
                # Concatenated gzip members.
                self._obj = zlib.decompressobj(16 + zlib.MAX_WBITS)
        return bytes(ret)

    def flush(self) -> bytes:
        return self._obj.flush()


class DeflateDecoder(ContentDecoder):
    """Deflate, expecting raw (headerless) framing unless told otherwise."""

    encoding = "deflate"

    def __init__(self, wbits: int = -zlib.MAX_WBITS) -> None:
        self._obj = zlib.decompressobj(wbits)

    def decompress(self, data: bytes) -> bytes:
        try:
            return self._obj.decompress(data)
        except zlib.error as exc:
            raise DecodingError(str(exc)) from exc

    def flush(self) -> bytes:
        try:
            return self._obj.flush()
        except zlib.error as exc:
            raise DecodingError(str(exc)) from exc


class Bzip2Decoder(ContentDecoder):
    encoding = "bzip2"

    def __init__(self) -> None:
        self._obj = bz2.BZ2Decompressor()

    def decompress(self, data: bytes) -> bytes:
        if not data or self._obj.eof:
            return b""
        try:
            return self._obj.decompress(data)
        except OSError as exc:
            raise DecodingError(str(exc)) from exc


def get_decoder(
    content_encoding: str | None,
    codecs: Codecs,
    deflate_wbits: int = -zlib.MAX_WBITS,
) -> ContentDecoder:
    """Pick the decoder for a ``Content-Encoding`` value.

    Codings that are unknown, or not enabled in ``codecs``, fall back to
    passing the body through as-is.
    """
    if content_encoding not in codecs:
        return ContentDecoder()
    if content_encoding == "gzip":
        return GzipDecoder()
    if content_encoding == "deflate":
        return DeflateDecoder(deflate_wbits)
    return Bzip2Decoder()


def iter_body(
    transport: Transport,
    content_length: int | None = None,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> typing.Iterator[bytes]:
    """Yield body blocks as they arrive, up to ``content_length`` or EOF."""
    remaining = content_length
    while remaining is None or remaining > 0:
        size = block_size if remaining is None else min(block_size, remaining)
        block = transport.read_some(size)
        if not block:
            return
        if remaining is not None:
            remaining -= len(block)
        yield block


class StreamReader:
    def __init__(
        self, decoder: ContentDecoder, block_size: int = DEFAULT_BLOCK_SIZE
    ) -> None:
        self.decoder = decoder
        self.block_size = block_size

    def parse(
        self,
        source: Transport,
        parser: JSONParser,
        content_length: int | None = None,
    ) -> typing.Any:
        """Inflate everything ``source`` delivers into ``parser``.

        Returns whatever the parser's ``close()`` returns: the document in
        collect mode, ``None`` in streaming mode.
        """
        logger.debug("Reading %s body", self.decoder.encoding)
        for block in iter_body(source, content_length, self.block_size):
            parser.feed(self.decoder.decompress(block))
        parser.feed(self.decoder.flush())
        return parser.close()
