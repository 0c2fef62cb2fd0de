from __future__ import annotations

import logging
import typing
import zlib

from ._chunked import ChunkDecoder
from ._config import ALLOWED_MIME_TYPES, DEFAULT_BLOCK_SIZE, DEFAULT_USER_AGENT, Codecs
from ._decoders import ContentDecoder, StreamReader, get_decoder
from ._exceptions import (
    InvalidContentType,
    InvalidURL,
    StreamConfigurationError,
    UnsupportedProtocol,
)
from ._head import read_response_head
from ._models import URL, Method, Request, ResponseHead
from ._parser import CollectingParser, JSONParser, OnValue, StreamingParser
from ._request import BodyTypes, HeaderTypes, build_request
from ._transport import SocketTransport, Transport

logger = logging.getLogger("httpjsonstream.client")

TransportFactory = typing.Callable[[str, int, typing.Optional[float]], Transport]


def _enforce_http_url(url: URL) -> None:
    if not url.scheme:
        raise UnsupportedProtocol("Request URL is missing an 'http://' protocol.")
    if url.scheme != "http":
        raise UnsupportedProtocol(
            f"Request URL has an unsupported protocol '{url.scheme}://'."
        )
    if not url.host:
        raise InvalidURL(f"Request URL is missing a host: {str(url)!r}")


class HttpStream:
    """A one-request-per-connection HTTP/1.1 client that parses JSON as it
    arrives.

    Every call opens its own connection, writes the request, reads the
    response head and pushes the body through the JSON parser, closing the
    connection however the call ends. Nothing is shared between calls.

    Parameters
    ----------
    user_agent:
        Default ``User-Agent``; a ``User-Agent`` entry in per-call
        ``headers`` takes precedence.
    codecs:
        Content codecs to advertise in ``Accept-Encoding`` and decode.
        Defaults to :meth:`Codecs.available`.
    parser_options:
        Keyword arguments forwarded to ijson on every call, e.g.
        ``{"use_float": True}``. Per-call keyword arguments are merged on top.
    timeout:
        Socket timeout in seconds. ``None`` (the default) blocks for as long
        as the peer takes.
    transport_factory:
        ``(host, port, timeout) -> Transport``; defaults to a TCP socket.
    decode_chunked_content:
        Chunked bodies are handed to the parser without content decoding
        unless this is set, in which case ``Content-Encoding`` is honoured
        for them as well.
    deflate_wbits:
        ``wbits`` for ``deflate`` bodies; raw deflate by default.

    Chunked and non-chunked responses alike must carry an allowed
    ``Content-Type`` (``application/json`` or ``text/plain``). A chunked
    stream that sends no ``Content-Type``, or a vendor type such as
    ``application/x-ndjson``, is rejected with :class:`InvalidContentType`
    before any chunk is read.

    Examples
    --------
    >>> client = HttpStream()
    >>> client.stream("GET", "http://localhost:8080/feed", print)
    >>> document = client.collect("GET", "http://localhost:8080/status")
    """

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        codecs: Codecs | None = None,
        parser_options: dict[str, typing.Any] | None = None,
        timeout: float | None = None,
        transport_factory: TransportFactory | None = None,
        decode_chunked_content: bool = False,
        deflate_wbits: int = -zlib.MAX_WBITS,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> None:
        self.user_agent = user_agent
        self.codecs = Codecs.available() if codecs is None else codecs
        self.parser_options: dict[str, typing.Any] = dict(parser_options or {})
        self.timeout = timeout
        self.transport_factory: TransportFactory = (
            transport_factory or SocketTransport.connect
        )
        self.decode_chunked_content = decode_chunked_content
        self.deflate_wbits = deflate_wbits
        self.block_size = block_size

    def build_request(
        self,
        method: Method | str,
        url: URL | str,
        *,
        body: BodyTypes | None = None,
        headers: HeaderTypes | None = None,
    ) -> Request:
        url = URL(url)
        _enforce_http_url(url)
        return build_request(
            method,
            url,
            headers=headers,
            body=body,
            user_agent=self.user_agent,
            codecs=self.codecs,
        )

    def stream(
        self,
        method: Method | str,
        url: URL | str,
        on_value: OnValue,
        *,
        body: BodyTypes | None = None,
        headers: HeaderTypes | None = None,
        **parser_options: typing.Any,
    ) -> None:
        """Call ``on_value`` with each JSON value in the response as soon as
        it has been parsed."""
        request = self.build_request(method, url, body=body, headers=headers)
        options = {**self.parser_options, **parser_options}
        self.send(request, StreamingParser(on_value, **options))

    def collect(
        self,
        method: Method | str,
        url: URL | str,
        *,
        body: BodyTypes | None = None,
        headers: HeaderTypes | None = None,
        **parser_options: typing.Any,
    ) -> typing.Any:
        """Parse the whole response body and return the JSON document.

        Chunked responses cannot be collected; use :meth:`stream` for those.
        """
        request = self.build_request(method, url, body=body, headers=headers)
        options = {**self.parser_options, **parser_options}
        return self.send(request, CollectingParser(**options))

    def send(self, request: Request, parser: JSONParser) -> typing.Any:
        url = request.url
        transport = self.transport_factory(url.host, url.port or 80, self.timeout)
        try:
            transport.write(request.encode())
            head = read_response_head(transport)
            logger.info(
                'HTTP Request: %s %s "%s %d %s"',
                request.method.value,
                url,
                head.http_version,
                head.status_code,
                head.reason_phrase,
            )
            return self._read_body(request, head, transport, parser)
        finally:
            transport.close()

    def _read_body(
        self,
        request: Request,
        head: ResponseHead,
        transport: Transport,
        parser: JSONParser,
    ) -> typing.Any:
        if head.is_chunked and not isinstance(parser, StreamingParser):
            raise StreamConfigurationError(
                "Chunked response received, but no on_value callback was given "
                "to handle the values. Use stream() for chunked responses.",
                request=request,
            )

        mime_type = head.mime_type
        if mime_type.lower() not in ALLOWED_MIME_TYPES:
            raise InvalidContentType(mime_type, request=request)

        if head.is_chunked:
            return self._read_chunked(head, transport, parser)

        decoder = get_decoder(head.content_encoding, self.codecs, self.deflate_wbits)
        logger.debug("Using %s decoder", decoder.encoding)
        reader = StreamReader(decoder, self.block_size)
        return reader.parse(transport, parser, head.content_length)

    def _read_chunked(
        self, head: ResponseHead, transport: Transport, parser: JSONParser
    ) -> typing.Any:
        decoder = ContentDecoder()
        encoding = head.content_encoding
        if encoding and encoding != "identity":
            if self.decode_chunked_content:
                decoder = get_decoder(encoding, self.codecs, self.deflate_wbits)
            else:
                logger.warning(
                    "Ignoring Content-Encoding %r on a chunked response; "
                    "pass decode_chunked_content=True to decode it",
                    encoding,
                )
        for data in ChunkDecoder(transport):
            parser.feed(decoder.decompress(data))
        parser.feed(decoder.flush())
        return parser.close()

    def get(
        self,
        url: URL | str,
        on_value: OnValue | None = None,
        *,
        headers: HeaderTypes | None = None,
        **parser_options: typing.Any,
    ) -> typing.Any:
        return self._dispatch("GET", url, on_value, None, headers, parser_options)

    def post(
        self,
        url: URL | str,
        body: BodyTypes,
        on_value: OnValue | None = None,
        *,
        headers: HeaderTypes | None = None,
        **parser_options: typing.Any,
    ) -> typing.Any:
        return self._dispatch("POST", url, on_value, body, headers, parser_options)

    def put(
        self,
        url: URL | str,
        body: BodyTypes,
        on_value: OnValue | None = None,
        *,
        headers: HeaderTypes | None = None,
        **parser_options: typing.Any,
    ) -> typing.Any:
        return self._dispatch("PUT", url, on_value, body, headers, parser_options)

    def delete(
        self,
        url: URL | str,
        on_value: OnValue | None = None,
        *,
        headers: HeaderTypes | None = None,
        **parser_options: typing.Any,
    ) -> typing.Any:
        return self._dispatch("DELETE", url, on_value, None, headers, parser_options)

    def _dispatch(
        self,
        method: str,
        url: URL | str,
        on_value: OnValue | None,
        body: BodyTypes | None,
        headers: HeaderTypes | None,
        parser_options: dict[str, typing.Any],
    ) -> typing.Any:
        if on_value is None:
            return self.collect(method, url, body=body, headers=headers, **parser_options)
        return self.stream(
            method, url, on_value, body=body, headers=headers, **parser_options
        )

    def __repr__(self) -> str:
        return f"<HttpStream user_agent={self.user_agent!r} codecs={self.codecs!r}>"
