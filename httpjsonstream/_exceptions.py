"""
Exception hierarchy, laid out like httpx's:

* HTTPError
  x RequestError
    + TransportError
      - ProtocolError
        · RemoteProtocolError
        · InvalidChunkLength
      - UnsupportedProtocol
    + DecodingError
  x InvalidContentType
  x StreamConfigurationError
* InvalidURL

Socket failures are not translated: ``OSError`` and ``socket.timeout``
reach the caller untouched. Malformed JSON surfaces as ``ijson.JSONError``.
"""

from __future__ import annotations

import typing

if typing.TYPE_CHECKING:
    from ._models import Request


class HTTPError(Exception):
    """Base class for every error raised while making a streaming request."""

    def __init__(self, message: str, **kwargs: typing.Any) -> None:
        super().__init__(message)
        self._request: Request | None = kwargs.get("request", None)

    @property
    def request(self) -> Request:
        if self._request is None:
            raise RuntimeError("The .request property has not been set.")
        return self._request

    @request.setter
    def request(self, request: Request) -> None:
        self._request = request


class RequestError(HTTPError):
    def __init__(self, message: str, *, request: Request | None = None) -> None:
        super().__init__(message, request=request)


class TransportError(RequestError):
    pass


class ProtocolError(TransportError):
    pass


class RemoteProtocolError(ProtocolError):
    """The server sent something that is not valid HTTP/1.1 framing."""


class InvalidChunkLength(ProtocolError):
    def __init__(
        self, line: bytes, *, request: Request | None = None
    ) -> None:
        super().__init__(f"Invalid chunk size line: {line!r}", request=request)
        self.line = line


class UnsupportedProtocol(TransportError):
    pass


class DecodingError(RequestError):
    """A compressed body could not be inflated."""


class InvalidContentType(HTTPError):
    """The response MIME type is not one we know how to parse."""

    def __init__(
        self, mime_type: str, *, request: Request | None = None
    ) -> None:
        super().__init__(
            f"The response MIME type {mime_type!r} cannot be parsed as JSON",
            request=request,
        )
        self.mime_type = mime_type


class StreamConfigurationError(HTTPError):
    """The call was set up in a way that cannot handle the response."""


class InvalidURL(Exception):
    pass
