from __future__ import annotations

import enum
import typing
from urllib.parse import unquote

from ._urlparse import DEFAULT_PORTS, ParseResult, urlparse


class Method(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def has_body(self) -> bool:
        return self in (Method.POST, Method.PUT)

    def __str__(self) -> str:
        return self.value


class URL:
    """A parsed target URL.

    ``port`` falls back to 80 for ``http`` URLs that omit it,
    ``path`` is never empty, and ``userinfo`` is percent-decoded, ready to be
    base64 encoded into a Basic ``Authorization`` header.
    """

    __slots__ = ("_uri",)

    def __init__(self, url: str | URL = "") -> None:
        if isinstance(url, URL):
            self._uri: ParseResult = url._uri
        elif isinstance(url, str):
            self._uri = urlparse(url)
        else:
            raise TypeError(
                f"Invalid type for url.  Expected str or URL, got {type(url)}: {url!r}"
            )

    @property
    def scheme(self) -> str:
        return self._uri.scheme

    @property
    def userinfo(self) -> str:
        return unquote(self._uri.userinfo)

    @property
    def host(self) -> str:
        return self._uri.host

    @property
    def port(self) -> int | None:
        if self._uri.port is not None:
            return self._uri.port
        return DEFAULT_PORTS.get(self._uri.scheme)

    @property
    def path(self) -> str:
        return self._uri.path or "/"

    @property
    def query(self) -> str | None:
        return self._uri.query

    @property
    def raw_path(self) -> str:
        """The request target: path, plus ``?query`` when a query is present."""
        if self.query is None:
            return self.path
        return f"{self.path}?{self.query}"

    def __eq__(self, other: typing.Any) -> bool:
        return isinstance(other, (URL, str)) and str(self) == str(URL(other))

    def __hash__(self) -> int:
        return hash(str(self))

    def __str__(self) -> str:
        return str(self._uri)

    def __repr__(self) -> str:
        return f"URL({str(self)!r})"


class Request:
    """A fully built HTTP/1.1 request. Immutable once constructed."""

    __slots__ = ("_method", "_url", "_headers", "_body")

    def __init__(
        self,
        method: Method,
        url: URL,
        headers: typing.Sequence[tuple[str, str]],
        body: bytes | None = None,
    ) -> None:
        self._method = method
        self._url = url
        self._headers = tuple(headers)
        self._body = body

    @property
    def method(self) -> Method:
        return self._method

    @property
    def url(self) -> URL:
        return self._url

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    @property
    def header_items(self) -> tuple[tuple[str, str], ...]:
        return self._headers

    @property
    def body(self) -> bytes | None:
        return self._body

    def encode(self) -> bytes:
        lines = [f"{self._method} {self._url.raw_path} HTTP/1.1"]
        lines.extend(f"{name}: {value}" for name, value in self._headers)
        head = ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")
        if self._body is not None:
            return head + self._body
        return head

    def __repr__(self) -> str:
        return f"<Request({self._method.value!r}, {str(self._url)!r})>"


class ResponseHead:
    """Status line and headers of a response.

    Header names are stored lowercased; values are kept as received, minus
    trailing whitespace. A repeated header keeps its last value.
    """

    __slots__ = ("http_version", "status_code", "reason_phrase", "headers")

    def __init__(
        self,
        http_version: str,
        status_code: int,
        reason_phrase: str,
        headers: dict[str, str],
    ) -> None:
        self.http_version = http_version
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        self.headers = headers

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    @property
    def mime_type(self) -> str:
        """``Content-Type`` without parameters, e.g. ``application/json``."""
        return (self.get("content-type") or "").partition(";")[0].strip()

    @property
    def is_chunked(self) -> bool:
        value = self.get("transfer-encoding")
        if not value:
            return False
        codings = [coding.strip().lower() for coding in value.split(",")]
        return codings[-1] == "chunked"

    @property
    def content_encoding(self) -> str | None:
        value = self.get("content-encoding")
        return value.strip().lower() if value else None

    @property
    def content_length(self) -> int | None:
        value = self.get("content-length")
        if value is None:
            return None
        value = value.strip()
        if not (value.isascii() and value.isdigit()):
            return None
        return int(value)

    def __repr__(self) -> str:
        return f"<ResponseHead [{self.status_code} {self.reason_phrase}]>"
