from __future__ import annotations

import base64
import logging
import typing

from ._config import DEFAULT_CONTENT_TYPE, DEFAULT_USER_AGENT, Codecs
from ._models import URL, Method, Request

logger = logging.getLogger("httpjsonstream.request")

HeaderTypes = typing.Union[
    typing.Mapping[str, str], typing.Sequence[typing.Tuple[str, str]]
]
BodyTypes = typing.Union[str, bytes]

# Computed from the request itself; callers cannot override them.
_PROTECTED_HEADERS = {"content-length", "connection"}


def _header_items(headers: HeaderTypes | None) -> list[tuple[str, str]]:
    if headers is None:
        return []
    if isinstance(headers, typing.Mapping):
        return [(str(k), str(v)) for k, v in headers.items()]
    return [(str(k), str(v)) for k, v in headers]


def basic_auth_header(userinfo: str) -> str:
    token = base64.b64encode(userinfo.encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def encode_body(body: BodyTypes | None) -> bytes:
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    raise TypeError(f"Invalid type for body. Expected str or bytes, got {type(body)}")


def build_request(
    method: Method | str,
    url: URL | str,
    *,
    headers: HeaderTypes | None = None,
    body: BodyTypes | None = None,
    user_agent: str = DEFAULT_USER_AGENT,
    codecs: Codecs | None = None,
) -> Request:
    """Assemble an HTTP/1.1 request for a single, non-persistent exchange.

    ``headers`` may override any default header (``User-Agent`` and, for
    ``POST``/``PUT``, ``Content-Type`` being the usual ones); names are
    matched case-insensitively and anything that does not replace a default
    is sent after the defaults. ``Content-Length`` and ``Connection`` are
    always derived here.

    ``Accept-Encoding`` advertises exactly the codecs in ``codecs`` and is
    left out when none are enabled.
    """
    method = Method(method.upper() if isinstance(method, str) else method)
    url = URL(url)
    codecs = Codecs.none() if codecs is None else codecs

    if body is not None and not method.has_body:
        raise ValueError(f"{method.value} requests cannot carry a body")

    defaults: list[tuple[str, str]] = [("Host", url.host)]
    if url.userinfo:
        defaults.append(("Authorization", basic_auth_header(url.userinfo)))
    defaults.append(("User-Agent", user_agent))
    defaults.append(("Accept", "*/*"))

    content: bytes | None = None
    if method.has_body:
        content = encode_body(body)
        defaults.append(("Content-Length", str(len(content))))
        defaults.append(("Content-Type", DEFAULT_CONTENT_TYPE))
    defaults.append(("Connection", "close"))
    if codecs.accept_encoding is not None:
        defaults.append(("Accept-Encoding", codecs.accept_encoding))
    defaults.append(("Accept-Charset", "utf-8"))

    index = {name.lower(): position for position, (name, _) in enumerate(defaults)}
    extra: list[tuple[str, str]] = []
    for name, value in _header_items(headers):
        key = name.lower()
        if key in _PROTECTED_HEADERS:
            raise ValueError(f"The {name!r} header cannot be set by the caller")
        if key in index:
            defaults[index[key]] = (defaults[index[key]][0], value)
        else:
            extra.append((name, value))

    request = Request(method, url, defaults + extra, body=content)
    logger.debug("Built request %r", request)
    return request
