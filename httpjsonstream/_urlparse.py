"""
RFC 3986 URL parsing, trimmed to what a single-shot HTTP/1.1 client needs.

The parser splits a URL into components, validates them and percent-encodes
whatever needs encoding. Non-ASCII hostnames are IDNA encoded.
"""

from __future__ import annotations

import ipaddress
import re
import typing

import idna

from ._exceptions import InvalidURL

MAX_URL_LENGTH = 65536

UNRESERVED_CHARACTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
SUB_DELIMS = "!$&'()*+,;="

PERCENT_ENCODED_REGEX = re.compile("%[A-Fa-f0-9]{2}")

_ALWAYS_EXCLUDED = (0x20, 0x22, 0x3C, 0x3E)
_PATH_EXCLUDED = _ALWAYS_EXCLUDED + (0x23, 0x3F, 0x60, 0x7B, 0x7D)
_USERINFO_EXTRA = (0x2F, 0x3B, 0x3D, 0x40, 0x5B, 0x5C, 0x5D, 0x5E, 0x7C)


def _safe_chars(*excluded: int) -> str:
    excluded_set = set(excluded)
    return "".join(chr(i) for i in range(0x20, 0x7F) if i not in excluded_set)


QUERY_SAFE = _safe_chars(*_ALWAYS_EXCLUDED, 0x23)
PATH_SAFE = _safe_chars(*_PATH_EXCLUDED)
USERINFO_SAFE = _safe_chars(*_PATH_EXCLUDED, *_USERINFO_EXTRA)

URL_REGEX = re.compile(
    r"(?:(?P<scheme>([a-zA-Z][a-zA-Z0-9+.-]*)?):)?"
    r"(?://(?P<authority>[^/?#]*))?"
    r"(?P<path>[^?#]*)"
    r"(?:\?(?P<query>[^#]*))?"
    r"(?:#(?P<fragment>.*))?"
)

AUTHORITY_REGEX = re.compile(
    r"(?:(?P<userinfo>.*)@)?(?P<host>(\[.*\]|[^:@]*)):?(?P<port>.*)?"
)

IPv4_STYLE_HOSTNAME = re.compile(r"^[0-9]+\.[0-9]+\.[0-9]+\.[0-9]+$")
IPv6_STYLE_HOSTNAME = re.compile(r"^\[.*\]$")

DEFAULT_PORTS = {"http": 80}


class ParseResult(typing.NamedTuple):
    scheme: str
    userinfo: str
    host: str
    port: int | None
    path: str
    query: str | None

    @property
    def authority(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return "".join([
            f"{self.userinfo}@" if self.userinfo else "",
            host,
            f":{self.port}" if self.port is not None else "",
        ])

    def __str__(self) -> str:
        authority = self.authority
        return "".join([
            f"{self.scheme}:" if self.scheme else "",
            f"//{authority}" if authority else "",
            self.path,
            f"?{self.query}" if self.query is not None else "",
        ])


def _validate_non_printable(value: str, label: str) -> None:
    if any(char.isascii() and not char.isprintable() for char in value):
        char = next(c for c in value if c.isascii() and not c.isprintable())
        raise InvalidURL(f"Invalid non-printable ASCII character in {label}, {char!r} at position {value.find(char)}.")


def urlparse(url: str) -> ParseResult:
    if len(url) > MAX_URL_LENGTH:
        raise InvalidURL("URL too long")

    _validate_non_printable(url, "URL")

    url_dict = URL_REGEX.match(url).groupdict()  # type: ignore[union-attr]

    scheme = url_dict["scheme"] or ""
    authority = url_dict["authority"] or ""
    path = url_dict["path"] or ""
    query = url_dict["query"]

    authority_dict = AUTHORITY_REGEX.match(authority).groupdict()  # type: ignore[union-attr]

    userinfo = authority_dict["userinfo"] or ""
    host = authority_dict["host"] or ""
    port = authority_dict["port"]

    parsed_scheme = scheme.lower()
    parsed_userinfo = quote(userinfo, safe=USERINFO_SAFE)
    parsed_host = encode_host(host)
    parsed_port = normalize_port(port, parsed_scheme)

    has_authority = bool(parsed_userinfo or parsed_host or parsed_port is not None)

    validate_path(path, has_authority=has_authority)
    if parsed_scheme or has_authority:
        path = normalize_path(path)

    return ParseResult(
        parsed_scheme,
        parsed_userinfo,
        parsed_host,
        parsed_port,
        quote(path, safe=PATH_SAFE),
        None if query is None else quote(query, safe=QUERY_SAFE),
    )


def encode_host(host: str) -> str:
    if not host:
        return ""

    if IPv4_STYLE_HOSTNAME.match(host):
        try:
            ipaddress.IPv4Address(host)
        except ipaddress.AddressValueError:
            raise InvalidURL(f"Invalid IPv4 address: {host!r}")
        return host

    if IPv6_STYLE_HOSTNAME.match(host):
        try:
            ipaddress.IPv6Address(host[1:-1])
        except ipaddress.AddressValueError:
            raise InvalidURL(f"Invalid IPv6 address: {host!r}")
        return host[1:-1]

    if host.isascii():
        WHATWG_SAFE = '"`{}%|\\'
        return quote(host.lower(), safe=SUB_DELIMS + WHATWG_SAFE)

    try:
        return idna.encode(host.lower()).decode("ascii")
    except idna.IDNAError:
        raise InvalidURL(f"Invalid IDNA hostname: {host!r}")


def normalize_port(port: str | None, scheme: str) -> int | None:
    if not port:
        return None
    try:
        port_as_int = int(port)
    except ValueError:
        raise InvalidURL(f"Invalid port: {port!r}")
    if not 0 < port_as_int < 65536:
        raise InvalidURL(f"Invalid port: {port!r}")
    return None if port_as_int == DEFAULT_PORTS.get(scheme) else port_as_int


def validate_path(path: str, has_authority: bool) -> None:
    if has_authority and path and not path.startswith("/"):
        raise InvalidURL("For absolute URLs, path must be empty or begin with '/'")


def normalize_path(path: str) -> str:
    if "." not in path:
        return path
    components = path.split("/")
    if "." not in components and ".." not in components:
        return path
    output: list[str] = []
    for component in components:
        if component == "..":
            if output and output != [""]:
                output.pop()
        elif component != ".":
            output.append(component)
    return "/".join(output)


def _percent_encode(string: str) -> str:
    return "".join(f"%{byte:02X}" for byte in string.encode("utf-8"))


def percent_encoded(string: str, safe: str) -> str:
    non_escaped = UNRESERVED_CHARACTERS + safe
    if not string.rstrip(non_escaped):
        return string
    return "".join(c if c in non_escaped else _percent_encode(c) for c in string)


def quote(string: str, safe: str) -> str:
    parts: list[str] = []
    pos = 0
    for match in re.finditer(PERCENT_ENCODED_REGEX, string):
        start, end = match.start(), match.end()
        if start != pos:
            parts.append(percent_encoded(string[pos:start], safe=safe))
        parts.append(match.group(0))
        pos = end
    if pos != len(string):
        parts.append(percent_encoded(string[pos:], safe=safe))
    return "".join(parts)
