from __future__ import annotations

import pytest

import httpjsonstream
from httpjsonstream import read_response_head
from tests.transports import MemoryTransport


def test_status_line_and_headers() -> None:
    transport = MemoryTransport(
        b"HTTP/1.1 404 Not Found\r\n"
        b"Content-Type: application/json\r\n"
        b"X-Request-Id: abc  \r\n"
        b"\r\n"
    )
    head = read_response_head(transport)
    assert head.http_version == "HTTP/1.1"
    assert head.status_code == 404
    assert head.reason_phrase == "Not Found"
    assert head.headers == {"content-type": "application/json", "x-request-id": "abc"}


def test_header_names_are_case_insensitive() -> None:
    transport = MemoryTransport(
        b"HTTP/1.1 200 OK\r\ntransfer-encoding: chunked\r\nCONTENT-TYPE: text/plain\r\n\r\n"
    )
    head = read_response_head(transport)
    assert head.get("Transfer-Encoding") == "chunked"
    assert head.is_chunked
    assert head.mime_type == "text/plain"


def test_last_duplicate_header_wins() -> None:
    transport = MemoryTransport(
        b"HTTP/1.1 200 OK\r\nX-Value: one\r\nx-value: two\r\n\r\n"
    )
    assert read_response_head(transport).get("X-Value") == "two"


def test_value_keeps_later_delimiters() -> None:
    transport = MemoryTransport(b"HTTP/1.1 200 OK\r\nX-Note: a: b\r\n\r\n")
    assert read_response_head(transport).get("x-note") == "a: b"


def test_stops_at_blank_line() -> None:
    transport = MemoryTransport(
        b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\n{\"a\": 1}"
    )
    read_response_head(transport)
    assert transport.unread() == b'{"a": 1}'


def test_status_without_reason() -> None:
    head = read_response_head(MemoryTransport(b"HTTP/1.1 204\r\n\r\n"))
    assert head.status_code == 204
    assert head.reason_phrase == ""


def test_mime_type_strips_parameters() -> None:
    transport = MemoryTransport(
        b"HTTP/1.1 200 OK\r\nContent-Type: application/json; charset=utf-8\r\n\r\n"
    )
    assert read_response_head(transport).mime_type == "application/json"


@pytest.mark.parametrize(
    "value, chunked",
    [("chunked", True), ("gzip, chunked", True), ("Chunked ", True), ("gzip", False)],
)
def test_is_chunked(value: str, chunked: bool) -> None:
    raw = f"HTTP/1.1 200 OK\r\nTransfer-Encoding: {value}\r\n\r\n".encode()
    assert read_response_head(MemoryTransport(raw)).is_chunked is chunked


def test_content_length() -> None:
    head = read_response_head(
        MemoryTransport(b"HTTP/1.1 200 OK\r\nContent-Length: 12\r\n\r\n")
    )
    assert head.content_length == 12
    assert read_response_head(MemoryTransport(b"HTTP/1.1 200 OK\r\n\r\n")).content_length is None


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n",
        b"Content-Type: application/json\r\n\r\n",
        b"garbage\r\n\r\n",
    ],
)
def test_malformed_heads(raw: bytes) -> None:
    with pytest.raises(httpjsonstream.RemoteProtocolError):
        read_response_head(MemoryTransport(raw))


def test_too_many_headers() -> None:
    raw = b"HTTP/1.1 200 OK\r\n" + b"X-A: b\r\n" * 200 + b"\r\n"
    with pytest.raises(httpjsonstream.RemoteProtocolError):
        read_response_head(MemoryTransport(raw))


def test_header_without_space_after_colon() -> None:
    transport = MemoryTransport(
        b"HTTP/1.1 200 OK\r\nServer:nginx\r\nContent-Type:\tapplication/json \r\n\r\n"
    )
    head = read_response_head(transport)
    assert head.status_code == 200
    assert head.headers == {"server": "nginx", "content-type": "application/json"}


def test_only_first_line_is_the_status_line() -> None:
    transport = MemoryTransport(
        b"HTTP/1.1 200 OK\r\nHTTP/1.0 500 Oops\r\nnot a header\r\nX-A: b\r\n\r\n"
    )
    head = read_response_head(transport)
    assert (head.http_version, head.status_code, head.reason_phrase) == ("HTTP/1.1", 200, "OK")
    assert head.headers == {"x-a": "b"}


@pytest.mark.parametrize("value", ["\xb2", "-1", "12abc", ""])
def test_content_length_must_be_ascii_digits(value: str) -> None:
    raw = f"HTTP/1.1 200 OK\r\nContent-Length: {value}\r\n\r\n".encode("latin-1")
    assert read_response_head(MemoryTransport(raw)).content_length is None
