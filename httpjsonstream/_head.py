from __future__ import annotations

import logging
import re

from ._exceptions import RemoteProtocolError
from ._models import ResponseHead
from ._transport import Transport

logger = logging.getLogger("httpjsonstream.head")

STATUS_LINE_REGEX = re.compile(r"^(?P<version>HTTP/\S+)\s+(?P<code>\d{3})(?:\s+(?P<reason>.*))?$")

# Maximum number of header lines accepted before giving up on the response.
MAX_HEADER_LINES = 100


def parse_status_line(line: str) -> tuple[str, int, str]:
    match = STATUS_LINE_REGEX.match(line)
    if match is None:
        raise RemoteProtocolError(f"Malformed status line: {line!r}")
    return match["version"], int(match["code"]), (match["reason"] or "").strip()


def read_response_head(transport: Transport) -> ResponseHead:
    """Consume the status line and headers, stopping right after the blank line.

    Nothing past the terminating CRLF is read, so the body is left untouched
    on the transport for whichever body pipeline runs next.
    """
    status: tuple[str, int, str] | None = None
    headers: dict[str, str] = {}

    for _ in range(MAX_HEADER_LINES + 1):
        raw = transport.readline()
        if not raw:
            raise RemoteProtocolError("Server disconnected before the response head was complete")
        if raw in (b"\r\n", b"\n"):
            break

        line = raw.decode("latin-1").rstrip("\r\n")
        if status is None:
            status = parse_status_line(line)
            continue
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            logger.debug("Ignoring malformed header line %r", line)
            continue
        headers[name.strip().lower()] = value.strip()
    else:
        raise RemoteProtocolError(f"More than {MAX_HEADER_LINES} header lines received")

    if status is None:
        raise RemoteProtocolError("Response head has no status line")

    version, code, reason = status
    head = ResponseHead(version, code, reason, headers)
    logger.debug("Received response head %r with headers %r", head, headers)
    return head
