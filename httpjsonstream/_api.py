from __future__ import annotations

import typing

from ._client import HttpStream
from ._config import DEFAULT_USER_AGENT
from ._models import URL, Method
from ._parser import OnValue
from ._request import BodyTypes, HeaderTypes

__all__ = ["collect", "delete", "get", "post", "put", "stream"]


def stream(
    method: Method | str,
    url: URL | str,
    on_value: OnValue,
    *,
    body: BodyTypes | None = None,
    headers: HeaderTypes | None = None,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float | None = None,
    **parser_options: typing.Any,
) -> None:
    """Send a request and call ``on_value`` for every JSON value in the response.

    **Parameters:** see :meth:`HttpStream.stream`.

    Usage:

    ```
    >>> import httpjsonstream
    >>> httpjsonstream.stream("GET", "http://localhost:8000/events", print)
    ```
    """
    client = HttpStream(user_agent=user_agent, timeout=timeout)
    client.stream(method, url, on_value, body=body, headers=headers, **parser_options)


def collect(
    method: Method | str,
    url: URL | str,
    *,
    body: BodyTypes | None = None,
    headers: HeaderTypes | None = None,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float | None = None,
    **parser_options: typing.Any,
) -> typing.Any:
    """Send a request and return the parsed JSON document of the response."""
    client = HttpStream(user_agent=user_agent, timeout=timeout)
    return client.collect(method, url, body=body, headers=headers, **parser_options)


def get(
    url: URL | str,
    on_value: OnValue | None = None,
    *,
    headers: HeaderTypes | None = None,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float | None = None,
    **parser_options: typing.Any,
) -> typing.Any:
    """Sends a `GET` request.

    With ``on_value`` the response is streamed and ``None`` is returned,
    otherwise the parsed document is returned.
    """
    client = HttpStream(user_agent=user_agent, timeout=timeout)
    return client.get(url, on_value, headers=headers, **parser_options)


def post(
    url: URL | str,
    body: BodyTypes,
    on_value: OnValue | None = None,
    *,
    headers: HeaderTypes | None = None,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float | None = None,
    **parser_options: typing.Any,
) -> typing.Any:
    """Sends a `POST` request."""
    client = HttpStream(user_agent=user_agent, timeout=timeout)
    return client.post(url, body, on_value, headers=headers, **parser_options)


def put(
    url: URL | str,
    body: BodyTypes,
    on_value: OnValue | None = None,
    *,
    headers: HeaderTypes | None = None,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float | None = None,
    **parser_options: typing.Any,
) -> typing.Any:
    """Sends a `PUT` request."""
    client = HttpStream(user_agent=user_agent, timeout=timeout)
    return client.put(url, body, on_value, headers=headers, **parser_options)


def delete(
    url: URL | str,
    on_value: OnValue | None = None,
    *,
    headers: HeaderTypes | None = None,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float | None = None,
    **parser_options: typing.Any,
) -> typing.Any:
    """Sends a `DELETE` request."""
    client = HttpStream(user_agent=user_agent, timeout=timeout)
    return client.delete(url, on_value, headers=headers, **parser_options)
