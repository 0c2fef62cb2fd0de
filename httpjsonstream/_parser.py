"""
Bridge between decoded body bytes and the incremental JSON parser (ijson).

Two explicit modes:

* :class:`StreamingParser` calls ``on_value`` once per complete top-level
  JSON value as soon as its last byte has been fed, and returns nothing.
* :class:`CollectingParser` consumes the whole body and returns the single
  parsed document.

Buffering of values that straddle chunk boundaries is ijson's job; the bridge
only forwards bytes in order.
"""

from __future__ import annotations

import typing

import ijson

JSONError = ijson.JSONError
IncompleteJSONError = ijson.IncompleteJSONError

OnValue = typing.Callable[[typing.Any], typing.Any]


class JSONParser:
    """Push-style wrapper around ``ijson.items_coro`` for top-level values."""

    def __init__(self, **options: typing.Any) -> None:
        self._options = options
        self._values = ijson.sendable_list()
        # Created on the first non-empty feed, so an empty body never reaches ijson.
        self._coro: typing.Any = None
        self._closed = False

    def feed(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Cannot feed a parser that has been closed")
        if not data:
            return
        if self._coro is None:
            self._coro = ijson.items_coro(self._values, "", **self._options)
        self._coro.send(data)
        self._drain()

    def _finish(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._coro is None:
            return
        # Closing the coroutine signals end of input; incomplete documents raise here.
        self._coro.close()
        self._drain()

    def _drain(self) -> None:
        if not self._values:
            return
        values = list(self._values)
        del self._values[:]
        for value in values:
            self._emit(value)

    def _emit(self, value: typing.Any) -> None:
        raise NotImplementedError()

    def close(self) -> typing.Any:
        raise NotImplementedError()


class StreamingParser(JSONParser):
    """Delivers every parsed top-level value to ``on_value``.

    Concatenated and newline-delimited values are accepted by default
    (``multiple_values=True``), which is what long-lived JSON streams send.
    """

    def __init__(self, on_value: OnValue, **options: typing.Any) -> None:
        if not callable(on_value):
            raise TypeError(f"on_value must be callable, got {type(on_value)}")
        options.setdefault("multiple_values", True)
        super().__init__(**options)
        self._on_value = on_value
        self.count = 0

    def _emit(self, value: typing.Any) -> None:
        self.count += 1
        self._on_value(value)

    def close(self) -> None:
        self._finish()


class CollectingParser(JSONParser):
    """Parses the whole body and hands back the document from :meth:`close`."""

    _missing = object()

    def __init__(self, **options: typing.Any) -> None:
        super().__init__(**options)
        self._result: typing.Any = self._missing

    def _emit(self, value: typing.Any) -> None:
        # With multiple_values=True the last document wins.
        self._result = value

    def close(self) -> typing.Any:
        self._finish()
        if self._result is self._missing:
            raise IncompleteJSONError("Incomplete or empty JSON data")
        return self._result
