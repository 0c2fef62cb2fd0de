from __future__ import annotations

import importlib.util
import typing

from .__version__ import __version__

DEFAULT_USER_AGENT = f"httpjsonstream/{__version__}"
DEFAULT_CONTENT_TYPE = "application/x-www-form-urlencoded"
ALLOWED_MIME_TYPES = ("application/json", "text/plain")
DEFAULT_BLOCK_SIZE = 64 * 1024

# Advertised in this order in Accept-Encoding.
KNOWN_CODECS = ("bzip2", "gzip", "deflate")

_CODEC_MODULES = {"bzip2": "bz2", "gzip": "zlib", "deflate": "zlib"}


class Codecs:
    """The set of content codecs a client is allowed to advertise and decode.

    Passed explicitly into the request builder and the decoder dispatch, so
    nothing depends on which compression modules happen to be importable in
    the running interpreter unless you ask for that with :meth:`available`.

    >>> Codecs(["gzip"]).accept_encoding
    'gzip'
    >>> Codecs.none().accept_encoding is None
    True
    """

    __slots__ = ("_names",)

    def __init__(self, names: typing.Iterable[str] = ()) -> None:
        names = set(names)
        unknown = names.difference(KNOWN_CODECS)
        if unknown:
            raise ValueError(f"Unknown content codecs: {sorted(unknown)}")
        self._names = tuple(name for name in KNOWN_CODECS if name in names)

    @classmethod
    def available(cls) -> Codecs:
        """Every codec whose decompression module this interpreter ships."""
        return cls(
            name
            for name in KNOWN_CODECS
            if importlib.util.find_spec(_CODEC_MODULES[name]) is not None
        )

    @classmethod
    def none(cls) -> Codecs:
        return cls()

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    @property
    def accept_encoding(self) -> str | None:
        """Comma-joined header value, or ``None`` when nothing is enabled."""
        if not self._names:
            return None
        return ",".join(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> typing.Iterator[str]:
        return iter(self._names)

    def __eq__(self, other: typing.Any) -> bool:
        return isinstance(other, Codecs) and self._names == other._names

    def __hash__(self) -> int:
        return hash(self._names)

    def __repr__(self) -> str:
        return f"Codecs({list(self._names)!r})"
