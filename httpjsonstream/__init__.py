# ruff: noqa: I001
from .__version__ import __description__, __title__, __version__
from ._api import collect, delete, get, post, put, stream
from ._chunked import ChunkDecoder, ChunkState
from ._client import HttpStream
from ._config import ALLOWED_MIME_TYPES, DEFAULT_USER_AGENT, Codecs
from ._decoders import (
    Bzip2Decoder,
    ContentDecoder,
    DeflateDecoder,
    GzipDecoder,
    StreamReader,
    get_decoder,
)
from ._exceptions import (
    DecodingError,
    HTTPError,
    InvalidChunkLength,
    InvalidContentType,
    InvalidURL,
    ProtocolError,
    RemoteProtocolError,
    RequestError,
    StreamConfigurationError,
    TransportError,
    UnsupportedProtocol,
)
from ._head import read_response_head
from ._models import URL, Method, Request, ResponseHead
from ._parser import CollectingParser, IncompleteJSONError, JSONError, JSONParser, StreamingParser
from ._request import build_request
from ._transport import SocketTransport, Transport

try:
    from .cli import main
except ImportError:

    def main() -> None:  # type: ignore[misc]
        import sys

        print(
            'The "httpjsonstream" command requires the CLI extra. '
            'Install it with: pip install "httpjsonstream[cli]"',
            file=sys.stderr,
        )
        sys.exit(1)


_EXCLUDED_FROM_ALL = {"cli", "main"}

__all__ = sorted(
    (
        member
        for member in list(vars().keys())
        if (
            not member.startswith("_")
            or member in ["__description__", "__title__", "__version__"]
        )
        and member not in _EXCLUDED_FROM_ALL
    ),
    key=str.casefold,
)
