from __future__ import annotations

import json
import logging
import sys
import typing

import click

# ---------------------------------------------------------------------------
# Rich output helpers (graceful fallback when rich is not installed)
# ---------------------------------------------------------------------------

try:
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.syntax import Syntax

    HAS_RICH = True
except ImportError:  # pragma: no cover
    HAS_RICH = False


def format_value(value: typing.Any) -> str:
    # ijson yields Decimal for non-integral numbers unless use_float is set.
    return json.dumps(value, indent=4, ensure_ascii=False, default=str)


def parse_header(header: str) -> tuple[str, str]:
    """Parse a 'Key: Value' header string."""
    if ":" not in header:
        raise click.BadParameter(
            f"Invalid header format: '{header}'. Expected 'Key: Value'."
        )
    key, _, value = header.partition(":")
    return key.strip(), value.strip()


def _configure_logging(verbose: bool, use_rich: bool) -> None:
    if not verbose:
        return
    logger = logging.getLogger("httpjsonstream")
    logger.setLevel(logging.DEBUG)
    if use_rich:
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------


@click.command(help="Stream the JSON values of an HTTP response as they arrive.")
@click.argument("url")
@click.option(
    "-m",
    "--method",
    default="GET",
    type=click.Choice(["GET", "POST", "PUT", "DELETE"], case_sensitive=False),
    help="HTTP method.",
)
@click.option(
    "-d", "--data", "body", default=None, help="Request body for POST and PUT."
)
@click.option(
    "-H",
    "--header",
    "headers",
    multiple=True,
    help='Add a header, e.g. -H "Content-Type: application/json".',
)
@click.option("--user-agent", default=None, help="Override the User-Agent header.")
@click.option(
    "--timeout", type=float, default=None, help="Socket timeout in seconds."
)
@click.option(
    "--collect",
    is_flag=True,
    default=False,
    help="Parse the whole body and print it once instead of streaming.",
)
@click.option(
    "--use-float", is_flag=True, default=False, help="Parse decimals as floats."
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose output.")
@click.option(
    "--no-color", is_flag=True, default=False, help="Disable colored output."
)
def main(
    url: str,
    method: str,
    body: str | None,
    headers: tuple[str, ...],
    user_agent: str | None,
    timeout: float | None,
    collect: bool,
    use_float: bool,
    verbose: bool,
    no_color: bool,
) -> None:
    import httpjsonstream

    use_rich = HAS_RICH and not no_color and sys.stdout.isatty()
    _configure_logging(verbose, HAS_RICH and not no_color)
    console = Console() if use_rich else None

    def show(value: typing.Any) -> None:
        text = format_value(value)
        if console is not None:
            console.print(Syntax(text, "json", theme="monokai"))
        else:
            click.echo(text)

    method = method.upper()
    if body is not None and method not in ("POST", "PUT"):
        raise click.UsageError(f"--data cannot be used with {method}")
    if body is None and method in ("POST", "PUT"):
        body = ""

    header_dict: dict[str, str] = {}
    for h in headers:
        key, value = parse_header(h)
        header_dict[key] = value

    client_kwargs: dict[str, typing.Any] = {"timeout": timeout}
    if user_agent is not None:
        client_kwargs["user_agent"] = user_agent
    parser_options = {"use_float": True} if use_float else {}

    client = httpjsonstream.HttpStream(parser_options=parser_options, **client_kwargs)
    try:
        if collect:
            show(client.collect(method, url, body=body, headers=header_dict))
        else:
            client.stream(method, url, show, body=body, headers=header_dict)
    except (
        httpjsonstream.HTTPError,
        httpjsonstream.InvalidURL,
        httpjsonstream.JSONError,
        OSError,
    ) as exc:
        _fail(exc, use_rich)


def _fail(exc: Exception, use_rich: bool) -> typing.NoReturn:
    if use_rich:
        console = Console(stderr=True)
        console.print(f"[bold red]{type(exc).__name__}[/bold red]: {exc}")
    else:
        click.echo(f"{type(exc).__name__}: {exc}", err=True)
    sys.exit(1)
