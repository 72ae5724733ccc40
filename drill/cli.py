"""Command-line interface for the word drill.

Provides ``word-drill start``, ``status``, and ``check-targets``.  The
entry point is registered via ``pyproject.toml`` as
``word-drill = "drill.cli:cli"``.
"""

import logging
from pathlib import Path

import click
import httpx

from drill.config import DEFAULT_HOST, get_port
from drill.errors import ConfigFormatError, ConfigLoadError
from drill.targets.grammar import build_grammar
from drill.targets.parser import load_targets

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_MIN_PORT = 1024
_MAX_PORT = 65535


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_port(port: int | None) -> int:
    """Return the port to use, falling back to env var / default."""
    if port is not None:
        return port
    return get_port()


def _validate_port(port: int) -> None:
    """Raise ``click.BadParameter`` if *port* is out of range."""
    if not (_MIN_PORT <= port <= _MAX_PORT):
        raise click.BadParameter(
            f"Port must be between {_MIN_PORT} and {_MAX_PORT}, got {port}."
        )


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_LOG_FORMAT,
    )


def _run_server(
    port: int,
    target_file: Path | None,
    model_path: str | None,
    threshold: float | None,
) -> None:
    """Start uvicorn with the drill FastAPI app.  Blocks until shutdown."""
    import uvicorn

    from drill.server.app import create_app

    app = create_app(
        target_file=target_file, model_path=model_path, threshold=threshold
    )
    uvicorn.run(app, host=DEFAULT_HOST, port=port, log_level="info")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
def cli() -> None:
    """Word drill -- say what you see, with compassionate matching."""


# ---------------------------------------------------------------------------
# start
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--port", default=None, type=int, help="Server port (default: 7870)")
@click.option(
    "--targets",
    "target_file",
    default=None,
    type=click.Path(path_type=Path),
    help="Target list file (default: target.txt)",
)
@click.option("--model", "model_path", default=None, help="Vosk model directory")
@click.option(
    "--threshold",
    default=None,
    type=click.FloatRange(0.0, 1.0),
    help="Confidence needed for a correct answer (default: 0.30)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def start(
    port: int | None,
    target_file: Path | None,
    model_path: str | None,
    threshold: float | None,
    verbose: bool,
) -> None:
    """Start the word drill server."""
    port = _resolve_port(port)
    _validate_port(port)
    _setup_logging(verbose)

    click.echo(f"Starting word drill on http://{DEFAULT_HOST}:{port} ...")
    try:
        _run_server(port, target_file, model_path, threshold)
    except OSError as exc:
        if "address already in use" in str(exc).lower():
            click.echo(
                click.style(
                    f"Port {port} is already in use. "
                    "Choose a different port with --port.",
                    fg="red",
                )
            )
            raise SystemExit(1)
        raise


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--port", default=None, type=int, help="Server port to check")
def status(port: int | None) -> None:
    """Show word drill server status."""
    port = _resolve_port(port)
    try:
        resp = httpx.get(f"http://{DEFAULT_HOST}:{port}/health", timeout=2.0)
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, OSError, ValueError):
        click.echo(
            click.style(f"Server is not responding on port {port}.", fg="yellow")
        )
        raise SystemExit(1)

    click.echo(click.style("Server is healthy.", fg="green"))
    click.echo(f"  Version:     {data.get('version', '?')}")
    click.echo(f"  State:       {data.get('state', '?')}")
    click.echo(f"  Targets:     {data.get('targets', '?')}")
    click.echo(f"  Microphone:  {data.get('mic_available', '?')}")
    click.echo(f"  Recognizer:  {data.get('recognizer_ready', '?')}")
    if data.get("load_error"):
        click.echo(click.style(f"  {data['load_error']}", fg="red"))


# ---------------------------------------------------------------------------
# check-targets
# ---------------------------------------------------------------------------


@cli.command("check-targets")
@click.argument("path", type=click.Path(path_type=Path))
def check_targets(path: Path) -> None:
    """Parse a target file and print its items and grammar."""
    try:
        items = load_targets(path)
    except (ConfigLoadError, ConfigFormatError) as exc:
        click.echo(click.style(f"Error: {exc}", fg="red"))
        raise SystemExit(1)

    for index, item in enumerate(items):
        click.echo(
            f"{index:3d}  {item.key:<24} {item.display:<24} "
            f"{item.image_path}  [{item.category}]"
        )
    grammar = build_grammar(items)
    click.echo(f"Grammar: {grammar.to_json()}")
    click.echo(click.style(f"{len(items)} targets OK", fg="green"))
