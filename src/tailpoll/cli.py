from __future__ import annotations

import dataclasses
import logging
import re
import threading
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from tailpoll import __version__, paths
from tailpoll.config import as_dict, load_config
from tailpoll.engine import TailEngine
from tailpoll.errors import ConfigError, InvalidArgumentError

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog="Tip: use `tailpoll COMMAND -h` to see all options for that command.",
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\"}
_ESCAPE_RE = re.compile(r"\\([nrt\\])")


def _unescape(s: str) -> str:
    r"""Shell-friendly delimiters: `\n`, `\r\n`, `\t` typed literally."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], s)


def prompt_path() -> str:
    """Ask until the user names an existing file."""
    typer.echo("Which file do you want to monitor?")
    while True:
        s = typer.prompt("path").strip()
        if Path(s).is_file():
            return s
        typer.echo("File does not exist. Please try again.")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
):
    if version:
        typer.echo(f"tailpoll {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command()
def follow(
    path: Optional[str] = typer.Argument(None, help="File to follow. Prompted for when omitted."),
    delimiter: Optional[str] = typer.Option(None, "--delimiter", "-d", help=r"Line delimiter, e.g. '\n' or '||'."),
    interval: Optional[int] = typer.Option(None, "--interval", "-i", min=1, help="Poll interval in ms."),
    encoding: Optional[str] = typer.Option(None, "--encoding", "-e", help="File encoding."),
    keep_offset: bool = typer.Option(
        False,
        "--keep-offset",
        help="On restart resume from the last offset instead of skipping what was appended meanwhile.",
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Use this config.yaml instead of the user one."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
):
    """Print lines appended to PATH until CTRL+C (or until the file is deleted)."""
    _setup_logging(verbose)

    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        typer.echo(f"[tailpoll] Invalid config: {e}", err=True)
        raise typer.Exit(code=1)

    overrides: Dict[str, Any] = {}
    if delimiter is not None:
        overrides["delimiter"] = _unescape(delimiter)
    if interval is not None:
        overrides["poll_interval_ms"] = interval
    if encoding is not None:
        overrides["encoding"] = encoding
    if keep_offset:
        overrides["reset_before_restart"] = False
    cfg = dataclasses.replace(cfg, **overrides)

    if path is None:
        path = prompt_path()

    try:
        engine = TailEngine.from_config(path, cfg)
    except (FileNotFoundError, InvalidArgumentError) as e:
        typer.echo(f"[tailpoll] {e}", err=True)
        raise typer.Exit(code=1)

    done = threading.Event()
    engine.line_added.connect(typer.echo)

    @engine.file_deleted.connect
    def _on_deleted() -> None:
        typer.echo(f"[tailpoll] {engine.path} was deleted.", err=True)
        done.set()

    typer.echo(f"[tailpoll] Following {engine.path}", err=True)
    typer.echo("[tailpoll] Press CTRL+C to stop.", err=True)
    engine.start()
    try:
        while not done.wait(0.5):
            pass
    except KeyboardInterrupt:
        typer.echo("\n[tailpoll] Stop requested by user. (CTRL+C)", err=True)
    finally:
        engine.stop()


@app.command()
def config(
    config_path: Optional[Path] = typer.Option(None, "--config", help="Show this config.yaml instead of the user one."),
):
    """Show the config file path and the effective values."""
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        typer.echo(f"[tailpoll] Invalid config: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"CONFIG: {config_path or paths.config_file()}")
    for key, value in as_dict(cfg).items():
        typer.echo(f"{key}: {value!r}")
    typer.echo(f"resolved delimiter: {cfg.line_delimiter!r}")
