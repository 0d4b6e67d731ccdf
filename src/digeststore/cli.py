# src/digeststore/cli.py
"""digeststore Command Line Interface.

Entry point for the digeststore CLI tool.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import typer
from pydantic import ValidationError

from digeststore import __version__
from digeststore.contracts import ID, StoreError
from digeststore.core.config import DigestStoreSettings, load_settings
from digeststore.core.fs_store import FilesystemStoreBackend, open_store

__all__ = ["app"]

app = typer.Typer(
    name="digeststore",
    help="digeststore: content-addressable blob storage.",
    no_args_is_help=True,
)


@dataclass(frozen=True)
class _CliState:
    """Options resolved by the top-level callback, shared with subcommands."""

    settings: DigestStoreSettings
    root: Path | None


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"digeststore version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load DIGESTSTORE_* (and any other) variables from a .env file.

    Without env_file, python-dotenv searches upward from the working
    directory. Variables already set in the environment win. Returns
    whether a file was loaded; exits with code 1 if an explicit env_file
    is missing.
    """
    from dotenv import find_dotenv, load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(find_dotenv(usecwd=True), override=False)


@contextmanager
def _store_errors() -> Iterator[None]:
    """Report store errors as a one-line message and exit code 1."""
    try:
        yield
    except StoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _open(ctx: typer.Context) -> FilesystemStoreBackend:
    state: _CliState = ctx.obj
    store_settings = state.settings.store
    if state.root is not None:
        store_settings = store_settings.model_copy(update={"root": state.root})
    with _store_errors():
        return open_store(store_settings)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    root: Path | None = typer.Option(
        None,
        "--root",
        "-r",
        help="Store root directory (overrides settings).",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log at DEBUG level.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit log lines as JSON on stderr.",
    ),
) -> None:
    """digeststore: content-addressable blob storage."""
    from digeststore.core.logging import configure_logging

    # .env must be loaded before settings so DIGESTSTORE_* overrides apply
    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )

    try:
        loaded = load_settings(settings)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    log_level = "DEBUG" if verbose else loaded.logging.level
    configure_logging(json_output=json_logs or loaded.logging.json_output, level=log_level)

    ctx.obj = _CliState(settings=loaded, root=root)


@app.command()
def put(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="File to store ('-' reads stdin)."),
) -> None:
    """Store a file and print its ID."""
    store = _open(ctx)
    if file == "-":
        data = sys.stdin.buffer.read()
    else:
        try:
            data = Path(file).read_bytes()
        except FileNotFoundError:
            typer.echo(f"Error: File not found: {file}", err=True)
            raise typer.Exit(1) from None
        except OSError as e:
            typer.echo(f"Error: Cannot read {file}: {e.strerror}", err=True)
            raise typer.Exit(1) from None

    with _store_errors():
        id = store.set(data)
    typer.echo(id)


@app.command()
def get(
    ctx: typer.Context,
    id: str = typer.Argument(..., help="ID of the content."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write content to this file instead of stdout.",
    ),
) -> None:
    """Print verified content for an ID."""
    store = _open(ctx)
    with _store_errors():
        data = store.get(id)
    if output is not None:
        try:
            output.write_bytes(data)
        except OSError as e:
            typer.echo(f"Error: Cannot write {output}: {e.strerror}", err=True)
            raise typer.Exit(1) from None
    else:
        typer.echo(data, nl=False)


@app.command("rm")
def remove(
    ctx: typer.Context,
    id: str = typer.Argument(..., help="ID of the content."),
) -> None:
    """Delete content and all of its metadata."""
    store = _open(ctx)
    with _store_errors():
        store.delete(id)


@app.command("meta-set")
def meta_set(
    ctx: typer.Context,
    id: str = typer.Argument(..., help="ID of the content."),
    key: str = typer.Argument(..., help="Metadata key."),
    value: str = typer.Argument(..., help="Value (stored as UTF-8)."),
) -> None:
    """Attach a metadata value to stored content."""
    store = _open(ctx)
    with _store_errors():
        store.set_metadata(id, key, value.encode("utf-8"))


@app.command("meta-get")
def meta_get(
    ctx: typer.Context,
    id: str = typer.Argument(..., help="ID of the content."),
    key: str = typer.Argument(..., help="Metadata key."),
) -> None:
    """Print a metadata value."""
    store = _open(ctx)
    with _store_errors():
        value = store.get_metadata(id, key)
    typer.echo(value, nl=False)


@app.command("ls")
def list_ids(ctx: typer.Context) -> None:
    """List every stored ID, one per line."""
    store = _open(ctx)
    ids: list[ID] = []
    with _store_errors():
        store.walk(ids.append)
    for id in sorted(ids):
        typer.echo(id)


@app.command()
def verify(ctx: typer.Context) -> None:
    """Re-hash every stored entry and report corruption."""
    from digeststore.core.verify import verify_store

    store = _open(ctx)
    with _store_errors():
        result = verify_store(store)

    typer.echo(f"Checked {result.checked_count} entries in {result.duration_seconds:.2f}s")
    for id in result.corrupted_ids:
        typer.secho(f"  CORRUPTED {id}", fg=typer.colors.RED)
    for id in result.missing_ids:
        typer.echo(f"  vanished during sweep: {id}")
    if not result.ok:
        raise typer.Exit(1)
