"""agentic-cas CLI entry point."""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from ..core.config import CASConfig
from ..errors import CASError
from ..services.cas import ContentAddressableStore, compute_digest
from ..services.reference import StorageReference
from .display import console, error, info, reference_table, success, warning

app = typer.Typer(
    name="cas",
    help="Content-addressable storage for generated documentation artifacts",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

from . import config as config_cli  # noqa: E402

app.add_typer(config_cli.app, name="config", help="⚙️ Show or initialize configuration")


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (default: ~/.agentic_cas/config.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Store and retrieve immutable artifacts by content hash."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"config_path": config_path}


def _load_config(ctx: typer.Context) -> CASConfig:
    try:
        return CASConfig.load((ctx.obj or {}).get("config_path"))
    except CASError as e:
        error(str(e))
        raise typer.Exit(1)


def _get_store(ctx: typer.Context) -> ContentAddressableStore:
    config = _load_config(ctx)
    try:
        return config.create_store()
    except (CASError, ValueError) as e:
        error(f"Cannot initialize storage backend: {e}")
        raise typer.Exit(1)


def _read_payload(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    path = Path(source)
    if not path.is_file():
        error(f"File not found: {source}")
        raise typer.Exit(1)
    return path.read_bytes()


def _read_reference_text(value: str) -> str:
    """Accept reference JSON inline or a path to a file containing it."""
    if value.lstrip().startswith("{"):
        return value
    path = Path(value)
    if not path.is_file():
        error(f"Not a reference JSON or readable file: {value}")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


@app.command()
def put(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="File to store, or '-' for stdin"),
    content_type: str = typer.Option(
        "application/octet-stream", "--type", "-t", help="MIME type recorded with the object"
    ),
    extension: Optional[str] = typer.Option(
        None, "--ext", "-e", help="Filename extension (default: the file's suffix, or 'bin')"
    ),
    container: Optional[str] = typer.Option(
        None, "--container", help="Target container (default: configured container)"
    ),
):
    """Store a file and print its reference as JSON.

    Example:
        cas put README.md --type text/markdown
        cat results.json | cas put - --type application/json --ext json
    """
    data = _read_payload(source)
    ext = extension or (Path(source).suffix.lstrip(".") if source != "-" else "") or "bin"
    store = _get_store(ctx)

    try:
        ref = store.put(data, content_type, ext, container=container)
    except (CASError, ValueError) as e:
        error(f"Failed to store {source}: {e}")
        raise typer.Exit(1)

    typer.echo(ref.to_json())
    success(f"Stored {ref.size} bytes at {ref.location}")


@app.command()
def get(
    ctx: typer.Context,
    reference: str = typer.Argument(..., help="Reference JSON, or a file containing it"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output file (default: stdout)"
    ),
):
    """Fetch the bytes a reference points to."""
    ref_text = _read_reference_text(reference)
    store = _get_store(ctx)

    try:
        data = store.get(ref_text)
    except CASError as e:
        error(str(e))
        raise typer.Exit(1)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(data)
        success(f"Wrote {len(data)} bytes to {output}")
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()


@app.command()
def digest(
    source: str = typer.Argument(..., help="File to hash, or '-' for stdin"),
):
    """Print the SHA-256 content hash of a file without storing it."""
    typer.echo(compute_digest(_read_payload(source)))


@app.command()
def exists(
    ctx: typer.Context,
    reference: str = typer.Argument(..., help="Reference JSON, or a file containing it"),
):
    """Check whether the referenced object is present (exit code 1 if not)."""
    ref_text = _read_reference_text(reference)
    store = _get_store(ctx)

    try:
        present = store.exists(ref_text)
    except CASError as e:
        error(str(e))
        raise typer.Exit(1)

    typer.echo("true" if present else "false")
    if not present:
        raise typer.Exit(1)


@app.command()
def show(
    reference: str = typer.Argument(..., help="Reference JSON, or a file containing it"),
):
    """Describe a stored reference (no backend access).

    Text that is not a reference is reported as inline content.
    """
    ref = StorageReference.parse_embedded(_read_reference_text(reference))
    if ref is None:
        warning("Not a storage reference; content is stored inline")
        raise typer.Exit(1)

    console.print("[bold]Stored in content-addressable storage[/bold]")
    console.print(reference_table(ref))


@app.command()
def version():
    """Show agentic-cas version."""
    from .. import __version__

    info(f"agentic-cas version: {__version__}")


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
