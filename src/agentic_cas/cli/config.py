"""Configuration management CLI commands."""

import typer
from rich.syntax import Syntax

from ..core.config import CASConfig
from ..core.paths import CONFIG_FILE
from ..errors import CASError
from .display import console, error, info, section, success, warning

app = typer.Typer(help="Manage agentic-cas configuration")


@app.command()
def show(ctx: typer.Context):
    """Show the effective configuration (file + environment overrides)."""
    config_path = (ctx.obj or {}).get("config_path") or CONFIG_FILE
    try:
        config = CASConfig.load(config_path)
    except CASError as e:
        error(str(e))
        raise typer.Exit(1)

    if config.azure_connection_string:
        config = config.model_copy(update={"azure_connection_string": "***"})

    section(f"Configuration ({config_path if config_path.exists() else 'defaults'})")
    console.print(Syntax(config.to_yaml_string(), "yaml", theme="monokai"))


@app.command()
def init(
    ctx: typer.Context,
    container: str = typer.Option(None, "--container", help="Default container name"),
    backend: str = typer.Option("auto", "--backend", help="auto, local, memory or azure"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Initialize configuration file.

    Creates ~/.agentic_cas/config.yaml with sensible defaults.
    """
    config_path = (ctx.obj or {}).get("config_path") or CONFIG_FILE
    if config_path.exists() and not force:
        warning(f"Configuration already exists at {config_path}")
        info("Use --force to overwrite")
        raise typer.Exit(1)

    values = {"backend": backend}
    if container:
        values["default_container"] = container
    try:
        config = CASConfig(**values)
    except ValueError as e:
        error(f"Invalid configuration: {e}")
        raise typer.Exit(1)

    config.save(config_path)
    success(f"Configuration saved to {config_path}")
