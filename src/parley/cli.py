"""Typer application for the ``parley`` console script.

Commands:
    about: Print version and project information.
    extensions: List extensions published in the ``parley.extensions``
        entry-point group, with the events and commands they declare.
    config show|set|reset: Inspect or edit the user config file.
"""

from __future__ import annotations

from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from parley import __version__
from parley.config import config_path, load_config, save_config
from parley.exceptions import ConfigError
from parley.extensions.base import Extension
from parley.extensions.manager import ENTRY_POINT_GROUP, iter_entry_points
from parley.log import setup_logging
from parley.models import ClientConfig

app = typer.Typer(
    name="parley",
    help="Chat-platform REST client with an extension system.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

PROJECT_LINKS = {
    "Source": "https://github.com/parley-lib/parley",
    "Documentation": "https://parley-lib.github.io",
    "Changelog": "https://parley-lib.github.io/changelog",
}


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"parley {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable coloured output."),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    setup_logging(verbose=verbose, no_color=no_color)


@app.command()
def about() -> None:
    """Show information about parley."""
    console = Console()
    console.print(f"[bold]parley[/bold] {__version__} - a chat-platform REST client\n")
    for key, value in PROJECT_LINKS.items():
        console.print(f"[dim]{key}:[/dim] {value}")


@app.command()
def extensions() -> None:
    """List installed extensions and what they declare."""
    console = Console()
    entry_points = iter_entry_points()
    if not entry_points:
        console.print(f"No extensions installed in the '{ENTRY_POINT_GROUP}' group.")
        return

    table = Table(title="Installed extensions", show_header=True, header_style="bold cyan")
    for header in ("Name", "Target", "Events", "Commands"):
        table.add_column(header)

    for ep in entry_points:
        try:
            extension_cls = ep.load()
        except Exception as exc:
            table.add_row(ep.name, ep.value, f"[red]failed to load: {exc}[/red]", "")
            continue
        if not (isinstance(extension_cls, type) and issubclass(extension_cls, Extension)):
            table.add_row(ep.name, ep.value, "[yellow]not an Extension[/yellow]", "")
            continue
        spec = extension_cls.__extension_spec__
        table.add_row(
            ep.name,
            ep.value,
            ", ".join(spec.event_names) or "-",
            ", ".join(c.name for c in spec.commands) or "-",
        )

    console.print(table)


# ------------------------------------------------------------------ #
# parley config
# ------------------------------------------------------------------ #

config_app = typer.Typer(no_args_is_help=True)
app.add_typer(config_app, name="config", help="Show or change the user configuration.")

_CREDENTIAL_SCHEMES = ("env:", "file:")


def _mask_token(token: str) -> str:
    if token.startswith(_CREDENTIAL_SCHEMES):
        return token
    return f"{token[:4]}****"


def _flatten(data: dict[str, Any], prefix: str = "") -> list[tuple[str, Any]]:
    rows: list[tuple[str, Any]] = []
    for key, value in data.items():
        if isinstance(value, dict):
            rows.extend(_flatten(value, f"{prefix}{key}."))
        else:
            rows.append((f"{prefix}{key}", value))
    return rows


def _load_or_exit(err: Console) -> ClientConfig:
    try:
        return load_config()
    except ConfigError as exc:
        err.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from None


@config_app.command("show")
def config_show() -> None:
    """Show the config file location and every setting in it.

    Literal tokens are masked; ``env:`` and ``file:`` sources are shown as is.
    """
    console = Console()
    config = _load_or_exit(Console(stderr=True))
    console.print(f"[dim]Config file:[/dim] {config_path()}")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in _flatten(config.model_dump(mode="json")):
        if value is None:
            shown = "-"
        elif key == "token":
            shown = _mask_token(value)
        elif isinstance(value, list):
            shown = ", ".join(value) or "-"
        else:
            shown = str(value)
        table.add_row(key, shown)
    console.print(table)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dotted setting name, e.g. 'request.timeout'."),
    value: str = typer.Argument(help="New value. Lists take comma-separated names."),
) -> None:
    """Change one setting and save the config.

    The value is validated against the config model before anything is
    written. An empty value clears an optional setting.

    Example::

        parley config set token env:BOT_TOKEN
        parley config set request.max_retries 5
        parley config set extensions.disabled noisy,legacy
    """
    err = Console(stderr=True)
    config = _load_or_exit(err)
    data = config.model_dump(mode="json")

    *parents, leaf = key.split(".")
    section = data
    for part in parents:
        section = section.get(part)
        if not isinstance(section, dict):
            break
    if not isinstance(section, dict) or leaf not in section or isinstance(section[leaf], dict):
        err.print(f"[red]Error:[/red] Unknown config key: {escape(key)}")
        raise typer.Exit(code=2)

    if isinstance(section[leaf], list):
        section[leaf] = [name.strip() for name in value.split(",") if name.strip()]
    else:
        section[leaf] = value if value else None

    try:
        updated = ClientConfig.model_validate(data)
    except ValueError as exc:
        err.print(f"[red]Error:[/red] Invalid value for {escape(key)}: {escape(str(exc))}")
        raise typer.Exit(code=2) from None

    save_config(updated)
    Console().print(f"Set [bold]{escape(key)}[/bold] in {config_path()}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Replace the user config with the defaults."""
    if not yes and not typer.confirm("Reset the configuration to defaults?"):
        raise typer.Exit()
    save_config(ClientConfig())
    Console().print("Configuration reset to defaults.")


def main() -> None:
    app()
