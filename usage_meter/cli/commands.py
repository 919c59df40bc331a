"""CLI commands for usage-meter."""

from __future__ import annotations

import asyncio
import locale
import sys

import typer
from loguru import logger
from rich.console import Console

from usage_meter import __version__

app = typer.Typer(
    name="usage_meter",
    help="usage-meter - Claude plan usage widget",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"usage-meter v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _apply_user_locale() -> None:
    """Use the user's LC_TIME so month names and AM/PM follow their locale."""
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as exc:
        logger.debug(f"Keeping default time locale: {exc}")


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug output to stderr."),
) -> None:
    """usage-meter entrypoint."""
    del version
    _configure_logging(verbose)
    _apply_user_locale()


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite existing config without prompt.",
    ),
) -> None:
    """Write the default configuration file."""
    from usage_meter.config.loader import get_config_path, save_config
    from usage_meter.config.schema import Config

    config_path = get_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    save_config(Config(), config_path)
    console.print(f"[green]OK[/green] Created config at {config_path}")
    console.print("\nNext steps:")
    console.print("  1. (Optional) set budget overrides in [cyan]~/.usage-meter/config.json[/cyan]")
    console.print("  2. Start the widget: [cyan]usage-meter gui[/cyan]")


@app.command()
def status() -> None:
    """Show configuration and data source status."""
    from usage_meter.config.loader import get_config_path, load_config
    from usage_meter.usage.budgets import resolve_budgets
    from usage_meter.usage.credentials import read_credentials

    config_path = get_config_path()
    config = load_config()
    claude_dir = config.claude_path
    projects = claude_dir / "projects"
    creds = read_credentials(claude_dir)
    budgets = resolve_budgets(creds.tier, config.budgets)

    def _ok(flag: bool) -> str:
        return "[green]OK[/green]" if flag else "[red]NO[/red]"

    console.print("usage-meter Status\n")
    console.print(f"Config: {config_path} {_ok(config_path.exists())}")
    console.print(f"Projects: {projects} {_ok(projects.is_dir())}")
    console.print(f"Tier: [cyan]{creds.tier}[/cyan]")
    console.print(f"Usage API: {'enabled' if config.refresh.use_api else 'disabled'}, "
                  f"token {_ok(creds.access_token is not None)}")
    console.print(
        f"Budgets: 5h ${budgets.five_hour:g}, weekly ${budgets.weekly:g}, "
        f"weekly sonnet ${budgets.weekly_sonnet:g}"
    )
    console.print(
        f"Timers: auto-refresh {config.refresh.auto_refresh_s:g}s, "
        f"countdown {config.refresh.countdown_s:g}s"
    )


@app.command()
def show(
    as_json: bool = typer.Option(False, "--json", help="Print the raw snapshot as JSON."),
) -> None:
    """Fetch usage once and print it."""
    from usage_meter.cli.console_surface import ConsoleSurface
    from usage_meter.config.loader import load_config
    from usage_meter.meter.coordinator import RefreshCoordinator, RefreshState, RefreshTrigger
    from usage_meter.meter.renderer import Renderer
    from usage_meter.meter.store import SnapshotStore
    from usage_meter.usage.service import UsageService

    config = load_config()
    surface = ConsoleSurface()
    store = SnapshotStore()
    coordinator = RefreshCoordinator(
        provider=UsageService.from_config(config).fetch,
        store=store,
        renderer=Renderer(surface, store),
        surface=surface,
    )

    state = asyncio.run(coordinator.refresh(RefreshTrigger.MANUAL))
    if state is RefreshState.ERROR:
        console.print(f"[red]{surface.status}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(data=store.current.to_dict())
        return

    console.print(surface.to_table())
    console.print(surface.tier)
    console.print(f"[dim]{surface.status}[/dim]")


@app.command()
def gui() -> None:
    """Start the usage widget."""
    from usage_meter.config.loader import load_config
    from usage_meter.gui import theme as gui_theme
    from usage_meter.gui.app import MeterApp
    from usage_meter.gui.runtime import MeterRuntime

    config = load_config()
    if config.gui.font_size > 0:
        gui_theme.FONT_SIZE = config.gui.font_size

    meter_app = MeterApp(
        width=config.gui.width,
        always_on_top=config.gui.always_on_top,
        appearance=config.gui.theme,
    )
    runtime = MeterRuntime(config, surface=meter_app, host=meter_app)
    meter_app.on_ready = runtime.start
    meter_app.on_refresh = runtime.request_manual_refresh
    meter_app.on_hide = runtime.request_hide
    meter_app.on_close = runtime.stop

    console.print("Starting usage widget")
    console.print(f"Claude data: [cyan]{config.claude_path}[/cyan]")
    try:
        meter_app.run()
    except KeyboardInterrupt:
        runtime.stop()
