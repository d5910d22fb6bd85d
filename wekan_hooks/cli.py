"""Command-line interface for the webhook listener."""

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import HooksConfig, Severity, load_config, validate_config_file
from .dispatcher import Dispatcher, DispatchReport
from .events import HANDLED_EVENTS, KNOWN_EVENTS, is_handled
from .hooks import HookContext, Outcome
from .resolver import FieldResolver
from .store import MongoStore

logger = logging.getLogger("wekan_hooks.cli")

app = typer.Typer(
    name="wekan-hooks",
    help="Webhook listener that keeps Wekan checklists and custom fields in sync.",
    add_completion=False,
)
console = Console()

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-f",
    envvar="HOOKS_CONFIG",
    help="Path to wekan-hooks.yml (optional, environment variables override it)",
)


def configure_logging(level: str = "INFO") -> None:
    """Send wekan_hooks logs to stderr through rich."""
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    root = logging.getLogger("wekan_hooks")
    root.handlers = [handler]
    root.setLevel(level)


def _load_or_exit(config_file: Path | None) -> HooksConfig:
    try:
        return load_config(config_file)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[dim]Run 'wekan-hooks validate' for details.[/dim]")
        sys.exit(1)


def build_dispatcher(config: HooksConfig) -> Dispatcher:
    """Connect to MongoDB and wire the default hooks."""
    store = MongoStore.connect(config.mongo_url, config.database, timeout=config.timeout)
    resolver = FieldResolver(store, board_title=config.board_title, ttl=config.cache_ttl)
    context = HookContext(store=store, resolver=resolver, checklist_title=config.checklist_title)
    return Dispatcher(context)


@app.command()
def start(config_file: Path = CONFIG_OPTION):
    """Start the webhook listener.

    Requires MONGO_URL, in the environment or as mongo_url in the config file.
    """
    import uvicorn

    from .server import create_app

    config = _load_or_exit(config_file)
    configure_logging(config.log_level)

    console.print("\n[bold]wekan-hooks[/bold]")
    console.print()

    config_table = Table(show_header=False, box=None, padding=(0, 2))
    config_table.add_column("Key", style="dim")
    config_table.add_column("Value")
    config_table.add_row("Config source", str(config_file or "environment"))
    config_table.add_row("Listen", f"{config.host}:{config.port}")
    config_table.add_row("Database", config.database)
    config_table.add_row("Board", config.board_title)
    config_table.add_row("Checklist", config.checklist_title)
    config_table.add_row("Timeout", f"{config.timeout}s")
    config_table.add_row("Id cache", f"{config.cache_ttl}s" if config.cache_ttl else "process lifetime")
    console.print(config_table)

    dispatcher = build_dispatcher(config)
    console.print(f"\nHooks: {', '.join(h.__name__ for h in dispatcher.hooks)}")
    console.print("\n[green]Starting...[/green]\n")

    try:
        uvicorn.run(
            create_app(dispatcher),
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Shutting down...[/yellow]")


@app.command()
def validate(config_file: Path = CONFIG_OPTION):
    """Validate the configuration (config file plus environment overrides)."""
    console.print(f"\nValidating [bold]{config_file or 'environment'}[/bold]\n")

    result = validate_config_file(config_file)

    if not result.issues:
        console.print("[green]Valid[/green] — no issues found\n")
        sys.exit(0)

    for issue in result.issues:
        if issue.severity == Severity.ERROR:
            console.print(f"  [red]error[/red]: {issue}")
        else:
            console.print(f"  [yellow]warning[/yellow]: {issue}")
    console.print()

    if result.is_valid:
        console.print(f"[green]Valid[/green] with {len(result.warnings)} warning(s)\n")
        sys.exit(0)
    console.print(f"[red]Invalid[/red] — {len(result.errors)} error(s)\n")
    sys.exit(1)


@app.command()
def replay(
    kind: str = typer.Argument(..., help="Event kind, e.g. act-moveCard"),
    card_id: str = typer.Argument(..., help="Id of the card the event is about"),
    config_file: Path = CONFIG_OPTION,
):
    """Run the hooks for one event by hand.

    Every hook is idempotent, so replaying an event whose processing
    failed is safe.
    """
    if not is_handled(kind):
        note = "unknown event kind" if kind not in KNOWN_EVENTS else "event kind not handled"
        console.print(
            f"[yellow]warning[/yellow]: {note} '{kind}', every hook will skip it "
            f"(handled: {', '.join(sorted(HANDLED_EVENTS))})"
        )

    config = _load_or_exit(config_file)
    configure_logging(config.log_level)
    dispatcher = build_dispatcher(config)

    report = DispatchReport(kind=kind, card_id=card_id)
    error = None
    try:
        dispatcher.dispatch(kind, card_id, report=report)
    except Exception as e:
        error = e

    table = Table(show_header=True, box=None, padding=(0, 2))
    table.add_column("Hook")
    table.add_column("Outcome")
    table.add_column("Detail", style="dim")
    styles = {Outcome.APPLIED: "green", Outcome.SKIPPED: "dim", Outcome.FAILED: "red"}
    for result in report.results:
        style = styles[result.outcome]
        table.add_row(result.hook, f"[{style}]{result.outcome.value}[/{style}]", result.reason or "")
    console.print(table)

    if error is not None:
        console.print(f"\n[red]Error: {error}[/red]")
        sys.exit(1)


def main():
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
