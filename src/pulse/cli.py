"""Command-line interface for Pulse."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from pulse import __version__
from pulse.config import Config, default_config_path, write_default_config
from pulse.dispatch import DispatchStore
from pulse.errors import PulseError
from pulse.models import AssignmentStatus, HostStatus
from pulse.monitor import HostMonitor

console = Console()
err_console = Console(stderr=True)


def setup_logging(level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_config(path: Optional[str]) -> Config:
    config_path = Path(path) if path else default_config_path()
    try:
        return Config.from_yaml(config_path)
    except FileNotFoundError:
        err_console.print(f"[red]No configuration file found at {config_path}.[/]")
        err_console.print("Create one with: [cyan]pulse init[/]")
        sys.exit(1)
    except ValueError as e:
        err_console.print(f"[red]Invalid configuration: {e}[/]")
        sys.exit(1)


def create_status_table(results: list[HostStatus]) -> Table:
    """Create a Rich table of host states."""
    table = Table(title="Pulse", show_header=True, header_style="bold")

    table.add_column("Status", justify="center")
    table.add_column("Host", style="cyan", no_wrap=True)
    table.add_column("Load", justify="right")
    table.add_column("Memory", justify="right")
    table.add_column("Disk", justify="right")
    table.add_column("Uptime")

    for r in results:
        if r.online:
            table.add_row(
                Text("UP", style="green"),
                r.label,
                r.cpu or "-",
                r.memory or "-",
                r.disk or "-",
                r.uptime or "-",
            )
        else:
            table.add_row(
                Text("DOWN", style="red"),
                r.label,
                Text(r.error or "unreachable", style="dim"),
                "",
                "",
                "",
            )

    return table


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Pulse - SSH host monitor."""
    pass


@main.command()
@click.option("-c", "--config", help="Path to configuration file")
@click.option("--json", "output_json", is_flag=True, help="Output in JSON format")
@click.option("--watch", "-w", is_flag=True, help="Check repeatedly every interval")
@click.option("--interval", "-i", type=int, help="Override the configured interval (seconds)")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (default: log_level from the config file)",
)
def check(
    config: Optional[str],
    output_json: bool,
    watch: bool,
    interval: Optional[int],
    log_level: Optional[str],
) -> None:
    """Check all configured hosts."""
    cfg = load_config(config)
    setup_logging(log_level or cfg.log_level)

    if not cfg.hosts:
        err_console.print("[red]No hosts configured. Edit your config file.[/]")
        sys.exit(1)
    if interval and interval > 0:
        cfg.interval = interval

    monitor = HostMonitor(cfg)

    def show(results: list[HostStatus], transitions: list[str]) -> None:
        if output_json:
            click.echo(json.dumps(monitor.to_dict(results), indent=2, ensure_ascii=False))
        else:
            console.print(create_status_table(results))
        for t in transitions:
            err_console.print(f"[yellow]⚠ {t}[/]")

    if watch:
        err_console.print(f"[dim]Watching (interval: {cfg.interval}s, Ctrl+C to stop)[/]")
        try:
            monitor.run(on_cycle=show)
        except KeyboardInterrupt:
            err_console.print("\n[dim]Stopped watching.[/]")
        return

    monitor.run(on_cycle=show, once=True)
    if any(not r.online for r in monitor.get_last_results()):
        sys.exit(1)


@main.command()
@click.option("-o", "--output", help="Output file path (default: ~/.config/pulse/hosts.yaml)")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing file")
def init(output: Optional[str], force: bool) -> None:
    """Create a sample configuration file."""
    path = Path(output).expanduser() if output else default_config_path()

    if path.exists() and not force:
        console.print(f"[red]File already exists: {path}[/]")
        console.print("Use --force to overwrite")
        sys.exit(1)

    write_default_config(path)
    console.print(f"[green]Created sample config at {path}[/]")
    console.print("Edit it with your hosts, then run: [cyan]pulse check[/]")


@main.group()
@click.option("--file", "dispatch_file", help="Dispatch file (default: ~/.pulse/dispatch.json)")
@click.pass_context
def dispatch(ctx: click.Context, dispatch_file: Optional[str]) -> None:
    """Manage issue assignments to hosts."""
    if dispatch_file is None and default_config_path().exists():
        dispatch_file = load_config(None).dispatch_file
    try:
        ctx.obj = DispatchStore.load(dispatch_file)
    except PulseError as e:
        raise click.ClickException(str(e))


@dispatch.command("assign")
@click.argument("issue_key")
@click.argument("target")
@click.option("-s", "--summary", default="", help="Issue summary")
@click.pass_obj
def dispatch_assign(store: DispatchStore, issue_key: str, target: str, summary: str) -> None:
    """Assign ISSUE_KEY to TARGET (replaces an existing assignment)."""
    assignment = store.assign(issue_key, summary, target)
    store.save()
    console.print(f"[green]Assigned[/] {assignment.id}")


@dispatch.command("status")
@click.argument("assignment_id")
@click.argument("status", type=click.Choice([s.value for s in AssignmentStatus]))
@click.option("-n", "--note", default="", help="Optional note")
@click.pass_obj
def dispatch_status(store: DispatchStore, assignment_id: str, status: str, note: str) -> None:
    """Set the STATUS of an assignment."""
    try:
        store.update_status(assignment_id, status, note)
    except PulseError as e:
        raise click.ClickException(str(e))
    store.save()
    console.print(f"{assignment_id}: [cyan]{status}[/]")


@dispatch.command("list")
@click.option("-t", "--target", help="Only show assignments for this target")
@click.option("--json", "output_json", is_flag=True, help="Output in JSON format")
@click.pass_obj
def dispatch_list(store: DispatchStore, target: Optional[str], output_json: bool) -> None:
    """List assignments."""
    assignments = store.for_target(target) if target else store.all()

    if output_json:
        click.echo(json.dumps([a.to_dict() for a in assignments], indent=2, ensure_ascii=False))
        return

    table = Table(title="Assignments", show_header=True, header_style="bold")
    table.add_column("Issue", style="cyan", no_wrap=True)
    table.add_column("Target")
    table.add_column("Status", justify="center")
    table.add_column("Summary")
    table.add_column("Updated")
    for a in assignments:
        table.add_row(
            a.issue_key,
            a.target,
            a.status.value,
            a.summary + (f" ({a.note})" if a.note else ""),
            a.updated_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@dispatch.command("remove")
@click.argument("assignment_id")
@click.pass_obj
def dispatch_remove(store: DispatchStore, assignment_id: str) -> None:
    """Remove an assignment."""
    try:
        store.remove(assignment_id)
    except PulseError as e:
        raise click.ClickException(str(e))
    store.save()
    console.print(f"Removed {assignment_id}")


if __name__ == "__main__":
    main()
