"""Refscout CLI - List the NuGet assemblies a .csproj project compiles against."""

from __future__ import annotations

import logging
import threading
import time

import click
from rich.console import Console
from rich.table import Table

from refscout.config import ChangeEvent
from refscout.dotnet.assets import list_targets
from refscout.errors import RefscoutError
from refscout.output import build_result, write_output
from refscout.resolver import ProjectResolver
from refscout.watcher import ChangeWatcher
from refscout.workspace import Workspace


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _references_table(resolver: ProjectResolver) -> Table:
    table = Table(title=f"{resolver.name} ({resolver.state.value})", show_edge=False)
    table.add_column("Package", style="bold")
    table.add_column("Version")
    table.add_column("Assembly")
    for ref in resolver.references:
        table.add_row(ref.name, ref.version, ref.path)
    return table


def _target_note(resolver: ProjectResolver) -> str | None:
    """Say which target was used when the assets file lists several."""
    try:
        targets = list_targets(resolver.facts.assets_path)
    except RefscoutError:
        return None
    if len(targets) < 2:
        return None
    return f"Using target {targets[0]} of {', '.join(targets)}"


@click.group()
def cli() -> None:
    """Refscout - Resolve NuGet assemblies without building the project."""
    pass


@cli.command("resolve")
@click.argument("paths", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", "output_path", default=None, help="Output JSON file path")
@click.option("--verbose", is_flag=True, help="Log every step")
@click.option("--quiet", is_flag=True, help="Suppress all output except errors")
def resolve_cmd(paths: tuple[str, ...], output_path: str | None, verbose: bool, quiet: bool) -> None:
    """Resolve the referenced assemblies of one or more .csproj or .sln files."""
    _configure_logging(verbose, quiet)
    console = Console()
    start = time.monotonic()
    try:
        workspace = Workspace.from_paths(paths)
    except RefscoutError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    with workspace:
        total_ms = (time.monotonic() - start) * 1000
        if not quiet:
            for resolver in workspace.projects():
                console.print(_references_table(resolver))
                note = _target_note(resolver)
                if note:
                    console.print(f"[yellow]{note}[/yellow]")
        if output_path:
            write_output(build_result(workspace.projects(), total_ms), output_path)
            if not quiet:
                console.print(f"[green]Output written to:[/green] {output_path}")


@cli.command("watch")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--verbose", is_flag=True, help="Log every step")
def watch_cmd(path: str, verbose: bool) -> None:
    """Resolve a project, then re-resolve whenever its .csproj changes. Ctrl+C to stop."""
    _configure_logging(verbose, False)
    console = Console()
    changed = threading.Event()

    def watcher_factory(file_path, sink):
        def notify(event: ChangeEvent) -> None:
            sink(event)
            changed.set()
        return ChangeWatcher(file_path, notify)

    try:
        resolver = ProjectResolver.open(path, watch=True, watcher_factory=watcher_factory)
    except RefscoutError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    with resolver:
        console.print(_references_table(resolver))
        try:
            while resolver.is_watching:
                if not changed.wait(timeout=0.5):
                    continue
                changed.clear()
                # Let the worker drain the burst of events an editor save produces
                time.sleep(0.2)
                if resolver.last_error is not None:
                    console.print(f"[red]Error:[/red] {resolver.last_error}")
                console.print(_references_table(resolver))
        except KeyboardInterrupt:
            pass
    console.print("[yellow]Stopped watching.[/yellow]")


if __name__ == "__main__":
    cli()
