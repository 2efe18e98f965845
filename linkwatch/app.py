"""Typer CLI entrypoint for linkwatch."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository
from .infra import QueueEntry
from .logging_conf import configure_logging
from .monitor import LinkMonitor

app = typer.Typer(
    help="linkwatch: background link health and preview cache",
    no_args_is_help=True,
    rich_markup_mode=None,
)
queue_app = typer.Typer(
    name="queue",
    help="Inspect and edit the fetch queue",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()

ORDER_CHOICES = ("status", "created_at", "source_url", "target_url")


@dataclass
class AppState:
    repository: ConfigRepository
    monitor: LinkMonitor


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose=verbose)
    repository = ConfigRepository()
    monitor = LinkMonitor.from_repository(repository)
    return AppState(repository=repository, monitor=monitor)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _format_status(entry: QueueEntry) -> str:
    if entry.is_pending:
        return "Pending..."
    return str(entry.status)


def _format_timestamp(value: float | None) -> str:
    if value is None:
        return "-"
    return datetime.fromtimestamp(value).strftime("%Y-%m-%d %H:%M:%S")


def _render_queue_table(entries: Sequence[QueueEntry], total: int, page: int, pages: int) -> Table:
    table = Table(
        title=f"Link queue · {total} entries · page {page}/{max(pages, 1)}",
        box=box.SIMPLE_HEAD,
        show_lines=False,
    )
    table.add_column("Key", style="dim", no_wrap=True)
    table.add_column("From", style="cyan", overflow="fold")
    table.add_column("To", style="magenta", overflow="fold")
    table.add_column("Start", style="green", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Expires", style="yellow", no_wrap=True)
    for entry in entries:
        table.add_row(
            entry.id,
            entry.source_url,
            entry.target_url,
            _format_timestamp(entry.created_at),
            _format_status(entry),
            _format_timestamp(entry.expires_at),
            style="red" if entry.is_broken else None,
        )
    return table


def _render_entry(entry: QueueEntry) -> Table:
    table = Table(title=entry.target_url, box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", overflow="fold")
    table.add_row("key", entry.id)
    table.add_row("from", entry.source_url)
    table.add_row("status", _format_status(entry))
    table.add_row("broken", "yes" if entry.is_broken else "no")
    table.add_row("kind", entry.kind)
    table.add_row("expires", _format_timestamp(entry.expires_at))
    for name, value in sorted((entry.preview or {}).items()):
        table.add_row(f"og:{name}", value)
    return table


app.add_typer(queue_app, name="queue", help="Inspect and edit the fetch queue")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging", is_flag=True),
) -> None:
    ctx.obj = build_state(verbose)


@queue_app.command("list", help="Show queued and cached links.")
def queue_list(
    ctx: typer.Context,
    status: Optional[str] = typer.Option(None, "--status", help="pending, error or an HTTP code"),
    search: Optional[str] = typer.Option(None, "--search", help="Substring filter"),
    page: int = typer.Option(1, "--page", min=1),
    per_page: int = typer.Option(10, "--per-page", min=1),
    order_by: str = typer.Option("status", "--order-by", help="status, created_at, source_url or target_url"),
    desc: bool = typer.Option(False, "--desc", is_flag=True),
) -> None:
    if order_by not in ORDER_CHOICES:
        raise typer.BadParameter(f"--order-by must be one of {', '.join(ORDER_CHOICES)}")
    state = _get_state(ctx)
    entries, total = state.monitor.queue.list(
        status=status,
        search=search,
        offset=(page - 1) * per_page,
        limit=per_page,
        order_by=order_by,
        descending=desc,
    )
    pages = (total + per_page - 1) // per_page
    if not entries:
        console.print("Queue is empty.", style="yellow")
        return
    console.print(_render_queue_table(entries, total, page, pages))


@queue_app.command("add", help="Queue a URL for the next sweep.")
def queue_add(
    ctx: typer.Context,
    url: str = typer.Argument(...),
    source: str = typer.Option("", "--source", help="Page the link was found on"),
    kind: str = typer.Option("link", "--kind"),
) -> None:
    state = _get_state(ctx)
    entry = state.monitor.queue.enqueue(url, source or state.monitor.config.home_url, kind=kind)
    if entry is None:
        console.print(f"Rejected invalid URL: {url}", style="red")
        raise typer.Exit(code=1)
    console.print(f"Queued {entry.target_url} ({_format_status(entry)})", style="green")


@queue_app.command("remove", help="Delete entries by key.")
def queue_remove(ctx: typer.Context, keys: list[str] = typer.Argument(...)) -> None:
    state = _get_state(ctx)
    removed = state.monitor.queue.remove_many(keys)
    console.print(f"Deleted {removed} of {len(keys)} entries.", style="green" if removed else "yellow")


@queue_app.command("clear", help="Delete every entry, or those matching --search.")
def queue_clear(
    ctx: typer.Context,
    search: Optional[str] = typer.Option(None, "--search"),
    yes: bool = typer.Option(False, "--yes", "-y", is_flag=True, help="Skip confirmation"),
) -> None:
    state = _get_state(ctx)
    if not yes:
        scope = f"entries matching '{search}'" if search else "ALL entries"
        typer.confirm(f"Delete {scope}?", abort=True)
    removed = state.monitor.queue.clear(search)
    console.print(f"Cleared {removed} entries.", style="green")


@app.command("check", help="Look a URL up; unknown URLs are queued.")
def check(
    ctx: typer.Context,
    url: str = typer.Argument(...),
    source: str = typer.Option("", "--source"),
) -> None:
    state = _get_state(ctx)
    entry = state.monitor.lookup(url, source or None)
    if entry is None:
        queued = state.monitor.queue.get_entry(url)
        if queued is None:
            console.print(f"Rejected invalid URL: {url}", style="red")
            raise typer.Exit(code=1)
        console.print(f"Not yet known; queued {queued.target_url}.", style="yellow")
        return
    console.print(_render_entry(entry))


@app.command("sweep", help="Run one sweep over pending entries.")
def sweep(
    ctx: typer.Context,
    wait: bool = typer.Option(False, "--wait", is_flag=True, help="Wait for responses"),
    timeout: Optional[float] = typer.Option(None, "--timeout"),
) -> None:
    state = _get_state(ctx)
    report = state.monitor.sweep()
    console.print(
        f"Issued {report.issued}, skipped {report.skipped}, invalid {report.invalid}.",
        style="green",
    )
    if wait and not report.wait(timeout):
        console.print("Some requests are still outstanding.", style="yellow")


@app.command("run", help="Sweep on the configured interval until interrupted.")
def run(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    monitor = state.monitor
    monitor.start()
    console.print(
        f"Sweeping every {monitor.config.sweep_interval:g}s. Press Ctrl+C to stop.", style="green"
    )
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("Stopping...", style="yellow")
    finally:
        monitor.shutdown()


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
