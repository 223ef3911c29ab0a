"""CLI entry point using Typer."""

import logging
from datetime import UTC, datetime

import httpx
import structlog
import typer
from rich.console import Console
from rich.table import Table

from freshfetch.config import settings
from freshfetch.jobs.catalog import CatalogError, find_job, load_catalog

app = typer.Typer(
    name="freshfetch",
    help="Keep downloaded resources fresh on disk and refresh them hourly.",
)
console = Console()

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, settings.log_level.upper(), logging.INFO)),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
)


def _format_timestamp(timestamp: int) -> str:
    if timestamp <= 0:
        return "never"
    return datetime.fromtimestamp(timestamp / 1000, tz=UTC).isoformat()


@app.command()
def status(jobs_path: str = typer.Option(settings.jobs_file, "--jobs", help="Path to jobs YAML file")) -> None:
    """Show every job with its last run and whether it is up to date."""
    from freshfetch.staleness import is_up_to_date, now
    from freshfetch.storage.files import last_modified

    try:
        jobs = load_catalog(jobs_path)
    except CatalogError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not jobs:
        console.print("[yellow]No jobs defined.[/yellow]")
        return

    current = now()
    table = Table(title="Fetch Jobs")
    table.add_column("Name", style="cyan")
    table.add_column("URL", style="white")
    table.add_column("Path", style="white")
    table.add_column("Last run", style="white")
    table.add_column("Up to date", style="green")
    for job in jobs:
        last = last_modified(job.path)
        fresh = is_up_to_date(current, last, job.interval_seconds)
        table.add_row(job.name, job.url, job.path, _format_timestamp(last), "yes" if fresh else "[red]no[/red]")
    console.print(table)


@app.command()
def refresh(
    name: str = typer.Argument(..., help="Job name"),
    jobs_path: str = typer.Option(settings.jobs_file, "--jobs", help="Path to jobs YAML file"),
    force: bool = typer.Option(False, "--force", help="Fetch even if the stored copy is up to date"),
) -> None:
    """Run one job now."""
    from freshfetch.jobs.refresh import run_refresh
    from freshfetch.storage.files import StorageError
    from freshfetch.web.fetch import TransferError

    try:
        job = find_job(load_catalog(jobs_path), name)
        outcome = run_refresh(job, force=force)
    except (CatalogError, TransferError, StorageError, httpx.HTTPError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if outcome.refreshed:
        console.print(f"[bold green]Refreshed[/bold green] {job.name} -> {job.path} ({outcome.size_bytes} bytes)")
    else:
        console.print(f"[yellow]Up to date:[/yellow] {job.name}")


@app.command()
def serve(
    jobs_path: str = typer.Option(settings.jobs_file, "--jobs", help="Path to jobs YAML file"),
    run_now: bool = typer.Option(False, "--run-now", help="Also run every job once right away"),
) -> None:
    """Register every job hourly and run the scheduler until interrupted."""
    from apscheduler.schedulers.blocking import BlockingScheduler

    from freshfetch.jobs.refresh import scheduled_refresh
    from freshfetch.schedule.engine import ApschedulerEngine, OneShotTrigger
    from freshfetch.schedule.jobs import JobScheduler

    try:
        jobs = load_catalog(jobs_path)
    except CatalogError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    scheduler = BlockingScheduler(timezone=UTC)
    job_scheduler = JobScheduler(ApschedulerEngine(scheduler))

    registered = 0
    for job in jobs:
        runnable = scheduled_refresh(job)
        if job_scheduler.start_job_hourly(runnable, job.name):
            registered += 1
        else:
            console.print(f"[yellow]Not scheduled:[/yellow] {job.name}")
        if run_now:
            job_scheduler.start_job(runnable, OneShotTrigger(start_at=datetime.now(UTC)), f"{job.name} initial")

    if not registered:
        console.print("[bold red]Error:[/bold red] no jobs scheduled")
        raise typer.Exit(1)

    console.print(f"[bold blue]Scheduled {registered} job(s); press Ctrl+C to stop.[/bold blue]")
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        console.print("[bold blue]Shutting down scheduler[/bold blue]")
        if scheduler.running:
            scheduler.shutdown(wait=False)


if __name__ == "__main__":
    app()
