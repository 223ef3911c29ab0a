"""Refresh a fetched artifact when its last run is out of date."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from freshfetch.config import settings
from freshfetch.jobs.catalog import FetchJob
from freshfetch.staleness import is_up_to_date, now
from freshfetch.storage.files import last_modified, update_last_modified, write_lines
from freshfetch.web.fetch import download, download_to_file

logger = structlog.get_logger()


@dataclass(frozen=True)
class RefreshOutcome:
    name: str
    refreshed: bool
    run_at: int
    lines: int | None = None
    size_bytes: int | None = None


@retry(
    stop=stop_after_attempt(settings.fetch_max_attempts),
    wait=wait_exponential(min=2, max=30),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)
def _fetch(job: FetchJob, client: httpx.Client | None) -> list[str] | None:
    if job.mode == "stream":
        download_to_file(job.url, job.path, client=client)
        return None
    lines: list[str] = []
    download(job.url, lines, client=client)
    return lines


def run_refresh(
    job: FetchJob,
    *,
    client: httpx.Client | None = None,
    now_fn: Callable[[], int] = now,
    force: bool = False,
) -> RefreshOutcome:
    """Fetch ``job.url`` into ``job.path`` unless the stored copy is still fresh.

    The artifact's modification time is stamped with the run time, so the
    next call measures staleness from the start of this run.
    """
    run_at = now_fn()
    last = last_modified(job.path)
    if not force and is_up_to_date(run_at, last, job.interval_seconds):
        logger.info("Artifact up to date, skipping", job=job.name, path=job.path)
        return RefreshOutcome(name=job.name, refreshed=False, run_at=run_at)

    # a failed fetch or write leaves job.path and its stamp untouched
    lines = _fetch(job, client)
    if lines is not None:
        write_lines(lines, job.path)
    update_last_modified(job.path, run_at)

    size_bytes = Path(job.path).stat().st_size
    logger.info(
        "Artifact refreshed",
        job=job.name,
        path=job.path,
        lines=None if lines is None else len(lines),
        size_bytes=size_bytes,
    )
    return RefreshOutcome(
        name=job.name,
        refreshed=True,
        run_at=run_at,
        lines=None if lines is None else len(lines),
        size_bytes=size_bytes,
    )


def scheduled_refresh(job: FetchJob, *, client: httpx.Client | None = None) -> Callable[[], RefreshOutcome]:
    """Zero-argument callable for a scheduling engine."""

    def _run() -> RefreshOutcome:
        return run_refresh(job, client=client)

    _run.__qualname__ = f"refresh[{job.name}]"
    return _run
