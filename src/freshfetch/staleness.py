"""Up-to-date checks for periodically refreshed artifacts.

Timestamps are epoch milliseconds with second precision. Every value compared
here should come from :func:`now` or from a file stamped with one, otherwise
sub-second noise makes equal runs look stale.
"""

from __future__ import annotations

import time

import structlog

logger = structlog.get_logger()


def now() -> int:
    """Current time in milliseconds, truncated to whole seconds."""
    return (time.time_ns() // 1_000_000_000) * 1000


def is_up_to_date(now: int, last: int, interval_seconds: int) -> bool:
    """Return True if a run at ``last`` is still valid at ``now``.

    Args:
        now: current time in milliseconds
        last: time in milliseconds of the last successful run, ``<= 0`` if never run
        interval_seconds: seconds after which the last run is out of date
    """
    if last <= 0:
        logger.info("Never run, run now")
        return False

    boundary = last + interval_seconds * 1000
    up_to_date = now <= boundary
    logger.info("Run now?", now=now, boundary=boundary, up_to_date=up_to_date)
    return up_to_date
