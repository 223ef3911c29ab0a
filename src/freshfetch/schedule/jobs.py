"""Job registration: explicit triggers and the hourly cadence."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import structlog

from freshfetch.config import settings
from freshfetch.schedule.engine import RegistrationError, RepeatingTrigger, SchedulingEngine, Trigger

logger = structlog.get_logger()


def _job_label(job: Callable[[], object]) -> str:
    return getattr(job, "__qualname__", None) or repr(job)


def _start_time(trigger: Trigger) -> str:
    return trigger.start_at.isoformat()


class JobScheduler:
    """Hands jobs to a scheduling engine.

    Registration never raises: a rejected job is logged and reported as
    ``False``. Each job is registered under its name in the group
    ``"<name> group"``.
    """

    def __init__(
        self,
        engine: SchedulingEngine,
        *,
        start_offset_minutes: int | None = None,
        interval_hours: int | None = None,
        now_fn: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._engine = engine
        self._start_offset_minutes = (
            settings.hourly_start_offset_minutes if start_offset_minutes is None else start_offset_minutes
        )
        self._interval_hours = settings.hourly_interval_hours if interval_hours is None else interval_hours
        self._now_fn = now_fn

    def start_job(self, job: Callable[[], object], trigger: Trigger, name: str) -> bool:
        """Register ``job`` under ``name`` with the given trigger."""
        logger.info("Scheduling job", name=name, job=_job_label(job), start_at=_start_time(trigger))
        try:
            self._engine.register(name, f"{name} group", trigger, job)
        except RegistrationError as e:
            logger.error("Scheduling job failed", name=name, error=str(e), exc_info=True)
            return False
        logger.info("Scheduled job", name=name)
        return True

    def hourly_trigger(self) -> RepeatingTrigger:
        start_at = self._now_fn() + timedelta(minutes=self._start_offset_minutes)
        return RepeatingTrigger(start_at=start_at, hours=self._interval_hours)

    def start_job_hourly(self, job: Callable[[], object], name: str) -> bool:
        """Register ``job`` to run every hour, first after the configured offset."""
        return self.start_job(job, self.hourly_trigger(), name)
