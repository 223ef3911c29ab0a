"""Scheduling engine seam and its APScheduler adapter."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

import structlog
from apscheduler.jobstores.base import ConflictingIdError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

logger = structlog.get_logger()


@dataclass(frozen=True)
class OneShotTrigger:
    """Run once at ``start_at``."""

    start_at: datetime


@dataclass(frozen=True)
class RepeatingTrigger:
    """Run at ``start_at`` and then forever every ``hours`` hours."""

    start_at: datetime
    hours: int = 1


Trigger = OneShotTrigger | RepeatingTrigger


class RegistrationError(RuntimeError):
    """Raised when an engine refuses a job registration."""


class SchedulingEngine(Protocol):
    def register(self, identity: str, group: str, trigger: Trigger, job: Callable[[], object]) -> None: ...


def _to_apscheduler_trigger(trigger: Trigger) -> DateTrigger | IntervalTrigger:
    if isinstance(trigger, OneShotTrigger):
        return DateTrigger(run_date=trigger.start_at)
    if isinstance(trigger, RepeatingTrigger):
        return IntervalTrigger(hours=trigger.hours, start_date=trigger.start_at)
    raise RegistrationError(f"Unsupported trigger {trigger!r}")


class ApschedulerEngine:
    """Registers jobs on an APScheduler scheduler, refusing duplicate identities."""

    def __init__(self, scheduler: BaseScheduler) -> None:
        self._scheduler = scheduler

    @property
    def scheduler(self) -> BaseScheduler:
        return self._scheduler

    @staticmethod
    def job_id(identity: str, group: str) -> str:
        return f"{group}/{identity}"

    def register(self, identity: str, group: str, trigger: Trigger, job: Callable[[], object]) -> None:
        job_id = self.job_id(identity, group)
        if self._scheduler.get_job(job_id) is not None:
            raise RegistrationError(f"Job {identity!r} is already registered in {group!r}")

        try:
            self._scheduler.add_job(
                job,
                trigger=_to_apscheduler_trigger(trigger),
                id=job_id,
                name=identity,
                replace_existing=False,
            )
        except ConflictingIdError as e:
            raise RegistrationError(f"Job {identity!r} is already registered in {group!r}") from e
        except (TypeError, ValueError, LookupError) as e:
            raise RegistrationError(f"Could not register job {identity!r}: {e}") from e

        logger.debug("Registered job with APScheduler", job_id=job_id)
