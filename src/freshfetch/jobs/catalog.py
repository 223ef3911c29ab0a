"""Job catalog loaded from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, ValidationError


class CatalogError(ValueError):
    """Raised when the job catalog cannot be loaded."""


class FetchJob(BaseModel):
    """A resource to keep fresh on disk."""

    name: str = Field(min_length=1)
    url: str
    path: str
    interval_seconds: int = Field(default=3600, ge=0)
    mode: Literal["lines", "stream"] = "lines"


def load_catalog(jobs_path: str | Path) -> list[FetchJob]:
    path = Path(jobs_path).expanduser()
    if not path.exists():
        raise CatalogError(f"Jobs file not found: {jobs_path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    entries = data.get("jobs", []) if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise CatalogError(f"{path.name} must contain a list under 'jobs'")

    jobs: list[FetchJob] = []
    seen: set[str] = set()
    for index, entry in enumerate(entries, start=1):
        try:
            job = FetchJob.model_validate(entry)
        except ValidationError as e:
            raise CatalogError(f"Invalid job #{index} in {path.name}: {e}") from e
        if job.name in seen:
            raise CatalogError(f"Duplicate job name: {job.name}")
        seen.add(job.name)
        jobs.append(job)
    return jobs


def find_job(jobs: list[FetchJob], name: str) -> FetchJob:
    for job in jobs:
        if job.name == name:
            return job
    raise CatalogError(f"Unknown job: {name}")
