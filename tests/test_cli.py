"""Tests for the CLI (no network calls)."""

import httpx
import pytest
from apscheduler.schedulers.blocking import BlockingScheduler
from rich.console import Console
from typer.testing import CliRunner

from freshfetch import cli
from freshfetch.cli import app
from freshfetch.jobs import refresh as refresh_job
from freshfetch.jobs.refresh import RefreshOutcome
from freshfetch.web.fetch import TransferError

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(cli, "console", Console(width=240))


def test_status_lists_jobs(jobs_file):
    result = runner.invoke(app, ["status", "--jobs", str(jobs_file)])

    assert result.exit_code == 0
    assert "holidays" in result.stdout
    assert "logo" in result.stdout
    assert "never" in result.stdout


def test_status_missing_catalog(tmp_path):
    result = runner.invoke(app, ["status", "--jobs", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1
    assert "not found" in result.stdout.replace("\n", " ")


def test_refresh_runs_named_job(jobs_file, monkeypatch):
    seen = []

    def fake_run_refresh(job, *, force=False):
        seen.append((job.name, force))
        return RefreshOutcome(name=job.name, refreshed=True, run_at=1_700_000_000_000, lines=2, size_bytes=42)

    monkeypatch.setattr(refresh_job, "run_refresh", fake_run_refresh)

    result = runner.invoke(app, ["refresh", "holidays", "--jobs", str(jobs_file), "--force"])

    assert result.exit_code == 0
    assert seen == [("holidays", True)]
    assert "Refreshed" in result.stdout


def test_refresh_reports_transfer_error(jobs_file, monkeypatch):
    def failing_run_refresh(job, *, force=False):
        raise TransferError(404, job.url)

    monkeypatch.setattr(refresh_job, "run_refresh", failing_run_refresh)

    result = runner.invoke(app, ["refresh", "holidays", "--jobs", str(jobs_file)])

    assert result.exit_code == 1
    assert "404" in result.stdout


def test_refresh_unknown_job(jobs_file):
    result = runner.invoke(app, ["refresh", "weather", "--jobs", str(jobs_file)])

    assert result.exit_code == 1
    assert "Unknown job" in result.stdout


def test_serve_registers_every_job(jobs_file, monkeypatch):
    started = []
    monkeypatch.setattr(BlockingScheduler, "start", lambda self, *args, **kwargs: started.append(self.get_jobs()))

    result = runner.invoke(app, ["serve", "--jobs", str(jobs_file), "--run-now"])

    assert result.exit_code == 0
    assert "Scheduled 2 job(s)" in result.stdout
    [jobs] = started
    assert sorted(job.name for job in jobs) == ["holidays", "holidays initial", "logo", "logo initial"]


def test_refresh_reports_redirect_loop(jobs_file, monkeypatch):
    def looping_run_refresh(job, *, force=False):
        raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=httpx.Request("GET", job.url))

    monkeypatch.setattr(refresh_job, "run_refresh", looping_run_refresh)

    result = runner.invoke(app, ["refresh", "holidays", "--jobs", str(jobs_file)])

    assert result.exit_code == 1
    assert "Exceeded maximum allowed redirects" in result.stdout
