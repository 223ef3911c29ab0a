"""Pytest fixtures for freshfetch tests."""

from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
import pytest
import yaml  # type: ignore[import-untyped]

from freshfetch.schedule.engine import RegistrationError, Trigger
from freshfetch.web.fetch import build_client


@dataclass
class Registration:
    identity: str
    group: str
    trigger: Trigger
    job: Callable[[], object]


@dataclass
class FakeEngine:
    """In-memory engine that refuses a second registration of the same identity."""

    registrations: list[Registration] = field(default_factory=list)
    reject_all: bool = False

    def register(self, identity: str, group: str, trigger: Trigger, job: Callable[[], object]) -> None:
        if self.reject_all:
            raise RegistrationError("engine is shut down")
        if any(r.identity == identity and r.group == group for r in self.registrations):
            raise RegistrationError(f"{identity} already registered")
        self.registrations.append(Registration(identity, group, trigger, job))


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_client():
    """Build an httpx client served by a handler function instead of the network."""
    clients: list[httpx.Client] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        client = build_client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def jobs_file(tmp_path):
    """Write a jobs catalog with one line-based and one streamed job."""
    path = tmp_path / "jobs.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "jobs": [
                    {
                        "name": "holidays",
                        "url": "https://example.com/holidays.csv",
                        "path": str(tmp_path / "data" / "holidays.csv"),
                        "interval_seconds": 3600,
                    },
                    {
                        "name": "logo",
                        "url": "https://example.com/logo.png",
                        "path": str(tmp_path / "data" / "logo.png"),
                        "interval_seconds": 86400,
                        "mode": "stream",
                    },
                ]
            }
        )
    )
    return path
