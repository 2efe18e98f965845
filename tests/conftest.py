"""Shared pytest fixtures: isolated home directory, fake clock, cache and queue."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

import httpx
import pytest

from linkwatch.config import ConfigLocator, ConfigRepository, MonitorConfig
from linkwatch.engine import QueueManager
from linkwatch.infra import CacheStore, SQLiteManager
from linkwatch.monitor import LinkMonitor


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("LINKWATCH_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_config(tmp_path: Path) -> MonitorConfig:
    return MonitorConfig(
        home_url="https://blog.example.org/",
        database_path=tmp_path / "cache.db",
        cache_duration=86400,
        sweep_interval=90,
        request_timeout=5,
        fetch_workers=2,
    )


@pytest.fixture
def sqlite_manager() -> Iterable[SQLiteManager]:
    manager = SQLiteManager()
    yield manager
    manager.close_all()


@pytest.fixture
def store(sqlite_manager: SQLiteManager, tmp_path: Path, clock: FakeClock) -> CacheStore:
    return CacheStore(sqlite_manager, tmp_path / "cache.db", clock=clock)


@pytest.fixture
def queue(store: CacheStore) -> QueueManager:
    return QueueManager(store)


@pytest.fixture
def monitor_factory(
    sample_config: MonitorConfig, clock: FakeClock
) -> Iterable[Callable[[Callable[[httpx.Request], httpx.Response]], LinkMonitor]]:
    built: list[LinkMonitor] = []

    def _builder(handler: Callable[[httpx.Request], httpx.Response]) -> LinkMonitor:
        monitor = LinkMonitor.build(
            sample_config, clock=clock, transport=httpx.MockTransport(handler)
        )
        built.append(monitor)
        return monitor

    yield _builder
    for monitor in built:
        monitor.fetcher.close()
        monitor.storage.close_all()


@pytest.fixture
def temp_config_repository(tmp_path: Path) -> ConfigRepository:
    locator = ConfigLocator(project_root=tmp_path)
    return ConfigRepository(locator)
