"""
Pytest configuration and fixtures for worktrack tests.
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

# Ensure project root is in sys.path for 'worktrack' imports without install
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "tui: marks TUI tests")


@pytest.fixture
def temp_state_dir(tmp_path: Path, monkeypatch) -> Path:
    """Create and return a temporary state directory.

    Sets WORKTRACK_STATE and resets the debug logger so it picks up the
    new path.
    """
    state_dir = tmp_path / ".local" / "state" / "worktrack"
    state_dir.mkdir(parents=True)
    monkeypatch.setenv("WORKTRACK_STATE", str(state_dir))
    monkeypatch.delenv("WORKTRACK_DEBUG", raising=False)

    from worktrack.debug_logger import reset_logger
    reset_logger()

    return state_dir


@pytest.fixture(autouse=True)
def isolate_environment(temp_state_dir: Path, tmp_path: Path, monkeypatch):
    """Autouse fixture keeping every test away from the real config and data.

    Points WORKTRACK_SETTINGS at a missing file and WORKTRACK_DATA at a
    fresh temp directory.
    """
    monkeypatch.setenv("WORKTRACK_SETTINGS", str(tmp_path / "settings.json"))
    monkeypatch.setenv("WORKTRACK_DATA", str(tmp_path / "database"))
    yield temp_state_dir

    from worktrack.debug_logger import reset_logger
    reset_logger()


@pytest.fixture
def database_dir(tmp_path: Path) -> Path:
    return tmp_path / "database"


@pytest.fixture
def store(database_dir: Path):
    from worktrack.store import Store
    return Store(database_dir)


class FakeClock:
    """Manually advanced clock for deterministic session times."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 15, 9, 0, 0))


@pytest.fixture
def tags(store):
    """Tag registry with two tags, 'work' selected."""
    from worktrack.tags import TagRegistry
    registry = TagRegistry.load(store)
    registry.store_tag("work")
    registry.store_tag("admin")
    registry.select(0)
    return registry


@pytest.fixture
def session_log(store, clock):
    from worktrack.session_log import SessionLog
    return SessionLog(store, clock=clock)
