from datetime import datetime, timedelta

import pytest

from servicedesk.backup import BackupManager
from servicedesk.persistence import FileHandler
from servicedesk.store import RequestManager


class FakeClock:
    """Deterministic time source; moves only when told to."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 9, 0, 0))


@pytest.fixture
def store(clock):
    return RequestManager(clock=clock)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def files(store, data_dir):
    return FileHandler(store, data_dir)


@pytest.fixture
def backups(files, clock):
    return BackupManager(files, clock=clock)


@pytest.fixture
def sarah(store):
    return store.create_user("Sarah Connor", "Marketing", "USER", "sarah.connor@example.com", "100-201")
