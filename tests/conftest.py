from datetime import datetime

import pytest

from folders import LogFolders
from tests.helpers import Clock, FakeScheduler, FakeWatch


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def clock():
    return Clock(datetime(2024, 3, 5, 12, 0, 0))


@pytest.fixture
def roots(tmp_path):
    return LogFolders.under(str(tmp_path / "Local")), LogFolders.under(str(tmp_path / "LocalLow"))


@pytest.fixture(autouse=True)
def _reset_watches():
    FakeWatch.instances = []
    yield
    FakeWatch.instances = []
