import pytest

from storage import GameStore, SqlBackend
from tests.helpers import WORDS, FakeClock


@pytest.fixture
def words():
    return set(WORDS)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    return GameStore(SqlBackend.from_url(f"sqlite:///{tmp_path / 'test.db'}"))
