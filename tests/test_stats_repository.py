import pytest
from sqlalchemy import create_engine

from photosite.queries import RepositoryNotReadyError
from photosite.stats_repository import StatsRepository


def test_ping_without_engine_raises_not_ready():
    with pytest.raises(RepositoryNotReadyError):
        StatsRepository(None).ping()


def test_ping_unreachable_database_raises_connection_error(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'stats.db'}")
    with pytest.raises(ConnectionError, match="stats repository ping failed"):
        StatsRepository(engine).ping()
    engine.dispose()