"""Database health checks."""

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from photosite.queries import RepositoryNotReadyError


class StatsRepository:
    """Checks that the database answers."""

    def __init__(self, engine):
        self._engine = engine

    def ping(self):
        """Run a trivial query; raise ConnectionError if the database does not answer."""
        if self._engine is None:
            raise RepositoryNotReadyError()
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise ConnectionError(f"stats repository ping failed: {exc}") from exc