"""Queries on the tag table."""

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.exc import SQLAlchemyError

from photosite.models import Tag
from photosite.queries import RepositoryNotReadyError, SchemaNotReadyError, table_exists

_LIST_SQL = text(
    """
SELECT id, name, tag_type, created_at
FROM tags
ORDER BY name ASC
"""
).columns(id=Integer, name=String, tag_type=String, created_at=DateTime)


class TagRepository:
    """Reads tags."""

    def __init__(self, engine):
        self._engine = engine

    def list_tags(self):
        """All tags ordered by name; raise SchemaNotReadyError if the table is missing."""
        if self._engine is None:
            raise RepositoryNotReadyError()
        with self._engine.connect() as conn:
            if not table_exists(conn, "tags"):
                raise SchemaNotReadyError()
            try:
                rows = conn.execute(_LIST_SQL).all()
            except SQLAlchemyError as exc:
                exc.add_note("list tags failed")
                raise
        return [
            Tag(id=row.id, name=row.name, tag_type=row.tag_type, created_at=row.created_at)
            for row in rows
        ]