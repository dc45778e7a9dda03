"""Queries behind the photo filter options."""

from sqlalchemy import column, func, select, table, true
from sqlalchemy.exc import SQLAlchemyError

from photosite.constants import Orientation, TagType
from photosite.queries import RepositoryNotReadyError
from photosite.responses import OrientationOption, TagItem

_photos = table(
    "photos",
    column("id"),
    column("year"),
    column("category"),
    column("orientation"),
    column("is_published"),
)
_tags = table("tags", column("id"), column("name"), column("tag_type"))
_photo_tags = table("photo_tags", column("photo_id"), column("tag_id"))

_published = _photos.c.is_published == true()


def _years_statement():
    return (
        select(_photos.c.year)
        .distinct()
        .where(_published, _photos.c.year.is_not(None), _photos.c.year > 0)
        .order_by(_photos.c.year.desc())
    )


def _categories_statement():
    return (
        select(_photos.c.category)
        .distinct()
        .where(_published, func.coalesce(func.trim(_photos.c.category), "") != "")
        .order_by(_photos.c.category.asc())
    )


def _orientations_statement():
    return (
        select(_photos.c.orientation.label("name"), func.count(1).label("count"))
        .where(_published, _photos.c.orientation.in_([o.value for o in Orientation]))
        .group_by(_photos.c.orientation)
    )


def _tags_statement():
    joined = _tags.join(_photo_tags, _photo_tags.c.tag_id == _tags.c.id).join(
        _photos, _photos.c.id == _photo_tags.c.photo_id
    )
    return (
        select(_tags.c.id, _tags.c.name, _tags.c.tag_type)
        .distinct()
        .select_from(joined)
        .where(_published)
        .order_by(_tags.c.tag_type.asc(), _tags.c.name.asc(), _tags.c.id.asc())
    )


class FilterRepository:
    """Reads the years, categories, orientations and tags of published photos."""

    def __init__(self, engine):
        self._engine = engine

    def _rows(self, statement, context):
        if self._engine is None:
            raise RepositoryNotReadyError()
        try:
            with self._engine.connect() as conn:
                return conn.execute(statement).all()
        except SQLAlchemyError as exc:
            exc.add_note(context)
            raise

    def list_available_years(self):
        """Distinct positive years of published photos, newest first."""
        return [row[0] for row in self._rows(_years_statement(), "list years failed")]

    def list_available_categories(self):
        """Distinct non-blank categories of published photos, in ascending order."""
        rows = self._rows(_categories_statement(), "list categories failed")
        return [row[0] for row in rows]

    def list_orientation_counts(self):
        """Number of published photos per orientation, every orientation listed."""
        counts = {o.value: 0 for o in Orientation}
        rows = self._rows(_orientations_statement(), "list orientation counts failed")
        for name, count in rows:
            key = name.strip().lower()
            if key in counts:
                counts[key] = count
        return [OrientationOption(name=name, count=count) for name, count in counts.items()]

    def list_all_tags_grouped(self):
        """Tags used by published photos, grouped by lower-cased tag type."""
        grouped = {t.value: [] for t in TagType}
        rows = self._rows(_tags_statement(), "list grouped tags failed")
        for tag_id, name, tag_type in rows:
            key = tag_type.strip().lower()
            grouped.setdefault(key, []).append(TagItem(id=tag_id, name=name, tag_type=key))
        return grouped