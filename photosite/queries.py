"""SQL building blocks and errors shared by the repositories."""

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from photosite.constants import DEFAULT_SORT, SortField
from photosite.sorting import normalize_sort_field


class RepositoryNotReadyError(RuntimeError):
    """The repository has no database to talk to."""

    def __init__(self, message="repository not ready"):
        super().__init__(message)


class SchemaNotReadyError(RuntimeError):
    """The tables a query needs do not exist yet."""

    def __init__(self, message="repository sql not implemented for current schema"):
        super().__init__(message)


class RecordNotFoundError(LookupError):
    """A query that must return a row returned none."""

    def __init__(self, message="no rows in result set"):
        super().__init__(message)


PHOTO_SORT_COLUMNS = {
    SortField.SHOT_TIME.value: "p.shot_time",
    SortField.LIKE_COUNT.value: "p.like_count",
    SortField.VIEW_COUNT.value: "p.view_count",
    SortField.DOWNLOAD.value: "p.download_count",
    SortField.CREATED_AT.value: "p.created_at",
}


def photo_sort_column(sort_field):
    """Qualified column for a sort field; the default column for unknown fields."""
    field = normalize_sort_field(sort_field)
    return PHOTO_SORT_COLUMNS.get(field, PHOTO_SORT_COLUMNS[DEFAULT_SORT.value])


def table_exists(conn, table):
    """Whether ``table`` exists (in the ``public`` schema on PostgreSQL)."""
    schema = "public" if conn.dialect.name == "postgresql" else None
    try:
        return inspect(conn).has_table(table, schema=schema)
    except SQLAlchemyError as exc:
        exc.add_note(f"check table {table} failed")
        raise


def build_photo_list_where(req, start_index=1):
    """WHERE clause for a photo list request.

    Returns the clause text, a dict of bound parameters named ``p<index>``
    and the next free parameter index.
    """
    clauses = ["p.is_published = TRUE"]
    params = {}
    idx = start_index

    def bind(value):
        nonlocal idx
        name = f"p{idx}"
        params[name] = value
        idx += 1
        return f":{name}"

    for keyword in req.keyword_list():
        ph = bind(f"%{keyword}%")
        clauses.append(
            "(\n"
            f"COALESCE(p.title_cn, '') ILIKE {ph}\n"
            f"OR COALESCE(p.title_en, '') ILIKE {ph}\n"
            f"OR p.filename ILIKE {ph}\n"
            "OR EXISTS (\n"
            "\tSELECT 1\n"
            "\tFROM photo_tags pt\n"
            "\tJOIN tags t ON t.id = pt.tag_id\n"
            "\tWHERE pt.photo_id = p.id\n"
            f"\t  AND t.name ILIKE {ph}\n"
            ")\n"
            ")"
        )

    tag_names = []
    seen = set()
    for tag in req.tag_list():
        lower = tag.strip().lower()
        if not lower or lower in seen:
            continue
        seen.add(lower)
        tag_names.append(lower)

    if tag_names:
        placeholders = ",".join(bind(name) for name in tag_names)
        if req.tag_mode == "all":
            count_ph = bind(len(tag_names))
            clauses.append(
                "\np.id IN (\n"
                "\tSELECT pt.photo_id\n"
                "\tFROM photo_tags pt\n"
                "\tJOIN tags t ON t.id = pt.tag_id\n"
                f"\tWHERE LOWER(t.name) IN ({placeholders})\n"
                "\tGROUP BY pt.photo_id\n"
                f"\tHAVING COUNT(DISTINCT LOWER(t.name)) = {count_ph}\n"
                ")"
            )
        else:
            clauses.append(
                "\nEXISTS (\n"
                "\tSELECT 1\n"
                "\tFROM photo_tags pt\n"
                "\tJOIN tags t ON t.id = pt.tag_id\n"
                "\tWHERE pt.photo_id = p.id\n"
                f"\t  AND LOWER(t.name) IN ({placeholders})\n"
                ")"
            )

    if req.orientation:
        clauses.append(f"p.orientation = {bind(req.orientation)}")
    if req.year > 0:
        clauses.append(f"p.year = {bind(req.year)}")
    if req.month > 0:
        clauses.append(f"p.month = {bind(req.month)}")
    if req.category:
        clauses.append(f"p.category = {bind(req.category)}")

    return "WHERE " + " AND ".join(clauses), params, idx