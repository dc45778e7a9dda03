"""Queries and visitor counters on photos."""

from contextlib import contextmanager
from dataclasses import dataclass, fields
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Float, bindparam, text
from sqlalchemy.exc import SQLAlchemyError

from photosite import pager
from photosite.models import Photo
from photosite.photo_query import PhotoListRequest
from photosite.queries import (
    RecordNotFoundError,
    RepositoryNotReadyError,
    SchemaNotReadyError,
    build_photo_list_where,
    photo_sort_column,
    table_exists,
)
from photosite.responses import PhotoTagItem, TagItem
from photosite.sorting import normalize_sort_order

VIEW_WINDOW = timedelta(minutes=10)
DOWNLOAD_WINDOW = timedelta(minutes=30)

_PHOTO_FIELDS = frozenset(f.name for f in fields(Photo))

_LIST_COLUMNS = """
	p.id, p.uuid, p.filename, p.title_cn, p.title_en, p.thumb_url, p.display_url,
	p.width, p.height, p.orientation, p.shot_time, p.aperture, p.shutter_speed,
	p.iso, p.like_count, p.view_count, p.download_count"""

_DETAIL_SQL = text(
    """
SELECT
	id, uuid, filename, title_cn, title_en, description, category, shot_time, width, height, resolution, orientation,
	camera_model, lens_model, focal_length, focal_length_35mm, aperture, shutter_speed, iso, metering_mode,
	exposure_compensation, exposure_program, white_balance, flash, thumb_url, display_url, original_url, like_count, download_count,
	view_count, is_published, created_at, updated_at
FROM photos
WHERE uuid = :uuid AND is_published = TRUE
LIMIT 1
"""
).columns(
    shot_time=DateTime,
    created_at=DateTime,
    updated_at=DateTime,
    is_published=Boolean,
    focal_length=Float,
    focal_length_35mm=Float,
)

_BASE_SQL = text(
    """
SELECT id, uuid, like_count
FROM photos
WHERE uuid = :uuid
  AND is_published = TRUE
LIMIT 1
"""
)

_PHOTO_ID_SQL = text(
    """
SELECT id
FROM photos
WHERE uuid = :uuid
  AND is_published = TRUE
LIMIT 1
"""
)

_TAGS_BY_IDS_SQL = text(
    """
SELECT
	pt.photo_id,
	t.id,
	t.name,
	t.tag_type
FROM photo_tags pt
JOIN tags t ON t.id = pt.tag_id
WHERE pt.photo_id IN :photo_ids
ORDER BY pt.photo_id ASC, t.id ASC
"""
).bindparams(bindparam("photo_ids", expanding=True))

_TAGS_BY_ID_SQL = text(
    """
SELECT t.id, t.name, t.tag_type
FROM photo_tags pt
JOIN tags t ON t.id = pt.tag_id
WHERE pt.photo_id = :photo_id
ORDER BY t.tag_type ASC, t.id ASC
"""
)

_VIEW_WINDOW_SQL = text(
    """
SELECT EXISTS (
	SELECT 1
	FROM photo_views
	WHERE photo_id = :photo_id
	  AND visitor_hash = :visitor_hash
	  AND viewed_at >= :cutoff
)
"""
).bindparams(bindparam("cutoff", type_=DateTime))

_INSERT_VIEW_SQL = text(
    """
INSERT INTO photo_views (photo_id, visitor_hash, viewed_at)
VALUES (:photo_id, :visitor_hash, :now)
"""
).bindparams(bindparam("now", type_=DateTime))

_BUMP_VIEW_SQL = text(
    """
UPDATE photos
SET view_count = view_count + 1,
	updated_at = :now
WHERE id = :photo_id
"""
).bindparams(bindparam("now", type_=DateTime))

_VIEW_COUNT_SQL = text("SELECT view_count FROM photos WHERE id = :photo_id")

_DOWNLOAD_BASE_SQL = text(
    """
SELECT id, download_count, original_url
FROM photos
WHERE uuid = :uuid
  AND is_published = TRUE
LIMIT 1
"""
)

_DOWNLOAD_WINDOW_SQL = text(
    """
SELECT EXISTS (
	SELECT 1
	FROM photo_downloads
	WHERE photo_id = :photo_id
	  AND visitor_hash = :visitor_hash
	  AND downloaded_at >= :cutoff
)
"""
).bindparams(bindparam("cutoff", type_=DateTime))

_INSERT_DOWNLOAD_SQL = text(
    """
INSERT INTO photo_downloads (photo_id, visitor_hash, downloaded_at)
VALUES (:photo_id, :visitor_hash, :now)
"""
).bindparams(bindparam("now", type_=DateTime))

_BUMP_DOWNLOAD_SQL = text(
    """
UPDATE photos
SET download_count = download_count + 1,
	updated_at = :now
WHERE id = :photo_id
"""
).bindparams(bindparam("now", type_=DateTime))

_DOWNLOAD_COUNT_SQL = text("SELECT download_count FROM photos WHERE id = :photo_id")

_INSERT_LIKE_SQL = text(
    """
INSERT INTO photo_likes (photo_id, visitor_hash, created_at)
VALUES (:photo_id, :visitor_hash, :now)
ON CONFLICT DO NOTHING
"""
).bindparams(bindparam("now", type_=DateTime))

_DELETE_LIKE_SQL = text(
    """
DELETE FROM photo_likes
WHERE photo_id = :photo_id
  AND visitor_hash = :visitor_hash
"""
)

_BUMP_LIKE_SQL = text(
    """
UPDATE photos
SET like_count = like_count + 1,
	updated_at = :now
WHERE id = :photo_id
"""
).bindparams(bindparam("now", type_=DateTime))

_DROP_LIKE_SQL = text(
    """
UPDATE photos
SET like_count = CASE WHEN like_count - 1 > 0 THEN like_count - 1 ELSE 0 END,
	updated_at = :now
WHERE id = :photo_id
"""
).bindparams(bindparam("now", type_=DateTime))

_LIKE_COUNT_SQL = text("SELECT like_count FROM photos WHERE id = :photo_id")


@dataclass(frozen=True)
class ViewCountResult:
    """View count after a view and whether this view was counted."""

    view_count: int
    counted: bool


@dataclass(frozen=True)
class DownloadCountResult:
    """Download count, stored original URL and whether this download was counted."""

    download_count: int
    original_url: str
    counted: bool


@dataclass(frozen=True)
class LikeResult:
    """Whether a like was added or removed, and the resulting like count."""

    changed: bool
    like_count: int


@contextmanager
def _noting(message):
    try:
        yield
    except SQLAlchemyError as exc:
        exc.add_note(message)
        raise


def _now():
    return datetime.now(timezone.utc)


def _photo_from_row(mapping):
    data = {key: value for key, value in mapping.items() if key in _PHOTO_FIELDS}
    raw_uuid = data.get("uuid")
    if raw_uuid is not None and not isinstance(raw_uuid, UUID):
        data["uuid"] = UUID(str(raw_uuid))
    return Photo(**data)


def _published_photo_id(conn, photo_uuid):
    row = conn.execute(_PHOTO_ID_SQL, {"uuid": photo_uuid}).first()
    if row is None:
        raise RecordNotFoundError()
    return row[0]


class PhotoRepository:
    """Reads published photos and records views, downloads and likes."""

    def __init__(self, engine):
        self._engine = engine

    def _require_engine(self):
        if self._engine is None:
            raise RepositoryNotReadyError()
        return self._engine

    def list_photos(self, req):
        """One page of published photos matching ``req`` (normalised in place)."""
        engine = self._require_engine()
        if req is None:
            req = PhotoListRequest()
        req.normalize()

        where_sql, params, next_index = build_photo_list_where(req, 1)
        column = photo_sort_column(req.sort)
        order = normalize_sort_order(req.order).upper()
        limit_name, offset_name = f"p{next_index}", f"p{next_index + 1}"
        params[limit_name] = req.page_size
        params[offset_name] = pager.offset(req.page, req.page_size)

        sql = (
            f"\nSELECT{_LIST_COLUMNS}\nFROM photos p\n{where_sql}\n"
            f"ORDER BY {column} {order}, p.id DESC\n"
            f"LIMIT :{limit_name} OFFSET :{offset_name}\n"
        )
        stmt = text(sql).columns(shot_time=DateTime)
        with _noting("list photos failed"), engine.connect() as conn:
            rows = conn.execute(stmt, params).mappings().all()
        return [_photo_from_row(row) for row in rows]

    def count_photos(self, req):
        """Number of published photos matching ``req`` (normalised in place)."""
        engine = self._require_engine()
        if req is None:
            req = PhotoListRequest()
        req.normalize()

        where_sql, params, _ = build_photo_list_where(req, 1)
        stmt = text(f"SELECT COUNT(1) FROM photos p {where_sql}")
        with _noting("count photos failed"), engine.connect() as conn:
            return conn.execute(stmt, params).scalar_one()

    def list_photo_tags_by_photo_ids(self, photo_ids):
        """Tags of each given photo, keyed by photo id, ordered by tag id."""
        result = {photo_id: [] for photo_id in photo_ids}
        if not photo_ids:
            return result
        engine = self._require_engine()
        with _noting("list photo tags failed"), engine.connect() as conn:
            rows = conn.execute(_TAGS_BY_IDS_SQL, {"photo_ids": list(photo_ids)}).all()
        for row in rows:
            result.setdefault(row.photo_id, []).append(
                PhotoTagItem(id=row.id, name=row.name, tag_type=row.tag_type)
            )
        return result

    def get_photo_by_uuid(self, photo_uuid):
        """Same as get_photo_detail_by_uuid."""
        return self.get_photo_detail_by_uuid(photo_uuid)

    def get_photo_detail_by_uuid(self, photo_uuid):
        """Every column of a published photo; raise RecordNotFoundError if there is none."""
        engine = self._require_engine()
        with engine.connect() as conn:
            if not table_exists(conn, "photos"):
                raise SchemaNotReadyError()
            row = conn.execute(_DETAIL_SQL, {"uuid": photo_uuid}).mappings().first()
        if row is None:
            raise RecordNotFoundError()
        return _photo_from_row(row)

    def get_published_photo_base_by_uuid(self, photo_uuid):
        """Id, uuid and like count of a published photo."""
        engine = self._require_engine()
        with engine.connect() as conn:
            row = conn.execute(_BASE_SQL, {"uuid": photo_uuid}).mappings().first()
        if row is None:
            raise RecordNotFoundError()
        return _photo_from_row(row)

    def get_photo_tags_by_photo_id(self, photo_id):
        """Tags of one photo ordered by tag type, then id."""
        engine = self._require_engine()
        with _noting("get photo tags failed"), engine.connect() as conn:
            rows = conn.execute(_TAGS_BY_ID_SQL, {"photo_id": photo_id}).all()
        return [TagItem(id=row.id, name=row.name, tag_type=row.tag_type) for row in rows]

    def increment_view_count(self, photo_uuid, visitor_hash):
        """Count a view unless this visitor viewed the photo in the last ten minutes."""
        engine = self._require_engine()
        now = _now()
        with engine.begin() as conn:
            photo_id = _published_photo_id(conn, photo_uuid)
            keys = {"photo_id": photo_id, "visitor_hash": visitor_hash}
            with _noting("check photo_views window failed"):
                in_window = bool(
                    conn.execute(_VIEW_WINDOW_SQL, {**keys, "cutoff": now - VIEW_WINDOW}).scalar()
                )
            if in_window:
                with _noting("query view_count failed"):
                    count = conn.execute(_VIEW_COUNT_SQL, {"photo_id": photo_id}).scalar_one()
                return ViewCountResult(view_count=count, counted=False)

            with _noting("insert photo_views failed"):
                conn.execute(_INSERT_VIEW_SQL, {**keys, "now": now})
            conn.execute(_BUMP_VIEW_SQL, {"photo_id": photo_id, "now": now})
            count = conn.execute(_VIEW_COUNT_SQL, {"photo_id": photo_id}).scalar_one()
        return ViewCountResult(view_count=count, counted=True)

    def increment_download_count(self, photo_uuid, visitor_hash):
        """Count a download unless this visitor downloaded the photo in the last thirty minutes."""
        engine = self._require_engine()
        now = _now()
        with engine.begin() as conn:
            base = conn.execute(_DOWNLOAD_BASE_SQL, {"uuid": photo_uuid}).first()
            if base is None:
                raise RecordNotFoundError()
            photo_id = base.id
            original_url = base.original_url or ""
            keys = {"photo_id": photo_id, "visitor_hash": visitor_hash}
            with _noting("check photo_downloads window failed"):
                in_window = bool(
                    conn.execute(
                        _DOWNLOAD_WINDOW_SQL, {**keys, "cutoff": now - DOWNLOAD_WINDOW}
                    ).scalar()
                )
            if in_window:
                return DownloadCountResult(
                    download_count=base.download_count, original_url=original_url, counted=False
                )

            with _noting("insert photo_downloads failed"):
                conn.execute(_INSERT_DOWNLOAD_SQL, {**keys, "now": now})
            conn.execute(_BUMP_DOWNLOAD_SQL, {"photo_id": photo_id, "now": now})
            count = conn.execute(_DOWNLOAD_COUNT_SQL, {"photo_id": photo_id}).scalar_one()
        return DownloadCountResult(download_count=count, original_url=original_url, counted=True)

    def add_like(self, photo_uuid, visitor_hash):
        """Record a like by this visitor; a repeated like changes nothing."""
        engine = self._require_engine()
        now = _now()
        with engine.begin() as conn:
            photo_id = _published_photo_id(conn, photo_uuid)
            with _noting("insert photo_likes failed"):
                result = conn.execute(
                    _INSERT_LIKE_SQL,
                    {"photo_id": photo_id, "visitor_hash": visitor_hash, "now": now},
                )
            liked = result.rowcount > 0
            if liked:
                with _noting("increment like_count failed"):
                    conn.execute(_BUMP_LIKE_SQL, {"photo_id": photo_id, "now": now})
            with _noting("query like_count failed"):
                count = conn.execute(_LIKE_COUNT_SQL, {"photo_id": photo_id}).scalar_one()
        return LikeResult(changed=liked, like_count=count)

    def remove_like(self, photo_uuid, visitor_hash):
        """Remove this visitor's like; the like count never drops below zero."""
        engine = self._require_engine()
        now = _now()
        with engine.begin() as conn:
            photo_id = _published_photo_id(conn, photo_uuid)
            with _noting("delete photo_likes failed"):
                result = conn.execute(
                    _DELETE_LIKE_SQL, {"photo_id": photo_id, "visitor_hash": visitor_hash}
                )
            unliked = result.rowcount > 0
            if unliked:
                with _noting("decrement like_count failed"):
                    conn.execute(_DROP_LIKE_SQL, {"photo_id": photo_id, "now": now})
            with _noting("query like_count failed"):
                count = conn.execute(_LIKE_COUNT_SQL, {"photo_id": photo_id}).scalar_one()
        return LikeResult(changed=unliked, like_count=count)