from datetime import datetime
from uuid import UUID

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from photosite import pager
from photosite.photo_query import PhotoListRequest
from photosite.photo_repository import PhotoRepository
from photosite.queries import RecordNotFoundError, RepositoryNotReadyError, SchemaNotReadyError

UUID_A = "550e8400-e29b-41d4-a716-446655440000"
UUID_B = "2d4f2e5b-4aa1-4ed1-a32a-111111111111"
UUID_C = "00000000-0000-4000-8000-000000000003"
UUID_HIDDEN = "00000000-0000-4000-8000-000000000004"
UUID_MISSING = "00000000-0000-4000-8000-000000000099"
ORIGINAL_A = "https://cdn.example.com/photos/a.jpg"

SCHEMA = [
    """CREATE TABLE photos (
        id INTEGER PRIMARY KEY, uuid TEXT, filename TEXT, title_cn TEXT, title_en TEXT,
        description TEXT, category TEXT, shot_time TIMESTAMP, width INTEGER, height INTEGER,
        resolution TEXT, orientation TEXT, camera_model TEXT, lens_model TEXT,
        focal_length REAL, focal_length_35mm REAL, aperture TEXT, shutter_speed TEXT,
        iso INTEGER, metering_mode TEXT, exposure_compensation TEXT, exposure_program TEXT,
        white_balance TEXT, flash TEXT, thumb_url TEXT, display_url TEXT, original_url TEXT,
        like_count INTEGER DEFAULT 0, download_count INTEGER DEFAULT 0,
        view_count INTEGER DEFAULT 0, is_published BOOLEAN, year INTEGER, month INTEGER,
        created_at TIMESTAMP, updated_at TIMESTAMP)""",
    "CREATE TABLE tags (id INTEGER PRIMARY KEY, name TEXT, tag_type TEXT, created_at TIMESTAMP)",
    "CREATE TABLE photo_tags (photo_id INTEGER, tag_id INTEGER)",
    """CREATE TABLE photo_likes (id INTEGER PRIMARY KEY, photo_id INTEGER, visitor_hash TEXT,
        created_at TIMESTAMP, UNIQUE (photo_id, visitor_hash))""",
    "CREATE TABLE photo_views (photo_id INTEGER, visitor_hash TEXT, viewed_at TIMESTAMP)",
    "CREATE TABLE photo_downloads (photo_id INTEGER, visitor_hash TEXT, downloaded_at TIMESTAMP)",
]

PHOTOS = [
    (1, UUID_A, "a.jpg", "landscape", 5, 2, 1, ORIGINAL_A, 1),
    (2, UUID_B, "b.jpg", "portrait", 9, 0, 0, None, 1),
    (3, UUID_C, "c.jpg", "landscape", 1, 4, 3, None, 1),
    (4, UUID_HIDDEN, "d.jpg", "square", 7, 0, 0, None, 0),
]


def _memory_engine():
    return create_engine(
        "sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )


@pytest.fixture
def engine():
    eng = _memory_engine()
    with eng.begin() as conn:
        for stmt in SCHEMA:
            conn.execute(text(stmt))
        for row in PHOTOS:
            conn.execute(
                text(
                    "INSERT INTO photos (id, uuid, filename, orientation, view_count, like_count,"
                    " download_count, original_url, is_published, width, height, created_at,"
                    " updated_at) VALUES (:id, :uuid, :filename, :orientation, :views, :likes,"
                    " :downloads, :url, :published, 10, 10, '2024-01-01 00:00:00',"
                    " '2024-01-01 00:00:00')"
                ),
                dict(
                    zip(
                        ("id", "uuid", "filename", "orientation", "views", "likes",
                         "downloads", "url", "published"),
                        row,
                    )
                ),
            )
        conn.execute(
            text(
                "INSERT INTO tags (id, name, tag_type) VALUES"
                " (1, 'Sunset', 'mood'), (2, 'Sea', 'element'), (3, 'City', 'subject')"
            )
        )
        conn.execute(
            text("INSERT INTO photo_tags (photo_id, tag_id) VALUES (1, 1), (1, 2), (2, 1), (3, 3)")
        )
    yield eng
    eng.dispose()


@pytest.fixture
def repo(engine):
    return PhotoRepository(engine)


@pytest.mark.parametrize(
    "call",
    [
        lambda r: r.list_photos(PhotoListRequest()),
        lambda r: r.count_photos(PhotoListRequest()),
        lambda r: r.get_photo_detail_by_uuid(UUID_A),
        lambda r: r.get_published_photo_base_by_uuid(UUID_A),
        lambda r: r.get_photo_tags_by_photo_id(1),
        lambda r: r.increment_view_count(UUID_A, "v"),
        lambda r: r.increment_download_count(UUID_A, "v"),
        lambda r: r.add_like(UUID_A, "v"),
        lambda r: r.remove_like(UUID_A, "v"),
        lambda r: r.list_photo_tags_by_photo_ids([1]),
    ],
)
def test_without_engine_raises_not_ready(call):
    with pytest.raises(RepositoryNotReadyError):
        call(PhotoRepository(None))


def test_tags_by_empty_ids_need_no_database():
    assert PhotoRepository(None).list_photo_tags_by_photo_ids([]) == {}


def test_list_photos_only_published(repo):
    photos = repo.list_photos(PhotoListRequest())
    assert {p.filename for p in photos} == {"a.jpg", "b.jpg", "c.jpg"}
    assert repo.count_photos(PhotoListRequest()) == len(photos)


def test_list_photos_normalizes_request(repo):
    req = PhotoListRequest(page_size=0, sort="bogus")
    repo.list_photos(req)
    assert req.page_size == pager.DEFAULT_PAGE_SIZE
    assert req.sort == "shot_time"


def test_list_photos_maps_uuid(repo):
    photos = repo.list_photos(PhotoListRequest(orientation="portrait"))
    assert [p.uuid for p in photos] == [UUID(UUID_B)]


def test_list_photos_sort_by_view_count_ascending(repo):
    photos = repo.list_photos(PhotoListRequest(sort="view_count", order="asc"))
    counts = [p.view_count for p in photos]
    assert counts == sorted(counts)


def test_list_photos_sort_descending(repo):
    photos = repo.list_photos(PhotoListRequest(sort="like_count", order="desc"))
    counts = [p.like_count for p in photos]
    assert counts == sorted(counts, reverse=True)


def test_list_photos_paging_consistent(repo):
    full = repo.list_photos(PhotoListRequest(sort="view_count", page_size=2))
    second = repo.list_photos(PhotoListRequest(sort="view_count", page=2, page_size=1))
    assert [p.id for p in second] == [full[1].id]


def test_orientation_filter(repo):
    photos = repo.list_photos(PhotoListRequest(orientation="landscape"))
    assert photos
    assert all(p.orientation == "landscape" for p in photos)
    assert repo.count_photos(PhotoListRequest(orientation="landscape")) == len(photos)


def test_tag_filter_any(repo):
    photos = repo.list_photos(PhotoListRequest(tags="SUNSET"))
    assert {p.filename for p in photos} == {"a.jpg", "b.jpg"}


def test_tag_filter_all(repo):
    photos = repo.list_photos(PhotoListRequest(tags="sunset,sea", tag_mode="all"))
    assert [p.filename for p in photos] == ["a.jpg"]


def test_list_photo_tags_by_photo_ids(repo):
    result = repo.list_photo_tags_by_photo_ids([1, 2, 99])
    assert set(result) == {1, 2, 99}
    assert result[99] == []
    ids = [t.id for t in result[1]]
    assert ids == sorted(ids)
    assert {t.name for t in result[1]} == {"Sunset", "Sea"}


def test_get_photo_tags_by_photo_id_ordered_by_type(repo):
    tags = repo.get_photo_tags_by_photo_id(1)
    types = [t.tag_type for t in tags]
    assert types == sorted(types)
    assert {t.name for t in tags} == {"Sunset", "Sea"}


def test_get_photo_detail(repo):
    photo = repo.get_photo_detail_by_uuid(UUID_A)
    assert photo.uuid == UUID(UUID_A)
    assert photo.filename == "a.jpg"
    assert photo.original_url == ORIGINAL_A
    assert photo.is_published is True
    assert isinstance(photo.created_at, datetime)
    assert repo.get_photo_by_uuid(UUID_A) == photo


@pytest.mark.parametrize("photo_uuid", [UUID_HIDDEN, UUID_MISSING])
def test_get_photo_detail_not_found(repo, photo_uuid):
    with pytest.raises(RecordNotFoundError):
        repo.get_photo_detail_by_uuid(photo_uuid)


def test_get_photo_detail_without_schema():
    eng = _memory_engine()
    with pytest.raises(SchemaNotReadyError):
        PhotoRepository(eng).get_photo_detail_by_uuid(UUID_A)


def test_get_published_photo_base(repo):
    detail = repo.get_photo_detail_by_uuid(UUID_C)
    base = repo.get_published_photo_base_by_uuid(UUID_C)
    assert (base.id, base.uuid, base.like_count) == (detail.id, detail.uuid, detail.like_count)
    with pytest.raises(RecordNotFoundError):
        repo.get_published_photo_base_by_uuid(UUID_HIDDEN)


def test_view_counted_once_per_window(repo):
    before = repo.get_photo_detail_by_uuid(UUID_A).view_count
    first = repo.increment_view_count(UUID_A, "visitor-1")
    assert first.counted is True
    assert first.view_count == before + 1
    again = repo.increment_view_count(UUID_A, "visitor-1")
    assert again.counted is False
    assert again.view_count == first.view_count
    other = repo.increment_view_count(UUID_A, "visitor-2")
    assert other.counted is True
    assert other.view_count == first.view_count + 1
    assert repo.get_photo_detail_by_uuid(UUID_A).view_count == other.view_count


def test_view_counted_again_after_window(repo, engine):
    first = repo.increment_view_count(UUID_B, "visitor-1")
    with engine.begin() as conn:
        conn.execute(text("UPDATE photo_views SET viewed_at = '2000-01-01 00:00:00.000000'"))
    later = repo.increment_view_count(UUID_B, "visitor-1")
    assert later.counted is True
    assert later.view_count == first.view_count + 1


def test_view_unknown_photo(repo):
    with pytest.raises(RecordNotFoundError):
        repo.increment_view_count(UUID_HIDDEN, "visitor-1")


def test_download_counted_once_per_window(repo):
    before = repo.get_photo_detail_by_uuid(UUID_A).download_count
    first = repo.increment_download_count(UUID_A, "visitor-1")
    assert first.counted is True
    assert first.download_count == before + 1
    assert first.original_url == ORIGINAL_A
    again = repo.increment_download_count(UUID_A, "visitor-1")
    assert again.counted is False
    assert again.download_count == first.download_count
    assert again.original_url == ORIGINAL_A


def test_download_without_original_url(repo):
    result = repo.increment_download_count(UUID_B, "visitor-1")
    assert result.original_url == ""
    with pytest.raises(RecordNotFoundError):
        repo.increment_download_count(UUID_MISSING, "visitor-1")


def test_like_and_unlike_round_trip(repo):
    before = repo.get_photo_detail_by_uuid(UUID_A).like_count
    liked = repo.add_like(UUID_A, "visitor-1")
    assert liked.changed is True
    assert liked.like_count == before + 1
    repeat = repo.add_like(UUID_A, "visitor-1")
    assert repeat.changed is False
    assert repeat.like_count == liked.like_count
    unliked = repo.remove_like(UUID_A, "visitor-1")
    assert unliked.changed is True
    assert unliked.like_count == before
    repeat_unlike = repo.remove_like(UUID_A, "visitor-1")
    assert repeat_unlike.changed is False
    assert repeat_unlike.like_count == before


def test_unlike_never_goes_below_zero(repo, engine):
    with engine.begin() as conn:
        conn.execute(text("INSERT INTO photo_likes (photo_id, visitor_hash) VALUES (2, 'visitor-1')"))
    result = repo.remove_like(UUID_B, "visitor-1")
    assert result.changed is True
    assert result.like_count == 0


def test_like_unknown_photo(repo):
    with pytest.raises(RecordNotFoundError):
        repo.add_like(UUID_HIDDEN, "visitor-1")
    with pytest.raises(RecordNotFoundError):
        repo.remove_like(UUID_MISSING, "visitor-1")