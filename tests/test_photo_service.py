from dataclasses import fields
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from photosite import pager
from photosite.models import Photo
from photosite.photo_query import PhotoListRequest
from photosite.photo_service import PhotoNotFoundError, PhotoService
from photosite.queries import RecordNotFoundError
from photosite.responses import PhotoTagItem, TagItem


class StubRepo:
    def __init__(self, photos=(), total=0, tag_map=None, detail=None, detail_error=None,
                 tags=(), list_error=None):
        self.photos = list(photos)
        self.total = total
        self.tag_map = tag_map
        self.detail = detail
        self.detail_error = detail_error
        self.tags = list(tags)
        self.list_error = list_error
        self.requested_ids = None
        self.detail_calls = []

    def list_photos(self, req):
        if self.list_error is not None:
            raise self.list_error
        return self.photos

    def count_photos(self, req):
        return self.total

    def list_photo_tags_by_photo_ids(self, photo_ids):
        self.requested_ids = list(photo_ids)
        if self.tag_map is not None:
            return self.tag_map
        return {photo_id: [] for photo_id in photo_ids}

    def get_photo_detail_by_uuid(self, photo_uuid):
        self.detail_calls.append(photo_uuid)
        if self.detail_error is not None:
            raise self.detail_error
        return self.detail

    def get_photo_tags_by_photo_id(self, photo_id):
        return self.tags


def _items(data):
    return getattr(data, fields(data)[0].name)


def test_list_photos_normalises_paging():
    repo = StubRepo(total=61)
    req = PhotoListRequest(page=0, page_size=100, q=" sky , kite ")
    data = PhotoService(repo).list_photos(req)
    assert data.pagination.page == pager.DEFAULT_PAGE
    assert data.pagination.page_size == pager.MAX_PAGE_SIZE
    assert data.pagination.total == 61
    assert data.pagination.total_pages == pager.total_pages(61, pager.MAX_PAGE_SIZE)
    assert data.query.keywords == ["sky", "kite"]
    assert data.query.tag_mode == "any"


def test_list_photos_accepts_missing_request():
    data = PhotoService(StubRepo()).list_photos(None)
    assert data.pagination.page == pager.DEFAULT_PAGE
    assert data.pagination.page_size == pager.DEFAULT_PAGE_SIZE
    assert _items(data) == []


def test_list_photos_maps_items_and_tags():
    first, second = uuid4(), uuid4()
    shot = datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)
    photos = [
        Photo(id=7, uuid=first, filename="a.jpg", title_cn=" Sky ", shot_time=shot, like_count=4),
        Photo(id=3, uuid=second, filename="b.jpg"),
    ]
    tag = PhotoTagItem(id=9, name="sea", tag_type="subject")
    repo = StubRepo(photos=photos, total=2, tag_map={7: [tag], 3: []})

    items = _items(PhotoService(repo).list_photos(PhotoListRequest()))

    assert repo.requested_ids == [7, 3]
    assert [item.uuid for item in items] == [str(first), str(second)]
    assert items[0].title_cn == " Sky ".strip()
    assert items[0].tags == [tag]
    assert items[0].like_count == 4
    assert datetime.fromisoformat(items[0].shot_time.replace("Z", "+00:00")) == shot
    assert items[1].shot_time == ""
    assert items[1].title_en == ""
    assert items[1].iso == 0


def test_list_photos_failure_is_annotated():
    repo = StubRepo(list_error=RuntimeError("boom"))
    with pytest.raises(RuntimeError) as excinfo:
        PhotoService(repo).list_photos(PhotoListRequest())
    assert "list photos failed" in excinfo.value.__notes__


def test_detail_rejects_invalid_uuid_without_query():
    repo = StubRepo()
    with pytest.raises(ValueError, match="invalid uuid"):
        PhotoService(repo).get_photo_detail("not-a-uuid")
    assert repo.detail_calls == []


def test_detail_not_found():
    repo = StubRepo(detail_error=RecordNotFoundError())
    with pytest.raises(PhotoNotFoundError):
        PhotoService(repo).get_photo_detail(str(uuid4()))


def test_detail_other_errors_propagate():
    repo = StubRepo(detail_error=ConnectionError("down"))
    with pytest.raises(ConnectionError) as excinfo:
        PhotoService(repo).get_photo_detail(str(uuid4()))
    assert "get photo detail failed" in excinfo.value.__notes__


def test_detail_maps_fields():
    photo_uuid = uuid4()
    created = datetime(2025, 6, 2, 10, 0, tzinfo=timezone.utc)
    photo = Photo(
        id=10,
        uuid=photo_uuid,
        filename="detail.jpg",
        title_cn="  Harbour  ",
        exposure_compensation="0EV",
        focal_length=35.0,
        iso=200,
        created_at=created,
        updated_at=created,
    )
    tags = [TagItem(id=1, name="sea", tag_type="subject")]
    repo = StubRepo(detail=photo, tags=tags)

    data = PhotoService(repo).get_photo_detail(str(photo_uuid))

    assert repo.detail_calls == [str(photo_uuid)]
    assert data.id == 10
    assert data.uuid == str(photo_uuid)
    assert data.title_cn == "Harbour"
    assert data.description == ""
    assert data.iso == 200
    assert data.focal_length == 35.0
    assert data.tags == tags
    assert datetime.fromisoformat(data.created_at.replace("Z", "+00:00")) == created
    assert data.shot_time == ""