"""Photo listing and photo detail."""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timezone
from uuid import UUID

from photosite import pager
from photosite.photo_query import PhotoListRequest
from photosite.queries import RecordNotFoundError
from photosite.responses import (
    Pagination,
    PhotoDetailData,
    PhotoListData,
    PhotoListItem,
    PhotoListQuery,
)

_NIL_UUID = str(UUID(int=0))
_ZERO_TIME = "0001-01-01T00:00:00Z"


class PhotoNotFoundError(LookupError):
    """No published photo has the requested uuid."""

    def __init__(self, message="photo not found"):
        super().__init__(message)


@contextmanager
def _step(message):
    try:
        yield
    except Exception as exc:
        exc.add_note(message)
        raise


def _text(value):
    return "" if value is None else value.strip()


def _number(value):
    return 0 if value is None else value


def _rfc3339(moment):
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        return text[:-6] + "Z"
    return text


def _format_time(moment):
    return "" if moment is None else _rfc3339(moment)


def _format_timestamp(moment):
    return _ZERO_TIME if moment is None else _rfc3339(moment)


def _uuid_text(value):
    return _NIL_UUID if value is None else str(value)


@dataclass
class PhotoService:
    """Builds photo list pages and photo detail payloads from the repository."""

    _photo_repo: object

    def __init__(self, photo_repo):
        self._photo_repo = photo_repo

    def list_photos(self, req):
        """One page of photos with their tags, paging data and the effective query."""
        if req is None:
            req = PhotoListRequest()
        req.normalize()

        repo = self._photo_repo
        with _step("list photos failed"):
            photos = repo.list_photos(req)
        with _step("count photos failed"):
            total = repo.count_photos(req)
        with _step("list photo tags failed"):
            tag_map = repo.list_photo_tags_by_photo_ids([photo.id for photo in photos])

        items = [
            PhotoListItem(
                id=photo.id,
                uuid=_uuid_text(photo.uuid),
                filename=photo.filename,
                title_cn=_text(photo.title_cn),
                title_en=_text(photo.title_en),
                thumb_url=_text(photo.thumb_url),
                display_url=_text(photo.display_url),
                width=photo.width,
                height=photo.height,
                orientation=photo.orientation,
                shot_time=_format_time(photo.shot_time),
                aperture=_text(photo.aperture),
                shutter_speed=_text(photo.shutter_speed),
                iso=_number(photo.iso),
                like_count=photo.like_count,
                view_count=photo.view_count,
                download_count=photo.download_count,
                tags=tag_map.get(photo.id, []),
            )
            for photo in photos
        ]

        pagination = Pagination(
            page=req.page,
            page_size=req.page_size,
            total=total,
            total_pages=pager.total_pages(total, req.page_size),
        )
        query = PhotoListQuery(
            q=req.q,
            keywords=req.keyword_list(),
            sort=req.sort,
            order=req.order,
            tags=req.tag_list(),
            tag_mode=req.tag_mode,
            orientation=req.orientation,
            year=req.year,
            month=req.month,
            category=req.category,
        )
        return PhotoListData(items, pagination, query)

    def get_photo_detail(self, photo_uuid):
        """Every detail of a published photo; raise PhotoNotFoundError if there is none."""
        try:
            UUID(photo_uuid)
        except (ValueError, TypeError, AttributeError) as exc:
            raise ValueError(f"invalid uuid: {exc}") from exc

        repo = self._photo_repo
        try:
            photo = repo.get_photo_detail_by_uuid(photo_uuid)
        except RecordNotFoundError as exc:
            raise PhotoNotFoundError() from exc
        except Exception as exc:
            exc.add_note("get photo detail failed")
            raise

        with _step("get photo detail tags failed"):
            tags = repo.get_photo_tags_by_photo_id(photo.id)

        # Values follow the field order of PhotoDetailData.
        return PhotoDetailData(
            photo.id,
            _uuid_text(photo.uuid),
            photo.filename,
            _text(photo.title_cn),
            _text(photo.title_en),
            _text(photo.description),
            _text(photo.category),
            _format_time(photo.shot_time),
            photo.width,
            photo.height,
            photo.orientation,
            _text(photo.resolution),
            _text(photo.camera_model),
            _text(photo.lens_model),
            _text(photo.aperture),
            _text(photo.shutter_speed),
            _number(photo.iso),
            _number(photo.focal_length),
            _number(photo.focal_length_35mm),
            _text(photo.metering_mode),
            _text(photo.exposure_compensation),
            _text(photo.exposure_program),
            _text(photo.white_balance),
            _text(photo.flash),
            _text(photo.thumb_url),
            _text(photo.display_url),
            _text(photo.original_url),
            photo.like_count,
            photo.download_count,
            photo.view_count,
            _format_timestamp(photo.created_at),
            _format_timestamp(photo.updated_at),
            tags,
        )