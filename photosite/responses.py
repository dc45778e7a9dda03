"""Response payloads and the common response envelope."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from http import HTTPStatus

from photosite.apperr import as_app_error
from photosite.constants import MSG_INTERNAL_SERVER_ERROR, MSG_SUCCESS, ErrorCode


def _val(key, default, omitempty=False):
    return field(default=default, metadata={"json": key, "omitempty": omitempty})


def _many(key, factory=list, omitempty=False):
    return field(default_factory=factory, metadata={"json": key, "omitempty": omitempty})


def to_json(value):
    """Convert payload objects into JSON-ready data, honouring key names and omitted empties."""
    if is_dataclass(value) and not isinstance(value, type):
        out = {}
        for f in fields(value):
            item = getattr(value, f.name)
            if f.metadata.get("omitempty") and not item:
                continue
            out[f.metadata.get("json", f.name)] = to_json(item)
        return out
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def success(data):
    """Success envelope and HTTP status for ``data``."""
    body = {"code": int(ErrorCode.SUCCESS), "message": MSG_SUCCESS, "data": to_json(data)}
    return body, int(HTTPStatus.OK)


def error(http_status, code, message):
    """Error envelope and HTTP status."""
    return {"code": int(code), "message": message, "data": None}, int(http_status)


def error_from(err):
    """Error envelope for ``err``; unknown errors become an internal server error."""
    app_err = as_app_error(err)
    if app_err is not None:
        return error(app_err.http_status, app_err.code, app_err.message)
    return error(HTTPStatus.INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_SERVER, MSG_INTERNAL_SERVER_ERROR)


@dataclass
class TagItem:
    id: int = _val("id", 0)
    name: str = _val("name", "")
    tag_type: str = _val("tagType", "")


@dataclass
class TagListData:
    items: list[TagItem] = _many("items")


@dataclass
class OrientationOption:
    name: str = _val("name", "")
    count: int = _val("count", 0)


@dataclass
class FilterData:
    years: list[int] = _many("years")
    categories: list[str] = _many("categories")
    orientations: list[OrientationOption] = _many("orientations")
    tag_types: list[str] = _many("tagTypes")
    tags: dict[str, list[TagItem]] = _many("tags", dict)


@dataclass
class PhotoViewData:
    uuid: str = _val("uuid", "")
    view_count: int = _val("viewCount", 0)
    counted: bool = _val("counted", False)


@dataclass
class PhotoLikeData:
    uuid: str = _val("uuid", "")
    liked: bool = _val("liked", False)
    like_count: int = _val("likeCount", 0)


@dataclass
class PhotoUnlikeData:
    uuid: str = _val("uuid", "")
    unliked: bool = _val("unliked", False)
    like_count: int = _val("likeCount", 0)


@dataclass
class PhotoDownloadData:
    uuid: str = _val("uuid", "")
    download_count: int = _val("downloadCount", 0)
    download_url: str = _val("downloadUrl", "")
    counted: bool = _val("counted", False)


@dataclass
class PhotoDetailData:
    id: int = _val("id", 0)
    uuid: str = _val("uuid", "")
    filename: str = _val("filename", "", True)
    title_cn: str = _val("titleCn", "", True)
    title_en: str = _val("titleEn", "", True)
    description: str = _val("description", "", True)
    category: str = _val("category", "", True)
    shot_time: str = _val("shotTime", "", True)
    width: int = _val("width", 0)
    height: int = _val("height", 0)
    orientation: str = _val("orientation", "", True)
    resolution: str = _val("resolution", "", True)
    camera_model: str = _val("cameraModel", "", True)
    lens_model: str = _val("lensModel", "", True)
    aperture: str = _val("aperture", "", True)
    shutter_speed: str = _val("shutterSpeed", "", True)
    iso: int = _val("iso", 0, True)
    focal_length: float = _val("focalLength", 0.0, True)
    focal_length_35mm: float = _val("focalLength35mm", 0.0, True)
    metering_mode: str = _val("meteringMode", "", True)
    exposure_comp: str = _val("exposureCompensation", "", True)
    exposure_program: str = _val("exposureProgram", "", True)
    white_balance: str = _val("whiteBalance", "", True)
    flash: str = _val("flash", "", True)
    thumb_url: str = _val("thumbUrl", "", True)
    display_url: str = _val("displayUrl", "", True)
    original_url: str = _val("originalUrl", "", True)
    like_count: int = _val("likeCount", 0)
    download_count: int = _val("downloadCount", 0)
    view_count: int = _val("viewCount", 0)
    created_at: str = _val("createdAt", "", True)
    updated_at: str = _val("updatedAt", "", True)
    tags: list[TagItem] = _many("tags")


@dataclass
class PhotoTagItem:
    id: int = _val("id", 0)
    name: str = _val("name", "")
    tag_type: str = _val("tagType", "")


@dataclass
class PhotoListItem:
    id: int = _val("id", 0)
    uuid: str = _val("uuid", "")
    filename: str = _val("filename", "")
    title_cn: str = _val("titleCn", "", True)
    title_en: str = _val("titleEn", "", True)
    thumb_url: str = _val("thumbUrl", "", True)
    display_url: str = _val("displayUrl", "", True)
    width: int = _val("width", 0)
    height: int = _val("height", 0)
    orientation: str = _val("orientation", "", True)
    shot_time: str = _val("shotTime", "", True)
    aperture: str = _val("aperture", "", True)
    shutter_speed: str = _val("shutterSpeed", "", True)
    iso: int = _val("iso", 0, True)
    like_count: int = _val("likeCount", 0)
    view_count: int = _val("viewCount", 0)
    download_count: int = _val("downloadCount", 0)
    tags: list[PhotoTagItem] = _many("tags")


@dataclass
class Pagination:
    page: int = _val("page", 0)
    page_size: int = _val("pageSize", 0)
    total: int = _val("total", 0)
    total_pages: int = _val("totalPages", 0)


@dataclass
class PhotoListQuery:
    q: str = _val("q", "")
    keywords: list[str] = _many("keywords")
    sort: str = _val("sort", "")
    order: str = _val("order", "")
    tags: list[str] = _many("tags")
    tag_mode: str = _val("tagMode", "")
    orientation: str = _val("orientation", "", True)
    year: int = _val("year", 0, True)
    month: int = _val("month", 0, True)
    category: str = _val("category", "", True)


@dataclass
class PhotoListData:
    items: list[PhotoListItem] = _many("list")
    pagination: Pagination = _many("pagination", Pagination)
    query: PhotoListQuery = _many("query", PhotoListQuery)