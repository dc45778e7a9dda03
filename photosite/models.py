"""Database row models."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class Photo:
    """A row of the ``photos`` table; field names match the column names."""

    id: int = 0
    uuid: UUID | None = None
    filename: str = ""
    title_cn: str | None = None
    title_en: str | None = None
    description: str | None = None
    category: str | None = None
    shot_time: datetime | None = None
    width: int = 0
    height: int = 0
    orientation: str = ""
    resolution: str | None = None
    camera_model: str | None = None
    lens_model: str | None = None
    aperture: str | None = None
    shutter_speed: str | None = None
    iso: int | None = None
    focal_length: float | None = None
    focal_length_35mm: float | None = None
    metering_mode: str | None = None
    exposure_compensation: str | None = None
    exposure_program: str | None = None
    white_balance: str | None = None
    flash: str | None = None
    thumb_url: str | None = None
    display_url: str | None = None
    original_url: str | None = None
    like_count: int = 0
    download_count: int = 0
    view_count: int = 0
    is_published: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class PhotoLike:
    """A row of the ``photo_likes`` table."""

    id: int = 0
    photo_id: int = 0
    visitor_hash: str = ""
    created_at: datetime | None = None


@dataclass
class PhotoTag:
    """A row of the ``photo_tags`` join table."""

    photo_id: int = 0
    tag_id: int = 0


@dataclass
class Tag:
    """A row of the ``tags`` table."""

    id: int = 0
    name: str = ""
    tag_type: str = ""
    created_at: datetime | None = None