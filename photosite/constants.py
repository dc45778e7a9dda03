"""Error codes, response messages and enumerations shared by the service."""

from enum import IntEnum, StrEnum


class ErrorCode(IntEnum):
    """Business codes carried in the ``code`` field of every response."""

    SUCCESS = 0

    INVALID_QUERY_PARAMS = 40000
    INVALID_UUID = 40002
    VISITOR_HASH_MISSING = 40003

    PHOTO_NOT_FOUND = 40401

    TOO_MANY_BEHAVIOR_REQUESTS = 42901
    SUSPICIOUS_BEHAVIOR = 42902

    INTERNAL_SERVER = 50000
    PHOTOS_LIST = 50001
    PHOTO_DETAIL = 50002
    PHOTO_LIKE = 50003
    PHOTO_DOWNLOAD = 50004
    TAG_LIST = 50005
    FILTER_LIST = 50006


MSG_SUCCESS = "success"
MSG_INVALID_QUERY_PARAMS = "invalid query params"
MSG_INVALID_UUID = "invalid uuid"
MSG_VISITOR_HASH_MISSING = "visitor hash missing"
MSG_PHOTO_NOT_FOUND = "photo not found"
MSG_TOO_MANY_BEHAVIOR_REQUESTS = "too many behavior requests"
MSG_SUSPICIOUS_BEHAVIOR = "suspicious behavior blocked"
MSG_INTERNAL_SERVER_ERROR = "internal server error"


class Orientation(StrEnum):
    """Photo orientations."""

    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    SQUARE = "square"


class SortField(StrEnum):
    """Fields a photo list may be sorted by."""

    SHOT_TIME = "shot_time"
    LIKE_COUNT = "like_count"
    VIEW_COUNT = "view_count"
    DOWNLOAD = "download_count"
    CREATED_AT = "created_at"


DEFAULT_SORT = SortField.SHOT_TIME
DEFAULT_SORT_ORDER = "desc"


class TagType(StrEnum):
    """Kinds of tag."""

    SUBJECT = "subject"
    ELEMENT = "element"
    MOOD = "mood"