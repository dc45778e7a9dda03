"""HTTP handlers of the photo endpoints."""

from uuid import UUID

from flask import request

from photosite import apperr
from photosite.constants import (
    MSG_INTERNAL_SERVER_ERROR,
    MSG_INVALID_QUERY_PARAMS,
    MSG_INVALID_UUID,
    MSG_PHOTO_NOT_FOUND,
    MSG_VISITOR_HASH_MISSING,
    ErrorCode,
)
from photosite.photo_query import PhotoListRequest
from photosite.photo_service import PhotoNotFoundError
from photosite.responses import error_from, success
from photosite.visitor_middleware import current_visitor_hash


def _is_uuid(value):
    try:
        UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def _invalid_uuid():
    return error_from(apperr.new(400, ErrorCode.INVALID_UUID, MSG_INVALID_UUID))


def _not_found():
    return error_from(apperr.new(404, ErrorCode.PHOTO_NOT_FOUND, MSG_PHOTO_NOT_FOUND))


class PhotoHandler:
    """Serves photo lists, photo details and visitor actions."""

    def __init__(self, photo_service, behavior_service):
        self._photo_service = photo_service
        self._behavior_service = behavior_service

    def list_photos(self):
        """GET /photos."""
        try:
            req = PhotoListRequest.from_query(request.args)
        except ValueError:
            return error_from(
                apperr.new(400, ErrorCode.INVALID_QUERY_PARAMS, MSG_INVALID_QUERY_PARAMS)
            )
        try:
            data = self._photo_service.list_photos(req)
        except Exception as exc:
            return error_from(
                apperr.wrap(500, ErrorCode.PHOTOS_LIST, MSG_INTERNAL_SERVER_ERROR, exc)
            )
        return success(data)

    def get_photo_detail(self, photo_uuid):
        """GET /photos/<uuid>."""
        if not _is_uuid(photo_uuid):
            return _invalid_uuid()
        try:
            data = self._photo_service.get_photo_detail(photo_uuid)
        except PhotoNotFoundError:
            return _not_found()
        except Exception as exc:
            return error_from(
                apperr.wrap(500, ErrorCode.PHOTO_DETAIL, MSG_INTERNAL_SERVER_ERROR, exc)
            )
        return success(data)

    def _act(self, photo_uuid, action, failure_code):
        if not _is_uuid(photo_uuid):
            return _invalid_uuid()
        visitor = current_visitor_hash()
        if not visitor:
            return error_from(
                apperr.new(400, ErrorCode.VISITOR_HASH_MISSING, MSG_VISITOR_HASH_MISSING)
            )
        try:
            data = action(photo_uuid, visitor)
        except PhotoNotFoundError:
            return _not_found()
        except Exception as exc:
            return error_from(apperr.wrap(500, failure_code, MSG_INTERNAL_SERVER_ERROR, exc))
        return success(data)

    def view_photo(self, photo_uuid):
        """POST /photos/<uuid>/view."""
        return self._act(photo_uuid, self._behavior_service.view_photo, ErrorCode.PHOTO_DETAIL)

    def like_photo(self, photo_uuid):
        """POST /photos/<uuid>/like."""
        return self._act(photo_uuid, self._behavior_service.like_photo, ErrorCode.PHOTO_LIKE)

    def unlike_photo(self, photo_uuid):
        """POST /photos/<uuid>/unlike."""
        return self._act(photo_uuid, self._behavior_service.unlike_photo, ErrorCode.PHOTO_LIKE)

    def download_photo(self, photo_uuid):
        """POST /photos/<uuid>/download."""
        return self._act(
            photo_uuid, self._behavior_service.download_photo, ErrorCode.PHOTO_DOWNLOAD
        )