"""HTTP handlers of the health, tag and filter endpoints."""

from photosite import apperr
from photosite.constants import MSG_INTERNAL_SERVER_ERROR, ErrorCode
from photosite.responses import error_from, success


class HealthHandler:
    """Reports that the service is up."""

    def __init__(self, service_name):
        self._service_name = service_name

    def health(self):
        """GET /health."""
        return success({"status": "ok", "service": self._service_name})


class TagHandler:
    """Serves the tag list."""

    def __init__(self, tag_service):
        self._tag_service = tag_service

    def list_tags(self):
        """GET /tags."""
        try:
            data = self._tag_service.list_tags()
        except Exception as exc:
            return error_from(apperr.wrap(500, ErrorCode.TAG_LIST, MSG_INTERNAL_SERVER_ERROR, exc))
        return success(data)


class FilterHandler:
    """Serves the filter options of the photo list."""

    def __init__(self, filter_service):
        self._filter_service = filter_service

    def get_filters(self):
        """GET /filters."""
        try:
            data = self._filter_service.get_filters()
        except Exception as exc:
            return error_from(
                apperr.wrap(500, ErrorCode.FILTER_LIST, MSG_INTERNAL_SERVER_ERROR, exc)
            )
        return success(data)