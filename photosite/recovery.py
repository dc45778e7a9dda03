"""Turning unexpected exceptions into a JSON 500 response."""

import traceback

from flask import request

from photosite.constants import MSG_INTERNAL_SERVER_ERROR, ErrorCode
from photosite.responses import error


def _is_http_exception(exc):
    return isinstance(getattr(exc, "code", None), int) and callable(
        getattr(exc, "get_response", None)
    )


def install_recovery(app, logger):
    """Log any unhandled exception and answer with an internal server error."""

    def recover(exc):
        if _is_http_exception(exc):
            return exc.get_response()
        logger.error(
            "panic recovered",
            extra={
                "fields": {
                    "panic": str(exc),
                    "path": request.path,
                    "stack": "".join(traceback.format_exception(exc)),
                }
            },
        )
        return error(500, ErrorCode.INTERNAL_SERVER, MSG_INTERNAL_SERVER_ERROR)

    app.register_error_handler(Exception, recover)
    return app