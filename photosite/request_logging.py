"""JSON logging and per-request access log lines."""

import json
import logging
import sys
import time
from datetime import datetime

from flask import g, request

from photosite.visitor_middleware import _client_ip

_LEVELS = {"debug": logging.DEBUG, "warn": logging.WARNING, "error": logging.ERROR}
_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}
_START_KEY = "_request_started"


def _iso8601(created):
    moment = datetime.fromtimestamp(created).astimezone()
    stamp = moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}"
    offset = moment.strftime("%z")
    return stamp + ("Z" if offset == "+0000" else offset)


class _JsonFormatter(logging.Formatter):
    def format(self, record):
        entry = {
            "level": _LEVEL_NAMES.get(record.levelno, record.levelname.lower()),
            "time": _iso8601(record.created),
            "caller": f"{record.module}:{record.lineno}",
            "msg": record.getMessage(),
        }
        entry.update(getattr(record, "fields", None) or {})
        return json.dumps(entry, ensure_ascii=False, default=str)


def new_logger(level):
    """The service logger writing one JSON object per line to stderr."""
    logger = logging.getLogger("photosite")
    logger.setLevel(_LEVELS.get(level.lower(), logging.INFO))
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    logger.handlers = [handler]
    logger.propagate = False
    return logger


def install_request_logging(app, logger):
    """Log method, path, status, client address and latency of every request."""

    def start():
        setattr(g, _START_KEY, time.perf_counter())

    def finish(response):
        started = g.get(_START_KEY, time.perf_counter())
        logger.info(
            "http request",
            extra={
                "fields": {
                    "method": request.method,
                    "path": request.path,
                    "status": response.status_code,
                    "ip": _client_ip(),
                    "latency": time.perf_counter() - started,
                }
            },
        )
        return response

    app.before_request(start)
    app.after_request(finish)
    return app