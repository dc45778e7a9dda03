"""Permissive cross-origin headers."""

from flask import request

_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type,Authorization,X-Requested-With,Accept,Origin",
    "Access-Control-Expose-Headers": "Content-Length,Content-Type",
}


def _answer_preflight():
    if request.method == "OPTIONS":
        return "", 204
    return None


def _add_headers(response):
    for name, value in _HEADERS.items():
        response.headers[name] = value
    return response


def install_cors(app):
    """Add CORS headers to every response and answer preflight requests with 204."""
    app.before_request(_answer_preflight)
    app.after_request(_add_headers)
    return app