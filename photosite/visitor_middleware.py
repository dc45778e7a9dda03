"""Per-request anonymous visitor hash."""

import ipaddress

from flask import g, has_app_context, request

from photosite.visitor import visitor_hash

VISITOR_HASH_KEY = "visitor_hash"
_REMOTE_IP_HEADERS = ("X-Forwarded-For", "X-Real-IP")


def _valid_ip(value):
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def _ip_from_header(value):
    """Left-most address of a forwarding header whose entries are all valid."""
    items = value.split(",")
    for position in range(len(items) - 1, -1, -1):
        candidate = items[position].strip()
        if not _valid_ip(candidate):
            return ""
        if position == 0:
            return candidate
    return ""


def _client_ip():
    for header in _REMOTE_IP_HEADERS:
        value = request.headers.get(header, "")
        if value:
            ip = _ip_from_header(value)
            if ip:
                return ip
    return request.remote_addr or ""


def _assign_visitor_hash():
    setattr(
        g,
        VISITOR_HASH_KEY,
        visitor_hash(
            _client_ip(),
            request.headers.get("User-Agent", ""),
            request.headers.get("Accept-Language", ""),
        ),
    )


def install_visitor(app):
    """Compute the visitor hash of every request before it is handled."""
    app.before_request(_assign_visitor_hash)
    return app


def current_visitor_hash():
    """Visitor hash of the current request, or an empty string."""
    if not has_app_context():
        return ""
    value = g.get(VISITOR_HASH_KEY, "")
    return value if isinstance(value, str) else ""