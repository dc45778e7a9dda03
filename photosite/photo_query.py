"""Query parameters of the photo list endpoint and the photo action payload."""

from __future__ import annotations

import re
from dataclasses import dataclass

from photosite import pager
from photosite.constants import Orientation
from photosite.search import parse_keywords
from photosite.sorting import normalize_sort_field, normalize_sort_order

_TAG_SPLITTER = re.compile(r"[,\t\n\f\r ，、]+")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_ORIENTATIONS = frozenset(o.value for o in Orientation)
_TAG_MODES = frozenset({"any", "all"})

_QUERY_KEYS = {
    "q": "q",
    "page": "page",
    "pageSize": "page_size",
    "sort": "sort",
    "order": "order",
    "tags": "tags",
    "orientation": "orientation",
    "year": "year",
    "month": "month",
    "category": "category",
    "tagMode": "tag_mode",
}
_INT_ATTRS = frozenset({"page", "page_size", "year", "month"})


def _parse_int(key, raw):
    if raw == "":
        return 0
    if not _INTEGER.fullmatch(raw):
        raise ValueError(f"invalid integer for {key}: {raw!r}")
    value = int(raw)
    if not -(2**63) <= value < 2**63:
        raise ValueError(f"integer out of range for {key}: {raw!r}")
    return value


@dataclass
class PhotoListRequest:
    """Filters, sorting and paging for a photo list."""

    q: str = ""
    page: int = 0
    page_size: int = 0
    sort: str = ""
    order: str = ""
    tags: str = ""
    orientation: str = ""
    year: int = 0
    month: int = 0
    category: str = ""
    tag_mode: str = ""

    @classmethod
    def from_query(cls, args):
        """Bind a request from a query-string mapping; raise ValueError on bad integers."""
        values = {}
        for key, attr in _QUERY_KEYS.items():
            if key not in args:
                continue
            raw = args.get(key)
            if isinstance(raw, (list, tuple)):
                raw = raw[0] if raw else ""
            raw = "" if raw is None else str(raw)
            values[attr] = _parse_int(key, raw) if attr in _INT_ATTRS else raw
        return cls(**values)

    def normalize(self):
        """Trim text, clamp paging and reset out-of-range values in place."""
        self.q = self.q.strip()
        self.tags = self.tags.strip()
        self.orientation = self.orientation.strip().lower()
        self.category = self.category.strip()
        self.tag_mode = self.tag_mode.strip().lower()

        if self.page < 1:
            self.page = pager.DEFAULT_PAGE
        if self.page_size <= 0:
            self.page_size = pager.DEFAULT_PAGE_SIZE
        elif self.page_size > pager.MAX_PAGE_SIZE:
            self.page_size = pager.MAX_PAGE_SIZE

        self.sort = normalize_sort_field(self.sort)
        self.order = normalize_sort_order(self.order)

        if self.tag_mode not in _TAG_MODES:
            self.tag_mode = "any"
        if self.orientation not in _ORIENTATIONS:
            self.orientation = ""
        if not 1 <= self.month <= 12:
            self.month = 0
        if not 1900 <= self.year <= 2100:
            self.year = 0

    def keyword_list(self):
        """Search keywords parsed from ``q``."""
        return parse_keywords(self.q)

    def tag_list(self):
        """Distinct tag names from ``tags``, compared case-insensitively, in order."""
        if not self.tags.strip():
            return []
        seen = set()
        result = []
        for part in _TAG_SPLITTER.split(self.tags):
            name = part.strip()
            if not name:
                continue
            lower = name.lower()
            if lower in seen:
                continue
            seen.add(lower)
            result.append(name)
        return result


SOURCE_MAX_LENGTH = 60


@dataclass
class PhotoActionRequest:
    """Optional payload of a photo action; reserved for future use."""

    source: str = ""

    def __post_init__(self):
        if len(self.source) > SOURCE_MAX_LENGTH:
            raise ValueError(f"source longer than {SOURCE_MAX_LENGTH} characters")