"""Validation of sort field and sort order parameters."""

from photosite.constants import DEFAULT_SORT, DEFAULT_SORT_ORDER, SortField

_ALLOWED_FIELDS = frozenset(field.value for field in SortField)
_ALLOWED_ORDERS = frozenset({"asc", "desc"})


def normalize(sort_field, order):
    """Normalise both the sort field and the sort order."""
    return normalize_sort_field(sort_field), normalize_sort_order(order)


def normalize_sort_field(sort_field):
    """Lower-case and trim ``sort_field``; fall back to the default if unknown."""
    field = sort_field.strip().lower()
    return field if field in _ALLOWED_FIELDS else DEFAULT_SORT.value


def normalize_sort_order(order):
    """Return ``asc`` or ``desc``; anything else becomes the default order."""
    value = order.strip().lower()
    return value if value in _ALLOWED_ORDERS else DEFAULT_SORT_ORDER


def is_allowed_field(sort_field):
    """Whether ``sort_field`` names a sortable column."""
    return sort_field.strip().lower() in _ALLOWED_FIELDS