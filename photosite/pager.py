"""Page number and page size arithmetic."""

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 30
MAX_PAGE_SIZE = 60


def normalize(page, page_size):
    """Clamp page and page size using the default limits."""
    return normalize_with(page, page_size, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)


def normalize_with(page, page_size, default_page_size, max_page_size):
    """Clamp page to at least 1 and page size into [1, max_page_size]."""
    if page < 1:
        page = DEFAULT_PAGE
    if page_size < 1:
        page_size = default_page_size
    elif page_size > max_page_size:
        page_size = max_page_size
    return page, page_size


def offset(page, page_size):
    """Row offset of the first item on ``page``."""
    if page < 1:
        page = DEFAULT_PAGE
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    return (page - 1) * page_size


def total_pages(total, page_size):
    """Number of pages needed to hold ``total`` items."""
    if total <= 0:
        return 0
    if page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    pages, rest = divmod(total, page_size)
    return pages + 1 if rest else pages