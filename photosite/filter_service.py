"""Filter options for the photo list."""

from contextlib import contextmanager

from photosite.constants import TagType
from photosite.responses import FilterData


@contextmanager
def _step(message):
    try:
        yield
    except Exception as exc:
        exc.add_note(message)
        raise


class FilterService:
    """Collects the years, categories, orientations and tags available for filtering."""

    def __init__(self, filter_repo):
        self._filter_repo = filter_repo

    def get_filters(self):
        """All filter options in one payload."""
        repo = self._filter_repo
        with _step("list years failed"):
            years = repo.list_available_years()
        with _step("list categories failed"):
            categories = repo.list_available_categories()
        with _step("list orientations failed"):
            orientations = repo.list_orientation_counts()
        with _step("list tags failed"):
            tags = repo.list_all_tags_grouped()

        return FilterData(
            years=years,
            categories=categories,
            orientations=orientations,
            tag_types=[t.value for t in TagType],
            tags=tags,
        )