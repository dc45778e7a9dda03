"""Tag listing."""

from photosite.constants import TagType
from photosite.queries import RepositoryNotReadyError, SchemaNotReadyError
from photosite.responses import TagItem, TagListData


def _placeholder_tags():
    return TagListData(items=[TagItem(id=0, name=t.value, tag_type=t.value) for t in TagType])


class TagService:
    """Lists tags, falling back to the tag types while the database is not ready."""

    def __init__(self, tag_repo):
        self._tag_repo = tag_repo

    def list_tags(self):
        """All tags as response items."""
        try:
            tags = self._tag_repo.list_tags()
        except (SchemaNotReadyError, RepositoryNotReadyError):
            return _placeholder_tags()
        except Exception as exc:
            exc.add_note("list tags failed")
            raise
        return TagListData(
            items=[TagItem(id=tag.id, name=tag.name, tag_type=tag.tag_type) for tag in tags]
        )