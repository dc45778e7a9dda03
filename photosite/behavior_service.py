"""Visitor actions on photos: views, likes and downloads."""

from photosite.photo_service import PhotoNotFoundError
from photosite.queries import RecordNotFoundError, RepositoryNotReadyError, SchemaNotReadyError
from photosite.photo_repository import DownloadCountResult, LikeResult, ViewCountResult
from photosite.responses import (
    PhotoDownloadData,
    PhotoLikeData,
    PhotoUnlikeData,
    PhotoViewData,
)

_NOT_READY = (SchemaNotReadyError, RepositoryNotReadyError)


def _require_hash(visitor_hash):
    if not visitor_hash:
        raise ValueError("visitor hash is required")


def _run(action, fallback, failure):
    """Call ``action``; a repository that is not ready yields ``fallback``."""
    try:
        return action()
    except _NOT_READY:
        return fallback
    except RecordNotFoundError as exc:
        raise PhotoNotFoundError() from exc
    except Exception as exc:
        exc.add_note(failure)
        raise


class BehaviorService:
    """Records views, likes and downloads and signs download URLs."""

    def __init__(self, photo_repo, signer):
        self._photo_repo = photo_repo
        self._signer = signer

    def view_photo(self, photo_uuid, visitor_hash):
        """Count a view by this visitor."""
        _require_hash(visitor_hash)
        result = _run(
            lambda: self._photo_repo.increment_view_count(photo_uuid, visitor_hash),
            ViewCountResult(view_count=0, counted=False),
            "view photo failed",
        )
        return PhotoViewData(uuid=photo_uuid, view_count=result.view_count, counted=result.counted)

    def like_photo(self, photo_uuid, visitor_hash):
        """Record a like by this visitor."""
        _require_hash(visitor_hash)
        result = _run(
            lambda: self._photo_repo.add_like(photo_uuid, visitor_hash),
            LikeResult(changed=False, like_count=0),
            "like photo failed",
        )
        return PhotoLikeData(uuid=photo_uuid, liked=result.changed, like_count=result.like_count)

    def unlike_photo(self, photo_uuid, visitor_hash):
        """Remove this visitor's like."""
        _require_hash(visitor_hash)
        result = _run(
            lambda: self._photo_repo.remove_like(photo_uuid, visitor_hash),
            LikeResult(changed=False, like_count=0),
            "unlike photo failed",
        )
        return PhotoUnlikeData(
            uuid=photo_uuid, unliked=result.changed, like_count=result.like_count
        )

    def download_photo(self, photo_uuid, visitor_hash):
        """Count a download and return a signed URL of the original file."""
        _require_hash(visitor_hash)
        if self._signer is None:
            raise RuntimeError("download signer is not configured")

        result = _run(
            lambda: self._photo_repo.increment_download_count(photo_uuid, visitor_hash),
            DownloadCountResult(download_count=0, original_url="", counted=False),
            "download photo failed",
        )
        try:
            signed_url = self._signer.sign_download_url(result.original_url)
        except Exception as exc:
            exc.add_note("sign download url failed")
            raise
        return PhotoDownloadData(
            uuid=photo_uuid,
            download_count=result.download_count,
            download_url=signed_url,
            counted=result.counted,
        )