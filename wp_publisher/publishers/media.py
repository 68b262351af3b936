"""
Featured image handling.

The media library is searched first so re-running the publisher never
uploads the same image twice; only when no asset matches the post slug is
the source image downloaded and uploaded under a deterministic filename.
"""

from __future__ import annotations

import mimetypes
from typing import Any, Callable, Optional

from wp_publisher.models.result import StepResult
from wp_publisher.utils.errors import SubResourceError, log_message

# Extensions for the content types WordPress accepts as images.
_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/pjpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "image/avif": "avif",
}


def extension_for(content_type: str) -> str:
    """Return the file extension implied by ``content_type`` (default ``jpg``)."""
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime in _EXTENSIONS:
        return _EXTENSIONS[mime]
    guessed = mimetypes.guess_extension(mime) if mime else None
    return guessed.lstrip(".") if guessed else "jpg"


def featured_filename(slug: str, content_type: str) -> str:
    return f"{slug}-featured.{extension_for(content_type)}"


class MediaAttacher:
    def __init__(self, client: Any, log: Callable[..., None] = log_message) -> None:
        self.client = client
        self.log = log

    def find_existing(self, slug: str) -> Optional[int]:
        """Return the id of a library asset whose slug contains ``slug``."""
        existing = self.client.request("/media", params={"search": slug, "per_page": 5})
        for media in existing or []:
            media_slug = media.get("slug") or ""
            if slug in media_slug:
                return media["id"]
        return None

    def _upload_from(self, slug: str, source_url: str) -> int:
        self.log(f"    Downloading image for {slug}...")
        image = self.client.download_image(source_url)
        filename = featured_filename(slug, image.content_type)
        self.log(f"    Uploading to WordPress ({len(image.content) // 1024}KB)...")
        media = self.client.upload_media(image.content, filename, image.content_type.split(";")[0].strip())
        return media["id"]

    def ensure_featured_media(self, slug: str, source_url: Optional[str]) -> StepResult[int]:
        """
        Make sure the featured image for ``slug`` is in the media library.

        :return: A successful result holding the media id (or ``None`` when
            no ``source_url`` was given), or a failed result when the image
            could not be found, downloaded or uploaded.
        """
        if not source_url:
            return StepResult.success(None)

        try:
            media_id = self.find_existing(slug)
        except Exception as e:
            self.log(f"    Media search failed for {slug}, uploading instead: {e}", level="WARNING")
            media_id = None
        if media_id is not None:
            return StepResult.success(media_id)

        try:
            return StepResult.success(self._upload_from(slug, source_url))
        except Exception as e:
            return StepResult.failure(SubResourceError("media", source_url, e))
