from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def to_iso_date(value: Optional[str]) -> Optional[str]:
    """Convert an index date to the ISO-8601 UTC form sent to WordPress.

    Naive dates and datetimes are read as UTC.  ``None`` or a blank value
    yields ``None`` so the remote system keeps its own date.

    :raises ValueError: if ``value`` is not an ISO date or datetime.
    """
    if value is None or not str(value).strip():
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="seconds")


class PostIndexEntry(BaseModel):
    """One element of the ``posts`` array in the post index."""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    slug: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    excerpt: str = ""
    date: Optional[str] = None
    author: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    featured_image_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("featuredImageUrl", "featuredImage", "featured_image_url"),
    )

    @field_validator("slug")
    @classmethod
    def _slug_is_filename(cls, v: str) -> str:
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"slug must be a plain file name, got {v!r}")
        return v

    @field_validator("excerpt", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("featured_image_url", mode="before")
    @classmethod
    def _blank_url(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def describe(self) -> dict[str, Any]:
        """Fields used to identify the post in reports."""
        return {"slug": self.slug, "title": self.title}


@dataclass
class InvalidIndexEntry:
    """An element of the ``posts`` array that failed validation."""

    position: int
    slug: str
    title: str
    reason: str

    @classmethod
    def from_raw(cls, position: int, raw: Any, reason: str) -> InvalidIndexEntry:
        fields = raw if isinstance(raw, dict) else {}
        slug = str(fields.get("slug") or "").strip() or f"#{position}"
        return cls(position=position, slug=slug, title=str(fields.get("title") or ""), reason=reason)

    def describe(self) -> dict[str, Any]:
        return {"slug": self.slug, "title": self.title, "position": self.position}


class WordPressPost(BaseModel):
    """Payload for ``POST /posts`` and ``PUT /posts/<id>``."""

    model_config = ConfigDict(extra="forbid")

    title: str
    slug: str
    content: str
    excerpt: str = ""
    status: str = "publish"
    date: Optional[str] = None
    tags: Optional[list[int]] = None
    categories: Optional[list[int]] = None
    featured_media: Optional[int] = None

    @field_validator("tags", "categories", mode="before")
    @classmethod
    def _dedup_ids(cls, v: Optional[list[int]]):
        if not v:
            return None
        seen = set()
        deduped = []
        for item in v:
            if item not in seen:
                seen.add(item)
                deduped.append(item)
        return deduped

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
