from __future__ import annotations

from datetime import datetime
from typing import Any, Final, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from postkit.utils.dates import parse_timestamp

# Canonical frontmatter keys
FM_TITLE: Final[str] = "title"
FM_EXCERPT: Final[str] = "excerpt"
FM_CATEGORY: Final[str] = "category"
FM_DATE: Final[str] = "date"
FM_PUBLISHED_AT: Final[str] = "publishedAt"
FM_UPDATED_AT: Final[str] = "updatedAt"
FM_READING_TIME: Final[str] = "readingTime"
FM_AUTHOR: Final[str] = "author"
FM_TAGS: Final[str] = "tags"

REQUIRED_KEYS: Final[tuple[str, ...]] = (FM_TITLE, FM_DATE, FM_CATEGORY, FM_AUTHOR, FM_TAGS)
TIMESTAMP_KEYS: Final[tuple[str, ...]] = (FM_DATE, FM_PUBLISHED_AT, FM_UPDATED_AT)


class RefModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    slug: str


class PostFrontmatter(BaseModel):
    """
    Typed view of a post's frontmatter. Field names on the wire are camelCase.
    Unknown keys are kept (posts carry extras such as `image` or `featured`).
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title: str
    excerpt: Optional[str] = None
    category: Optional[RefModel] = None
    date: Optional[datetime] = None
    published_at: Optional[datetime] = Field(default=None, alias=FM_PUBLISHED_AT)
    updated_at: Optional[datetime] = Field(default=None, alias=FM_UPDATED_AT)
    reading_time: Optional[str] = Field(default=None, alias=FM_READING_TIME)
    author: Optional[RefModel] = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("date", "published_at", "updated_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, v: Any) -> Any:
        if v is None:
            return None
        return parse_timestamp(v)
