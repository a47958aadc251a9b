from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from postkit.domain.schema import REQUIRED_KEYS, PostFrontmatter


def test_required_keys_match_frontmatter_contract():
    assert set(REQUIRED_KEYS) == {"title", "date", "category", "author", "tags"}


def test_camel_case_aliases_and_timestamps():
    fm = PostFrontmatter.model_validate(
        {
            "title": "Hello",
            "category": {"name": "Git", "slug": "git"},
            "author": {"name": "Jane", "slug": "jane"},
            "date": "2024-03-10",
            "publishedAt": "2024-03-10T09:00:00Z",
            "updatedAt": datetime(2024, 4, 1),
            "readingTime": "3 min read",
            "tags": ["git"],
            "image": "/images/hello.png",
        }
    )
    assert fm.published_at == datetime(2024, 3, 10, 9, tzinfo=timezone.utc)
    assert fm.updated_at == datetime(2024, 4, 1, tzinfo=timezone.utc)
    assert fm.reading_time == "3 min read"
    assert fm.category.slug == "git"
    assert fm.model_extra == {"image": "/images/hello.png"}


def test_rejects_wrong_types():
    with pytest.raises(ValidationError) as excinfo:
        PostFrontmatter.model_validate({"title": "x", "tags": "git", "category": "Git"})
    locs = {err["loc"][0] for err in excinfo.value.errors()}
    assert {"tags", "category"} <= locs


def test_rejects_bad_timestamp():
    with pytest.raises(ValidationError):
        PostFrontmatter.model_validate({"title": "x", "publishedAt": "last week"})
