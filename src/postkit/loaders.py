from __future__ import annotations

from hashlib import sha256
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from postkit.adapters.loading.filesystem import FilesystemReader
from postkit.adapters.loading.frontmatter import (
    estimate_reading_time,
    extract_headings,
    normalize_tags,
)
from postkit.domain.models import LintReport, MarkdownFile, Post, Ref
from postkit.domain.schema import (
    FM_AUTHOR,
    FM_CATEGORY,
    FM_DATE,
    FM_EXCERPT,
    FM_PUBLISHED_AT,
    FM_READING_TIME,
    FM_TAGS,
    FM_TITLE,
    FM_UPDATED_AT,
)
from postkit.utils.dates import try_parse_timestamp
from postkit.utils.logging import get_logger

log = get_logger("loaders")


def _hash_text(text: str) -> str:
    return sha256(text.encode("utf-8")).hexdigest()


def _ref(value: Any) -> Optional[Ref]:
    if not isinstance(value, Mapping):
        return None
    name, slug = value.get("name"), value.get("slug")
    if not isinstance(name, str) or not isinstance(slug, str):
        return None
    return Ref(name=name.strip(), slug=slug.strip())


def _opt_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def post_from_file(file: MarkdownFile) -> Post:
    """
    Build a Post from a parsed file. Expects the file to have passed linting; fields
    that are still malformed come through as None rather than raising.
    """
    fm = file.frontmatter
    title = _opt_str(fm.get(FM_TITLE)) or file.slug
    reading_time = _opt_str(fm.get(FM_READING_TIME)) or estimate_reading_time(file.body)

    return Post(
        slug=file.slug,
        title=title,
        path=file.path,
        content=file.body,
        content_hash=_hash_text(file.body),
        excerpt=_opt_str(fm.get(FM_EXCERPT)),
        category=_ref(fm.get(FM_CATEGORY)),
        author=_ref(fm.get(FM_AUTHOR)),
        date=try_parse_timestamp(fm.get(FM_DATE)),
        published_at=try_parse_timestamp(fm.get(FM_PUBLISHED_AT)),
        updated_at=try_parse_timestamp(fm.get(FM_UPDATED_AT)),
        reading_time=reading_time,
        tags=tuple(normalize_tags(fm.get(FM_TAGS))),
        headings=tuple(extract_headings(file.body)),
        metadata=dict(fm),
    )


def posts_from_files(files: Sequence[MarkdownFile], report: Optional[LintReport] = None) -> list[Post]:
    """
    Build Posts for every file, skipping those the lint report marks as failing.
    """
    failing = report.failing_paths() if report is not None else set()
    posts: list[Post] = []
    for file in files:
        if file.path in failing or file.error is not None:
            log.debug("skipping %s: lint errors", file.path)
            continue
        posts.append(post_from_file(file))
    return posts


def load_descriptors(directory: Path, reader: Optional[FilesystemReader] = None) -> Optional[dict[str, MarkdownFile]]:
    """
    Read category/author descriptor files keyed by slug (file name without .md).
    Returns None when the directory does not exist.
    """
    if not directory.is_dir():
        return None
    reader = reader or FilesystemReader(recursive=False)
    files, _ = reader.read([str(directory)])
    out: dict[str, MarkdownFile] = {}
    for f in files:
        if f.error is not None:
            log.warning("ignoring descriptor %s: %s", f.path, f.error)
            continue
        out[f.slug] = f
    return out
