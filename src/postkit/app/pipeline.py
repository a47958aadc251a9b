from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

from postkit.adapters.linting.linter import FrontmatterLinter
from postkit.app.container import Container
from postkit.domain.errors import ExportError
from postkit.domain.models import LintReport, LoadReport, MarkdownFile, Post
from postkit.loaders import posts_from_files
from postkit.ports import CorpusReader
from postkit.taxonomy import build_author_index, build_category_index, build_tag_index, sort_posts
from postkit.utils.json_sanitize import json_sanitize
from postkit.utils.logging import get_logger

log = get_logger("pipeline")


def lint_corpus(
    inputs: Sequence[str],
    *,
    reader: CorpusReader,
    linter: FrontmatterLinter,
) -> tuple[list[MarkdownFile], LoadReport, LintReport]:
    files, load_report = reader.read(inputs)
    return files, load_report, linter.lint(files)


def load_posts(container: Container, inputs: Optional[Sequence[str]] = None) -> tuple[list[Post], LoadReport, LintReport]:
    """
    Read and lint the corpus; return posts (newest first) for files without lint errors.
    """
    inputs = list(inputs) if inputs else [str(container.settings.paths.posts_dir)]
    files, load_report, lint_report = lint_corpus(inputs, reader=container.reader, linter=container.linter)
    posts = sort_posts(posts_from_files(files, lint_report))
    skipped = len(files) - len(posts)
    if skipped:
        log.warning("%d file(s) left out because of lint errors", skipped)
    return posts, load_report, lint_report


def _write_json(path: Path, payload: Any) -> None:
    """Write to a temp file first, then atomically replace."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(json.dumps(json_sanitize(payload), indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)
    except OSError as e:
        raise ExportError(f"could not write {path}: {e}") from e


def _post_summary(post: Post) -> dict[str, Any]:
    data = asdict(post)
    data.pop("content")
    data.pop("metadata")
    return data


def build_index(
    container: Container,
    *,
    inputs: Optional[Sequence[str]] = None,
    out_dir: Optional[Path] = None,
) -> Path:
    """
    Write posts.json, tags.json, categories.json, authors.json and manifest.json.
    Returns the manifest path.
    """
    out_dir = out_dir or container.settings.paths.output_dir
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportError(f"could not create {out_dir}: {e}") from e

    posts, load_report, lint_report = load_posts(container, inputs)
    tags = build_tag_index(posts)
    categories = build_category_index(posts, container.categories)
    authors = build_author_index(posts, container.authors)

    _write_json(out_dir / "posts.json", [_post_summary(p) for p in posts])
    _write_json(out_dir / "tags.json", [asdict(t) for t in tags])
    _write_json(out_dir / "categories.json", [asdict(c) for c in categories])
    _write_json(out_dir / "authors.json", [asdict(a) for a in authors])

    manifest = {
        "created_at": datetime.now(timezone.utc).isoformat(),
        "content_dir": container.settings.paths.content_dir,
        "post_count": len(posts),
        "tag_count": len(tags),
        "category_count": len(categories),
        "author_count": len(authors),
        "load_report": asdict(load_report),
        "lint": {
            "files_checked": lint_report.files_checked,
            "errors": len(lint_report.errors),
            "warnings": len(lint_report.warnings),
            "by_rule": lint_report.by_rule,
        },
        "files": ["posts.json", "tags.json", "categories.json", "authors.json"],
    }
    manifest_path = out_dir / "manifest.json"
    _write_json(manifest_path, manifest)
    log.info("index written to %s (%d posts)", out_dir, len(posts))
    return manifest_path


def write_feed(
    container: Container,
    *,
    inputs: Optional[Sequence[str]] = None,
    out_path: Optional[Path] = None,
    now: Optional[datetime] = None,
) -> Path:
    out_path = out_path or container.settings.paths.output_dir / "feed.xml"
    posts, _, _ = load_posts(container, inputs)
    xml = container.feed_builder.build(posts, now=now)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(xml, encoding="utf-8")
    except OSError as e:
        raise ExportError(f"could not write {out_path}: {e}") from e
    log.info("RSS feed with %d items written to %s", min(len(posts), container.feed_builder.limit), out_path)
    return out_path
