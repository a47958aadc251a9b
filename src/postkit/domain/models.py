from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence


# -------------------------
# Raw corpus objects
# -------------------------

@dataclass(frozen=True, slots=True)
class MarkdownFile:
    """
    One file read from disk, before any linting.

    error is set when the frontmatter block could not be parsed; frontmatter is then empty.
    """
    path: Path
    slug: str
    frontmatter: Mapping[str, Any] = field(default_factory=dict)
    body: str = ""
    has_frontmatter: bool = False
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class LoadReport:
    scanned: int = 0
    loaded: int = 0
    skipped_hidden: int = 0
    skipped_extension: int = 0
    skipped_unreadable: int = 0
    failed: int = 0
    by_extension: Mapping[str, int] = field(default_factory=dict)
    skip_reasons: Mapping[str, int] = field(default_factory=dict)


# -------------------------
# Post and taxonomy
# -------------------------

@dataclass(frozen=True, slots=True)
class Ref:
    """A named, slugged pointer (post category or author)."""
    name: str
    slug: str


@dataclass(frozen=True, slots=True)
class Heading:
    level: int
    text: str
    anchor: str  # e.g. "h2-install-docker"


@dataclass(frozen=True, slots=True)
class Post:
    """
    A post built from a MarkdownFile whose frontmatter passed linting.

    published_at/updated_at/date are timezone-aware; naive inputs are read as UTC.
    """
    slug: str
    title: str
    path: Path
    content: str
    content_hash: str
    excerpt: Optional[str] = None
    category: Optional[Ref] = None
    author: Optional[Ref] = None
    date: Optional[datetime] = None
    published_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    reading_time: Optional[str] = None
    tags: Sequence[str] = field(default_factory=tuple)
    headings: Sequence[Heading] = field(default_factory=tuple)
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def sort_date(self) -> Optional[datetime]:
        return self.published_at or self.date


@dataclass(frozen=True, slots=True)
class Tag:
    name: str
    slug: str
    count: int


@dataclass(frozen=True, slots=True)
class Category:
    name: str
    slug: str
    description: Optional[str] = None
    long_description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    count: int = 0


@dataclass(frozen=True, slots=True)
class Author:
    name: str
    slug: str
    bio: Optional[str] = None
    avatar: Optional[str] = None
    post_count: int = 0


# -------------------------
# Lint results
# -------------------------

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True, slots=True)
class LintIssue:
    path: Path
    rule: str
    message: str
    severity: str = ERROR
    field: Optional[str] = None


@dataclass(frozen=True, slots=True)
class LintReport:
    files_checked: int
    issues: Sequence[LintIssue] = field(default_factory=tuple)

    @property
    def errors(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity == ERROR]

    @property
    def warnings(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity == WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def by_rule(self) -> dict[str, int]:
        return dict(Counter(i.rule for i in self.issues))

    def failing_paths(self) -> set[Path]:
        return {i.path for i in self.errors}
