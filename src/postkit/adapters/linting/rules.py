from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Optional, Sequence
from urllib.parse import urlsplit

from pydantic import ValidationError

from postkit.adapters.loading.frontmatter import split_fenced_code_blocks
from postkit.domain.models import WARNING, LintIssue, MarkdownFile
from postkit.domain.schema import (
    FM_AUTHOR,
    FM_CATEGORY,
    FM_DATE,
    FM_EXCERPT,
    FM_PUBLISHED_AT,
    FM_TAGS,
    FM_UPDATED_AT,
    REQUIRED_KEYS,
    TIMESTAMP_KEYS,
    PostFrontmatter,
)
from postkit.utils.dates import parse_timestamp, try_parse_timestamp
from postkit.utils.slugs import is_url_safe_slug, tag_to_slug

# one level of balanced parentheses inside the URL, as in wiki links
_MD_LINK_RE = re.compile(r"\[[^\]]*\]\((https?://(?:[^()\s]|\([^()\s]*\))+)")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


@dataclass(frozen=True, slots=True)
class FrontmatterRule:
    """The frontmatter block exists and parsed to a mapping. Other rules depend on it."""
    name: ClassVar[str] = "frontmatter"
    blocking: ClassVar[bool] = True

    def check(self, file: MarkdownFile) -> list[LintIssue]:
        if file.error is not None:
            return [LintIssue(file.path, self.name, file.error)]
        if not file.has_frontmatter:
            return [LintIssue(file.path, self.name, "missing frontmatter block delimited by '---'")]
        return []


@dataclass(frozen=True, slots=True)
class RequiredKeysRule:
    name: ClassVar[str] = "required-keys"
    required_keys: Sequence[str] = REQUIRED_KEYS

    def check(self, file: MarkdownFile) -> list[LintIssue]:
        issues: list[LintIssue] = []
        for key in self.required_keys:
            if key not in file.frontmatter:
                issues.append(LintIssue(file.path, self.name, f"missing required key '{key}'", field=key))
            elif _is_blank(file.frontmatter[key]):
                issues.append(LintIssue(file.path, self.name, f"required key '{key}' is empty", field=key))
        return issues


@dataclass(frozen=True, slots=True)
class SchemaRule:
    """
    Type-checks the frontmatter against PostFrontmatter.

    Missing/null keys belong to required-keys and timestamp values to timestamps,
    so pydantic errors for those are not repeated here.
    """
    name: ClassVar[str] = "schema"

    def check(self, file: MarkdownFile) -> list[LintIssue]:
        data = {k: v for k, v in file.frontmatter.items() if v is not None}
        try:
            PostFrontmatter.model_validate(data)
        except ValidationError as e:
            issues: list[LintIssue] = []
            for err in e.errors():
                loc = ".".join(str(p) for p in err["loc"])
                if err["type"] == "missing" and len(err["loc"]) == 1:
                    continue
                if err["loc"] and err["loc"][0] in TIMESTAMP_KEYS:
                    continue
                issues.append(LintIssue(file.path, self.name, f"{loc}: {err['msg']}", field=loc))
            return issues
        return []


@dataclass(frozen=True, slots=True)
class TimestampsRule:
    name: ClassVar[str] = "timestamps"

    def check(self, file: MarkdownFile) -> list[LintIssue]:
        fm = file.frontmatter
        issues: list[LintIssue] = []
        for key in TIMESTAMP_KEYS:
            value = fm.get(key)
            if value is None:
                continue
            try:
                parse_timestamp(value)
            except ValueError as e:
                issues.append(LintIssue(file.path, self.name, f"{key}: {e}", field=key))

        published = try_parse_timestamp(fm.get(FM_PUBLISHED_AT)) or try_parse_timestamp(fm.get(FM_DATE))
        updated = try_parse_timestamp(fm.get(FM_UPDATED_AT))
        if published is not None and updated is not None and updated < published:
            issues.append(
                LintIssue(
                    file.path,
                    self.name,
                    f"updatedAt ({updated.isoformat()}) is earlier than publishedAt ({published.isoformat()})",
                    field=FM_UPDATED_AT,
                )
            )
        return issues


@dataclass(frozen=True, slots=True)
class SlugsRule:
    name: ClassVar[str] = "slugs"
    keys: Sequence[str] = (FM_CATEGORY, FM_AUTHOR)

    def check(self, file: MarkdownFile) -> list[LintIssue]:
        issues: list[LintIssue] = []
        for key in self.keys:
            ref = file.frontmatter.get(key)
            if not isinstance(ref, Mapping):
                continue
            slug = ref.get("slug")
            if slug is None:
                issues.append(LintIssue(file.path, self.name, f"{key}.slug is missing", field=f"{key}.slug"))
            elif not is_url_safe_slug(slug):
                issues.append(
                    LintIssue(
                        file.path,
                        self.name,
                        f"{key}.slug {slug!r} is not URL-safe (lowercase letters, digits, single hyphens)",
                        field=f"{key}.slug",
                    )
                )
        return issues


@dataclass(frozen=True, slots=True)
class TagsRule:
    name: ClassVar[str] = "tags"

    def check(self, file: MarkdownFile) -> list[LintIssue]:
        tags = file.frontmatter.get(FM_TAGS)
        if not isinstance(tags, list):
            return []

        issues: list[LintIssue] = []
        seen: dict[str, str] = {}
        for tag in tags:
            if not isinstance(tag, str):
                continue
            if not tag.strip():
                issues.append(LintIssue(file.path, self.name, "blank tag", WARNING, FM_TAGS))
                continue
            if not tag_to_slug(tag):
                issues.append(LintIssue(file.path, self.name, f"tag {tag!r} has no usable slug", WARNING, FM_TAGS))
                continue
            key = tag.strip().lower()
            if key in seen:
                issues.append(
                    LintIssue(file.path, self.name, f"duplicate tag {tag!r} (already listed as {seen[key]!r})", WARNING, FM_TAGS)
                )
            else:
                seen[key] = tag
        return issues


@dataclass(frozen=True, slots=True)
class ExcerptRule:
    name: ClassVar[str] = "excerpt"

    def check(self, file: MarkdownFile) -> list[LintIssue]:
        if _is_blank(file.frontmatter.get(FM_EXCERPT)):
            return [LintIssue(file.path, self.name, "excerpt is missing or empty", WARNING, FM_EXCERPT)]
        return []


@dataclass(frozen=True, slots=True)
class BodyRule:
    name: ClassVar[str] = "body"

    def check(self, file: MarkdownFile) -> list[LintIssue]:
        if not file.body.strip():
            return [LintIssue(file.path, self.name, "post body is empty")]
        return []


def _valid_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
        return parts.scheme in ("http", "https") and bool(parts.hostname)
    except ValueError:
        return False


@dataclass(frozen=True, slots=True)
class LinksRule:
    """Markdown links to http(s) URLs outside code fences: well-formed, not repeated."""
    name: ClassVar[str] = "links"

    def check(self, file: MarkdownFile) -> list[LintIssue]:
        urls: list[str] = []
        for seg, is_code in split_fenced_code_blocks(file.body):
            if not is_code:
                urls.extend(_MD_LINK_RE.findall(seg))

        issues: list[LintIssue] = []
        seen: set[str] = set()
        reported: set[str] = set()
        for url in urls:
            if not _valid_url(url):
                issues.append(LintIssue(file.path, self.name, f"malformed URL {url!r}", WARNING))
            if url in seen and url not in reported:
                issues.append(LintIssue(file.path, self.name, f"duplicate link {url!r}", WARNING))
                reported.add(url)
            seen.add(url)
        return issues


@dataclass(frozen=True, slots=True)
class ReferencesRule:
    """
    category.slug and author.slug point at descriptor files. A None set means the
    descriptor directory does not exist and the check is skipped for that key.
    """
    name: ClassVar[str] = "references"
    known_categories: Optional[frozenset[str]] = None
    known_authors: Optional[frozenset[str]] = None

    def check_all(self, files: Sequence[MarkdownFile]) -> list[LintIssue]:
        issues: list[LintIssue] = []
        for file in files:
            for key, known in ((FM_CATEGORY, self.known_categories), (FM_AUTHOR, self.known_authors)):
                if known is None:
                    continue
                ref = file.frontmatter.get(key)
                if not isinstance(ref, Mapping):
                    continue
                slug = ref.get("slug")
                if isinstance(slug, str) and slug not in known:
                    issues.append(
                        LintIssue(file.path, self.name, f"{key} {slug!r} has no descriptor file", WARNING, f"{key}.slug")
                    )
        return issues
