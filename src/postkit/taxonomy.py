from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence

from postkit.domain.models import Author, Category, MarkdownFile, Post, Tag
from postkit.utils.slugs import tag_to_slug

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

CATEGORY_ICONS: dict[str, str] = {
    "kubernetes": "Layers",
    "terraform": "Server",
    "docker": "Database",
    "ci-cd": "Workflow",
    "cloud": "Cloud",
    "git": "GitBranch",
    "security": "Lock",
    "cli": "Terminal",
    "code": "Code",
}

CATEGORY_COLORS: dict[str, str] = {
    "kubernetes": "bg-blue-500/10 text-blue-500",
    "terraform": "bg-purple-500/10 text-purple-500",
    "docker": "bg-cyan-500/10 text-cyan-500",
    "ci-cd": "bg-green-500/10 text-green-500",
    "cloud": "bg-orange-500/10 text-orange-500",
    "git": "bg-red-500/10 text-red-500",
    "security": "bg-yellow-500/10 text-yellow-500",
    "cli": "bg-indigo-500/10 text-indigo-500",
    "code": "bg-pink-500/10 text-pink-500",
}


def _str_or_none(value: object) -> Optional[str]:
    return value if isinstance(value, str) and value else None


# ------------------ Posts ------------------

def sort_posts(posts: Sequence[Post]) -> list[Post]:
    """Newest first by publishedAt (falling back to date); undated posts last, by slug."""
    dated = [p for p in posts if p.sort_date is not None]
    undated = sorted((p for p in posts if p.sort_date is None), key=lambda p: p.slug)
    dated.sort(key=lambda p: (p.sort_date or _EPOCH, p.slug), reverse=True)
    return dated + undated


# ------------------ Tags ------------------

def build_tag_index(posts: Sequence[Post]) -> list[Tag]:
    """
    Group tags by slug so 'Docker' and 'docker' count together; the first casing seen
    names the tag. Sorted by count, ties in first-seen order.
    """
    names: dict[str, str] = {}
    counts: dict[str, int] = {}
    for post in posts:
        for tag in post.tags:
            slug = tag_to_slug(tag)
            if not slug:
                continue
            if slug not in names:
                names[slug] = tag
                counts[slug] = 0
            counts[slug] += 1

    tags = [Tag(name=names[s], slug=s, count=counts[s]) for s in names]
    # sort is stable, so equal counts keep insertion order
    return sorted(tags, key=lambda t: -t.count)


def tag_name_for_slug(tags: Sequence[Tag], slug: str) -> Optional[str]:
    for t in tags:
        if t.slug == slug:
            return t.name
    return None


def posts_by_tag_slug(posts: Sequence[Post], slug: str, tags: Optional[Sequence[Tag]] = None) -> list[Post]:
    tag_name = tag_name_for_slug(tags if tags is not None else build_tag_index(posts), slug)
    if tag_name is None:
        return []
    wanted = tag_name.lower()
    return [p for p in posts if any(t.lower() == wanted for t in p.tags)]


# ------------------ Categories ------------------

def category_counts(posts: Sequence[Post]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for post in posts:
        if post.category is not None and post.category.slug:
            counts[post.category.slug] = counts.get(post.category.slug, 0) + 1
    return counts


def build_category_index(
    posts: Sequence[Post],
    descriptors: Optional[Mapping[str, MarkdownFile]] = None,
) -> list[Category]:
    """
    One Category per descriptor file, plus any category posts reference without a
    descriptor (named from the first post that uses it). Count desc, then name.
    """
    counts = category_counts(posts)
    descriptors = descriptors or {}

    referenced_names: dict[str, str] = {}
    for post in posts:
        if post.category is not None:
            referenced_names.setdefault(post.category.slug, post.category.name)

    categories: list[Category] = []
    for slug, desc in descriptors.items():
        fm = desc.frontmatter
        categories.append(
            Category(
                name=_str_or_none(fm.get("name")) or referenced_names.get(slug) or slug,
                slug=slug,
                description=_str_or_none(fm.get("description")),
                long_description=_str_or_none(fm.get("longDescription")),
                icon=_str_or_none(fm.get("icon")) or CATEGORY_ICONS.get(slug),
                color=_str_or_none(fm.get("color")) or CATEGORY_COLORS.get(slug),
                count=counts.get(slug, 0),
            )
        )

    for slug, name in referenced_names.items():
        if slug in descriptors:
            continue
        categories.append(
            Category(
                name=name,
                slug=slug,
                icon=CATEGORY_ICONS.get(slug),
                color=CATEGORY_COLORS.get(slug),
                count=counts.get(slug, 0),
            )
        )

    return sorted(categories, key=lambda c: (-c.count, c.name.lower()))


# ------------------ Authors ------------------

def posts_by_author(posts: Sequence[Post], slug: str) -> list[Post]:
    return [p for p in posts if p.author is not None and p.author.slug == slug]


def build_author_index(
    posts: Sequence[Post],
    descriptors: Optional[Mapping[str, MarkdownFile]] = None,
) -> list[Author]:
    descriptors = descriptors or {}
    counts: dict[str, int] = {}
    referenced_names: dict[str, str] = {}
    for post in posts:
        if post.author is None:
            continue
        counts[post.author.slug] = counts.get(post.author.slug, 0) + 1
        referenced_names.setdefault(post.author.slug, post.author.name)

    authors: list[Author] = []
    for slug, desc in descriptors.items():
        fm = desc.frontmatter
        authors.append(
            Author(
                name=_str_or_none(fm.get("name")) or referenced_names.get(slug) or slug,
                slug=slug,
                bio=_str_or_none(fm.get("bio")),
                avatar=_str_or_none(fm.get("avatar")),
                post_count=counts.get(slug, 0),
            )
        )
    for slug, name in referenced_names.items():
        if slug not in descriptors:
            authors.append(Author(name=name, slug=slug, post_count=counts[slug]))

    return sorted(authors, key=lambda a: a.name.lower())
