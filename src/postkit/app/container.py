from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from postkit.adapters.feed.rss import FeedChannel, RssFeedBuilder
from postkit.adapters.linting.linter import FrontmatterLinter
from postkit.adapters.loading.filesystem import FilesystemReader
from postkit.domain.models import MarkdownFile
from postkit.loaders import load_descriptors
from postkit.profiles import DEFAULT_PROFILE, LintConfig, load_profile
from postkit.settings import Settings


@dataclass(frozen=True, slots=True)
class Container:
    """
    Lightweight dependency container: the adapters one CLI run works with.
    """
    settings: Settings
    lint_config: LintConfig
    reader: FilesystemReader
    linter: FrontmatterLinter
    feed_builder: RssFeedBuilder
    categories: Optional[dict[str, MarkdownFile]]
    authors: Optional[dict[str, MarkdownFile]]


def resolve_profile(name: str, settings: Settings) -> LintConfig:
    """The built-in "default" profile does not need a file on disk."""
    profiles_dir = settings.paths.profiles_dir
    if name == DEFAULT_PROFILE and not (profiles_dir / f"{name}.json").exists():
        return LintConfig()
    return load_profile(name, profiles_dir)


def build_container(settings: Settings, lint_config: Optional[LintConfig] = None) -> Container:
    if lint_config is None:
        lint_config = resolve_profile(settings.lint.profile, settings)

    reader = FilesystemReader()
    categories = load_descriptors(settings.paths.categories_dir)
    authors = load_descriptors(settings.paths.authors_dir)

    linter = FrontmatterLinter.from_config(
        lint_config,
        known_categories=frozenset(categories) if categories is not None else None,
        known_authors=frozenset(authors) if authors is not None else None,
    )
    channel = FeedChannel(
        site_url=settings.site.url,
        title=settings.site.title,
        description=settings.site.description,
        language=settings.site.language,
    )
    return Container(
        settings=settings,
        lint_config=lint_config,
        reader=reader,
        linter=linter,
        feed_builder=RssFeedBuilder(channel=channel, limit=settings.feed.limit),
        categories=categories,
        authors=authors,
    )
