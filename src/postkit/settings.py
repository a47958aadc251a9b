from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv

from postkit.adapters.feed.rss import DEFAULT_ITEM_LIMIT
from postkit.domain.errors import ConfigError


@dataclass(frozen=True)
class Paths:
    content_dir: Path
    output_dir: Path
    profiles_dir: Path
    posts_subdir: str = "posts"
    categories_subdir: str = "categories"
    authors_subdir: str = "authors"

    @property
    def posts_dir(self) -> Path:
        return self.content_dir / self.posts_subdir

    @property
    def categories_dir(self) -> Path:
        return self.content_dir / self.categories_subdir

    @property
    def authors_dir(self) -> Path:
        return self.content_dir / self.authors_subdir


@dataclass(frozen=True)
class Site:
    url: str
    title: str
    description: str
    language: str


@dataclass(frozen=True)
class Lint:
    profile: str


@dataclass(frozen=True)
class Feed:
    limit: int


@dataclass(frozen=True)
class Settings:
    paths: Paths
    site: Site
    lint: Lint
    feed: Feed


DEFAULTS: dict[str, dict[str, Any]] = {
    "paths": {"content_dir": "content", "output_dir": "artifacts", "profiles_dir": "profiles"},
    "site": {
        "url": "https://devops-daily.com",
        "title": "DevOps Daily",
        "description": "The latest DevOps news, tutorials, and guides",
        "language": "en",
    },
    "lint": {"profile": "default"},
    "feed": {"limit": DEFAULT_ITEM_LIMIT},
}


def _expand(p: str, base: Path) -> Path:
    path = Path(os.path.expandvars(os.path.expanduser(p)))
    if not path.is_absolute():
        path = base / path
    return path.resolve()


def _merge(raw: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    merged = {section: dict(values) for section, values in DEFAULTS.items()}
    for section, values in raw.items():
        if not isinstance(values, Mapping):
            raise ConfigError(f"Config section [{section}] must be a table")
        merged.setdefault(section, {}).update(values)
    return merged


def _build(raw: Mapping[str, Any], base: Path) -> Settings:
    try:
        paths = raw["paths"]
        site = raw["site"]
        return Settings(
            paths=Paths(
                content_dir=_expand(paths["content_dir"], base),
                output_dir=_expand(paths["output_dir"], base),
                profiles_dir=_expand(paths["profiles_dir"], base),
                posts_subdir=paths.get("posts_subdir", "posts"),
                categories_subdir=paths.get("categories_subdir", "categories"),
                authors_subdir=paths.get("authors_subdir", "authors"),
            ),
            site=Site(
                url=str(site["url"]),
                title=str(site["title"]),
                description=str(site["description"]),
                language=str(site["language"]),
            ),
            lint=Lint(profile=str(raw["lint"]["profile"])),
            feed=Feed(limit=int(raw["feed"]["limit"])),
        )
    except KeyError as e:
        raise ConfigError(f"Missing config key: {e}") from e
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config value: {e}") from e


def apply_env(settings: Settings, env: Mapping[str, str] | None = None) -> Settings:
    """
    POSTKIT_CONTENT_DIR, POSTKIT_OUTPUT_DIR and SITE_URL override the file.
    """
    env = os.environ if env is None else env
    paths = settings.paths
    if env.get("POSTKIT_CONTENT_DIR"):
        paths = replace(paths, content_dir=_expand(env["POSTKIT_CONTENT_DIR"], Path.cwd()))
    if env.get("POSTKIT_OUTPUT_DIR"):
        paths = replace(paths, output_dir=_expand(env["POSTKIT_OUTPUT_DIR"], Path.cwd()))
    site = settings.site
    if env.get("SITE_URL"):
        site = replace(site, url=env["SITE_URL"])
    return replace(settings, paths=paths, site=site)


def default_settings(base: Path | None = None) -> Settings:
    return _build(_merge({}), (base or Path.cwd()).resolve())


def load_settings(path: str | Path = "postkit.toml", *, use_env: bool = True) -> Settings:
    """
    Read postkit.toml. Relative paths resolve against the file's directory.
    Missing sections fall back to DEFAULTS; a missing file is an error.
    """
    path = Path(path)

    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")

    try:
        with path.open("rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    settings = _build(_merge(raw), path.resolve().parent)
    if use_env:
        load_dotenv()
        settings = apply_env(settings)
    return settings
