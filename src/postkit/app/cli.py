from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from postkit.app.container import build_container, resolve_profile
from postkit.app.pipeline import build_index, lint_corpus, load_posts, write_feed
from postkit.app.reporting import dump_lint_report, lint_report_payload
from postkit.domain.errors import PostkitError
from postkit.domain.models import ERROR, LintReport
from postkit.profiles import override_cfg
from postkit.settings import Feed, Settings, apply_env, default_settings, load_settings
from postkit.taxonomy import build_author_index, build_category_index, build_tag_index
from postkit.utils.logging import configure_logging

DEFAULT_CONFIG = "postkit.toml"


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="postkit", description="Lint and index a Markdown post corpus.")
    ap.add_argument("--config", default=None, help=f"Settings file (default: ./{DEFAULT_CONFIG} if present)")
    ap.add_argument("--content-dir", default=None, help="Content root holding posts/, categories/, authors/")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="-v for info, -vv for debug logging")

    sub = ap.add_subparsers(dest="command", required=True)

    lint = sub.add_parser("lint", help="Check post frontmatter")
    lint.add_argument("paths", nargs="*", help="Files, directories or globs (default: <content>/posts)")
    lint.add_argument("--profile", default=None, help="Profile name (loads profiles/<name>.json)")
    lint.add_argument("--strict", action="store_true", help="Shortcut for --profile strict")
    lint.add_argument("--disable", action="append", default=[], metavar="RULE", help="Disable a rule by name")
    lint.add_argument("--require-excerpt", action="store_true", default=None)
    lint.add_argument("--no-links", dest="check_links", action="store_false", default=None, help="Skip link checks")
    lint.add_argument("--format", choices=("text", "json"), default="text")
    lint.add_argument("--report-dir", default=None, help="Also dump the report as JSON into this directory")

    index = sub.add_parser("index", help="Write the JSON index (posts, tags, categories, authors)")
    index.add_argument("paths", nargs="*")
    index.add_argument("--out", default=None, help="Output directory (default: settings paths.output_dir)")

    feed = sub.add_parser("feed", help="Write the RSS feed")
    feed.add_argument("paths", nargs="*")
    feed.add_argument("--out", default=None, help="Output file (default: <output_dir>/feed.xml)")
    feed.add_argument("--limit", type=int, default=None)
    feed.add_argument("--site-url", default=None)

    for name, help_text in (("tags", "List tags by use"), ("categories", "List categories"), ("authors", "List authors")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("paths", nargs="*")

    return ap


def _resolve_settings(args: argparse.Namespace) -> Settings:
    if args.config is not None:
        settings = load_settings(args.config)
    elif Path(DEFAULT_CONFIG).exists():
        settings = load_settings(DEFAULT_CONFIG)
    else:
        load_dotenv()
        settings = apply_env(default_settings())

    if args.content_dir:
        settings = replace(settings, paths=replace(settings.paths, content_dir=Path(args.content_dir).resolve()))
    if getattr(args, "limit", None) is not None:
        settings = replace(settings, feed=Feed(limit=args.limit))
    if getattr(args, "site_url", None):
        settings = replace(settings, site=replace(settings.site, url=args.site_url))
    return settings


def _print_lint_report(console: Console, report: LintReport) -> None:
    if report.issues:
        table = Table(show_header=True, header_style="bold")
        table.add_column("file")
        table.add_column("rule")
        table.add_column("severity")
        table.add_column("message", overflow="fold")
        for issue in report.issues:
            style = "red" if issue.severity == ERROR else "yellow"
            table.add_row(issue.path.name, issue.rule, f"[{style}]{issue.severity}[/{style}]", issue.message)
        console.print(table)

    status = "[green]ok[/green]" if report.ok else "[red]failed[/red]"
    console.print(
        f"{status}: {report.files_checked} files, {len(report.errors)} errors, {len(report.warnings)} warnings"
    )


def _cmd_lint(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    profile = "strict" if args.strict else (args.profile or settings.lint.profile)
    config = resolve_profile(profile, settings)
    config = override_cfg(
        config,
        {
            "require_excerpt": args.require_excerpt,
            "check_links": args.check_links,
            "disabled_rules": (config.disabled_rules + args.disable) if args.disable else None,
        },
    )
    c = build_container(settings, config)

    inputs = args.paths or [str(settings.paths.posts_dir)]
    _, load_report, report = lint_corpus(inputs, reader=c.reader, linter=c.linter)

    if args.format == "json":
        print(json.dumps(lint_report_payload(report, load_report), indent=2))
    else:
        _print_lint_report(console, report)

    if args.report_dir:
        path = dump_lint_report(report, load_report, args.report_dir)
        console.print(f"report: {path}")

    return 0 if report.ok else 1


def _cmd_index(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    c = build_container(settings)
    out_dir = Path(args.out).resolve() if args.out else None
    manifest = build_index(c, inputs=args.paths or None, out_dir=out_dir)
    console.print(f"Index built: {manifest.parent}")
    console.print(f"  manifest: {manifest}")
    return 0


def _cmd_feed(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    c = build_container(settings)
    out_path = Path(args.out).resolve() if args.out else None
    path = write_feed(c, inputs=args.paths or None, out_path=out_path)
    console.print(f"RSS feed generated at {path}")
    return 0


def _cmd_taxonomy(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    c = build_container(settings)
    posts, _, _ = load_posts(c, args.paths or None)

    table = Table(show_header=True, header_style="bold")
    if args.command == "tags":
        table.add_column("tag")
        table.add_column("slug")
        table.add_column("posts", justify="right")
        for t in build_tag_index(posts):
            table.add_row(t.name, t.slug, str(t.count))
    elif args.command == "categories":
        table.add_column("category")
        table.add_column("slug")
        table.add_column("posts", justify="right")
        for cat in build_category_index(posts, c.categories):
            table.add_row(cat.name, cat.slug, str(cat.count))
    else:
        table.add_column("author")
        table.add_column("slug")
        table.add_column("posts", justify="right")
        for a in build_author_index(posts, c.authors):
            table.add_row(a.name, a.slug, str(a.post_count))
    console.print(table)
    return 0


COMMANDS = {
    "lint": _cmd_lint,
    "index": _cmd_index,
    "feed": _cmd_feed,
    "tags": _cmd_taxonomy,
    "categories": _cmd_taxonomy,
    "authors": _cmd_taxonomy,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_argparser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    configure_logging(level)

    console = Console()
    try:
        settings = _resolve_settings(args)
        return COMMANDS[args.command](args, settings, console)
    except PostkitError as e:
        console.print(f"[red]error:[/red] {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
