from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from postkit.adapters.loading.frontmatter import split_frontmatter
from postkit.adapters.loading.text_loader import TextLoader
from postkit.domain.errors import FrontmatterError
from postkit.domain.models import LoadReport, MarkdownFile
from postkit.utils.logging import get_logger

log = get_logger("reader")


def _is_hidden(path: Path, base: Path) -> bool:
    # Only parts below the input root count.
    try:
        rel = path.relative_to(base)
    except ValueError:
        rel = Path(path.name)
    return any(part.startswith(".") for part in rel.parts)


def _iter_files(inputs: Sequence[str], *, recursive: bool) -> list[tuple[Path, Path]]:
    """
    Expand inputs into (file, base) pairs; base is the directory the file was found under.
    """
    found: dict[Path, Path] = {}

    def add_dir(d: Path) -> None:
        base = d.resolve()
        it = d.rglob("*") if recursive else d.glob("*")
        for x in it:
            if x.is_file():
                found.setdefault(x.resolve(), base)

    for inp in inputs:
        p = Path(inp).expanduser()

        # Case 1: direct file or directory
        if p.exists():
            if p.is_dir():
                add_dir(p)
            elif p.is_file():
                found.setdefault(p.resolve(), p.resolve().parent)
            continue

        # Case 2: glob pattern (ONLY if relative)
        if p.is_absolute():
            log.warning("input does not exist: %s", p)
            continue

        for m in Path(".").glob(inp):
            if m.is_dir():
                add_dir(m)
            elif m.is_file():
                found.setdefault(m.resolve(), m.resolve().parent)

    # Stable, deterministic ordering
    return sorted(found.items(), key=lambda kv: str(kv[0]))


def read_markdown_file(path: Path, text: str) -> MarkdownFile:
    """
    Parse already-loaded text into a MarkdownFile. A frontmatter parse failure is
    recorded on the result instead of raised, so one bad post does not stop a run.
    """
    slug = path.stem
    try:
        frontmatter, body, has_fm = split_frontmatter(text)
    except FrontmatterError as e:
        return MarkdownFile(path=path, slug=slug, body=text, has_frontmatter=True, error=str(e))
    return MarkdownFile(path=path, slug=slug, frontmatter=frontmatter, body=body, has_frontmatter=has_fm)


@dataclass(frozen=True, slots=True)
class FilesystemReader:
    allowed_extensions: set[str] = field(default_factory=lambda: {".md"})
    recursive: bool = True
    skip_hidden: bool = True
    text_loader: TextLoader = field(default_factory=TextLoader)

    def read(self, inputs: Sequence[str]) -> tuple[list[MarkdownFile], LoadReport]:
        scanned = loaded = 0
        skipped_hidden = skipped_extension = skipped_unreadable = failed = 0
        by_ext: dict[str, int] = {}
        reasons: dict[str, int] = {}

        out: list[MarkdownFile] = []
        for path, base in _iter_files(inputs, recursive=self.recursive):
            scanned += 1

            if self.skip_hidden and _is_hidden(path, base):
                skipped_hidden += 1
                continue

            ext = path.suffix.lower()
            if self.allowed_extensions and ext not in self.allowed_extensions:
                skipped_extension += 1
                continue

            loaded_text = self.text_loader.read(path)
            if loaded_text.text is None:
                log.warning("skipping %s (%s)", path, loaded_text.skip_reason)
                skipped_unreadable += 1
                reasons[loaded_text.skip_reason] = reasons.get(loaded_text.skip_reason, 0) + 1
                continue

            md = read_markdown_file(path, loaded_text.text)
            if md.error is not None:
                log.debug("frontmatter error in %s: %s", path, md.error)
                failed += 1

            out.append(md)
            loaded += 1
            by_ext[ext] = by_ext.get(ext, 0) + 1

        report = LoadReport(
            scanned=scanned,
            loaded=loaded,
            skipped_hidden=skipped_hidden,
            skipped_extension=skipped_extension,
            skipped_unreadable=skipped_unreadable,
            failed=failed,
            by_extension=dict(by_ext),
            skip_reasons=dict(reasons),
        )
        log.info("read %d of %d files (%d with frontmatter errors)", loaded, scanned, failed)
        return out, report
