from __future__ import annotations

from typing import Protocol, Sequence

from postkit.domain.models import LoadReport, MarkdownFile


class CorpusReader(Protocol):
    """
    Turns input paths (files, directories, globs) into MarkdownFiles.
    """

    def read(self, inputs: Sequence[str]) -> tuple[list[MarkdownFile], LoadReport]:
        ...
