from __future__ import annotations

from typing import Protocol, Sequence

from postkit.domain.models import LintIssue, MarkdownFile


class LintRule(Protocol):
    """
    Checks a single file. Rules never raise for bad content; they return issues.
    """
    name: str

    def check(self, file: MarkdownFile) -> list[LintIssue]:
        ...


class CorpusRule(Protocol):
    """
    Checks the corpus as a whole (cross-file constraints).
    """
    name: str

    def check_all(self, files: Sequence[MarkdownFile]) -> list[LintIssue]:
        ...
