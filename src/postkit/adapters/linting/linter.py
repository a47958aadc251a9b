from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from postkit.adapters.linting.rules import (
    BodyRule,
    ExcerptRule,
    FrontmatterRule,
    LinksRule,
    ReferencesRule,
    RequiredKeysRule,
    SchemaRule,
    SlugsRule,
    TagsRule,
    TimestampsRule,
)
from postkit.domain.models import ERROR, WARNING, LintIssue, LintReport, MarkdownFile
from postkit.domain.schema import FM_EXCERPT
from postkit.ports import CorpusRule, LintRule
from postkit.profiles import LintConfig
from postkit.utils.logging import get_logger

log = get_logger("lint")


def build_rules(
    config: LintConfig,
    *,
    known_categories: Optional[frozenset[str]] = None,
    known_authors: Optional[frozenset[str]] = None,
) -> tuple[list[LintRule], list[CorpusRule]]:
    """
    Instantiate the rule set a config asks for, minus config.disabled_rules.
    """
    rules: list[LintRule] = [
        FrontmatterRule(),
        RequiredKeysRule(required_keys=tuple(config.required_keys)),
        SchemaRule(),
        TimestampsRule(),
        SlugsRule(),
        TagsRule(),
    ]
    # required-keys already covers a missing excerpt when it lists one
    if config.require_excerpt and FM_EXCERPT not in config.required_keys:
        rules.append(ExcerptRule())
    if config.check_body:
        rules.append(BodyRule())
    if config.check_links:
        rules.append(LinksRule())

    corpus_rules: list[CorpusRule] = []
    if config.check_references and (known_categories is not None or known_authors is not None):
        corpus_rules.append(ReferencesRule(known_categories=known_categories, known_authors=known_authors))

    disabled = set(config.disabled_rules)
    return (
        [r for r in rules if r.name not in disabled],
        [r for r in corpus_rules if r.name not in disabled],
    )


@dataclass(slots=True)
class FrontmatterLinter:
    """
    Runs per-file rules in order, then corpus rules over the files that parsed.

    A blocking rule (frontmatter) that reports issues stops the remaining per-file
    rules for that file.
    """
    rules: Sequence[LintRule]
    corpus_rules: Sequence[CorpusRule] = field(default_factory=list)
    warnings_as_errors: bool = False

    @classmethod
    def from_config(
        cls,
        config: LintConfig,
        *,
        known_categories: Optional[frozenset[str]] = None,
        known_authors: Optional[frozenset[str]] = None,
    ) -> FrontmatterLinter:
        rules, corpus_rules = build_rules(
            config, known_categories=known_categories, known_authors=known_authors
        )
        return cls(rules=rules, corpus_rules=corpus_rules, warnings_as_errors=config.warnings_as_errors)

    def lint(self, files: Sequence[MarkdownFile]) -> LintReport:
        issues: list[LintIssue] = []
        parsed: list[MarkdownFile] = []

        for file in files:
            blocked = False
            for rule in self.rules:
                found = rule.check(file)
                issues.extend(found)
                if found and getattr(rule, "blocking", False):
                    blocked = True
                    break
            if not blocked:
                parsed.append(file)

        for corpus_rule in self.corpus_rules:
            issues.extend(corpus_rule.check_all(parsed))

        if self.warnings_as_errors:
            issues = [replace(i, severity=ERROR) if i.severity == WARNING else i for i in issues]

        for issue in issues:
            log.debug("%s [%s] %s: %s", issue.path, issue.severity, issue.rule, issue.message)

        report = LintReport(files_checked=len(files), issues=tuple(issues))
        log.info(
            "linted %d files: %d errors, %d warnings",
            report.files_checked,
            len(report.errors),
            len(report.warnings),
        )
        return report
