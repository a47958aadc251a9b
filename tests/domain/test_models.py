from datetime import datetime, timezone
from pathlib import Path

from postkit.domain.models import ERROR, WARNING, LintIssue, LintReport, Post


def _post(**kw):
    return Post(slug="a", title="A", path=Path("a.md"), content="", content_hash="x", **kw)


def test_sort_date_prefers_published_at():
    d = datetime(2024, 1, 1, tzinfo=timezone.utc)
    p = datetime(2024, 2, 1, tzinfo=timezone.utc)
    assert _post(date=d, published_at=p).sort_date == p
    assert _post(date=d).sort_date == d
    assert _post().sort_date is None


def test_lint_report_views():
    a, b = Path("a.md"), Path("b.md")
    report = LintReport(
        files_checked=2,
        issues=(
            LintIssue(a, "slugs", "bad slug", ERROR),
            LintIssue(a, "tags", "dup", WARNING),
            LintIssue(b, "tags", "dup", WARNING),
        ),
    )
    assert not report.ok
    assert len(report.errors) == 1
    assert len(report.warnings) == 2
    assert report.by_rule == {"slugs": 1, "tags": 2}
    assert report.failing_paths() == {a}


def test_empty_report_is_ok():
    assert LintReport(files_checked=0).ok
