from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from postkit.domain.models import LintReport, LoadReport
from postkit.utils.json_sanitize import json_sanitize


def lint_report_payload(report: LintReport, load_report: Optional[LoadReport] = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ok": report.ok,
        "files_checked": report.files_checked,
        "error_count": len(report.errors),
        "warning_count": len(report.warnings),
        "by_rule": report.by_rule,
        "issues": [asdict(i) for i in report.issues],
    }
    if load_report is not None:
        payload["load"] = asdict(load_report)
    return json_sanitize(payload)


def dump_lint_report(
    report: LintReport,
    load_report: Optional[LoadReport] = None,
    out_dir: str | Path = "logs/lint",
) -> str:
    """
    Persist a lint run as logs/lint/<timestamp>.json for later inspection.

    Returns:
        Path of the written file.
    """
    Path(out_dir).mkdir(parents=True, exist_ok=True)
    time_string = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = Path(out_dir) / f"{time_string}.json"
    path.write_text(
        json.dumps(lint_report_payload(report, load_report), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return str(path)
