from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from pathlib import Path

from review_scanner.aggregator import FindingAggregator
from review_scanner.models import Finding

SEVERITY_MARKERS = {
    "error": "🔴",
    "warning": "🟡",
    "info": "🔵",
}


def format_inline_comment(finding: Finding) -> str:
    text = f"**{finding.rule_id}** ({finding.severity})\n{finding.message}"
    if finding.suggestion:
        text += f"\n\n💡 *Suggestion:* {finding.suggestion}"
    return text


def format_summary(aggregator: FindingAggregator) -> str:
    """Markdown body for the pull request summary comment."""
    summary = aggregator.summary()
    lines = ["## 🤖 Automated Code Review", ""]

    if summary.total == 0:
        lines.append("✅ No issues found in the changed files.")
    else:
        lines.extend(
            [
                f"Found **{summary.total}** issue(s) in {summary.files_with_findings} file(s).",
                "",
                "| Severity | Count |",
                "|---|---|",
            ]
        )
        for severity, count in summary.by_severity.items():
            lines.append(f"| {SEVERITY_MARKERS.get(severity, '')} {severity} | {count} |")

        for path, findings in aggregator.by_file().items():
            lines.extend(["", f"### `{path}`", ""])
            for finding in findings:
                marker = SEVERITY_MARKERS.get(finding.severity, "")
                lines.append(f"- {marker} Line {finding.line_number}: **{finding.rule_id}** - {finding.message}")

    if aggregator.skipped:
        lines.extend(["", "### Skipped files", ""])
        for item in aggregator.skipped:
            lines.append(f"- `{item.file_path}`: {item.reason}")

    lines.extend(["", f"_Scanned {summary.files_scanned} file(s)._"])
    return "\n".join(lines)


def format_text(aggregator: FindingAggregator) -> str:
    lines = [
        f"{item.file_path}:{item.line_number}: {item.severity} {item.rule_id} {item.message}"
        for item in aggregator.all()
    ]
    for item in aggregator.skipped:
        lines.append(f"{item.file_path}: skipped ({item.reason})")
    summary = aggregator.summary()
    counts = ", ".join(f"{count} {severity}" for severity, count in summary.by_severity.items())
    lines.append(f"{summary.total} finding(s) in {summary.files_scanned} file(s): {counts}")
    return "\n".join(lines)


def write_reports(aggregator: FindingAggregator, output_dir: str | Path) -> dict:
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    summary_json = out_dir / "summary.json"
    findings_json = out_dir / "findings.json"
    findings_csv = out_dir / "findings.csv"

    rows = [item.to_dict() for item in aggregator.all()]
    payload = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "summary": aggregator.summary().to_dict(),
        "skipped": [item.to_dict() for item in aggregator.skipped],
        "diagnostics": [item.to_dict() for item in aggregator.diagnostics],
        "files": {
            "summary": str(summary_json.resolve()),
            "findings_json": str(findings_json.resolve()),
            "findings_csv": str(findings_csv.resolve()),
        },
    }

    _write_json(findings_json, rows)
    _write_csv(findings_csv, rows)
    _write_json(summary_json, payload)
    return payload


def _write_json(path: Path, payload) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=True)


def _write_csv(path: Path, rows: list[dict]) -> None:
    with path.open("w", encoding="utf-8", newline="") as handle:
        if not rows:
            handle.write("")
            return

        fieldnames: list[str] = []
        seen = set()
        for row in rows:
            for key in row:
                if key not in seen:
                    seen.add(key)
                    fieldnames.append(key)

        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
