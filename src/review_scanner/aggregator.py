from __future__ import annotations

from typing import Iterable

from review_scanner.models import (
    SEVERITIES,
    FileScan,
    FileSkip,
    Finding,
    RuleDiagnostic,
    Summary,
)


class FindingAggregator:
    """Collects per-file results in discovery order.

    Findings are only ever appended; nothing is removed or deduplicated. All
    views and the summary are derived on demand.
    """

    def __init__(self) -> None:
        self._findings: list[Finding] = []
        self._diagnostics: list[RuleDiagnostic] = []
        self._skipped: list[FileSkip] = []
        self._files: list[str] = []
        self._seen_files: set[str] = set()

    def add(self, path: str, scan: FileScan) -> None:
        self._record_file(path)
        self._findings.extend(scan.findings)
        self._diagnostics.extend(scan.diagnostics)

    def add_findings(self, findings: Iterable[Finding]) -> None:
        for finding in findings:
            self._record_file(finding.file_path)
            self._findings.append(finding)

    def skip(self, path: str, reason: str) -> None:
        self._skipped.append(FileSkip(file_path=path, reason=reason))

    def merge(self, other: "FindingAggregator") -> None:
        for path in other._files:
            self._record_file(path)
        self._findings.extend(other._findings)
        self._diagnostics.extend(other._diagnostics)
        self._skipped.extend(other._skipped)

    def all(self) -> list[Finding]:
        return list(self._findings)

    @property
    def diagnostics(self) -> list[RuleDiagnostic]:
        return list(self._diagnostics)

    @property
    def skipped(self) -> list[FileSkip]:
        return list(self._skipped)

    @property
    def files_scanned(self) -> int:
        return len(self._files)

    def by_severity(self) -> dict[str, int]:
        counts = {severity: 0 for severity in SEVERITIES}
        for finding in self._findings:
            counts[finding.severity] = counts.get(finding.severity, 0) + 1
        return counts

    def by_file(self) -> dict[str, list[Finding]]:
        grouped: dict[str, list[Finding]] = {}
        for finding in self._findings:
            grouped.setdefault(finding.file_path, []).append(finding)
        return grouped

    def by_rule(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for finding in self._findings:
            counts[finding.rule_id] = counts.get(finding.rule_id, 0) + 1
        return counts

    def has_errors(self) -> bool:
        return any(finding.severity == "error" for finding in self._findings)

    def summary(self) -> Summary:
        by_file = {path: len(items) for path, items in self.by_file().items()}
        return Summary(
            total=len(self._findings),
            by_severity=self.by_severity(),
            by_file=by_file,
            files_scanned=self.files_scanned,
            files_with_findings=len(by_file),
            skipped_files=len(self._skipped),
            rule_diagnostics=len(self._diagnostics),
            by_rule=self.by_rule(),
        )

    def _record_file(self, path: str) -> None:
        if path not in self._seen_files:
            self._seen_files.add(path)
            self._files.append(path)
