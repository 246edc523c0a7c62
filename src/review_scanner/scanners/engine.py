from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from review_scanner.models import FileScan, Finding, RuleDiagnostic, SourceUnit
from review_scanner.scanners.catalog import CatalogRegistry, default_registry
from review_scanner.scanners.classifier import LineClassifier
from review_scanner.scanners.comments import BlockCommentTracker
from review_scanner.scanners.window import ContextWindow


logger = logging.getLogger(__name__)


class Analyzer:
    """Drives one file at a time through the comment tracker and the line classifier."""

    def __init__(self, registry: CatalogRegistry | None = None):
        self.registry = registry if registry is not None else default_registry()

    def analyze(self, path: str, language: str | None, text: str) -> FileScan:
        return self.analyze_unit(SourceUnit.from_text(path, language or "", text))

    def analyze_unit(self, unit: SourceUnit) -> FileScan:
        catalog = self.registry.for_language(unit.language)
        if catalog is None:
            logger.debug("No rule catalog for %s (language=%r)", unit.path, unit.language)
            return FileScan(
                file_path=unit.path,
                language=unit.language or None,
                line_count=len(unit.lines),
            )

        window = ContextWindow(unit.lines)
        tracker = BlockCommentTracker(unit.path, catalog.comment_policy, catalog.is_enabled)
        classifier = LineClassifier(catalog)
        findings: list[Finding] = []
        diagnostics: list[RuleDiagnostic] = []

        for index, line in enumerate(unit.lines):
            consumed, comment_findings = tracker.feed(index + 1, line)
            findings.extend(comment_findings)
            if consumed:
                continue
            line_findings, line_diagnostics = classifier.classify(unit.path, index, window)
            findings.extend(line_findings)
            diagnostics.extend(line_diagnostics)

        leftover = tracker.finish()
        if leftover is not None:
            diagnostics.append(leftover)

        logger.debug("Scanned %s: %d lines, %d findings", unit.path, len(unit.lines), len(findings))
        return FileScan(
            file_path=unit.path,
            language=unit.language,
            line_count=len(unit.lines),
            findings=tuple(findings),
            diagnostics=tuple(diagnostics),
        )

    def analyze_many(self, units: Sequence[SourceUnit], workers: int = 1) -> list[FileScan]:
        """Scan whole files, in parallel when ``workers > 1``; results keep input order."""
        if workers <= 1 or len(units) <= 1:
            return [self.analyze_unit(unit) for unit in units]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self.analyze_unit, units))


def analyze(
    path: str,
    language: str | None,
    text: str,
    registry: CatalogRegistry | None = None,
) -> list[Finding]:
    return list(Analyzer(registry).analyze(path, language, text).findings)
