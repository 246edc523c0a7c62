from __future__ import annotations

import logging
import re
from typing import Iterable

from review_scanner.aggregator import FindingAggregator
from review_scanner.models import ChangedFile, SourceUnit
from review_scanner.scanners import Analyzer


logger = logging.getLogger(__name__)


def review_changed_files(
    files: Iterable[ChangedFile],
    analyzer: Analyzer,
    *,
    workers: int = 1,
    exclude_patterns: tuple[str, ...] = (),
) -> FindingAggregator:
    exclude_compiled = [re.compile(pat) for pat in exclude_patterns if pat]
    aggregator = FindingAggregator()
    units: list[SourceUnit] = []

    for item in files:
        if exclude_compiled and any(p.search(item.path) for p in exclude_compiled):
            logger.debug("Excluded %s", item.path)
            continue
        if item.text is None:
            reason = item.skip_reason or "unreadable"
            logger.warning("Skipping %s: %s", item.path, reason)
            aggregator.skip(item.path, reason)
            continue
        language = analyzer.registry.language_for_path(item.path)
        units.append(SourceUnit.from_text(item.path, language or "", item.text))

    for scan in analyzer.analyze_many(units, workers=workers):
        aggregator.add(scan.file_path, scan)

    summary = aggregator.summary()
    logger.info(
        "Reviewed %d files: %d findings, %d skipped, %d rule diagnostics",
        summary.files_scanned,
        summary.total,
        summary.skipped_files,
        summary.rule_diagnostics,
    )
    return aggregator
