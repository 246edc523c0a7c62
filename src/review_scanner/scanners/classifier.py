from __future__ import annotations

import logging

from review_scanner.models import Finding, RuleDiagnostic
from review_scanner.scanners.catalog import LineContext, RuleCatalog
from review_scanner.scanners.window import ContextWindow


logger = logging.getLogger(__name__)


class LineClassifier:
    """Runs every enabled rule of one catalog against a single line.

    All matching rules report; a rule that raises is recorded as a diagnostic
    and the rest of the catalog still runs.
    """

    def __init__(self, catalog: RuleCatalog):
        self.catalog = catalog
        self._rules = catalog.active_rules

    def classify(
        self,
        path: str,
        index: int,
        window: ContextWindow,
    ) -> tuple[list[Finding], list[RuleDiagnostic]]:
        ctx = LineContext(
            path=path,
            index=index,
            text=window.line(index),
            window=window,
            thresholds=self.catalog.thresholds,
        )
        findings: list[Finding] = []
        diagnostics: list[RuleDiagnostic] = []

        for definition in self._rules:
            try:
                if not definition.applies_to(ctx):
                    continue
                message, suggestion = definition.render(ctx)
            except Exception as exc:
                logger.warning(
                    "Rule %s failed on %s:%d: %s",
                    definition.rule_id,
                    path,
                    ctx.line_number,
                    exc,
                )
                diagnostics.append(
                    RuleDiagnostic(
                        file_path=path,
                        line_number=ctx.line_number,
                        rule_id=definition.rule_id,
                        kind="rule_error",
                        error=f"{type(exc).__name__}: {exc}",
                    )
                )
                continue

            findings.append(
                Finding(
                    file_path=path,
                    line_number=ctx.line_number,
                    severity=definition.severity,
                    rule_id=definition.rule_id,
                    message=message,
                    suggestion=suggestion,
                    category=definition.category,
                )
            )

        return findings, diagnostics
