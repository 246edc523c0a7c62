from __future__ import annotations

import logging
import re
from typing import Callable

from review_scanner.models import ERROR, INFO, WARNING, Finding, RuleDiagnostic
from review_scanner.scanners.catalog import CommentPolicy


logger = logging.getLogger(__name__)

OUTSIDE = "outside"
INSIDE = "inside"

EMPTY_BLOCK_COMMENT = "EMPTY_BLOCK_COMMENT"
INCOMPLETE_TODO_BLOCK = "INCOMPLETE_TODO_BLOCK"
FIXME_COMMENT = "FIXME_COMMENT"
TEMPORARY_WORKAROUND = "TEMPORARY_WORKAROUND"
INCOMPLETE_DOC_TAGS = "INCOMPLETE_DOC_TAGS"

COMMENT_RULE_IDS = (
    EMPTY_BLOCK_COMMENT,
    INCOMPLETE_TODO_BLOCK,
    FIXME_COMMENT,
    TEMPORARY_WORKAROUND,
    INCOMPLETE_DOC_TAGS,
)

TODO_RE = re.compile(r"\bTODO\b(?P<rest>.*)$", re.IGNORECASE)
FIXME_RE = re.compile(r"\bFIXME\b", re.IGNORECASE)
WORKAROUND_RE = re.compile(r"\b(?:hack(?:s|y|ed)?|workarounds?|kludge|bug)\b", re.IGNORECASE)
LEADING_STARS_RE = re.compile(r"^\*+")


class BlockCommentTracker:
    """Two-state machine that swallows block comments line by line.

    Lines it consumes are never handed to the line classifier. A closed comment
    is analyzed as one piece and reported on its opening line.
    """

    def __init__(
        self,
        file_path: str,
        policy: CommentPolicy,
        enabled: Callable[[str], bool] | None = None,
    ):
        self.file_path = file_path
        self.policy = policy
        self.enabled = enabled or (lambda rule_id: True)
        self.mode = OUTSIDE
        self._buffer: list[str] = []
        self._start_line = 0

    @property
    def pending_text(self) -> str:
        return "\n".join(self._buffer)

    def feed(self, line_number: int, line: str) -> tuple[bool, list[Finding]]:
        """Consume one line. Returns (consumed, findings emitted on close)."""
        if self.mode == OUTSIDE:
            stripped = line.strip()
            if not stripped.startswith(self.policy.open_marker):
                return False, []
            self.mode = INSIDE
            self._start_line = line_number
            self._buffer = [line]
            if self.policy.close_marker in stripped[len(self.policy.open_marker):]:
                return True, self._close()
            return True, []

        self._buffer.append(line)
        if self.policy.close_marker in line:
            return True, self._close()
        return True, []

    def finish(self) -> RuleDiagnostic | None:
        """End of file. An open comment is dropped and reported as a diagnostic only."""
        if self.mode != INSIDE:
            return None
        diagnostic = RuleDiagnostic(
            file_path=self.file_path,
            line_number=self._start_line,
            rule_id=None,
            kind="unterminated_comment",
            error=f"Block comment opened on line {self._start_line} is never closed",
        )
        logger.debug("%s: %s", self.file_path, diagnostic.error)
        self._reset()
        return diagnostic

    def _close(self) -> list[Finding]:
        text = self.pending_text
        start_line = self._start_line
        self._reset()
        return analyze_block_comment(
            text,
            start_line,
            file_path=self.file_path,
            policy=self.policy,
            enabled=self.enabled,
        )

    def _reset(self) -> None:
        self.mode = OUTSIDE
        self._buffer = []
        self._start_line = 0


def analyze_block_comment(
    text: str,
    line_number: int,
    *,
    file_path: str,
    policy: CommentPolicy,
    enabled: Callable[[str], bool] | None = None,
) -> list[Finding]:
    is_enabled = enabled or (lambda rule_id: True)
    findings: list[Finding] = []

    def emit(rule_id: str, severity: str, message: str, suggestion: str) -> None:
        if not is_enabled(rule_id):
            return
        findings.append(
            Finding(
                file_path=file_path,
                line_number=line_number,
                severity=severity,
                rule_id=rule_id,
                message=message,
                suggestion=suggestion,
                category="documentation",
            )
        )

    if not comment_body(text, policy):
        emit(
            EMPTY_BLOCK_COMMENT,
            INFO,
            "Block comment appears to be empty",
            "Remove or add meaningful documentation",
        )

    if _has_bare_todo(text, policy):
        emit(
            INCOMPLETE_TODO_BLOCK,
            WARNING,
            "Incomplete TODO in block comment",
            "Add a description with an owner and a deadline",
        )

    if FIXME_RE.search(text):
        emit(
            FIXME_COMMENT,
            ERROR,
            "FIXME comment - resolve before production",
            "Create a ticket or resolve immediately",
        )

    if WORKAROUND_RE.search(text):
        emit(
            TEMPORARY_WORKAROUND,
            WARNING,
            "Temporary workaround detected",
            "Document why and plan refactoring",
        )

    if (
        policy.doc_marker in text
        and not any(tag in text for tag in policy.doc_tags)
        and len(text) > policy.min_doc_length
    ):
        emit(
            INCOMPLETE_DOC_TAGS,
            INFO,
            f"{policy.doc_label} missing {'/'.join(policy.doc_tags)}",
            "Add documentation tags for completeness",
        )

    return findings


def comment_body(text: str, policy: CommentPolicy) -> str:
    """Comment text with delimiters and decorative leading stars removed."""
    parts: list[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if policy.close_marker in line:
            line = line.split(policy.close_marker, 1)[0]
        if line.startswith(policy.doc_marker):
            line = line[len(policy.doc_marker):]
        elif line.startswith(policy.open_marker):
            line = line[len(policy.open_marker):]
        line = LEADING_STARS_RE.sub("", line.strip()).strip()
        if line:
            parts.append(line)
    return "\n".join(parts)


def _has_bare_todo(text: str, policy: CommentPolicy) -> bool:
    """A TODO with no description on its own line or the next body line."""
    body = comment_body(text, policy).splitlines()
    for position, line in enumerate(body):
        match = TODO_RE.search(line)
        if match is None or match.group("rest").strip(" \t:-*"):
            continue
        following = body[position + 1] if position + 1 < len(body) else ""
        if not following or TODO_RE.search(following):
            return True
    return False
