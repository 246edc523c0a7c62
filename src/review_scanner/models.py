from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


ERROR = "error"
WARNING = "warning"
INFO = "info"
SEVERITIES = (ERROR, WARNING, INFO)


@dataclass(frozen=True)
class SourceUnit:
    path: str
    language: str
    lines: tuple[str, ...]

    @classmethod
    def from_text(cls, path: str, language: str, text: str) -> "SourceUnit":
        return cls(path=path, language=language, lines=tuple(text.splitlines()))


@dataclass(frozen=True)
class Finding:
    file_path: str
    line_number: int
    severity: str
    rule_id: str
    message: str
    suggestion: str | None = None
    category: str = "quality"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RuleDiagnostic:
    file_path: str
    line_number: int
    rule_id: str | None
    kind: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FileSkip:
    file_path: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FileScan:
    file_path: str
    language: str | None
    line_count: int
    findings: tuple[Finding, ...] = ()
    diagnostics: tuple[RuleDiagnostic, ...] = ()


@dataclass(frozen=True)
class ChangedFile:
    path: str
    text: str | None
    status: str = "modified"
    skip_reason: str | None = None


@dataclass(frozen=True)
class Summary:
    total: int
    by_severity: dict[str, int]
    by_file: dict[str, int]
    files_scanned: int
    files_with_findings: int
    skipped_files: int
    rule_diagnostics: int
    by_rule: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RuleSettings:
    disabled: tuple[str, ...] = ()
    thresholds: dict[str, dict[str, int]] = field(default_factory=dict)


@dataclass(frozen=True)
class ScanSettings:
    max_file_size_bytes: int = 500_000
    workers: int = 1
    exclude_patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class GitHubSettings:
    base_url: str = "https://api.github.com"
    token_env: str = "GITHUB_TOKEN"
    post_inline_comments: bool = True
    max_inline_comments: int = 50


@dataclass(frozen=True)
class AppConfig:
    languages: dict[str, str] = field(default_factory=dict)
    rules: RuleSettings = field(default_factory=RuleSettings)
    scan: ScanSettings = field(default_factory=ScanSettings)
    github: GitHubSettings = field(default_factory=GitHubSettings)
