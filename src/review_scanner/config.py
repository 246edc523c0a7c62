from __future__ import annotations

import json
import re
from pathlib import Path

from review_scanner.errors import ConfigError
from review_scanner.models import AppConfig, GitHubSettings, RuleSettings, ScanSettings
from review_scanner.scanners.catalog import CatalogRegistry, default_registry


def load_config(path: str | Path | None) -> AppConfig:
    if path is None:
        return AppConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            raw = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Config file is not valid JSON: {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Config root must be an object")

    languages_raw = _ensure_object(raw.get("languages", {}), "languages")
    languages: dict[str, str] = {}
    for extension, language in languages_raw.items():
        extension = str(extension).strip().lower()
        if not extension.startswith("."):
            raise ConfigError(f"Language override key must be a file extension: {extension}")
        languages[extension] = str(language).strip()

    rules_raw = _ensure_object(raw.get("rules", {}), "rules")
    thresholds_raw = _ensure_object(rules_raw.get("thresholds", {}), "rules.thresholds")
    thresholds: dict[str, dict[str, int]] = {}
    for language, values in thresholds_raw.items():
        values = _ensure_object(values, f"rules.thresholds.{language}")
        thresholds[str(language)] = {
            str(name): _ensure_int(value, f"rules.thresholds.{language}.{name}")
            for name, value in values.items()
        }
    rules = RuleSettings(
        disabled=tuple(_ensure_string_list(rules_raw.get("disabled", []))),
        thresholds=thresholds,
    )

    scan_raw = _ensure_object(raw.get("scan", {}), "scan")
    exclude_patterns = tuple(_ensure_string_list(scan_raw.get("exclude_patterns", [])))
    for pattern in exclude_patterns:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ConfigError(f"Invalid exclude pattern {pattern!r}: {exc}") from exc
    scan = ScanSettings(
        max_file_size_bytes=_ensure_int(scan_raw.get("max_file_size_bytes", 500_000), "scan.max_file_size_bytes"),
        workers=max(1, _ensure_int(scan_raw.get("workers", 1), "scan.workers")),
        exclude_patterns=exclude_patterns,
    )

    github_raw = _ensure_object(raw.get("github", {}), "github")
    github = GitHubSettings(
        base_url=(_optional_str(github_raw.get("base_url")) or "https://api.github.com").rstrip("/"),
        token_env=_optional_str(github_raw.get("token_env")) or "GITHUB_TOKEN",
        post_inline_comments=bool(github_raw.get("post_inline_comments", True)),
        max_inline_comments=_ensure_int(github_raw.get("max_inline_comments", 50), "github.max_inline_comments"),
    )

    return AppConfig(languages=languages, rules=rules, scan=scan, github=github)


def build_registry(config: AppConfig, base: CatalogRegistry | None = None) -> CatalogRegistry:
    """Apply rule toggles, threshold overrides and extension overrides to a registry.

    Raises CatalogError for thresholds or languages the catalogs do not know.
    """
    registry = base if base is not None else default_registry()
    return registry.configured(
        disabled=config.rules.disabled,
        thresholds=config.rules.thresholds,
        extensions=config.languages,
    )


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _ensure_string_list(value: object) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError("Expected a list of strings")
    return [str(item) for item in value]


def _ensure_object(value: object, name: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be an object")
    return value


def _ensure_int(value: object, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"'{name}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{name}' must be an integer") from exc
