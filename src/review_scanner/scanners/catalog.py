from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Callable, Iterable, Iterator, Mapping

from review_scanner.errors import CatalogError
from review_scanner.models import SEVERITIES
from review_scanner.scanners.window import ContextWindow


DEFAULT_EXTENSIONS = {
    ".java": "java",
    ".js": "react",
    ".jsx": "react",
    ".ts": "react",
    ".tsx": "react",
    ".mjs": "react",
    ".cjs": "react",
    ".vue": "react",
}


@dataclass(frozen=True)
class LineContext:
    """Everything a rule may look at for one line.

    Windows are only reachable through named thresholds, so a rule can never
    look further than its configured window size.
    """

    path: str
    index: int
    text: str
    window: ContextWindow
    thresholds: Mapping[str, int]

    @property
    def line_number(self) -> int:
        return self.index + 1

    @property
    def stripped(self) -> str:
        return self.text.strip()

    @property
    def lower(self) -> str:
        return self.text.lower()

    @property
    def file_name(self) -> str:
        return PurePosixPath(self.path.replace("\\", "/")).name

    def limit(self, name: str) -> int:
        try:
            return int(self.thresholds[name])
        except KeyError as exc:
            raise CatalogError(f"Unknown threshold: {name}") from exc

    def before(self, window_name: str) -> tuple[str, ...]:
        return self.window.trailing(self.index, self.limit(window_name))

    def after(self, window_name: str) -> tuple[str, ...]:
        return self.window.leading(self.index, self.limit(window_name))

    def here_and_after(self, window_name: str) -> tuple[str, ...]:
        return (self.text,) + self.after(window_name)

    def previous(self) -> str | None:
        return self.window.previous(self.index)

    def next(self) -> str | None:
        return self.window.next(self.index)


Predicate = Callable[[LineContext], bool]
MessageRenderer = Callable[[LineContext], str]


@dataclass(frozen=True)
class RuleDefinition:
    rule_id: str
    severity: str
    category: str
    applies_to: Predicate
    message: str | MessageRenderer
    suggestion: str | None = None
    description: str = ""

    def render(self, ctx: LineContext) -> tuple[str, str | None]:
        message = self.message(ctx) if callable(self.message) else self.message
        return message, self.suggestion


def rule(
    rule_id: str,
    severity: str,
    category: str,
    message: str | MessageRenderer,
    suggestion: str | None = None,
) -> Callable[[Predicate], RuleDefinition]:
    """Turn a predicate function into a RuleDefinition; its docstring becomes the description."""

    def decorator(func: Predicate) -> RuleDefinition:
        return RuleDefinition(
            rule_id=rule_id,
            severity=severity,
            category=category,
            applies_to=func,
            message=message,
            suggestion=suggestion,
            description=" ".join((func.__doc__ or "").split()),
        )

    return decorator


@dataclass(frozen=True)
class CommentPolicy:
    doc_label: str
    doc_tags: tuple[str, ...]
    min_doc_length: int
    open_marker: str = "/*"
    close_marker: str = "*/"
    doc_marker: str = "/**"


class RuleCatalog:
    def __init__(
        self,
        language: str,
        rules: Iterable[RuleDefinition],
        *,
        comment_policy: CommentPolicy,
        thresholds: Mapping[str, int] | None = None,
        disabled: Iterable[str] = (),
    ):
        self.language = language
        self.comment_policy = comment_policy
        self._rules = tuple(rules)
        self._thresholds = MappingProxyType(dict(thresholds or {}))
        self._disabled = frozenset(disabled)

        seen: set[str] = set()
        for item in self._rules:
            if item.rule_id in seen:
                raise CatalogError(f"Duplicate rule id in {language} catalog: {item.rule_id}")
            if item.severity not in SEVERITIES:
                raise CatalogError(f"Rule {item.rule_id} has unknown severity: {item.severity}")
            seen.add(item.rule_id)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[RuleDefinition]:
        return iter(self._rules)

    @property
    def rules(self) -> tuple[RuleDefinition, ...]:
        return self._rules

    @property
    def active_rules(self) -> tuple[RuleDefinition, ...]:
        return tuple(item for item in self._rules if item.rule_id not in self._disabled)

    @property
    def thresholds(self) -> Mapping[str, int]:
        return self._thresholds

    @property
    def disabled(self) -> frozenset[str]:
        return self._disabled

    def is_enabled(self, rule_id: str) -> bool:
        return rule_id not in self._disabled

    def rule_ids(self) -> list[str]:
        return [item.rule_id for item in self._rules]

    def get(self, rule_id: str) -> RuleDefinition | None:
        for item in self._rules:
            if item.rule_id == rule_id:
                return item
        return None

    def extended(self, *rules: RuleDefinition) -> "RuleCatalog":
        return RuleCatalog(
            self.language,
            self._rules + tuple(rules),
            comment_policy=self.comment_policy,
            thresholds=self._thresholds,
            disabled=self._disabled,
        )

    def configured(
        self,
        *,
        disabled: Iterable[str] = (),
        thresholds: Mapping[str, int] | None = None,
    ) -> "RuleCatalog":
        overrides = dict(thresholds or {})
        unknown = sorted(set(overrides) - set(self._thresholds))
        if unknown:
            raise CatalogError(
                f"Unknown thresholds for {self.language} catalog: {', '.join(unknown)}"
            )
        merged = dict(self._thresholds)
        for name, value in overrides.items():
            merged[name] = int(value)
        return RuleCatalog(
            self.language,
            self._rules,
            comment_policy=self.comment_policy,
            thresholds=merged,
            disabled=self._disabled | frozenset(disabled),
        )


class CatalogRegistry:
    def __init__(
        self,
        catalogs: Iterable[RuleCatalog],
        extensions: Mapping[str, str] | None = None,
    ):
        self._catalogs = {catalog.language: catalog for catalog in catalogs}
        self._extensions = MappingProxyType(
            {key.lower(): value for key, value in (extensions or DEFAULT_EXTENSIONS).items()}
        )

    def languages(self) -> list[str]:
        return sorted(self._catalogs)

    def for_language(self, language: str | None) -> RuleCatalog | None:
        if not language:
            return None
        return self._catalogs.get(language)

    def language_for_path(self, path: str) -> str | None:
        return language_for_path(path, self._extensions)

    def configured(
        self,
        *,
        disabled: Iterable[str] = (),
        thresholds: Mapping[str, Mapping[str, int]] | None = None,
        extensions: Mapping[str, str] | None = None,
    ) -> "CatalogRegistry":
        threshold_map = dict(thresholds or {})
        unknown = sorted(set(threshold_map) - set(self._catalogs))
        if unknown:
            raise CatalogError(f"Thresholds given for unknown languages: {', '.join(unknown)}")

        disabled = tuple(disabled)
        catalogs = [
            catalog.configured(disabled=disabled, thresholds=threshold_map.get(language))
            for language, catalog in self._catalogs.items()
        ]
        merged_extensions = dict(self._extensions)
        merged_extensions.update({key.lower(): value for key, value in (extensions or {}).items()})
        return CatalogRegistry(catalogs, merged_extensions)


def language_for_path(path: str, extensions: Mapping[str, str] | None = None) -> str | None:
    mapping = extensions if extensions is not None else DEFAULT_EXTENSIONS
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    if not suffix:
        return None
    return mapping.get(suffix)


@lru_cache(maxsize=1)
def default_registry() -> CatalogRegistry:
    from review_scanner.scanners.java_rules import build_java_catalog
    from review_scanner.scanners.react_rules import build_react_catalog

    return CatalogRegistry([build_java_catalog(), build_react_catalog()])
