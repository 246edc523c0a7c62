from review_scanner.scanners.catalog import (
    CatalogRegistry,
    CommentPolicy,
    LineContext,
    RuleCatalog,
    RuleDefinition,
    default_registry,
    language_for_path,
    rule,
)
from review_scanner.scanners.engine import Analyzer, analyze

__all__ = [
    "Analyzer",
    "CatalogRegistry",
    "CommentPolicy",
    "LineContext",
    "RuleCatalog",
    "RuleDefinition",
    "analyze",
    "default_registry",
    "language_for_path",
    "rule",
]
