import pytest

from review_scanner.errors import CatalogError
from review_scanner.models import WARNING
from review_scanner.scanners.catalog import (
    CatalogRegistry,
    RuleCatalog,
    default_registry,
    language_for_path,
    rule,
)
from review_scanner.scanners.java_rules import JAVA_COMMENT_POLICY, build_java_catalog


def _always(rule_id: str, severity: str = WARNING):
    return rule(rule_id, severity, "quality", f"{rule_id} fired")(lambda ctx: True)


def test_duplicate_rule_ids_are_rejected():
    with pytest.raises(CatalogError):
        RuleCatalog("java", [_always("DUP"), _always("DUP")], comment_policy=JAVA_COMMENT_POLICY)


def test_unknown_severity_is_rejected():
    with pytest.raises(CatalogError):
        RuleCatalog("java", [_always("BAD", "critical")], comment_policy=JAVA_COMMENT_POLICY)


def test_extended_returns_new_catalog():
    catalog = RuleCatalog("java", [_always("ONE")], comment_policy=JAVA_COMMENT_POLICY)

    bigger = catalog.extended(_always("TWO"))

    assert catalog.rule_ids() == ["ONE"]
    assert bigger.rule_ids() == ["ONE", "TWO"]


def test_configured_disables_rules_and_overrides_thresholds():
    catalog = build_java_catalog()

    tuned = catalog.configured(disabled=["LONG_LINE"], thresholds={"max_line_length": 200})

    assert "LONG_LINE" not in [item.rule_id for item in tuned.active_rules]
    assert tuned.thresholds["max_line_length"] == 200
    assert catalog.thresholds["max_line_length"] == 120
    assert catalog.is_enabled("LONG_LINE")


def test_configured_rejects_unknown_threshold():
    with pytest.raises(CatalogError):
        build_java_catalog().configured(thresholds={"no_such_window": 3})


def test_java_catalog_order_and_uniqueness():
    catalog = build_java_catalog()
    ids = catalog.rule_ids()

    assert ids[0] == "USE_LOGGING_FRAMEWORK"
    assert ids[-1] == "LOG_INJECTION_RISK"
    assert len(ids) == len(set(ids))
    assert catalog.get("RESOURCE_LEAK").severity == "error"
    assert catalog.get("NOPE") is None


def test_language_for_path():
    assert language_for_path("src/main/App.java") == "java"
    assert language_for_path("web/App.TSX") == "react"
    assert language_for_path("web/index.mjs") == "react"
    assert language_for_path("tools/build.py") is None
    assert language_for_path("Makefile") is None


def test_default_registry_languages():
    registry = default_registry()

    assert registry.languages() == ["java", "react"]
    assert registry.for_language("cobol") is None
    assert registry.for_language("react").get("MISSING_KEY_PROP").severity == "error"


def test_registry_rejects_thresholds_for_unknown_language():
    with pytest.raises(CatalogError):
        default_registry().configured(thresholds={"kotlin": {"max_line_length": 100}})


def test_registry_extension_overrides():
    registry = CatalogRegistry([build_java_catalog()]).configured(extensions={".kts": "java"})

    assert registry.language_for_path("build.kts") == "java"
