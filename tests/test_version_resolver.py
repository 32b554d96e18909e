import version_resolver
from version_resolver import VersionOrder


# ── clean / parse ────────────────────────────────────────────────────────────

def test_clean_extracts_first_dotted_run():
    assert version_resolver.clean("v2.3.1-beta") == "2.3.1"
    assert version_resolver.clean("Release 4.0.1 (hotfix 2)") == "4.0.1"
    assert version_resolver.clean("1.2") == "1.2"


def test_clean_without_numeric_run_falls_back():
    assert version_resolver.clean("nightly") == "0.0.0"
    assert version_resolver.clean("build 7") == "0.0.0"
    assert version_resolver.clean("") == "0.0.0"
    assert version_resolver.clean(None) == "0.0.0"


def test_clean_ignores_trailing_dot():
    assert version_resolver.clean("1.2.") == "1.2"
    assert version_resolver.clean("7. then 3.4") == "3.4"


def test_parse_reports_component_count():
    parsed = version_resolver.parse("v10.0.3.1")
    assert parsed.components == (10, 0, 3, 1)
    assert parsed.component_count == 4
    assert str(parsed) == "10.0.3.1"
    assert version_resolver.parse("abc") is None


# ── compare ──────────────────────────────────────────────────────────────────

def test_compare_numeric():
    assert version_resolver.compare("1.2.0", "1.2.0") is VersionOrder.EQUAL
    assert version_resolver.compare("1.3.0", "1.2.9") is VersionOrder.GREATER
    assert version_resolver.compare("1.2.9", "1.3.0") is VersionOrder.LESS
    assert version_resolver.compare("1.10", "1.9") is VersionOrder.GREATER


def test_compare_missing_components_are_zero():
    assert version_resolver.compare("1.2", "1.2.0") is VersionOrder.EQUAL
    assert version_resolver.compare("1.2.0.0", "1.2") is VersionOrder.EQUAL
    assert version_resolver.compare("1.2", "1.2.0.1") is VersionOrder.LESS


def test_compare_uses_cleaned_run():
    assert version_resolver.compare("v1.2.0-beta", "1.2") is VersionOrder.EQUAL


def test_compare_non_numeric_fallback_only_signals_difference():
    assert version_resolver.compare("abc", "abc") is VersionOrder.EQUAL
    assert version_resolver.compare("Nightly", "nightly") is VersionOrder.EQUAL
    assert version_resolver.compare("abc", "xyz") is not VersionOrder.EQUAL
    assert version_resolver.compare("xyz", "abc") is not VersionOrder.EQUAL
    assert version_resolver.compare("abc", "1.0") is not VersionOrder.EQUAL


def test_has_update():
    assert version_resolver.has_update("1.1", "1.0")
    assert not version_resolver.has_update("1.0.0", "1.0")
    # a rollback still counts as "different"
    assert version_resolver.has_update("0.9", "1.0")
