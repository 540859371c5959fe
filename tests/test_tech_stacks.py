import pytest

from sdsgen.data.tech_stacks import _parse_catalog, load_catalog
from sdsgen.errors import ConfigurationError


def test_catalog_platforms_and_defaults():
    catalog = load_catalog()
    assert catalog.platform_names() == ["mobile", "web", "backend", "desktop", "embedded"]
    assert catalog.default_stack("mobile")["name"] == "React Native"
    assert catalog.default_stack("web")["name"] == "React/Next.js"


def test_api_is_an_alias_of_backend():
    catalog = load_catalog()
    assert catalog.stacks_for("api") == catalog.stacks_for("backend")
    assert catalog.canonical(" API ") == "backend"


def test_unknown_platform():
    with pytest.raises(ConfigurationError):
        load_catalog().stacks_for("mainframe")


def test_returned_stacks_are_copies():
    catalog = load_catalog()
    catalog.default_stack("web")["name"] = "changed"
    assert catalog.default_stack("web")["name"] == "React/Next.js"


def test_find_stack():
    catalog = load_catalog()
    assert catalog.find_stack("mobile", 2)["name"] == "Flutter"
    assert catalog.find_stack("mobile", 99) is None


def test_filter_by_preferences_matches_name_or_language():
    catalog = load_catalog()
    assert [s["name"] for s in catalog.filter_by_preferences("mobile", ["kotlin"])] == ["Native Android (Kotlin)"]
    assert [s["name"] for s in catalog.filter_by_preferences("mobile", ["DART"])] == ["Flutter"]


def test_filter_without_match_returns_everything():
    catalog = load_catalog()
    assert len(catalog.filter_by_preferences("web", ["cobol"])) == 2
    assert len(catalog.filter_by_preferences("web", [])) == 2


def test_catalog_without_root_key_is_rejected():
    with pytest.raises(ConfigurationError):
        _parse_catalog({"platforms": {}})
