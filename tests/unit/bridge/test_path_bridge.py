"""Tests for path composition.

Date: 2026-01-16
"""

import pytest

from xmptk.infra.bridge.boundary_error import BAD_INDEX, BAD_SCHEMA, BAD_XPATH, BoundaryError
from xmptk.infra.bridge.meta_bridge import split_last_step
from xmptk.infra.bridge.path_bridge import (
    LAST_ITEM,
    compose_array_item_path,
    compose_field_selector,
    compose_lang_selector,
    compose_qualifier_path,
    compose_struct_field_path,
    normalize_lang,
)
from xmptk.infra.bridge.strings import take_text

DC = "http://purl.org/dc/elements/1.1/"
XMP = "http://ns.adobe.com/xap/1.0/"
XML = "http://www.w3.org/XML/1998/namespace"
UNREGISTERED = "http://example.com/unregistered/"


@pytest.fixture(autouse=True)
def _fake(fake_engine):
    return fake_engine


def _compose(func, *args):
    err = BoundaryError()
    result = func(err, *args)
    return take_text(result), err


class TestArrayItemPath:
    """Test array item paths."""

    def test_index(self):
        """Indexes are written 1-based as given."""
        path, err = _compose(compose_array_item_path, DC, "creator", 2)
        assert path == "creator[2]"
        assert not err.had_error

    def test_last_item(self):
        """LAST_ITEM selects the last existing item."""
        path, _ = _compose(compose_array_item_path, DC, "creator", LAST_ITEM)
        assert path == "creator[last()]"

    def test_negative_index(self):
        """Other negative indexes are out of bounds."""
        path, err = _compose(compose_array_item_path, DC, "creator", -5)
        assert path is None
        assert err.kind == BAD_INDEX

    def test_unregistered_schema(self):
        """The schema namespace must be registered."""
        path, err = _compose(compose_array_item_path, UNREGISTERED, "creator", 1)
        assert path is None
        assert err.kind == BAD_SCHEMA

    def test_empty_names(self):
        """Empty schema and array names are rejected."""
        _, err = _compose(compose_array_item_path, "", "creator", 1)
        assert err.kind == BAD_SCHEMA
        _, err = _compose(compose_array_item_path, DC, "", 1)
        assert err.kind == BAD_XPATH


class TestFieldAndQualifierPaths:
    """Test paths with a namespaced final step."""

    def test_struct_field(self):
        """The field is prefixed with its namespace's prefix."""
        path, _ = _compose(compose_struct_field_path, XMP, "Thumb", DC, "format")
        assert path == "Thumb/dc:format"

    def test_qualifier(self):
        """Qualifier steps start with a question mark."""
        path, _ = _compose(compose_qualifier_path, DC, "title", XML, "lang")
        assert path == "title/?xml:lang"

    def test_unregistered_field_namespace(self):
        """The field namespace must be registered too."""
        path, err = _compose(compose_struct_field_path, XMP, "Thumb", UNREGISTERED, "f")
        assert path is None
        assert err.kind == BAD_SCHEMA

    def test_field_selector_quotes_value(self):
        """Quotes inside the value are escaped."""
        path, _ = _compose(compose_field_selector, DC, "list", DC, "name", 'say "hi"')
        assert path == 'list[dc:name="say &quot;hi&quot;"]'

    def test_field_selector_without_value(self):
        """A missing value selects the empty string."""
        path, _ = _compose(compose_field_selector, DC, "list", DC, "name", None)
        assert path == 'list[dc:name=""]'


class TestLangSelector:
    """Test language item selectors."""

    def test_normalizes_language(self):
        """The language is normalized before composing."""
        path, _ = _compose(compose_lang_selector, DC, "title", "EN-us")
        assert path == 'title[?xml:lang="en-US"]'

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("X-Default", "x-default"),
            ("de-CH", "de-CH"),
            ("zh-Hant-tw", "zh-hant-tw"),
            ("fr", "fr"),
        ],
    )
    def test_normalize_lang(self, raw, expected):
        """Only a two-letter second subtag is upper case."""
        assert normalize_lang(raw) == expected


class TestSplitLastStep:
    """Test splitting iterator paths into parent and final step."""

    def test_top_level(self):
        """A top-level name has no parent."""
        assert split_last_step("dc:subject") == ("", "dc:subject")

    def test_array_item(self):
        """Array items split at the bracket."""
        assert split_last_step("dc:creator[1]") == ("dc:creator", "[1]")

    def test_qualifier(self):
        """Qualifiers split at their slash."""
        assert split_last_step("a/b:c[2]/?q:x") == ("a/b:c[2]", "/?q:x")

    def test_separators_inside_selector_ignored(self):
        """Slashes and brackets inside quoted values do not split."""
        assert split_last_step('dc:title[?xml:lang="a/b[c]"]') == (
            "dc:title",
            '[?xml:lang="a/b[c]"]',
        )
