"""Tests for iteration cursors against the fake engine.

Date: 2026-01-16
"""

import pytest

from xmptk.infra.bridge import iterator_bridge
from xmptk.infra.bridge.boundary_error import BoundaryError
from xmptk.infra.bridge.meta_bridge import meta_new
from xmptk.infra.bridge.strings import take_text

DC = "http://purl.org/dc/elements/1.1/"


@pytest.fixture
def meta(fake_engine, fake_lib):
    fake_lib.iteration_rows = [
        (DC, "", "", 0x8000_0000),
        (DC, "dc:creator", "", 0x0600),
        (DC, "dc:creator[1]", "Jane", 0),
    ]
    err = BoundaryError()
    handle = meta_new(err)
    assert not err.had_error
    return handle


def _drain(iterator, err):
    rows = []
    while True:
        item = iterator_bridge.iterator_next(iterator, err)
        if item is None:
            return rows
        ns, path, value, options = item
        rows.append((take_text(ns), take_text(path), take_text(value), options))


class TestIteratorNext:
    """Test stepping through a model."""

    def test_reports_rows_in_order(self, meta):
        """Each step yields namespace, path, value and option bits."""
        err = BoundaryError()
        iterator = iterator_bridge.iterator_new(meta, err)
        rows = _drain(iterator, err)
        assert not err.had_error
        assert rows == [
            (DC, "", "", 0x8000_0000),
            (DC, "dc:creator", "", 0x0600),
            (DC, "dc:creator[1]", "Jane", 0),
        ]

    def test_exhaustion_is_terminal(self, meta, fake_lib):
        """After the end the engine is not asked again."""
        err = BoundaryError()
        iterator = iterator_bridge.iterator_new(meta, err)
        _drain(iterator, err)
        assert iterator.exhausted
        calls = fake_lib.calls["xmp_iterator_next"]

        assert iterator_bridge.iterator_next(iterator, err) is None
        assert iterator_bridge.iterator_next(iterator, err) is None
        assert not err.had_error
        assert fake_lib.calls["xmp_iterator_next"] == calls

    def test_engine_error_is_not_exhaustion(self, meta, fake_lib):
        """A failing step reports the error and leaves the cursor usable."""
        err = BoundaryError()
        iterator = iterator_bridge.iterator_new(meta, err)
        fake_lib.fail_next["xmp_iterator_next"] = -105
        assert iterator_bridge.iterator_next(iterator, err) is None
        assert err.kind == 105
        assert not iterator.exhausted

    def test_released_model_rejects_iteration(self, meta):
        """Iterators are released with their model."""
        err = BoundaryError()
        iterator = iterator_bridge.iterator_new(meta, err)
        meta.release()
        with pytest.raises(ValueError):
            iterator_bridge.iterator_next(iterator, err)

    def test_new_failure_without_code(self, meta, fake_lib):
        """A NULL iterator with no code is an unknown failure."""
        fake_lib.fail_next["xmp_iterator_new"] = 0
        err = BoundaryError()
        assert iterator_bridge.iterator_new(meta, err) is None
        assert err.had_error


class TestIteratorSkip:
    """Test skipping parts of the walk."""

    def test_skip_then_exhaust(self, meta):
        """Skipping drops the remaining nodes in the fake."""
        err = BoundaryError()
        iterator = iterator_bridge.iterator_new(meta, err)
        iterator_bridge.iterator_next(iterator, err)
        assert iterator_bridge.iterator_skip(iterator, err, iterator_bridge.SKIP_SIBLINGS)
        assert _drain(iterator, err) == []

    def test_skip_after_exhaustion(self, meta, fake_lib):
        """Skipping an exhausted iterator is a no-op."""
        err = BoundaryError()
        iterator = iterator_bridge.iterator_new(meta, err)
        _drain(iterator, err)
        assert iterator_bridge.iterator_skip(iterator, err, iterator_bridge.SKIP_SUBTREE)
        assert fake_lib.calls["xmp_iterator_skip"] == 0


class TestAdoptWhileIterating:
    """Test that live iterators pin their model."""

    def test_adopt_refused(self, meta):
        """Replacing the model under a cursor is refused."""
        err = BoundaryError()
        iterator = iterator_bridge.iterator_new(meta, err)
        with pytest.raises(ValueError):
            meta.adopt(0x9999)
        assert iterator.alive
