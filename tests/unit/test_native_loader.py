"""Tests for locating and loading libexempi.

Date: 2026-01-16
"""

from unittest.mock import MagicMock, patch

import pytest

from xmptk.config import NATIVE_LIBRARY_ENV
from xmptk.infra.native.loader import load_native_library
from xmptk.infra.native.prototypes import REQUIRED_SYMBOLS, bind_prototypes
from xmptk.utils.shared.native_library import candidate_library_paths


class TestCandidateLibraryPaths:
    """Test library discovery order."""

    def test_explicit_path_is_only_candidate(self, tmp_path):
        """An explicit path disables every other lookup."""
        path = tmp_path / "libexempi.so"
        assert candidate_library_paths(path) == [str(path)]

    def test_environment_override(self, monkeypatch):
        """The environment variable wins over discovery."""
        monkeypatch.setenv(NATIVE_LIBRARY_ENV, "/opt/exempi/lib/libexempi.so.8")
        assert candidate_library_paths() == ["/opt/exempi/lib/libexempi.so.8"]

    def test_candidates_are_unique(self, monkeypatch):
        """Discovery never lists the same location twice."""
        monkeypatch.delenv(NATIVE_LIBRARY_ENV, raising=False)
        candidates = candidate_library_paths()
        assert len(candidates) == len(set(candidates))


class TestBindPrototypes:
    """Test applying signatures to the loaded library."""

    def test_missing_required_symbol(self):
        """A library without the core entry points is rejected."""
        lib = MagicMock(spec=[])
        with pytest.raises(OSError):
            bind_prototypes(lib)

    def test_reports_missing_optional_symbols(self):
        """Optional symbols are listed, not fatal."""
        lib = MagicMock(spec=sorted(REQUIRED_SYMBOLS))
        missing = bind_prototypes(lib)
        assert missing
        assert not set(missing) & REQUIRED_SYMBOLS


class TestLoadNativeLibrary:
    """Test the loader itself."""

    def test_unloadable_library_raises_oserror(self, tmp_path):
        """Every failed candidate is reported in one OSError."""
        with patch("xmptk.infra.native.loader.ctypes.CDLL", side_effect=OSError("cannot open")):
            with pytest.raises(OSError) as exc_info:
                load_native_library(tmp_path / "libexempi.so")
        assert "cannot open" in str(exc_info.value)
        assert NATIVE_LIBRARY_ENV in str(exc_info.value)

    def test_first_usable_candidate_is_returned(self):
        """The loader stops at the first library that binds."""
        fake = MagicMock()
        with patch("xmptk.infra.native.loader.candidate_library_paths", return_value=["a", "b"]), patch(
            "xmptk.infra.native.loader.ctypes.CDLL", return_value=fake
        ) as cdll, patch("xmptk.infra.native.loader.bind_prototypes", return_value=[]):
            assert load_native_library() is fake
        cdll.assert_called_once_with("a")
