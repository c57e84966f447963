"""
Module: conftest.py

Date: 2026-01-16

Global pytest configuration and fixtures for the xmptk test suite.

Tests marked ``engine`` talk to the real libexempi and are skipped when the
library cannot be loaded. Everything else runs against FakeNativeLibrary.
"""

import os
import sys

# Add project root to sys.path so 'tests.mocks' can be imported
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from tests.mocks import FakeNativeLibrary
from xmptk.infra.bridge.lifecycle import EngineLifecycle, get_engine, set_engine

_engine_state = {}


def _native_engine_available():
    """Try to load libexempi once per session."""
    if "available" not in _engine_state:
        from xmptk.infra.native.loader import load_native_library

        try:
            load_native_library()
            _engine_state["available"] = True
        except OSError:
            _engine_state["available"] = False
    return _engine_state["available"]


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line("markers", "engine: test needs the native libexempi engine")


def pytest_collection_modifyitems(session, config, items):
    """Skip engine tests when libexempi is not installed."""
    _ = session
    _ = config

    if not any("engine" in item.keywords for item in items):
        return
    if _native_engine_available():
        return

    skip_engine = pytest.mark.skip(reason="libexempi is not available")
    for item in items:
        if "engine" in item.keywords:
            item.add_marker(skip_engine)


@pytest.fixture
def fake_lib():
    """A fresh fake native library."""
    return FakeNativeLibrary()


@pytest.fixture
def fake_engine(fake_lib):
    """Install an engine backed by ``fake_lib`` as the global engine."""
    previous = get_engine()
    engine = EngineLifecycle(loader=lambda: fake_lib, terminate_at_exit=False)
    set_engine(engine)
    yield engine
    set_engine(previous)


@pytest.fixture
def sample_packet():
    """A minimal RDF packet with one ordered creator."""
    return (
        '<x:xmpmeta xmlns:x="adobe:ns:meta/">'
        '<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">'
        '<rdf:Description rdf:about="" xmlns:dc="http://purl.org/dc/elements/1.1/">'
        "<dc:creator><rdf:Seq><rdf:li>Jane</rdf:li></rdf:Seq></dc:creator>"
        "</rdf:Description>"
        "</rdf:RDF>"
        "</x:xmpmeta>"
    )
