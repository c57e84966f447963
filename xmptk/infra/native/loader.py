"""Module: loader.py

Date: 2026-01-04

Loads libexempi with ctypes and binds its prototypes.

Set XMPTK_EXEMPI_LIBRARY to override discovery.
"""

from __future__ import annotations

import ctypes
import os
from typing import Any

from xmptk.infra.native.prototypes import bind_prototypes
from xmptk.utils.logging.logger_factory import get_cached_logger
from xmptk.utils.shared.native_library import candidate_library_paths

logger = get_cached_logger(__name__)


def load_native_library(path: str | os.PathLike[str] | None = None) -> Any:
    """Load and configure the libexempi shared library.

    Candidates are tried in order until one loads and exports the required
    entry points.

    Args:
        path: Explicit library path. When given, no other location is tried.

    Returns:
        The configured ``ctypes.CDLL``.

    Raises:
        OSError: If no candidate could be loaded.

    """
    errors: list[str] = []
    for candidate in candidate_library_paths(path):
        try:
            lib = ctypes.CDLL(candidate)
            missing = bind_prototypes(lib)
        except OSError as e:
            logger.debug("[NativeLoader] Skipping %s: %s", candidate, e)
            errors.append(f"{candidate}: {e}")
            continue

        if missing:
            logger.debug("[NativeLoader] %s lacks optional symbols: %s", candidate, missing)
        logger.debug("[NativeLoader] Loaded libexempi from %s", candidate)
        return lib

    detail = "; ".join(errors) if errors else "no candidates"
    raise OSError(
        f"Unable to locate the libexempi shared library ({detail}). "
        "Set XMPTK_EXEMPI_LIBRARY to the full path."
    )
