"""Module: native_library.py.

Date: 2026-01-03

Native library detection and path resolution for cross-platform support.

This module locates the libexempi shared library with support for:
- An explicit path in the XMPTK_EXEMPI_LIBRARY environment variable
- A build bundled under the package's lib/ directory
- The platform loader search path (ctypes.util.find_library)
- Graceful degradation when the library is not available

Usage:
    from xmptk.utils.shared.native_library import candidate_library_paths

    for candidate in candidate_library_paths():
        ...
"""

from __future__ import annotations

import ctypes.util
import os
import platform
from pathlib import Path

from xmptk.config import (
    NATIVE_LIBRARY_BUNDLE_DIR,
    NATIVE_LIBRARY_ENV,
    NATIVE_LIBRARY_FILENAMES,
    NATIVE_LIBRARY_NAME,
)
from xmptk.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)


def get_env_library_path() -> str | None:
    """Return the library path forced through the environment, if any."""
    value = os.environ.get(NATIVE_LIBRARY_ENV, "").strip()
    return value or None


def get_bundled_library_path() -> Path | None:
    """Get path to a libexempi build shipped inside the package.

    The bundled directory is searched for each platform-specific file name
    in order, e.g. ``lib/libexempi.so.8`` then ``lib/libexempi.so`` on Linux.

    Returns:
        Path to the shared library or None if not found

    """
    system = platform.system()
    filenames = NATIVE_LIBRARY_FILENAMES.get(system)
    if filenames is None:
        logger.warning("[NativeLibrary] Unknown OS: %s", system)
        return None

    bundled_dir = Path(__file__).resolve().parent.parent.parent / NATIVE_LIBRARY_BUNDLE_DIR
    for filename in filenames:
        library_path = bundled_dir / filename
        if library_path.exists():
            logger.debug("[NativeLibrary] Found bundled library at: %s", library_path)
            return library_path

    logger.debug("[NativeLibrary] No bundled library in: %s", bundled_dir)
    return None


def get_system_library_path() -> str | None:
    """Find libexempi through the platform loader search path.

    Returns:
        Library name or path accepted by ``ctypes.CDLL``, or None

    """
    found = ctypes.util.find_library(NATIVE_LIBRARY_NAME)
    if found:
        logger.debug("[NativeLibrary] Found system library: %s", found)
        return found

    # find_library() needs ldconfig/gcc on Linux; fall back to bare sonames
    system = platform.system()
    names = NATIVE_LIBRARY_FILENAMES.get(system, [])
    return names[0] if names else None


def candidate_library_paths(explicit: str | os.PathLike[str] | None = None) -> list[str]:
    """Return every library location worth trying, most specific first.

    Args:
        explicit: Path given by the caller; when set it is the only candidate.

    Returns:
        Ordered, de-duplicated list of candidates

    """
    if explicit is not None:
        return [os.fspath(explicit)]

    env_path = get_env_library_path()
    if env_path:
        return [env_path]

    candidates: list[str] = []
    bundled = get_bundled_library_path()
    if bundled is not None:
        candidates.append(str(bundled))

    system_path = get_system_library_path()
    if system_path:
        candidates.append(system_path)

    for name in NATIVE_LIBRARY_FILENAMES.get(platform.system(), []):
        candidates.append(name)

    unique: list[str] = []
    for candidate in candidates:
        if candidate not in unique:
            unique.append(candidate)
    return unique
