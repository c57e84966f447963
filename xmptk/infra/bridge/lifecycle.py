"""Module: lifecycle.py

Date: 2026-01-06

Process-wide, one-shot initialization of the native engine.

libexempi must see ``xmp_init()`` before any other call and
``xmp_terminate()`` at most once. :class:`EngineLifecycle` performs the first
initialization under a lock; every caller, concurrent or later, observes
that single outcome. Failure is sticky for the life of the process.

Usage:
    from xmptk.infra.bridge.lifecycle import require_engine

    lib = require_engine(err)
    if lib is None:
        return None  # err holds NO_TOOLKIT_KIND
"""

from __future__ import annotations

import atexit
import threading
from collections.abc import Callable
from enum import Enum
from typing import Any

from xmptk.config import TERMINATE_AT_EXIT
from xmptk.infra.bridge.boundary_error import NO_TOOLKIT_KIND, BoundaryError
from xmptk.infra.native.loader import load_native_library
from xmptk.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)


class EngineState(Enum):
    """Initialization state of the native engine."""

    UNINITIALIZED = "uninitialized"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class EngineLifecycle:
    """Sticky, thread-safe lazy initializer for libexempi.

    Features:
    - Exactly one load + ``xmp_init()`` attempt per instance
    - Concurrent first callers block until that attempt completes
    - Failure is recorded, logged and reported; never fatal to the process
    - ``xmp_terminate()`` at most once, optionally from an atexit hook
    """

    def __init__(
        self,
        loader: Callable[[], Any] = load_native_library,
        terminate_at_exit: bool = TERMINATE_AT_EXIT,
    ) -> None:
        """Initialize the lifecycle manager.

        Args:
            loader: Returns a configured native library; raises OSError when
                none can be loaded.
            terminate_at_exit: Register ``terminate()`` with atexit once
                initialization succeeds.

        """
        self._loader = loader
        self._terminate_at_exit = terminate_at_exit
        self._lock = threading.Lock()
        self._state = EngineState.UNINITIALIZED
        self._lib: Any = None
        self._failure_reason: str | None = None
        self._terminated = False

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def failure_reason(self) -> str | None:
        return self._failure_reason

    @property
    def terminated(self) -> bool:
        return self._terminated

    @property
    def library(self) -> Any:
        """The loaded library, or None before a successful initialization."""
        return self._lib

    def ensure_initialized(self) -> bool:
        """Initialize the engine on first use.

        Returns:
            True iff the single initialization attempt succeeded and the
            engine has not been terminated since.

        """
        with self._lock:
            if self._state is EngineState.UNINITIALIZED:
                self._initialize_locked()
            return self._state is EngineState.SUCCEEDED and not self._terminated

    def _initialize_locked(self) -> None:
        self._state = EngineState.IN_PROGRESS
        try:
            lib = self._loader()
            ok = bool(lib.xmp_init())
        except Exception as e:
            self._fail(f"{type(e).__name__}: {e}")
            logger.exception("[EngineLifecycle] Failed to load the XMP engine")
            return

        if not ok:
            self._fail("xmp_init() reported failure")
            logger.error("[EngineLifecycle] xmp_init() reported failure")
            return

        self._lib = lib
        self._state = EngineState.SUCCEEDED
        logger.debug("[EngineLifecycle] XMP engine initialized")
        if self._terminate_at_exit:
            atexit.register(self.terminate)

    def _fail(self, reason: str) -> None:
        self._failure_reason = reason
        self._state = EngineState.FAILED

    def require(self, err: BoundaryError) -> Any:
        """Return the initialized library or report why it is unavailable.

        Args:
            err: Populated with ``NO_TOOLKIT_KIND`` when the engine is unusable.

        Returns:
            The native library, or None.

        """
        if self.ensure_initialized():
            return self._lib

        if self._terminated:
            err.set(NO_TOOLKIT_KIND, "XMP engine has been terminated")
        else:
            reason = self._failure_reason or "unknown reason"
            err.set(NO_TOOLKIT_KIND, f"XMP engine failed to initialize: {reason}")
        return None

    def terminate(self) -> None:
        """Call ``xmp_terminate()`` once, if initialization succeeded."""
        with self._lock:
            if self._state is not EngineState.SUCCEEDED or self._terminated:
                return
            self._terminated = True
            lib = self._lib
        try:
            lib.xmp_terminate()
            logger.debug("[EngineLifecycle] XMP engine terminated")
        except Exception:
            logger.exception("[EngineLifecycle] xmp_terminate() failed")


# Global instance (singleton pattern)
_engine: EngineLifecycle | None = None
_engine_lock = threading.Lock()


def get_engine() -> EngineLifecycle:
    """Get the global engine lifecycle instance.

    Returns:
        Singleton EngineLifecycle instance

    """
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = EngineLifecycle()
        return _engine


def set_engine(engine: EngineLifecycle | None) -> None:
    """Set a custom engine lifecycle (useful for testing).

    Args:
        engine: Custom EngineLifecycle instance, or None to reset

    """
    global _engine
    with _engine_lock:
        _engine = engine


def ensure_initialized() -> bool:
    """Initialize the global engine if needed; True when it is usable."""
    return get_engine().ensure_initialized()


def require_engine(err: BoundaryError) -> Any:
    """Shortcut for ``get_engine().require(err)``."""
    return get_engine().require(err)
