"""Module: handles.py

Date: 2026-01-07

Owners for opaque libexempi objects.

Each wrapper holds exactly one native pointer and frees it exactly once,
either on an explicit ``release()`` or when the wrapper is garbage
collected (``weakref.finalize``). After release the pointer is gone:
``ptr`` raises ValueError instead of handing a dangling address to C.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Any

from xmptk.infra.bridge.boundary_error import BoundaryError
from xmptk.utils.logging.logger_factory import get_cached_logger

if TYPE_CHECKING:
    from xmptk.infra.bridge.lifecycle import EngineLifecycle

logger = get_cached_logger(__name__)


def _destroy(engine: EngineLifecycle, destructor: str, ptr: int, owner: str) -> None:
    """Free one native object; failures are logged, never raised."""
    if engine.terminated:
        logger.debug("[Handles] %s 0x%x outlived the engine; not freed", owner, ptr)
        return
    try:
        getattr(engine.library, destructor)(ptr)
    except Exception:
        logger.exception("[Handles] Failed to free %s 0x%x", owner, ptr)


class NativeHandle:
    """Exclusive owner of one native object."""

    _destructor = ""

    def __init__(self, engine: EngineLifecycle, ptr: int) -> None:
        if not ptr:
            raise ValueError(f"{type(self).__name__} requires a non-NULL pointer")
        self._engine = engine
        self._ptr = ptr
        self._finalizer = weakref.finalize(
            self, _destroy, engine, self._destructor, ptr, type(self).__name__
        )

    @property
    def engine(self) -> EngineLifecycle:
        return self._engine

    @property
    def lib(self) -> Any:
        return self._engine.library

    @property
    def alive(self) -> bool:
        return self._finalizer.alive

    @property
    def ptr(self) -> int:
        if not self._finalizer.alive:
            raise ValueError(f"{type(self).__name__} used after release")
        return self._ptr

    def release(self) -> None:
        """Free the native object now. Later calls do nothing."""
        self._finalizer()

    def _replace_ptr(self, ptr: int) -> None:
        """Take ownership of ``ptr`` and free the previously owned object."""
        old = self._finalizer
        self._ptr = ptr
        self._finalizer = weakref.finalize(
            self, _destroy, self._engine, self._destructor, ptr, type(self).__name__
        )
        old()

    def __repr__(self) -> str:
        state = f"0x{self._ptr:x}" if self.alive else "released"
        return f"<{type(self).__name__} {state}>"


class FileHandle(NativeHandle):
    """A libexempi file session (``XmpFilePtr``).

    ``pending`` is the slot fed by :meth:`notify`; the bridge drains it at
    the start of the next fallible operation on this handle.
    """

    _destructor = "xmp_files_free"

    def __init__(self, engine: EngineLifecycle, ptr: int) -> None:
        super().__init__(engine, ptr)
        self.pending = BoundaryError()
        self.is_open = False
        self.path: str | None = None

    def notify(self, kind: int, message: str | None = None) -> None:
        """Stash an out-of-band engine report; the most recent one wins."""
        logger.debug("[Handles] File notification %s: %s", kind, message)
        self.pending.set(kind, message)

    def drain_pending(self, err: BoundaryError) -> bool:
        """Move a stashed report into ``err``.

        Returns:
            True if there was one (the caller must then fail without
            performing its operation).

        """
        if not self.pending.had_error:
            return False
        err.copy_from(self.pending.take())
        return True


class MetaHandle(NativeHandle):
    """A libexempi metadata model (``XmpPtr``).

    Iterators created over the model are tracked so they can be released
    before the model itself, and so the model is never swapped out from
    under a live cursor.
    """

    _destructor = "xmp_free"

    def __init__(self, engine: EngineLifecycle, ptr: int) -> None:
        super().__init__(engine, ptr)
        self._iterators: weakref.WeakSet[IteratorHandle] = weakref.WeakSet()

    def register_iterator(self, iterator: IteratorHandle) -> None:
        self._iterators.add(iterator)

    def has_live_iterators(self) -> bool:
        return any(it.alive for it in list(self._iterators))

    def adopt(self, ptr: int) -> None:
        """Replace the owned model with ``ptr`` (freeing the old one).

        Raises:
            ValueError: If iterators over the current model are still alive.

        """
        if self.has_live_iterators():
            raise ValueError("Cannot replace a model that has live iterators")
        self._replace_ptr(ptr)

    def release(self) -> None:
        for iterator in list(self._iterators):
            iterator.release()
        super().release()


class IteratorHandle(NativeHandle):
    """A libexempi iteration cursor (``XmpIteratorPtr``).

    Holds a back-reference to the model it walks; the model releases its
    iterators before itself.
    """

    _destructor = "xmp_iterator_free"

    def __init__(self, engine: EngineLifecycle, ptr: int, meta: MetaHandle) -> None:
        super().__init__(engine, ptr)
        self.meta = meta
        self.exhausted = False
        meta.register_iterator(self)
