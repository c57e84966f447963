"""Module: iterator_bridge.py

Date: 2026-01-12

Bridge entry points for iteration cursors (``XmpIteratorPtr``).

An iterator walks the model it was created from in pre-order. Exhaustion is
terminal: once ``xmp_iterator_next`` reports the end, later calls answer
"exhausted" without touching the engine again.
"""

from __future__ import annotations

import ctypes

from xmptk.infra.bridge.boundary_error import BoundaryError, capture_native_error, native_call
from xmptk.infra.bridge.handles import IteratorHandle, MetaHandle
from xmptk.infra.bridge.strings import NativeString, OwnedText, encode_text
from xmptk.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)

# Skip modes
SKIP_SUBTREE = 0x0001
SKIP_SIBLINGS = 0x0002


def iterator_new(
    meta: MetaHandle,
    err: BoundaryError,
    schema_ns: str = "",
    prop_name: str = "",
    options: int = 0,
) -> IteratorHandle | None:
    """Create a cursor over ``meta``.

    An empty ``schema_ns`` walks the whole model; an empty ``prop_name``
    walks the whole schema.
    """
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(prop_name)
    ptr = meta.ptr
    lib = meta.engine.require(err)
    if lib is None:
        return None
    with native_call(err, "iterator_new"):
        it = lib.xmp_iterator_new(ptr, ns, name, options)
        if it:
            return IteratorHandle(meta.engine, it, meta)
        if not capture_native_error(lib, err, "xmp_iterator_new"):
            err.set_unknown()
    return None


def iterator_next(
    iterator: IteratorHandle, err: BoundaryError
) -> tuple[OwnedText, OwnedText, OwnedText, int] | None:
    """Next ``(schema_ns, path, value, options)``; None once exhausted."""
    err.clear()
    if iterator.exhausted:
        return None
    ptr = iterator.ptr
    lib = iterator.engine.require(err)
    if lib is None:
        return None
    with native_call(err, "iterator_next"):
        bits = ctypes.c_uint32(0)
        with NativeString(lib) as ns, NativeString(lib) as path, NativeString(lib) as value:
            if lib.xmp_iterator_next(ptr, ns.ptr, path.ptr, value.ptr, ctypes.byref(bits)):
                return ns.copy(), path.copy(), value.copy(), bits.value
            if not capture_native_error(lib, err, "xmp_iterator_next"):
                iterator.exhausted = True
                logger.debug("[IteratorBridge] Iterator exhausted")
    return None


def iterator_skip(iterator: IteratorHandle, err: BoundaryError, mode: int) -> bool:
    """Skip the rest of the current subtree or of its siblings."""
    err.clear()
    if iterator.exhausted:
        return True
    ptr = iterator.ptr
    lib = iterator.engine.require(err)
    if lib is None:
        return False
    with native_call(err, "iterator_skip"):
        if lib.xmp_iterator_skip(ptr, mode):
            return True
        if not capture_native_error(lib, err, "xmp_iterator_skip"):
            err.set_unknown()
    return False
