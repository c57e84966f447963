"""Module: file_bridge.py

Date: 2026-01-12

Bridge entry points for file sessions (``XmpFilePtr``).

Two failure channels feed one handle: the return-value/``xmp_get_error``
channel of each call, and notifications the engine records without failing
the call. The latter are stashed on the handle (:meth:`FileHandle.notify`)
and surfaced by the next fallible operation, which then fails without
running. A stashed notification takes priority over anything that
operation could report itself.
"""

from __future__ import annotations

import os
from typing import Any

from xmptk.infra.bridge.boundary_error import (
    NO_FILE,
    NO_FILE_HANDLER,
    BoundaryError,
    capture_native_error,
    describe_error_code,
    native_call,
    normalize_error_code,
)
from xmptk.infra.bridge.handles import FileHandle, MetaHandle
from xmptk.infra.bridge.lifecycle import get_engine
from xmptk.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)

# Open flags
OPEN_FOR_READ = 0x0000_0001
OPEN_FOR_UPDATE = 0x0000_0002
OPEN_ONLY_XMP = 0x0000_0004
OPEN_FORCE_GIVEN_HANDLER = 0x0000_0008
OPEN_STRICTLY = 0x0000_0010
OPEN_USE_SMART_HANDLER = 0x0000_0020
OPEN_USE_PACKET_SCANNING = 0x0000_0040
OPEN_LIMITED_SCANNING = 0x0000_0080
OPEN_REPAIR_FILE = 0x0000_0100
OPEN_OPTIMIZE_FILE_LAYOUT = 0x0000_0200

# Close flags
CLOSE_SAFE_UPDATE = 0x0001


def _encode_path(path: str | os.PathLike[str] | bytes) -> bytes:
    raw = os.fsencode(path)
    if b"\x00" in raw:
        raise ValueError("File path contains an embedded NUL character")
    return raw


def _poll_notifications(lib: Any, handle: FileHandle, operation: str) -> None:
    """Stash a code the engine left behind on an otherwise successful call."""
    code = lib.xmp_get_error()
    if code:
        kind = normalize_error_code(code)
        logger.warning("[FileBridge] %s succeeded with engine report %d", operation, kind)
        handle.notify(kind, describe_error_code(kind, operation))


def _file_lib(handle: FileHandle, err: BoundaryError) -> tuple[int, Any]:
    ptr = handle.ptr
    if handle.drain_pending(err):
        return ptr, None
    return ptr, handle.engine.require(err)


def file_new(err: BoundaryError) -> FileHandle | None:
    """New, unopened file session."""
    err.clear()
    engine = get_engine()
    lib = engine.require(err)
    if lib is None:
        return None
    with native_call(err, "file_new"):
        ptr = lib.xmp_files_new()
        if ptr:
            return FileHandle(engine, ptr)
        if not capture_native_error(lib, err, "xmp_files_new"):
            err.set_unknown()
    return None


def file_open(
    handle: FileHandle, err: BoundaryError, path: str | os.PathLike[str] | bytes, flags: int = OPEN_FOR_READ
) -> bool:
    """Open ``path`` in an existing session."""
    err.clear()
    raw = _encode_path(path)
    ptr, lib = _file_lib(handle, err)
    if lib is None:
        return False
    with native_call(err, "file_open"):
        if lib.xmp_files_open(ptr, raw, flags):
            handle.is_open = True
            handle.path = os.fsdecode(raw)
            logger.debug("[FileBridge] Opened %s (flags=0x%x)", handle.path, flags)
            _poll_notifications(lib, handle, "xmp_files_open")
            return True
        if not capture_native_error(lib, err, "xmp_files_open"):
            if os.path.exists(raw):
                err.set(NO_FILE_HANDLER, f"No handler could open {os.fsdecode(raw)!r}")
            else:
                err.set(NO_FILE, f"No such file: {os.fsdecode(raw)!r}")
    return False


def file_close(handle: FileHandle, err: BoundaryError, flags: int = 0) -> bool:
    """Close the open file, writing pending updates.

    On failure the session is still marked open (``handle.is_open`` stays
    True), so the caller may retry or release it.
    """
    err.clear()
    ptr, lib = _file_lib(handle, err)
    if lib is None:
        return False
    with native_call(err, "file_close"):
        ok = lib.xmp_files_close(ptr, flags)
        if ok:
            handle.is_open = False
            logger.debug("[FileBridge] Closed %s", handle.path)
            return True
        if not capture_native_error(lib, err, "xmp_files_close"):
            err.set_unknown()
    return False


def file_take_pending(handle: FileHandle, err: BoundaryError) -> bool:
    """Surface a stashed notification without running any engine call.

    Returns:
        True if one was pending; it is then in ``err``.

    """
    err.clear()
    return handle.alive and handle.drain_pending(err)


def file_get_xmp(handle: FileHandle, err: BoundaryError) -> MetaHandle | None:
    """Copy of the file's XMP; None with a clean ``err`` if the file has none."""
    err.clear()
    ptr, lib = _file_lib(handle, err)
    if lib is None:
        return None
    with native_call(err, "file_get_xmp"):
        meta = lib.xmp_files_get_new_xmp(ptr)
        if meta:
            return MetaHandle(handle.engine, meta)
        capture_native_error(lib, err, "xmp_files_get_new_xmp")
    return None


def file_can_put_xmp(handle: FileHandle, err: BoundaryError, meta: MetaHandle) -> bool:
    """Whether ``meta`` could be written to the open file. No side effects."""
    err.clear()
    meta_ptr = meta.ptr
    ptr, lib = _file_lib(handle, err)
    if lib is None:
        return False
    with native_call(err, "file_can_put_xmp"):
        if lib.xmp_files_can_put_xmp(ptr, meta_ptr):
            return True
        capture_native_error(lib, err, "xmp_files_can_put_xmp")
    return False


def file_put_xmp(handle: FileHandle, err: BoundaryError, meta: MetaHandle) -> bool:
    """Stage ``meta`` for writing; the file is updated on close."""
    err.clear()
    meta_ptr = meta.ptr
    ptr, lib = _file_lib(handle, err)
    if lib is None:
        return False
    with native_call(err, "file_put_xmp"):
        if lib.xmp_files_put_xmp(ptr, meta_ptr):
            _poll_notifications(lib, handle, "xmp_files_put_xmp")
            return True
        if not capture_native_error(lib, err, "xmp_files_put_xmp"):
            err.set_unknown()
    return False
