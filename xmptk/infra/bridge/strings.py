"""Module: strings.py

Date: 2026-01-05

Ownership rules for text crossing the boundary.

Every text value a bridge function hands back is an :class:`OwnedText`: an
independent, NUL-terminated allocation sized to the exact byte length plus
terminator. The receiver releases it exactly once; the facade does that
immediately through :func:`take_text`. Engine-side ``XmpString`` objects
never leave the bridge; :class:`NativeString` scopes them to one call.
"""

from __future__ import annotations

import ctypes
import threading
from typing import Any

_outstanding_lock = threading.Lock()
_outstanding = 0


def _track(delta: int) -> None:
    global _outstanding
    with _outstanding_lock:
        _outstanding += delta


def outstanding_buffers() -> int:
    """Number of OwnedText buffers produced and not yet released."""
    with _outstanding_lock:
        return _outstanding


def encode_text(text: str) -> bytes:
    """Encode caller text for the engine.

    Raises:
        ValueError: If the text contains a NUL character, which the C API
            would silently truncate at.

    """
    if "\x00" in text:
        raise ValueError("Text passed to the XMP engine must not contain NUL characters")
    return text.encode("utf-8")


class OwnedText:
    """A text buffer owned by exactly one receiver until released."""

    __slots__ = ("_buffer", "_size", "_released")

    def __init__(self, data: bytes) -> None:
        self._size = len(data)
        self._buffer = ctypes.create_string_buffer(data, self._size + 1)
        self._released = False
        _track(1)

    @property
    def released(self) -> bool:
        return self._released

    @property
    def nbytes(self) -> int:
        """Byte length of the text, terminator excluded."""
        return self._size

    @property
    def address(self) -> int:
        self._check()
        return ctypes.addressof(self._buffer)

    def as_bytes(self) -> bytes:
        self._check()
        return self._buffer.raw[: self._size]

    def as_text(self) -> str:
        return self.as_bytes().decode("utf-8", errors="replace")

    def _check(self) -> None:
        if self._released:
            raise ValueError("OwnedText used after release")

    def _release(self) -> None:
        self._check()
        self._released = True
        self._buffer = None
        _track(-1)

    def __repr__(self) -> str:
        state = "released" if self._released else f"{self._size} bytes"
        return f"<OwnedText {state}>"


def copy_out(data: bytes | str) -> OwnedText:
    """Copy text into a fresh, independently owned buffer."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return OwnedText(bytes(data))


def release(owned: OwnedText) -> None:
    """Release a buffer produced by the bridge.

    Raises:
        ValueError: On a second release of the same buffer.

    """
    owned._release()


def copy_in_for_test(text: str) -> OwnedText:
    """Push caller-originated text through the same allocation discipline."""
    return copy_out(encode_text(text))


def take_text(owned: OwnedText | None) -> str | None:
    """Copy a bridge result into a Python str and release the original.

    ``None`` (no value) stays ``None``; an empty buffer becomes ``""``.
    """
    if owned is None:
        return None
    try:
        return owned.as_text()
    finally:
        release(owned)


class NativeString:
    """Scoped owner of one engine-allocated ``XmpString``.

    Usage::

        with NativeString(lib) as value:
            if lib.xmp_get_property(ptr, ns, name, value.ptr, None):
                result = value.copy()
            else:
                capture_native_error(lib, err, "xmp_get_property")

    The engine error of a failed call has to be read inside the block;
    freeing the string on exit resets it.
    """

    def __init__(self, lib: Any) -> None:
        self._lib = lib
        self._ptr: int | None = None

    def __enter__(self) -> NativeString:
        ptr = self._lib.xmp_string_new()
        if not ptr:
            raise MemoryError("xmp_string_new returned NULL")
        self._ptr = ptr
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.free()

    @property
    def ptr(self) -> int:
        if self._ptr is None:
            raise ValueError("NativeString is not allocated")
        return self._ptr

    def copy(self) -> OwnedText:
        """Copy the current contents into an :class:`OwnedText`."""
        length = self._lib.xmp_string_len(self.ptr)
        if not length:
            return copy_out(b"")
        cstr = self._lib.xmp_string_cstr(self.ptr)
        return copy_out(ctypes.string_at(cstr, length))

    def free(self) -> None:
        if self._ptr is not None:
            ptr, self._ptr = self._ptr, None
            self._lib.xmp_string_free(ptr)
