"""Module: xmp_file.py

Date: 2026-01-15

Reading and writing XMP embedded in files.

An :class:`XmpFile` is associated with at most one file at a time. Open it,
read and/or replace its XMP, then close it. Files opened for update are
written only on close; dropping an open session without closing loses
pending updates.

Usage:
    with XmpFile() as f:
        f.open_file(path, OpenFileOptions.FOR_UPDATE)
        meta = f.xmp() or XmpMeta()
        meta.set_property(xmp_ns.XMP, "CreatorTool", "xmptk")
        if f.can_put_xmp(meta):
            f.put_xmp(meta)
"""

from __future__ import annotations

import os

from xmptk.domain.xmp_error import check_boundary
from xmptk.domain.xmp_meta import XmpMeta
from xmptk.domain.xmp_options import CloseFileOptions, OpenFileOptions
from xmptk.infra.bridge import file_bridge
from xmptk.infra.bridge.boundary_error import BoundaryError
from xmptk.infra.bridge.handles import FileHandle
from xmptk.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)


class XmpFile:
    """A file session for metadata access."""

    def __init__(self) -> None:
        """Create a session associated with no file.

        Raises:
            XmpError: ``NO_TOOLKIT`` if the engine is unavailable.

        """
        err = BoundaryError()
        handle = file_bridge.file_new(err)
        check_boundary(err)
        self._handle: FileHandle = handle

    @property
    def is_open(self) -> bool:
        return self._handle.alive and self._handle.is_open

    @property
    def path(self) -> str | None:
        """Path of the currently (or last) opened file."""
        return self._handle.path

    def open_file(
        self, path: str | os.PathLike[str], flags: OpenFileOptions = OpenFileOptions.FOR_READ
    ) -> None:
        """Open a file for the requested forms of metadata access.

        Opening reads at least the raw XMP packet. Files opened read-only
        are closed on disk right after reading, though the session stays
        open until :meth:`close`.

        Raises:
            XmpError: ``NO_FILE`` if the path does not exist,
                ``NO_FILE_HANDLER`` if no format handler accepts the file, or
                any other error the engine reports.

        """
        err = BoundaryError()
        file_bridge.file_open(self._handle, err, path, int(flags))
        check_boundary(err)

    def xmp(self) -> XmpMeta | None:
        """A copy of the file's XMP, or None if the file has none."""
        err = BoundaryError()
        handle = file_bridge.file_get_xmp(self._handle, err)
        check_boundary(err)
        return XmpMeta._wrap(handle) if handle is not None else None

    def can_put_xmp(self, meta: XmpMeta) -> bool:
        """Whether ``meta`` could probably be written to this file.

        Depends on the packet size, the open flags and the format handler.
        Nothing is modified.
        """
        err = BoundaryError()
        result = file_bridge.file_can_put_xmp(self._handle, err, meta._handle)
        check_boundary(err)
        return result

    def put_xmp(self, meta: XmpMeta) -> None:
        """Supply new XMP; the file is written on :meth:`close`."""
        err = BoundaryError()
        file_bridge.file_put_xmp(self._handle, err, meta._handle)
        check_boundary(err)

    def close(self, flags: CloseFileOptions = CloseFileOptions.NONE) -> None:
        """Write pending updates and close the file.

        The session can open another file afterwards. Closing a session
        with no open file only reports a notification the engine left
        behind, if there is one. After a failed close the file stays open.
        """
        err = BoundaryError()
        if not self.is_open:
            file_bridge.file_take_pending(self._handle, err)
            check_boundary(err)
            return
        file_bridge.file_close(self._handle, err, int(flags))
        check_boundary(err)

    def release(self) -> None:
        """Free the session without closing; pending updates are lost."""
        self._handle.release()

    def __enter__(self) -> XmpFile:
        return self

    def __exit__(self, *exc_info: object) -> None:
        try:
            self.close()
        finally:
            self.release()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<XmpFile {state} path={self.path!r}>"
