"""
xmptk - safe Python access to the Adobe XMP Toolkit through libexempi.

Date: 2026-01-15

Usage:
    from xmptk import XmpMeta, xmp_ns

    meta = XmpMeta.from_file("photo.jpg")
    print(meta.property(xmp_ns.XMP, "CreatorTool"))
"""

from xmptk.config import APP_VERSION as __version__
from xmptk.domain import (
    CloseFileOptions,
    FromStrOptions,
    ItemPlacement,
    IterOptions,
    OpenFileOptions,
    PropFlags,
    ToStringOptions,
    XmpDate,
    XmpDateTime,
    XmpError,
    XmpErrorType,
    XmpFile,
    XmpIterator,
    XmpMeta,
    XmpProperty,
    XmpTime,
    XmpTimeZone,
    XmpValue,
)
from xmptk.domain import xmp_gps, xmp_ns
from xmptk.utils.logging import init_logging

__all__: list[str] = [
    "CloseFileOptions",
    "FromStrOptions",
    "ItemPlacement",
    "IterOptions",
    "OpenFileOptions",
    "PropFlags",
    "ToStringOptions",
    "XmpDate",
    "XmpDateTime",
    "XmpError",
    "XmpErrorType",
    "XmpFile",
    "XmpIterator",
    "XmpMeta",
    "XmpProperty",
    "XmpTime",
    "XmpTimeZone",
    "XmpValue",
    "__version__",
    "init_logging",
    "xmp_gps",
    "xmp_ns",
]
