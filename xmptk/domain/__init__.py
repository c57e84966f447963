"""
Domain layer for xmptk.

Date: 2026-01-15

Caller-facing types over the boundary bridge: every populated error record
becomes an XmpError, every native object is owned by exactly one of these
wrappers.

Exports:
    XmpMeta: The XMP data model.
    XmpFile: File session for embedded metadata.
    XmpIterator, XmpProperty: Model traversal.
    XmpValue, PropFlags: Property values and their option bits.
    XmpDateTime (+ XmpDate, XmpTime, XmpTimeZone): Date values.
    XmpError, XmpErrorType: Error reporting.
"""

from xmptk.domain.xmp_date_time import XmpDate, XmpDateTime, XmpTime, XmpTimeZone
from xmptk.domain.xmp_error import XmpError, XmpErrorType
from xmptk.domain.xmp_file import XmpFile
from xmptk.domain.xmp_iterator import XmpIterator, XmpProperty
from xmptk.domain.xmp_meta import XmpMeta
from xmptk.domain.xmp_options import (
    CloseFileOptions,
    FromStrOptions,
    ItemPlacement,
    IterOptions,
    OpenFileOptions,
    ToStringOptions,
)
from xmptk.domain.xmp_value import PropFlags, XmpValue

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
]
