"""Module: xmp_error.py

Date: 2026-01-10

Caller-facing error type.

Every populated :class:`~xmptk.infra.bridge.boundary_error.BoundaryError`
becomes an :class:`XmpError`; nothing the engine reports is dropped.
Misuse of the API itself (NUL characters in text, a released object) is a
``ValueError`` instead.
"""

from __future__ import annotations

from enum import IntEnum

from xmptk.infra.bridge.boundary_error import (
    NO_TOOLKIT_KIND,
    UNKNOWN_FAILURE_KIND,
    BoundaryError,
)


class XmpErrorType(IntEnum):
    """Which kind of failure occurred.

    Values match the toolkit's ``XMP_Error`` codes. ``INTERNAL`` and
    ``NO_TOOLKIT`` are reported by this package itself.
    """

    NO_TOOLKIT = NO_TOOLKIT_KIND
    INTERNAL = UNKNOWN_FAILURE_KIND

    # Generic error codes
    UNKNOWN = 0
    TBD = 1
    UNAVAILABLE = 2
    BAD_OBJECT = 3
    BAD_PARAM = 4
    BAD_VALUE = 5
    ASSERT_FAILURE = 6
    ENFORCE_FAILURE = 7
    UNIMPLEMENTED = 8
    INTERNAL_FAILURE = 9
    DEPRECATED = 10
    EXTERNAL_FAILURE = 11
    USER_ABORT = 12
    STD_EXCEPTION = 13
    UNKNOWN_EXCEPTION = 14
    NO_MEMORY = 15
    PROGRESS_ABORT = 16

    # More specific parameter error codes
    BAD_SCHEMA = 101
    BAD_XPATH = 102
    BAD_OPTIONS = 103
    BAD_INDEX = 104
    BAD_ITER_POSITION = 105
    BAD_PARSE = 106
    BAD_SERIALIZE = 107
    BAD_FILE_FORMAT = 108
    NO_FILE_HANDLER = 109
    TOO_LARGE_FOR_JPEG = 110
    NO_FILE = 111
    FILE_PERMISSION = 112
    DISK_SPACE = 113
    READ_ERROR = 114
    WRITE_ERROR = 115
    BAD_BLOCK_FORMAT = 116
    FILE_PATH_NOT_A_FILE = 117
    REJECTED_FILE_EXTENSION = 118

    # File format and internal structure error codes
    BAD_XML = 201
    BAD_RDF = 202
    BAD_XMP = 203
    EMPTY_ITERATOR = 204
    BAD_UNICODE = 205
    BAD_TIFF = 206
    BAD_JPEG = 207
    BAD_PSD = 208
    BAD_PSIR = 209
    BAD_IPTC = 210
    BAD_MPEG = 211
    HEIF_CONSTRUCTION_METHOD_NOT_SUPPORTED = 212
    BAD_PNG = 213

    @classmethod
    def from_kind(cls, kind: int) -> XmpErrorType:
        """Map a raw kind onto the enum; unrecognized codes become UNKNOWN."""
        try:
            return cls(kind)
        except ValueError:
            return cls.UNKNOWN


class XmpError(Exception):
    """Error condition reported by an XMP operation.

    Attributes:
        error_type: Selector for the specific failure.
        debug_message: Developer-oriented description; never localized and
            not meant for end users.

    """

    def __init__(self, error_type: XmpErrorType, debug_message: str = "") -> None:
        super().__init__(f"{error_type.name}: {debug_message}" if debug_message else error_type.name)
        self.error_type = error_type
        self.debug_message = debug_message

    @classmethod
    def from_boundary(cls, err: BoundaryError) -> XmpError:
        error_type = XmpErrorType.from_kind(err.kind)
        if error_type is XmpErrorType.INTERNAL:
            message = "Unexpected failure inside the XMP engine boundary"
        else:
            message = err.message or ""
        return cls(error_type, message)


def check_boundary(err: BoundaryError) -> None:
    """Raise the XmpError described by ``err``; do nothing if it is clean.

    The record is cleared either way.
    """
    if err.had_error:
        raise XmpError.from_boundary(err.take())