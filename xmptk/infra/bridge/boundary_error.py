"""Module: boundary_error.py

Date: 2026-01-05

Structured error record filled in by every fallible bridge call.

libexempi never throws across the C boundary; it returns a sentinel and
leaves a code behind for ``xmp_get_error()``. Anything that still goes
wrong on the Python side of a native call (a ctypes ArgumentError, an
OSError from a missing symbol, ...) is intercepted by :func:`native_call`
and recorded as the unknown sentinel instead of propagating.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from xmptk.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)

# Reserved kinds outside the toolkit's own taxonomy
UNKNOWN_FAILURE_KIND = -1
NO_TOOLKIT_KIND = -2

# Toolkit error codes (XMP_Error) -> short names used in debug messages.
# libexempi reports them negated; see normalize_error_code().
NATIVE_ERROR_NAMES: dict[int, str] = {
    0: "Unknown",
    1: "TBD",
    2: "Unavailable",
    3: "BadObject",
    4: "BadParam",
    5: "BadValue",
    6: "AssertFailure",
    7: "EnforceFailure",
    8: "Unimplemented",
    9: "InternalFailure",
    10: "Deprecated",
    11: "ExternalFailure",
    12: "UserAbort",
    13: "StdException",
    14: "UnknownException",
    15: "NoMemory",
    16: "ProgressAbort",
    101: "BadSchema",
    102: "BadXPath",
    103: "BadOptions",
    104: "BadIndex",
    105: "BadIterPosition",
    106: "BadParse",
    107: "BadSerialize",
    108: "BadFileFormat",
    109: "NoFileHandler",
    110: "TooLargeForJPEG",
    111: "NoFile",
    112: "FilePermission",
    113: "DiskSpace",
    114: "ReadError",
    115: "WriteError",
    116: "BadBlockFormat",
    117: "FilePathNotAFile",
    118: "RejectedFileExtension",
    201: "BadXML",
    202: "BadRDF",
    203: "BadXMP",
    204: "EmptyIterator",
    205: "BadUnicode",
    206: "BadTIFF",
    207: "BadJPEG",
    208: "BadPSD",
    209: "BadPSIR",
    210: "BadIPTC",
    211: "BadMPEG",
    212: "HEIFConstructionMethodNotSupported",
    213: "BadPNG",
}

UNAVAILABLE = 2
BAD_OBJECT = 3
BAD_PARAM = 4
BAD_VALUE = 5
UNIMPLEMENTED = 8
BAD_SCHEMA = 101
BAD_XPATH = 102
BAD_OPTIONS = 103
BAD_INDEX = 104
BAD_PARSE = 106
BAD_SERIALIZE = 107
NO_FILE_HANDLER = 109
NO_FILE = 111
BAD_XMP = 203


def normalize_error_code(code: int) -> int:
    """Map a raw ``xmp_get_error()`` value onto the toolkit taxonomy."""
    return abs(int(code))


def describe_error_code(kind: int, operation: str | None = None) -> str:
    """Build the debug message stored alongside a native error kind."""
    name = NATIVE_ERROR_NAMES.get(kind, f"error {kind}")
    if operation:
        return f"XMP Toolkit error {kind} ({name}) in {operation}"
    return f"XMP Toolkit error {kind} ({name})"


@dataclass
class BoundaryError:
    """Outcome slot for a single bridge call.

    ``had_error`` is False after a successful call. On failure ``kind`` holds
    a toolkit code, :data:`UNKNOWN_FAILURE_KIND` or :data:`NO_TOOLKIT_KIND`
    and ``message`` an owned copy of the debug text (absent for the unknown
    sentinel).
    """

    had_error: bool = False
    kind: int = 0
    message: str | None = None

    def clear(self) -> None:
        self.had_error = False
        self.kind = 0
        self.message = None

    def set(self, kind: int, message: str | None = None) -> None:
        self.had_error = True
        self.kind = kind
        self.message = message

    def set_unknown(self) -> None:
        self.set(UNKNOWN_FAILURE_KIND, None)

    def copy_from(self, other: BoundaryError) -> None:
        self.had_error = other.had_error
        self.kind = other.kind
        self.message = other.message

    def take(self) -> BoundaryError:
        """Return a copy of this record and reset it to the clean state."""
        taken = BoundaryError(self.had_error, self.kind, self.message)
        self.clear()
        return taken


@contextmanager
def native_call(err: BoundaryError, name: str) -> Iterator[None]:
    """Intercept anything raised while calling into the engine.

    The exception is logged with its traceback and ``err`` is set to the
    unknown sentinel; nothing escapes the block.

    Args:
        err: Slot to populate on failure.
        name: Bridge operation name, for the log record.

    """
    try:
        yield
    except Exception:
        logger.exception("[Bridge] Unexpected failure in %s", name)
        err.set_unknown()


def capture_native_error(lib: Any, err: BoundaryError, operation: str | None = None) -> bool:
    """Record the code libexempi left for the calling thread, if any.

    Called right after a native entry point returned its failure sentinel.

    Returns:
        True if a code was recorded, False when the engine reported none
        (the sentinel then means "absent", not "failed").

    """
    code = lib.xmp_get_error()
    if not code:
        return False
    kind = normalize_error_code(code)
    err.set(kind, describe_error_code(kind, operation))
    return True
