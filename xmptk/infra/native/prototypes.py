"""Module: prototypes.py

Date: 2026-01-04

C prototypes of the libexempi entry points used by the bridge.

Each entry maps a symbol name to ``(restype, argtypes)``. Handles are opaque
``void *`` values on this side; ``XmpString`` results are engine-allocated
and always wrapped in :class:`xmptk.infra.bridge.strings.NativeString`.
"""

from __future__ import annotations

import ctypes
from typing import Any

c_bool = ctypes.c_bool
c_char_p = ctypes.c_char_p
c_double = ctypes.c_double
c_int = ctypes.c_int
c_int32 = ctypes.c_int32
c_int64 = ctypes.c_int64
c_size_t = ctypes.c_size_t
c_uint32 = ctypes.c_uint32
c_void_p = ctypes.c_void_p

XmpPtr = c_void_p
XmpFilePtr = c_void_p
XmpIteratorPtr = c_void_p
XmpStringPtr = c_void_p

P_uint32 = ctypes.POINTER(c_uint32)


class NativeDateTime(ctypes.Structure):
    """libexempi's C ``XmpDateTime``.

    ``tzSign`` is -1 west of UTC, 0 for UTC and +1 east of it. The struct has
    no presence flags, so a date-only or zone-less value cannot be expressed.
    """

    _fields_ = [
        ("year", c_int32),
        ("month", c_int32),
        ("day", c_int32),
        ("hour", c_int32),
        ("minute", c_int32),
        ("second", c_int32),
        ("tzSign", c_int32),
        ("tzHour", c_int32),
        ("tzMinute", c_int32),
        ("nanoSecond", c_int32),
    ]


P_NativeDateTime = ctypes.POINTER(NativeDateTime)

PROTOTYPES: dict[str, tuple[Any, list[Any]]] = {
    # lifecycle / error
    "xmp_init": (c_bool, []),
    "xmp_terminate": (None, []),
    "xmp_get_error": (c_int, []),
    # strings
    "xmp_string_new": (XmpStringPtr, []),
    "xmp_string_free": (None, [XmpStringPtr]),
    "xmp_string_cstr": (c_void_p, [XmpStringPtr]),
    "xmp_string_len": (c_size_t, [XmpStringPtr]),
    # files
    "xmp_files_new": (XmpFilePtr, []),
    "xmp_files_open": (c_bool, [XmpFilePtr, c_char_p, c_uint32]),
    "xmp_files_close": (c_bool, [XmpFilePtr, c_uint32]),
    "xmp_files_get_new_xmp": (XmpPtr, [XmpFilePtr]),
    "xmp_files_can_put_xmp": (c_bool, [XmpFilePtr, XmpPtr]),
    "xmp_files_put_xmp": (c_bool, [XmpFilePtr, XmpPtr]),
    "xmp_files_free": (c_bool, [XmpFilePtr]),
    # namespaces
    "xmp_register_namespace": (c_bool, [c_char_p, c_char_p, XmpStringPtr]),
    "xmp_namespace_prefix": (c_bool, [c_char_p, XmpStringPtr]),
    "xmp_prefix_namespace_uri": (c_bool, [c_char_p, XmpStringPtr]),
    # models
    "xmp_new_empty": (XmpPtr, []),
    "xmp_new": (XmpPtr, [c_char_p, c_size_t]),
    "xmp_copy": (XmpPtr, [XmpPtr]),
    "xmp_free": (c_bool, [XmpPtr]),
    "xmp_serialize_and_format": (
        c_bool,
        [XmpPtr, XmpStringPtr, c_uint32, c_uint32, c_char_p, c_char_p, c_int32],
    ),
    # properties
    "xmp_has_property": (c_bool, [XmpPtr, c_char_p, c_char_p]),
    "xmp_get_property": (c_bool, [XmpPtr, c_char_p, c_char_p, XmpStringPtr, P_uint32]),
    "xmp_get_property_bool": (
        c_bool,
        [XmpPtr, c_char_p, c_char_p, ctypes.POINTER(c_bool), P_uint32],
    ),
    "xmp_get_property_int32": (
        c_bool,
        [XmpPtr, c_char_p, c_char_p, ctypes.POINTER(c_int32), P_uint32],
    ),
    "xmp_get_property_int64": (
        c_bool,
        [XmpPtr, c_char_p, c_char_p, ctypes.POINTER(c_int64), P_uint32],
    ),
    "xmp_get_property_float": (
        c_bool,
        [XmpPtr, c_char_p, c_char_p, ctypes.POINTER(c_double), P_uint32],
    ),
    "xmp_set_property": (c_bool, [XmpPtr, c_char_p, c_char_p, c_char_p, c_uint32]),
    "xmp_set_property_bool": (c_bool, [XmpPtr, c_char_p, c_char_p, c_bool, c_uint32]),
    "xmp_set_property_int32": (c_bool, [XmpPtr, c_char_p, c_char_p, c_int32, c_uint32]),
    "xmp_set_property_int64": (c_bool, [XmpPtr, c_char_p, c_char_p, c_int64, c_uint32]),
    "xmp_get_property_date": (
        c_bool,
        [XmpPtr, c_char_p, c_char_p, P_NativeDateTime, P_uint32],
    ),
    "xmp_set_property_float": (c_bool, [XmpPtr, c_char_p, c_char_p, c_double, c_uint32]),
    "xmp_set_property_date": (
        c_bool,
        [XmpPtr, c_char_p, c_char_p, P_NativeDateTime, c_uint32],
    ),
    "xmp_delete_property": (c_bool, [XmpPtr, c_char_p, c_char_p]),
    # arrays
    "xmp_get_array_item": (
        c_bool,
        [XmpPtr, c_char_p, c_char_p, c_int32, XmpStringPtr, P_uint32],
    ),
    "xmp_set_array_item": (
        c_bool,
        [XmpPtr, c_char_p, c_char_p, c_int32, c_char_p, c_uint32],
    ),
    "xmp_append_array_item": (
        c_bool,
        [XmpPtr, c_char_p, c_char_p, c_uint32, c_char_p, c_uint32],
    ),
    # localized text
    "xmp_get_localized_text": (
        c_bool,
        [
            XmpPtr,
            c_char_p,
            c_char_p,
            c_char_p,
            c_char_p,
            XmpStringPtr,
            XmpStringPtr,
            P_uint32,
        ],
    ),
    "xmp_set_localized_text": (
        c_bool,
        [XmpPtr, c_char_p, c_char_p, c_char_p, c_char_p, c_char_p, c_uint32],
    ),
    "xmp_delete_localized_text": (
        c_bool,
        [XmpPtr, c_char_p, c_char_p, c_char_p, c_char_p],
    ),
    # iteration
    "xmp_iterator_new": (XmpIteratorPtr, [XmpPtr, c_char_p, c_char_p, c_uint32]),
    "xmp_iterator_next": (
        c_bool,
        [XmpIteratorPtr, XmpStringPtr, XmpStringPtr, XmpStringPtr, P_uint32],
    ),
    "xmp_iterator_skip": (c_bool, [XmpIteratorPtr, c_uint32]),
    "xmp_iterator_free": (c_bool, [XmpIteratorPtr]),
}

# Entry points every supported libexempi release exports
REQUIRED_SYMBOLS = frozenset(
    {
        "xmp_init",
        "xmp_terminate",
        "xmp_get_error",
        "xmp_string_new",
        "xmp_string_free",
        "xmp_string_cstr",
        "xmp_string_len",
        "xmp_new_empty",
        "xmp_new",
        "xmp_free",
        "xmp_get_property",
        "xmp_set_property",
    }
)


def bind_prototypes(lib: Any) -> list[str]:
    """Apply argtypes/restype to every known symbol the library exports.

    Args:
        lib: A loaded ``ctypes.CDLL``.

    Returns:
        Names of optional symbols the library lacks.

    Raises:
        OSError: If a required symbol is missing (not a usable libexempi).

    """
    missing: list[str] = []
    for name, (restype, argtypes) in PROTOTYPES.items():
        try:
            func = getattr(lib, name)
        except AttributeError:
            if name in REQUIRED_SYMBOLS:
                raise OSError(f"Library does not export {name}; not a libexempi build") from None
            missing.append(name)
            continue
        func.restype = restype
        func.argtypes = argtypes
    return missing
