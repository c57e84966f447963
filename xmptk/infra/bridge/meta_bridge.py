"""Module: meta_bridge.py

Date: 2026-01-11

Bridge entry points for metadata models (``XmpPtr``) and the namespace
registry.

Every function follows the same shape: it clears ``err``, returns its
result on success, and on failure returns a sentinel (``None``/``False``)
with ``err`` populated. "Not found" results (a missing property, an unknown
prefix) return the sentinel with ``err`` left clean.

Toolkit operations libexempi does not export are assembled here from the
ones it does, the same way the toolkit itself defines them:
- struct fields / qualifiers: composed path + property access
- array item deletion / counting: composed path + delete / existence check
- typed date access: the engine's date struct, with part presence read
  from the stored text
- sort, object name, dump: model walk and rebuild
"""

from __future__ import annotations

import ctypes
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any
from xml.sax.saxutils import escape, unescape

from xmptk.config import DEFAULT_INDENT, DEFAULT_NEWLINE, NAME_READ_SERIALIZE_FLAGS
from xmptk.domain import xmp_ns
from xmptk.domain.xmp_date_time import XmpDateTime
from xmptk.infra.bridge import path_bridge
from xmptk.infra.bridge.boundary_error import (
    BAD_OBJECT,
    BAD_SCHEMA,
    BAD_SERIALIZE,
    BAD_XMP,
    BAD_XPATH,
    UNIMPLEMENTED,
    BoundaryError,
    capture_native_error,
    native_call,
)
from xmptk.infra.bridge.datetime_bridge import date_from_native, date_to_native, format_date_time
from xmptk.infra.bridge.handles import MetaHandle
from xmptk.infra.bridge.lifecycle import get_engine
from xmptk.infra.bridge.strings import NativeString, OwnedText, copy_out, encode_text, take_text
from xmptk.infra.native.prototypes import NativeDateTime
from xmptk.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)

# FromStr option bits
PARSE_REQUIRE_XMP_META = 0x0001
PARSE_STRICT_ALIASING = 0x0004

# Property option bits the bridge itself has to interpret
PROP_VALUE_IS_URI = 0x0000_0002
PROP_HAS_QUALIFIERS = 0x0000_0010
PROP_IS_QUALIFIER = 0x0000_0020
PROP_HAS_LANG = 0x0000_0040
PROP_HAS_TYPE = 0x0000_0080
PROP_VALUE_IS_STRUCT = 0x0000_0100
PROP_VALUE_IS_ARRAY = 0x0000_0200
PROP_ARRAY_IS_ORDERED = 0x0000_0400
PROP_ARRAY_IS_ALTERNATE = 0x0000_0800
PROP_ARRAY_IS_ALT_TEXT = 0x0000_1000
PROP_IS_ALIAS = 0x0001_0000
PROP_HAS_ALIASES = 0x0002_0000
PROP_IS_INTERNAL = 0x0004_0000
PROP_IS_STABLE = 0x0010_0000
PROP_IS_DERIVED = 0x0020_0000
PROP_SCHEMA_NODE = 0x8000_0000

PROP_COMPOSITE_MASK = PROP_VALUE_IS_STRUCT | PROP_VALUE_IS_ARRAY

# Bits a client may pass when creating a node
PROP_CREATABLE_MASK = (
    PROP_VALUE_IS_URI
    | PROP_VALUE_IS_STRUCT
    | PROP_VALUE_IS_ARRAY
    | PROP_ARRAY_IS_ORDERED
    | PROP_ARRAY_IS_ALTERNATE
    | PROP_ARRAY_IS_ALT_TEXT
)

_FLAG_NAMES = (
    (PROP_SCHEMA_NODE, "schema"),
    (PROP_VALUE_IS_URI, "isURI"),
    (PROP_HAS_QUALIFIERS, "hasQual"),
    (PROP_IS_QUALIFIER, "isQual"),
    (PROP_HAS_LANG, "hasLang"),
    (PROP_HAS_TYPE, "hasType"),
    (PROP_VALUE_IS_STRUCT, "isStruct"),
    (PROP_VALUE_IS_ARRAY, "isArray"),
    (PROP_ARRAY_IS_ORDERED, "isOrdered"),
    (PROP_ARRAY_IS_ALTERNATE, "isAlt"),
    (PROP_ARRAY_IS_ALT_TEXT, "isAltText"),
    (PROP_IS_ALIAS, "isAlias"),
    (PROP_HAS_ALIASES, "hasAliases"),
    (PROP_IS_INTERNAL, "isInternal"),
    (PROP_IS_STABLE, "isStable"),
    (PROP_IS_DERIVED, "isDerived"),
)

_XMPMETA_RE = re.compile(rb"<x:x[am]pmeta[\s/>]")
_RDF_START_RE = re.compile(rb"<rdf:RDF[\s/>]")
_RDF_END = b"</rdf:RDF>"
_XMPMETA_OPEN = b'<x:xmpmeta xmlns:x="adobe:ns:meta/">'
_XMPMETA_CLOSE = b"</x:xmpmeta>"
# rdf:about is only ever written on rdf:Description start tags
_ABOUT_RE = re.compile(r'(<rdf:Description\b[^>]*?\s)rdf:about="([^"]*)"')

# Registered by the engine itself, outside the schema constants
_STANDARD_URIS = frozenset({"adobe:ns:meta/"})

# URIs registered through this module; the engine has no way to list them
_registered_uris: set[str] = set()


# =====================================
# SHARED HELPERS
# =====================================


def _fail(lib: Any, err: BoundaryError, operation: str) -> None:
    """Record a failure signalled by a false/NULL return."""
    if not capture_native_error(lib, err, operation):
        logger.warning("[MetaBridge] %s failed without an engine error code", operation)
        err.set_unknown()


def _new_handle(meta_engine: Any, ptr: int | None) -> MetaHandle | None:
    return MetaHandle(meta_engine, ptr) if ptr else None


def _get_text(lib: Any, err: BoundaryError, ptr: int, ns: bytes, name: bytes) -> tuple[OwnedText, int] | None:
    bits = ctypes.c_uint32(0)
    with NativeString(lib) as value:
        if lib.xmp_get_property(ptr, ns, name, value.ptr, ctypes.byref(bits)):
            return value.copy(), bits.value
        capture_native_error(lib, err, "xmp_get_property")
    return None


def _get_typed(
    lib: Any, err: BoundaryError, symbol: str, ctype: Any, ptr: int, ns: bytes, name: bytes
) -> tuple[Any, int] | None:
    out = ctype()
    bits = ctypes.c_uint32(0)
    if getattr(lib, symbol)(ptr, ns, name, ctypes.byref(out), ctypes.byref(bits)):
        return out.value, bits.value
    capture_native_error(lib, err, symbol)
    return None


def _set_text(
    lib: Any, err: BoundaryError, ptr: int, ns: bytes, name: bytes, value: bytes | None, options: int
) -> bool:
    if lib.xmp_set_property(ptr, ns, name, value, options):
        return True
    _fail(lib, err, "xmp_set_property")
    return False


def _has(lib: Any, err: BoundaryError, ptr: int, ns: bytes, name: bytes) -> bool:
    if lib.xmp_has_property(ptr, ns, name):
        return True
    capture_native_error(lib, err, "xmp_has_property")
    return False


def _delete(lib: Any, err: BoundaryError, ptr: int, ns: bytes, name: bytes) -> bool:
    if lib.xmp_delete_property(ptr, ns, name):
        return True
    _fail(lib, err, "xmp_delete_property")
    return False


def _serialize(
    lib: Any,
    err: BoundaryError,
    ptr: int,
    options: int,
    padding: int = 0,
    newline: str = "",
    indent: str = "",
    base_indent: int = 0,
) -> OwnedText | None:
    nl = encode_text(newline or DEFAULT_NEWLINE)
    tab = encode_text(indent or DEFAULT_INDENT)
    with NativeString(lib) as buffer:
        if lib.xmp_serialize_and_format(ptr, buffer.ptr, options, padding, nl, tab, base_indent):
            return buffer.copy()
        _fail(lib, err, "xmp_serialize_and_format")
    return None


def _parse_new(lib: Any, err: BoundaryError, data: bytes) -> int | None:
    ptr = lib.xmp_new(data, len(data)) if data else lib.xmp_new_empty()
    if ptr:
        return ptr
    _fail(lib, err, "xmp_new")
    return None


def _meta_lib(meta: MetaHandle, err: BoundaryError) -> tuple[int, Any]:
    """Pointer and library for a model; lib is None if the engine is gone."""
    ptr = meta.ptr
    return ptr, meta.engine.require(err)


def _struct_field_path(err: BoundaryError, *names: str) -> bytes | None:
    path = take_text(path_bridge.compose_struct_field_path(err, *names))
    return None if path is None else encode_text(path)


def _qualifier_path(err: BoundaryError, *names: str) -> bytes | None:
    path = take_text(path_bridge.compose_qualifier_path(err, *names))
    return None if path is None else encode_text(path)


def _array_item_path(err: BoundaryError, schema_ns: str, array_name: str, index: int) -> bytes | None:
    path = take_text(path_bridge.compose_array_item_path(err, schema_ns, array_name, index))
    return None if path is None else encode_text(path)


# =====================================
# CONSTRUCTION / SERIALIZATION
# =====================================


def _prepare_buffer(err: BoundaryError, data: bytes, options: int) -> bytes | None:
    """Apply FromStr options the engine cannot take as parse flags.

    libexempi always parses with x:xmpmeta required, so a bare rdf:RDF
    element is wrapped unless the caller asked for x:xmpmeta strictly.
    """
    if options & PARSE_STRICT_ALIASING:
        err.set(UNIMPLEMENTED, "Strict aliasing is not supported by this engine")
        return None
    if not data or _XMPMETA_RE.search(data):
        return data
    if options & PARSE_REQUIRE_XMP_META:
        err.set(BAD_XMP, "x:xmpmeta element not found")
        return None

    start = _RDF_START_RE.search(data)
    end = data.rfind(_RDF_END)
    if start is None or end < start.start():
        return data
    end += len(_RDF_END)
    return data[: start.start()] + _XMPMETA_OPEN + data[start.start() : end] + _XMPMETA_CLOSE + data[end:]


def meta_new(err: BoundaryError) -> MetaHandle | None:
    """New, empty model."""
    err.clear()
    engine = get_engine()
    lib = engine.require(err)
    if lib is None:
        return None
    with native_call(err, "meta_new"):
        ptr = lib.xmp_new_empty()
        if ptr:
            return MetaHandle(engine, ptr)
        _fail(lib, err, "xmp_new_empty")
    return None


def meta_parse(err: BoundaryError, buffer: str | bytes, options: int = 0) -> MetaHandle | None:
    """Parse a complete serialized packet into a new model."""
    err.clear()
    data = buffer.encode("utf-8") if isinstance(buffer, str) else bytes(buffer)
    engine = get_engine()
    lib = engine.require(err)
    if lib is None:
        return None
    prepared = _prepare_buffer(err, data, options)
    if prepared is None:
        return None
    with native_call(err, "meta_parse"):
        return _new_handle(engine, _parse_new(lib, err, prepared))
    return None


def meta_serialize(
    meta: MetaHandle,
    err: BoundaryError,
    options: int = 0,
    padding: int = 0,
    newline: str = "",
    indent: str = "",
    base_indent: int = 0,
) -> OwnedText | None:
    """Serialize the model as RDF/XML text."""
    err.clear()
    encode_text(newline)
    encode_text(indent)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return None
    with native_call(err, "meta_serialize"):
        return _serialize(lib, err, ptr, options, padding, newline, indent, base_indent)
    return None


def meta_clone(meta: MetaHandle, err: BoundaryError) -> MetaHandle | None:
    """Deep, independent copy of the model."""
    err.clear()
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return None
    with native_call(err, "meta_clone"):
        copied = lib.xmp_copy(ptr)
        if copied:
            return MetaHandle(meta.engine, copied)
        _fail(lib, err, "xmp_copy")
    return None


# =====================================
# NAMESPACE REGISTRY
# =====================================


def register_namespace(err: BoundaryError, namespace_uri: str, suggested_prefix: str) -> OwnedText | None:
    """Register a namespace; returns the prefix actually in use (with colon).

    Registering a URI again keeps and returns its original prefix.
    """
    err.clear()
    uri = encode_text(namespace_uri)
    prefix = encode_text(suggested_prefix)
    lib = get_engine().require(err)
    if lib is None:
        return None
    if not namespace_uri:
        err.set(BAD_SCHEMA, "Empty namespace URI")
        return None
    if not suggested_prefix:
        err.set(BAD_SCHEMA, "Empty prefix")
        return None

    with native_call(err, "register_namespace"), NativeString(lib) as registered:
        # False without an error code means "registered under another prefix"
        if not lib.xmp_register_namespace(uri, prefix, registered.ptr) and capture_native_error(
            lib, err, "xmp_register_namespace"
        ):
            return None
        _registered_uris.add(namespace_uri)
        return registered.copy()
    return None


def namespace_prefix(err: BoundaryError, namespace_uri: str) -> OwnedText | None:
    """Prefix registered for a URI, or None."""
    err.clear()
    uri = encode_text(namespace_uri)
    lib = get_engine().require(err)
    if lib is None:
        return None
    with native_call(err, "namespace_prefix"), NativeString(lib) as prefix:
        if lib.xmp_namespace_prefix(uri, prefix.ptr):
            return prefix.copy()
        capture_native_error(lib, err, "xmp_namespace_prefix")
    return None


def namespace_uri(err: BoundaryError, prefix: str) -> OwnedText | None:
    """URI registered for a prefix (with or without colon), or None."""
    err.clear()
    raw = encode_text(prefix)
    lib = get_engine().require(err)
    if lib is None:
        return None
    with native_call(err, "namespace_uri"), NativeString(lib) as uri:
        if lib.xmp_prefix_namespace_uri(raw, uri.ptr):
            return uri.copy()
        capture_native_error(lib, err, "xmp_prefix_namespace_uri")
    return None


def _known_namespace_uris() -> set[str]:
    uris = {uri for name, uri in vars(xmp_ns).items() if name.isupper() and isinstance(uri, str)}
    return uris | _STANDARD_URIS | _registered_uris


def namespace_dump(err: BoundaryError, sink: Callable[[str], Any]) -> bool:
    """Push the prefix to URI map to ``sink``, one line per namespace.

    libexempi cannot enumerate its registry, so the map covers the standard
    schemas and every URI registered through :func:`register_namespace`.
    """
    err.clear()
    lib = get_engine().require(err)
    if lib is None:
        return False
    with native_call(err, "namespace_dump"):
        entries: list[tuple[str, str]] = []
        for uri in _known_namespace_uris():
            prefix = path_bridge.lookup_prefix(lib, err, uri)
            if err.had_error:
                return False
            if prefix is not None:
                entries.append((prefix, uri))
        entries.sort()
        width = max((len(prefix) for prefix, _ in entries), default=0)
        sink("Dumping namespace prefix to URI map\n")
        for prefix, uri in entries:
            sink(f"   {prefix.ljust(width)} => {uri}\n")
        return True
    return False


# =====================================
# SIMPLE PROPERTIES
# =====================================


def meta_does_property_exist(meta: MetaHandle, err: BoundaryError, schema_ns: str, prop_name: str) -> bool:
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(prop_name)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    with native_call(err, "meta_does_property_exist"):
        return _has(lib, err, ptr, ns, name)
    return False


def meta_get_property(
    meta: MetaHandle, err: BoundaryError, schema_ns: str, prop_name: str
) -> tuple[OwnedText, int] | None:
    """Value text and option bits; None if the property does not exist."""
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(prop_name)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return None
    with native_call(err, "meta_get_property"):
        return _get_text(lib, err, ptr, ns, name)
    return None


def _typed_getter(symbol: str, ctype: Any, label: str) -> Callable[..., tuple[Any, int] | None]:
    def getter(meta: MetaHandle, err: BoundaryError, schema_ns: str, prop_name: str) -> tuple[Any, int] | None:
        err.clear()
        ns, name = encode_text(schema_ns), encode_text(prop_name)
        ptr, lib = _meta_lib(meta, err)
        if lib is None:
            return None
        with native_call(err, label):
            return _get_typed(lib, err, symbol, ctype, ptr, ns, name)
        return None

    getter.__name__ = label
    getter.__doc__ = f"Typed read through ``{symbol}``; None if the property does not exist."
    return getter


meta_get_property_bool = _typed_getter("xmp_get_property_bool", ctypes.c_bool, "meta_get_property_bool")
meta_get_property_int32 = _typed_getter("xmp_get_property_int32", ctypes.c_int32, "meta_get_property_int32")
meta_get_property_int64 = _typed_getter("xmp_get_property_int64", ctypes.c_int64, "meta_get_property_int64")
meta_get_property_float = _typed_getter("xmp_get_property_float", ctypes.c_double, "meta_get_property_float")


def meta_get_property_date(
    meta: MetaHandle, err: BoundaryError, schema_ns: str, prop_name: str
) -> tuple[XmpDateTime, int] | None:
    """Date value and option bits, converted by the engine.

    Non-date text is reported by the engine (``BAD_VALUE``). Which parts
    are present comes from the stored text, the native struct has no such
    flags.
    """
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(prop_name)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return None
    with native_call(err, "meta_get_property_date"):
        raw = NativeDateTime()
        bits = ctypes.c_uint32(0)
        if not lib.xmp_get_property_date(ptr, ns, name, ctypes.byref(raw), ctypes.byref(bits)):
            capture_native_error(lib, err, "xmp_get_property_date")
            return None
        found = _get_text(lib, err, ptr, ns, name)
        if found is None:
            return None
        return date_from_native(raw, take_text(found[0]) or ""), bits.value
    return None


def meta_set_property(
    meta: MetaHandle,
    err: BoundaryError,
    schema_ns: str,
    prop_name: str,
    value: str | None,
    options: int = 0,
) -> bool:
    """Create or replace a property. ``value`` is None for composite nodes."""
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(prop_name)
    raw = None if value is None else encode_text(value)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    with native_call(err, "meta_set_property"):
        return _set_text(lib, err, ptr, ns, name, raw, options)
    return False


def _typed_setter(symbol: str, ctype: Any, label: str) -> Callable[..., bool]:
    def setter(
        meta: MetaHandle, err: BoundaryError, schema_ns: str, prop_name: str, value: Any, options: int = 0
    ) -> bool:
        err.clear()
        ns, name = encode_text(schema_ns), encode_text(prop_name)
        ptr, lib = _meta_lib(meta, err)
        if lib is None:
            return False
        with native_call(err, label):
            if getattr(lib, symbol)(ptr, ns, name, ctype(value), options):
                return True
            _fail(lib, err, symbol)
        return False

    setter.__name__ = label
    setter.__doc__ = f"Typed write through ``{symbol}``."
    return setter


meta_set_property_bool = _typed_setter("xmp_set_property_bool", ctypes.c_bool, "meta_set_property_bool")
meta_set_property_int32 = _typed_setter("xmp_set_property_int32", ctypes.c_int32, "meta_set_property_int32")
meta_set_property_int64 = _typed_setter("xmp_set_property_int64", ctypes.c_int64, "meta_set_property_int64")
meta_set_property_float = _typed_setter("xmp_set_property_float", ctypes.c_double, "meta_set_property_float")


def meta_set_property_date(
    meta: MetaHandle,
    err: BoundaryError,
    schema_ns: str,
    prop_name: str,
    value: XmpDateTime,
    options: int = 0,
) -> bool:
    """Store a date through the engine's date struct.

    Values without a date, a time or a zone are stored in their canonical
    text form, since the struct would fill in the missing parts.
    """
    native = date_to_native(value)
    if native is None:
        return meta_set_property(meta, err, schema_ns, prop_name, format_date_time(value), options)
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(prop_name)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    with native_call(err, "meta_set_property_date"):
        if lib.xmp_set_property_date(ptr, ns, name, ctypes.byref(native), options):
            return True
        _fail(lib, err, "xmp_set_property_date")
    return False


def meta_delete_property(meta: MetaHandle, err: BoundaryError, schema_ns: str, prop_name: str) -> bool:
    """Delete a property; deleting a missing property is not an error."""
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(prop_name)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    with native_call(err, "meta_delete_property"):
        return _delete(lib, err, ptr, ns, name)
    return False


# =====================================
# ARRAYS
# =====================================


def meta_get_array_item(
    meta: MetaHandle, err: BoundaryError, schema_ns: str, array_name: str, index: int
) -> tuple[OwnedText, int] | None:
    """Item at a 1-based index (``-1`` for the last); None if absent."""
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(array_name)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return None
    with native_call(err, "meta_get_array_item"):
        bits = ctypes.c_uint32(0)
        with NativeString(lib) as value:
            if lib.xmp_get_array_item(ptr, ns, name, index, value.ptr, ctypes.byref(bits)):
                return value.copy(), bits.value
            capture_native_error(lib, err, "xmp_get_array_item")
    return None


def meta_set_array_item(
    meta: MetaHandle,
    err: BoundaryError,
    schema_ns: str,
    array_name: str,
    index: int,
    value: str | None,
    options: int = 0,
) -> bool:
    """Replace an item, or insert before/after it with the placement bits."""
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(array_name)
    raw = None if value is None else encode_text(value)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    with native_call(err, "meta_set_array_item"):
        if lib.xmp_set_array_item(ptr, ns, name, index, raw, options):
            return True
        _fail(lib, err, "xmp_set_array_item")
    return False


def meta_append_array_item(
    meta: MetaHandle,
    err: BoundaryError,
    schema_ns: str,
    array_name: str,
    array_options: int,
    value: str | None,
    item_options: int = 0,
) -> bool:
    """Append an item, creating the array with ``array_options`` if needed."""
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(array_name)
    raw = None if value is None else encode_text(value)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    with native_call(err, "meta_append_array_item"):
        if lib.xmp_append_array_item(ptr, ns, name, array_options, raw, item_options):
            return True
        _fail(lib, err, "xmp_append_array_item")
    return False


def meta_delete_array_item(
    meta: MetaHandle, err: BoundaryError, schema_ns: str, array_name: str, index: int
) -> bool:
    """Delete an item; deleting an index past the end is not an error."""
    err.clear()
    ns = encode_text(schema_ns)
    encode_text(array_name)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    path = _array_item_path(err, schema_ns, array_name, index)
    if path is None:
        return False
    with native_call(err, "meta_delete_array_item"):
        return _delete(lib, err, ptr, ns, path)
    return False


def meta_count_array_items(meta: MetaHandle, err: BoundaryError, schema_ns: str, array_name: str) -> int | None:
    """Number of items; 0 if the array does not exist."""
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(array_name)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return None
    with native_call(err, "meta_count_array_items"):
        found = _get_text(lib, err, ptr, ns, name)
        if found is None:
            return None if err.had_error else 0
        owned, bits = found
        take_text(owned)
        if not bits & PROP_VALUE_IS_ARRAY:
            err.set(BAD_XPATH, "The named property is not an array")
            return None
        count = 0
        while _has(lib, err, ptr, ns, name + f"[{count + 1}]".encode("ascii")):
            count += 1
        return None if err.had_error else count
    return None


# =====================================
# STRUCT FIELDS / QUALIFIERS
# =====================================


def _composed_get(
    meta: MetaHandle, err: BoundaryError, label: str, schema_ns: str, compose: Callable[..., bytes | None], *names: str
) -> tuple[OwnedText, int] | None:
    err.clear()
    ns = encode_text(schema_ns)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return None
    path = compose(err, schema_ns, *names)
    if path is None:
        return None
    with native_call(err, label):
        return _get_text(lib, err, ptr, ns, path)
    return None


def _composed_set(
    meta: MetaHandle,
    err: BoundaryError,
    label: str,
    schema_ns: str,
    compose: Callable[..., bytes | None],
    names: tuple[str, ...],
    value: str | None,
    options: int,
) -> bool:
    err.clear()
    ns = encode_text(schema_ns)
    raw = None if value is None else encode_text(value)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    path = compose(err, schema_ns, *names)
    if path is None:
        return False
    with native_call(err, label):
        return _set_text(lib, err, ptr, ns, path, raw, options)
    return False


def _composed_delete(
    meta: MetaHandle, err: BoundaryError, label: str, schema_ns: str, compose: Callable[..., bytes | None], *names: str
) -> bool:
    err.clear()
    ns = encode_text(schema_ns)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    path = compose(err, schema_ns, *names)
    if path is None:
        return False
    with native_call(err, label):
        return _delete(lib, err, ptr, ns, path)
    return False


def _composed_exists(
    meta: MetaHandle, err: BoundaryError, label: str, schema_ns: str, compose: Callable[..., bytes | None], *names: str
) -> bool:
    err.clear()
    ns = encode_text(schema_ns)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    path = compose(err, schema_ns, *names)
    if path is None:
        return False
    with native_call(err, label):
        return _has(lib, err, ptr, ns, path)
    return False


def meta_get_struct_field(
    meta: MetaHandle, err: BoundaryError, struct_ns: str, struct_name: str, field_ns: str, field_name: str
) -> tuple[OwnedText, int] | None:
    return _composed_get(
        meta, err, "meta_get_struct_field", struct_ns, _struct_field_path, struct_name, field_ns, field_name
    )


def meta_set_struct_field(
    meta: MetaHandle,
    err: BoundaryError,
    struct_ns: str,
    struct_name: str,
    field_ns: str,
    field_name: str,
    value: str | None,
    options: int = 0,
) -> bool:
    """Set a field, creating the enclosing struct if necessary."""
    return _composed_set(
        meta,
        err,
        "meta_set_struct_field",
        struct_ns,
        _struct_field_path,
        (struct_name, field_ns, field_name),
        value,
        options,
    )


def meta_delete_struct_field(
    meta: MetaHandle, err: BoundaryError, struct_ns: str, struct_name: str, field_ns: str, field_name: str
) -> bool:
    return _composed_delete(
        meta, err, "meta_delete_struct_field", struct_ns, _struct_field_path, struct_name, field_ns, field_name
    )


def meta_does_struct_field_exist(
    meta: MetaHandle, err: BoundaryError, struct_ns: str, struct_name: str, field_ns: str, field_name: str
) -> bool:
    return _composed_exists(
        meta, err, "meta_does_struct_field_exist", struct_ns, _struct_field_path, struct_name, field_ns, field_name
    )


def meta_get_qualifier(
    meta: MetaHandle, err: BoundaryError, prop_ns: str, prop_name: str, qual_ns: str, qual_name: str
) -> tuple[OwnedText, int] | None:
    return _composed_get(meta, err, "meta_get_qualifier", prop_ns, _qualifier_path, prop_name, qual_ns, qual_name)


def meta_set_qualifier(
    meta: MetaHandle,
    err: BoundaryError,
    prop_ns: str,
    prop_name: str,
    qual_ns: str,
    qual_name: str,
    value: str | None,
    options: int = 0,
) -> bool:
    """Attach a qualifier to an existing property."""
    return _composed_set(
        meta,
        err,
        "meta_set_qualifier",
        prop_ns,
        _qualifier_path,
        (prop_name, qual_ns, qual_name),
        value,
        options,
    )


def meta_delete_qualifier(
    meta: MetaHandle, err: BoundaryError, prop_ns: str, prop_name: str, qual_ns: str, qual_name: str
) -> bool:
    return _composed_delete(meta, err, "meta_delete_qualifier", prop_ns, _qualifier_path, prop_name, qual_ns, qual_name)


def meta_does_qualifier_exist(
    meta: MetaHandle, err: BoundaryError, prop_ns: str, prop_name: str, qual_ns: str, qual_name: str
) -> bool:
    return _composed_exists(
        meta, err, "meta_does_qualifier_exist", prop_ns, _qualifier_path, prop_name, qual_ns, qual_name
    )


# =====================================
# LOCALIZED TEXT
# =====================================


def meta_get_localized_text(
    meta: MetaHandle,
    err: BoundaryError,
    schema_ns: str,
    alt_text_name: str,
    generic_lang: str | None,
    specific_lang: str,
) -> tuple[OwnedText, OwnedText, int] | None:
    """Value, actual language and option bits of the best-matching item.

    Language matching (exact, generic prefix, ``x-default``, first item) is
    the engine's.
    """
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(alt_text_name)
    generic = encode_text(generic_lang or "")
    specific = encode_text(specific_lang)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return None
    with native_call(err, "meta_get_localized_text"), NativeString(lib) as actual, NativeString(lib) as value:
        bits = ctypes.c_uint32(0)
        if lib.xmp_get_localized_text(
            ptr, ns, name, generic, specific, actual.ptr, value.ptr, ctypes.byref(bits)
        ):
            return value.copy(), actual.copy(), bits.value
        capture_native_error(lib, err, "xmp_get_localized_text")
    return None


def meta_set_localized_text(
    meta: MetaHandle,
    err: BoundaryError,
    schema_ns: str,
    alt_text_name: str,
    generic_lang: str | None,
    specific_lang: str,
    value: str,
    options: int = 0,
) -> bool:
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(alt_text_name)
    generic = encode_text(generic_lang or "")
    specific = encode_text(specific_lang)
    raw = encode_text(value)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    with native_call(err, "meta_set_localized_text"):
        if lib.xmp_set_localized_text(ptr, ns, name, generic, specific, raw, options):
            return True
        _fail(lib, err, "xmp_set_localized_text")
    return False


def meta_delete_localized_text(
    meta: MetaHandle,
    err: BoundaryError,
    schema_ns: str,
    alt_text_name: str,
    generic_lang: str | None,
    specific_lang: str,
) -> bool:
    err.clear()
    ns, name = encode_text(schema_ns), encode_text(alt_text_name)
    generic = encode_text(generic_lang or "")
    specific = encode_text(specific_lang)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    if not hasattr(lib, "xmp_delete_localized_text"):
        err.set(UNIMPLEMENTED, "xmp_delete_localized_text is not available in this libexempi")
        return False
    with native_call(err, "meta_delete_localized_text"):
        if lib.xmp_delete_localized_text(ptr, ns, name, generic, specific):
            return True
        _fail(lib, err, "xmp_delete_localized_text")
    return False


# =====================================
# MODEL WALK (sort / dump)
# =====================================


@dataclass
class _Node:
    """One node of a model snapshot."""

    schema: str
    path: str
    value: str
    options: int
    step: str = ""
    children: list[_Node] = field(default_factory=list)
    qualifiers: list[_Node] = field(default_factory=list)

    @property
    def is_composite(self) -> bool:
        return bool(self.options & PROP_COMPOSITE_MASK)

    def qualifier_value(self, step: str) -> str | None:
        for qualifier in self.qualifiers:
            if qualifier.step == step:
                return qualifier.value
        return None


def split_last_step(path: str) -> tuple[str, str]:
    """Split ``a/b:c[2]/?q:x`` into (``a/b:c[2]``, ``/?q:x``).

    Separators inside ``[...]`` selectors and quoted values are ignored.
    """
    boundaries: list[int] = []
    depth = 0
    in_quote = False
    for i, ch in enumerate(path):
        if in_quote:
            if ch == '"':
                in_quote = False
        elif ch == '"':
            in_quote = True
        elif ch == "[":
            if depth == 0:
                boundaries.append(i)
            depth += 1
        elif ch == "]":
            depth -= 1
        elif ch == "/" and depth == 0:
            boundaries.append(i)
    if not boundaries:
        return "", path
    cut = boundaries[-1]
    return path[:cut], path[cut:]


def _walk(lib: Any, err: BoundaryError, ptr: int) -> Iterator[tuple[str, str, str, int]] | None:
    """Full pre-order walk of a model; None with ``err`` set on failure."""
    it = lib.xmp_iterator_new(ptr, b"", b"", 0)
    if not it:
        _fail(lib, err, "xmp_iterator_new")
        return None
    rows: list[tuple[str, str, str, int]] = []
    try:
        bits = ctypes.c_uint32(0)
        with NativeString(lib) as ns, NativeString(lib) as path, NativeString(lib) as value:
            while lib.xmp_iterator_next(it, ns.ptr, path.ptr, value.ptr, ctypes.byref(bits)):
                rows.append(
                    (take_text(ns.copy()) or "", take_text(path.copy()) or "", take_text(value.copy()) or "", bits.value)
                )
            if capture_native_error(lib, err, "xmp_iterator_next"):
                return None
    finally:
        lib.xmp_iterator_free(it)
    return iter(rows)


def _snapshot(lib: Any, err: BoundaryError, ptr: int) -> list[_Node] | None:
    """Schema nodes of the model with their subtrees attached."""
    rows = _walk(lib, err, ptr)
    if rows is None:
        return None
    schemas: list[_Node] = []
    by_path: dict[str, _Node] = {}
    current: _Node | None = None
    for ns, path, value, options in rows:
        if options & PROP_SCHEMA_NODE or not path:
            current = _Node(ns, "", value, options, step=ns)
            schemas.append(current)
            continue
        parent_path, step = split_last_step(path)
        node = _Node(ns, path, value, options, step=step)
        parent = by_path.get(parent_path) if parent_path else current
        if parent is None:
            logger.warning("[MetaBridge] Orphan node %s in model walk", path)
            continue
        if step.startswith("/?"):
            parent.qualifiers.append(node)
        else:
            parent.children.append(node)
        by_path[path] = node
    return schemas


def _qualifier_key(node: _Node) -> tuple[int, str]:
    name = node.step[2:]
    if name == "xml:lang":
        return 0, name
    if name == "rdf:type":
        return 1, name
    return 2, name


def _sort_node(node: _Node) -> None:
    node.qualifiers.sort(key=_qualifier_key)
    if node.options & PROP_VALUE_IS_STRUCT:
        node.children.sort(key=lambda child: child.step)
    elif node.options & PROP_ARRAY_IS_ALT_TEXT:
        node.children.sort(
            key=lambda item: (
                (item.qualifier_value("/?xml:lang") or "") != "x-default",
                item.qualifier_value("/?xml:lang") or "",
            )
        )
    elif (
        node.options & PROP_VALUE_IS_ARRAY
        and not node.options & (PROP_ARRAY_IS_ORDERED | PROP_ARRAY_IS_ALTERNATE)
        and not any(item.is_composite for item in node.children)
    ):
        node.children.sort(key=lambda item: item.value)
    for child in node.children:
        _sort_node(child)
    for qualifier in node.qualifiers:
        _sort_node(qualifier)


def _rebuild(lib: Any, err: BoundaryError, target: int, node: _Node, path: str) -> bool:
    ns = encode_text(node.schema)
    raw = None if node.is_composite else encode_text(node.value)
    if not _set_text(lib, err, target, ns, encode_text(path), raw, node.options & PROP_CREATABLE_MASK):
        return False
    for qualifier in node.qualifiers:
        if not _rebuild(lib, err, target, qualifier, path + qualifier.step):
            return False
    index = 0
    for child in node.children:
        if child.step.startswith("["):
            index += 1
            child_path = f"{path}[{index}]"
        else:
            child_path = path + child.step
        if not _rebuild(lib, err, target, child, child_path):
            return False
    return True


def _read_name(lib: Any, err: BoundaryError, ptr: int) -> str | None:
    packet = take_text(_serialize(lib, err, ptr, NAME_READ_SERIALIZE_FLAGS))
    if packet is None:
        return None
    match = _ABOUT_RE.search(packet)
    return unescape(match.group(2), {"&quot;": '"'}) if match else ""


def _renamed_copy(lib: Any, err: BoundaryError, ptr: int, name: str) -> int | None:
    """New model equal to ``ptr`` but with ``rdf:about`` set to ``name``."""
    packet = take_text(_serialize(lib, err, ptr, NAME_READ_SERIALIZE_FLAGS))
    if packet is None:
        return None
    about = 'rdf:about="' + escape(name, {'"': "&quot;"}) + '"'
    renamed, count = _ABOUT_RE.subn(lambda m: m.group(1) + about, packet)
    if not count:
        err.set(BAD_SERIALIZE, "Serialized packet has no rdf:about attribute")
        return None
    return _parse_new(lib, err, renamed.encode("utf-8"))


def _replace_model(meta: MetaHandle, err: BoundaryError, lib: Any, new_ptr: int) -> bool:
    if meta.has_live_iterators():
        lib.xmp_free(new_ptr)
        err.set(BAD_OBJECT, "Model cannot be replaced while iterators are open")
        return False
    meta.adopt(new_ptr)
    return True


def _build_sorted(lib: Any, err: BoundaryError, schemas: list[_Node], name: str) -> int | None:
    """Emit the sorted snapshot into a new model; None with ``err`` set on failure."""
    scratch = lib.xmp_new_empty()
    if not scratch:
        _fail(lib, err, "xmp_new_empty")
        return None
    built = None
    try:
        for schema in schemas:
            schema.children.sort(key=lambda prop: prop.step)
            for prop in schema.children:
                _sort_node(prop)
                if not _rebuild(lib, err, scratch, prop, prop.step):
                    return None
        if not name:
            built, scratch = scratch, None
        else:
            built = _renamed_copy(lib, err, scratch, name)
        return built
    finally:
        if scratch:
            lib.xmp_free(scratch)


def meta_sort(meta: MetaHandle, err: BoundaryError) -> bool:
    """Reorder the model canonically.

    Schemas by prefix, properties and struct fields by qualified name,
    qualifiers with ``xml:lang`` and ``rdf:type`` first, alt-text items by
    language with ``x-default`` first, unordered arrays of simple items by
    value. Ordered arrays keep their order. The sorted model is built into
    a scratch copy; the original is only replaced once that succeeded.
    """
    err.clear()
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    with native_call(err, "meta_sort"):
        schemas = _snapshot(lib, err, ptr)
        if schemas is None:
            return False
        name = _read_name(lib, err, ptr)
        if name is None:
            return False

        prefixes = {s.schema: path_bridge.lookup_prefix(lib, err, s.schema) or s.schema for s in schemas}
        schemas.sort(key=lambda s: prefixes[s.schema])

        sorted_ptr = _build_sorted(lib, err, schemas, name)
        if sorted_ptr is None:
            return False
        return _replace_model(meta, err, lib, sorted_ptr)
    return False


def meta_get_object_name(meta: MetaHandle, err: BoundaryError) -> OwnedText | None:
    """Client-assigned model name (``rdf:about``); empty by default."""
    err.clear()
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return None
    with native_call(err, "meta_get_object_name"):
        name = _read_name(lib, err, ptr)
        if name is None:
            return None
        return copy_out(name)
    return None


def meta_set_object_name(meta: MetaHandle, err: BoundaryError, name: str) -> bool:
    err.clear()
    encode_text(name)
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    with native_call(err, "meta_set_object_name"):
        renamed = _renamed_copy(lib, err, ptr, name)
        if renamed is None:
            return False
        return _replace_model(meta, err, lib, renamed)
    return False


def _flag_names(options: int) -> str:
    return " ".join(label for bit, label in _FLAG_NAMES if options & bit)


def _dump_node(node: _Node, depth: int, sink: Callable[[str], Any]) -> None:
    indent = "   " * depth
    label = node.step[1:] if node.step.startswith("/") else node.step
    line = f"{indent}{label}"
    if not node.is_composite:
        line += f' = "{node.value}"'
    if node.options:
        line += f"  (0x{node.options:x} : {_flag_names(node.options)})"
    sink(line + "\n")
    for qualifier in node.qualifiers:
        _dump_node(qualifier, depth + 2, sink)
    for child in node.children:
        _dump_node(child, depth + 1, sink)


def meta_dump_object(meta: MetaHandle, err: BoundaryError, sink: Callable[[str], Any]) -> bool:
    """Push a readable description of the model to ``sink``, line by line.

    The first line is the header ``XMPMeta object "<name>"  (0x0)``. Chunks
    are delivered synchronously and concatenate in call order.
    """
    err.clear()
    ptr, lib = _meta_lib(meta, err)
    if lib is None:
        return False
    with native_call(err, "meta_dump_object"):
        name = _read_name(lib, err, ptr)
        schemas = None if name is None else _snapshot(lib, err, ptr)
        if schemas is None:
            return False
        sink(f'XMPMeta object "{name}"  (0x0)\n')
        for schema in schemas:
            prefix = path_bridge.lookup_prefix(lib, err, schema.schema) or "?"
            sink(f"\n   {prefix}  {schema.schema}  (0x{PROP_SCHEMA_NODE:x} : schema)\n")
            for prop in schema.children:
                _dump_node(prop, 2, sink)
        return not err.had_error
    return False
