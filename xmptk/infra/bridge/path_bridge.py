"""Module: path_bridge.py

Date: 2026-01-08

Path composition helpers.

libexempi does not export the toolkit's ``XMPUtils::Compose*`` functions,
so the path expressions are formatted here. They need no model, only the
namespace registry (for the field/qualifier prefix), which requires the
engine to be initialized.

Path forms:
- array item:       ``name[i]`` / ``name[last()]``
- struct field:     ``name/pfx:field``
- qualifier:        ``name/?pfx:qual``
- language item:    ``name[?xml:lang="en-US"]``
- field selector:   ``name[pfx:field="value"]``
"""

from __future__ import annotations

from typing import Any

from xmptk.infra.bridge.boundary_error import (
    BAD_INDEX,
    BAD_SCHEMA,
    BAD_XPATH,
    BoundaryError,
    capture_native_error,
    native_call,
)
from xmptk.infra.bridge.lifecycle import require_engine
from xmptk.infra.bridge.strings import NativeString, OwnedText, copy_out, encode_text, take_text

# Array index meaning "the last existing item"
LAST_ITEM = -1


def lookup_prefix(lib: Any, err: BoundaryError, namespace_uri: str) -> str | None:
    """Registered prefix (with trailing colon) for a namespace URI.

    Returns None with a clean ``err`` when the URI is not registered.
    """
    uri = encode_text(namespace_uri)
    with NativeString(lib) as prefix:
        if lib.xmp_namespace_prefix(uri, prefix.ptr):
            return take_text(prefix.copy())
        capture_native_error(lib, err, "xmp_namespace_prefix")
    return None


def normalize_lang(lang: str) -> str:
    """RFC 3066 normalization used by the toolkit for ``xml:lang`` values.

    Everything is lower case except a 2-letter second subtag (the region),
    which is upper case: ``EN-us`` -> ``en-US``, ``X-Default`` -> ``x-default``.
    """
    subtags = lang.lower().split("-")
    if len(subtags) > 1 and len(subtags[1]) == 2:
        subtags[1] = subtags[1].upper()
    return "-".join(subtags)


def _quote(value: str) -> str:
    return '"' + value.replace('"', "&quot;") + '"'


def _check_names(err: BoundaryError, schema_ns: str, name: str, what: str) -> bool:
    if not schema_ns:
        err.set(BAD_SCHEMA, "Empty schema namespace URI")
        return False
    if not name:
        err.set(BAD_XPATH, f"Empty {what} name")
        return False
    return True


def _registered_prefix(lib: Any, err: BoundaryError, namespace_uri: str, what: str) -> str | None:
    prefix = lookup_prefix(lib, err, namespace_uri)
    if prefix is None and not err.had_error:
        err.set(BAD_SCHEMA, f"Unregistered {what} namespace URI")
    return prefix


def _compose_qualified(
    err: BoundaryError,
    operation: str,
    schema_ns: str,
    base_name: str,
    base_what: str,
    child_ns: str,
    child_name: str,
    child_what: str,
) -> str | None:
    """Shared validation for paths that append a ``pfx:name`` step."""
    for text in (schema_ns, base_name, child_ns, child_name):
        encode_text(text)
    lib = require_engine(err)
    if lib is None:
        return None
    if not _check_names(err, schema_ns, base_name, base_what):
        return None
    if not child_ns:
        err.set(BAD_SCHEMA, f"Empty {child_what} namespace URI")
        return None
    if not child_name:
        err.set(BAD_XPATH, f"Empty {child_what} name")
        return None

    with native_call(err, operation):
        if _registered_prefix(lib, err, schema_ns, "schema") is None:
            return None
        return _registered_prefix(lib, err, child_ns, child_what)
    return None


def compose_array_item_path(
    err: BoundaryError, schema_ns: str, array_name: str, index: int
) -> OwnedText | None:
    """``array_name[index]``; :data:`LAST_ITEM` gives ``array_name[last()]``."""
    err.clear()
    encode_text(schema_ns)
    encode_text(array_name)
    lib = require_engine(err)
    if lib is None or not _check_names(err, schema_ns, array_name, "array"):
        return None

    with native_call(err, "compose_array_item_path"):
        if _registered_prefix(lib, err, schema_ns, "schema") is None:
            return None
        if index == LAST_ITEM:
            return copy_out(f"{array_name}[last()]")
        if index < 0:
            err.set(BAD_INDEX, "Array index out of bounds")
            return None
        return copy_out(f"{array_name}[{index}]")
    return None


def compose_struct_field_path(
    err: BoundaryError, struct_ns: str, struct_name: str, field_ns: str, field_name: str
) -> OwnedText | None:
    """``struct_name/pfx:field_name``."""
    err.clear()
    prefix = _compose_qualified(
        err, "compose_struct_field_path", struct_ns, struct_name, "struct",
        field_ns, field_name, "field",
    )
    if prefix is None:
        return None
    return copy_out(f"{struct_name}/{prefix}{field_name}")


def compose_qualifier_path(
    err: BoundaryError, schema_ns: str, prop_name: str, qual_ns: str, qual_name: str
) -> OwnedText | None:
    """``prop_name/?pfx:qual_name``."""
    err.clear()
    prefix = _compose_qualified(
        err, "compose_qualifier_path", schema_ns, prop_name, "property",
        qual_ns, qual_name, "qualifier",
    )
    if prefix is None:
        return None
    return copy_out(f"{prop_name}/?{prefix}{qual_name}")


def compose_lang_selector(
    err: BoundaryError, schema_ns: str, array_name: str, lang_name: str
) -> OwnedText | None:
    """``array_name[?xml:lang="lang"]`` with the language normalized."""
    err.clear()
    encode_text(schema_ns)
    encode_text(array_name)
    encode_text(lang_name)
    lib = require_engine(err)
    if lib is None or not _check_names(err, schema_ns, array_name, "array"):
        return None
    if not lang_name:
        err.set(BAD_XPATH, "Empty language name")
        return None

    with native_call(err, "compose_lang_selector"):
        if _registered_prefix(lib, err, schema_ns, "schema") is None:
            return None
        return copy_out(f"{array_name}[?xml:lang={_quote(normalize_lang(lang_name))}]")
    return None


def compose_field_selector(
    err: BoundaryError,
    schema_ns: str,
    array_name: str,
    field_ns: str,
    field_name: str,
    field_value: str | None,
) -> OwnedText | None:
    """``array_name[pfx:field_name="value"]``; a missing value selects ``""``."""
    err.clear()
    if field_value is not None:
        encode_text(field_value)
    prefix = _compose_qualified(
        err, "compose_field_selector", schema_ns, array_name, "array",
        field_ns, field_name, "field",
    )
    if prefix is None:
        return None
    return copy_out(f"{array_name}[{prefix}{field_name}={_quote(field_value or '')}]")
