"""Module: xmp_meta.py

Date: 2026-01-14

The XMP data model.

An :class:`XmpMeta` owns one native model. It is released when the object
is closed (``close()`` / ``with``) or garbage collected, whichever comes
first; using it afterwards raises ValueError.

Accessing properties:
    Every accessor takes a schema namespace URI and a property path. The
    path is a simple qualified name (``"dc:creator"`` or ``"creator"``) or
    a path expression built with the ``compose_*`` helpers. Getters return
    None when the property does not exist; engine-reported problems raise
    :class:`~xmptk.domain.xmp_error.XmpError`.

Usage:
    meta = XmpMeta.from_str(packet)
    creator = meta.array_item(xmp_ns.DC, "creator", 1)
    meta.set_property_bool(xmp_ns.XMP_RIGHTS, "Marked", True)
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from os import PathLike
from typing import Any

from xmptk.domain.xmp_date_time import XmpDateTime
from xmptk.domain.xmp_error import XmpError, XmpErrorType, check_boundary
from xmptk.domain.xmp_iterator import XmpIterator
from xmptk.domain.xmp_options import FromStrOptions, ItemPlacement, IterOptions, ToStringOptions
from xmptk.domain.xmp_value import XmpValue
from xmptk.infra.bridge import meta_bridge, path_bridge
from xmptk.infra.bridge.boundary_error import BoundaryError
from xmptk.infra.bridge.handles import MetaHandle
from xmptk.infra.bridge.strings import take_text
from xmptk.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)

ValueLike = XmpValue[str] | str


def _as_value(value: ValueLike) -> XmpValue[str]:
    return value if isinstance(value, XmpValue) else XmpValue(value)


def _call(func: Callable[..., Any], *args: Any) -> Any:
    """Run a static bridge function with a fresh error slot; raise what it reports."""
    err = BoundaryError()
    result = func(err, *args)
    check_boundary(err)
    return result


def _text_value(found: tuple[Any, int] | None) -> XmpValue[str] | None:
    if found is None:
        return None
    owned, options = found
    return XmpValue(take_text(owned) or "", options)


def _typed_value(found: tuple[Any, int] | None) -> XmpValue[Any] | None:
    if found is None:
        return None
    value, options = found
    return XmpValue(value, options)


class XmpMeta:
    """An XMP data model: a namespaced tree of properties."""

    # Index of the last existing item in an array
    LAST_ITEM = path_bridge.LAST_ITEM

    def __init__(self) -> None:
        """Create a new, empty model.

        Raises:
            XmpError: ``NO_TOOLKIT`` if the engine is unavailable.

        """
        self._handle: MetaHandle = _call(meta_bridge.meta_new)

    @classmethod
    def _wrap(cls, handle: MetaHandle) -> XmpMeta:
        meta = cls.__new__(cls)
        meta._handle = handle
        return meta

    def _call(self, func: Callable[..., Any], *args: Any) -> Any:
        err = BoundaryError()
        result = func(self._handle, err, *args)
        check_boundary(err)
        return result

    # =====================================
    # CONSTRUCTION
    # =====================================

    @classmethod
    def from_str(cls, text: str) -> XmpMeta:
        """Parse a complete serialized RDF packet."""
        return cls.from_str_with_options(text, FromStrOptions())

    @classmethod
    def from_str_with_options(cls, text: str, options: FromStrOptions) -> XmpMeta:
        return cls._wrap(_call(meta_bridge.meta_parse, text, options.flags))

    @classmethod
    def from_file(cls, path: str | PathLike[str]) -> XmpMeta:
        """Read the XMP embedded in a file without keeping the file open.

        Raises:
            XmpError: ``UNAVAILABLE`` if the file carries no XMP, or whatever
                the engine reports while opening it.

        """
        from xmptk.domain.xmp_file import XmpFile
        from xmptk.domain.xmp_options import OpenFileOptions

        with XmpFile() as f:
            f.open_file(path, OpenFileOptions.FOR_READ | OpenFileOptions.ONLY_XMP)
            meta = f.xmp()
        if meta is None:
            raise XmpError(XmpErrorType.UNAVAILABLE, "No XMP in file")
        return meta

    def clone(self) -> XmpMeta:
        """Deep, independent copy."""
        return XmpMeta._wrap(self._call(meta_bridge.meta_clone))

    def __copy__(self) -> XmpMeta:
        return self.clone()

    def __deepcopy__(self, memo: dict[int, Any]) -> XmpMeta:
        return self.clone()

    def close(self) -> None:
        """Release the native model (and any iterators over it) now."""
        self._handle.release()

    @property
    def closed(self) -> bool:
        return not self._handle.alive

    def __enter__(self) -> XmpMeta:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # =====================================
    # NAMESPACES
    # =====================================

    @staticmethod
    def register_namespace(namespace_uri: str, suggested_prefix: str) -> str:
        """Register a namespace URI; returns the prefix actually in use.

        Registering a URI that is already known is not an error and keeps
        the original prefix. Registrations are process-wide.
        """
        return take_text(_call(meta_bridge.register_namespace, namespace_uri, suggested_prefix)) or ""

    @staticmethod
    def namespace_prefix(namespace_uri: str) -> str | None:
        """Prefix (with trailing colon) registered for a URI, or None."""
        return take_text(_call(meta_bridge.namespace_prefix, namespace_uri))

    @staticmethod
    def namespace_uri(prefix: str) -> str | None:
        """URI registered for a prefix, or None."""
        return take_text(_call(meta_bridge.namespace_uri, prefix))

    @staticmethod
    def dump_namespaces(sink: Callable[[str], Any] | None = None) -> str | None:
        """Describe the registered prefix to URI map, for debugging.

        Registrations are process-wide and not tied to any model. Covers the
        standard schemas and the URIs registered through
        :meth:`register_namespace`. With a ``sink`` the text is pushed to it
        line by line and None is returned.
        """
        if sink is not None:
            _call(meta_bridge.namespace_dump, sink)
            return None
        chunks: list[str] = []
        _call(meta_bridge.namespace_dump, chunks.append)
        return "".join(chunks)

    # =====================================
    # EXISTENCE
    # =====================================

    def contains_property(self, namespace: str, path: str) -> bool:
        return self._call(meta_bridge.meta_does_property_exist, namespace, path)

    def contains_struct_field(
        self, struct_ns: str, struct_path: str, field_ns: str, field_name: str
    ) -> bool:
        return self._call(
            meta_bridge.meta_does_struct_field_exist, struct_ns, struct_path, field_ns, field_name
        )

    def contains_qualifier(self, prop_ns: str, prop_path: str, qual_ns: str, qual_name: str) -> bool:
        return self._call(meta_bridge.meta_does_qualifier_exist, prop_ns, prop_path, qual_ns, qual_name)

    # =====================================
    # SIMPLE PROPERTIES
    # =====================================

    def property(self, namespace: str, path: str) -> XmpValue[str] | None:
        return _text_value(self._call(meta_bridge.meta_get_property, namespace, path))

    def property_bool(self, namespace: str, path: str) -> XmpValue[bool] | None:
        return _typed_value(self._call(meta_bridge.meta_get_property_bool, namespace, path))

    def property_i32(self, namespace: str, path: str) -> XmpValue[int] | None:
        return _typed_value(self._call(meta_bridge.meta_get_property_int32, namespace, path))

    def property_i64(self, namespace: str, path: str) -> XmpValue[int] | None:
        return _typed_value(self._call(meta_bridge.meta_get_property_int64, namespace, path))

    def property_f64(self, namespace: str, path: str) -> XmpValue[float] | None:
        return _typed_value(self._call(meta_bridge.meta_get_property_float, namespace, path))

    def property_date(self, namespace: str, path: str) -> XmpValue[XmpDateTime] | None:
        return _typed_value(self._call(meta_bridge.meta_get_property_date, namespace, path))

    def set_property(self, namespace: str, path: str, value: ValueLike) -> None:
        """Create or replace a property.

        Pass an :class:`XmpValue` with ``is_array``/``is_struct`` set (and an
        empty value) to create a composite node.
        """
        v = _as_value(value)
        composite = v.is_array or v.is_struct
        self._call(
            meta_bridge.meta_set_property,
            namespace,
            path,
            None if composite else v.value,
            v.options,
        )

    def set_property_bool(self, namespace: str, path: str, value: XmpValue[bool] | bool) -> None:
        v = value if isinstance(value, XmpValue) else XmpValue(value)
        self._call(meta_bridge.meta_set_property_bool, namespace, path, v.value, v.options)

    def set_property_i32(self, namespace: str, path: str, value: XmpValue[int] | int) -> None:
        v = value if isinstance(value, XmpValue) else XmpValue(value)
        if not -(2**31) <= v.value < 2**31:
            raise ValueError(f"{v.value} does not fit in 32 bits")
        self._call(meta_bridge.meta_set_property_int32, namespace, path, v.value, v.options)

    def set_property_i64(self, namespace: str, path: str, value: XmpValue[int] | int) -> None:
        v = value if isinstance(value, XmpValue) else XmpValue(value)
        if not -(2**63) <= v.value < 2**63:
            raise ValueError(f"{v.value} does not fit in 64 bits")
        self._call(meta_bridge.meta_set_property_int64, namespace, path, v.value, v.options)

    def set_property_f64(self, namespace: str, path: str, value: XmpValue[float] | float) -> None:
        v = value if isinstance(value, XmpValue) else XmpValue(value)
        self._call(meta_bridge.meta_set_property_float, namespace, path, float(v.value), v.options)

    def set_property_date(
        self, namespace: str, path: str, value: XmpValue[XmpDateTime] | XmpDateTime
    ) -> None:
        v = value if isinstance(value, XmpValue) else XmpValue(value)
        self._call(meta_bridge.meta_set_property_date, namespace, path, v.value, v.options)

    def delete_property(self, namespace: str, path: str) -> None:
        """Delete a property; a missing property is not an error."""
        self._call(meta_bridge.meta_delete_property, namespace, path)

    # =====================================
    # ARRAYS
    # =====================================

    def array_item(self, namespace: str, path: str, index: int) -> XmpValue[str] | None:
        """Item at a 1-based ``index``; :attr:`LAST_ITEM` for the last one."""
        return _text_value(self._call(meta_bridge.meta_get_array_item, namespace, path, index))

    def property_array(self, namespace: str, path: str) -> Iterator[XmpValue[str]]:
        """Yield every item of an array, first to last.

        Yields nothing if the property does not exist.
        """
        index = 1
        while True:
            item = self.array_item(namespace, path, index)
            if item is None:
                return
            yield item
            index += 1

    def set_array_item(
        self, namespace: str, path: str, placement: ItemPlacement, item_value: ValueLike
    ) -> None:
        """Replace an item, or insert one before/after an existing index."""
        v = _as_value(item_value)
        self._call(
            meta_bridge.meta_set_array_item,
            namespace,
            path,
            placement.index,
            v.value,
            v.options | placement.flags,
        )

    def append_array_item(
        self, namespace: str, array_name: XmpValue[str], item_value: ValueLike
    ) -> None:
        """Append an item.

        ``array_name.options`` give the array form (ordered, alternate, ...)
        used when the array has to be created; they must agree with an
        existing array.
        """
        v = _as_value(item_value)
        array_options = array_name.options
        if array_options and not array_name.is_array:
            array_options |= XmpValue("").set_is_array(True).options
        self._call(
            meta_bridge.meta_append_array_item,
            namespace,
            array_name.value,
            array_options,
            v.value,
            v.options,
        )

    def delete_array_item(self, namespace: str, path: str, index: int) -> None:
        """Delete an item; a missing item is not an error."""
        self._call(meta_bridge.meta_delete_array_item, namespace, path, index)

    def array_len(self, namespace: str, path: str) -> int:
        """Number of items; 0 if the array does not exist."""
        return self._call(meta_bridge.meta_count_array_items, namespace, path) or 0

    # =====================================
    # STRUCT FIELDS
    # =====================================

    def struct_field(
        self, struct_ns: str, struct_path: str, field_ns: str, field_name: str
    ) -> XmpValue[str] | None:
        return _text_value(
            self._call(meta_bridge.meta_get_struct_field, struct_ns, struct_path, field_ns, field_name)
        )

    def set_struct_field(
        self, struct_ns: str, struct_path: str, field_ns: str, field_name: str, item_value: ValueLike
    ) -> None:
        """Set a field, creating the struct if needed."""
        v = _as_value(item_value)
        self._call(
            meta_bridge.meta_set_struct_field,
            struct_ns,
            struct_path,
            field_ns,
            field_name,
            None if v.is_struct or v.is_array else v.value,
            v.options,
        )

    def delete_struct_field(self, struct_ns: str, struct_path: str, field_ns: str, field_name: str) -> None:
        self._call(meta_bridge.meta_delete_struct_field, struct_ns, struct_path, field_ns, field_name)

    # =====================================
    # QUALIFIERS
    # =====================================

    def qualifier(self, prop_ns: str, prop_path: str, qual_ns: str, qual_name: str) -> XmpValue[str] | None:
        return _text_value(
            self._call(meta_bridge.meta_get_qualifier, prop_ns, prop_path, qual_ns, qual_name)
        )

    def set_qualifier(
        self, prop_ns: str, prop_path: str, qual_ns: str, qual_name: str, qual_value: ValueLike
    ) -> None:
        """Attach a qualifier; the property must already exist."""
        v = _as_value(qual_value)
        self._call(
            meta_bridge.meta_set_qualifier,
            prop_ns,
            prop_path,
            qual_ns,
            qual_name,
            v.value,
            v.options,
        )

    def delete_qualifier(self, prop_ns: str, prop_path: str, qual_ns: str, qual_name: str) -> None:
        self._call(meta_bridge.meta_delete_qualifier, prop_ns, prop_path, qual_ns, qual_name)

    # =====================================
    # LOCALIZED TEXT
    # =====================================

    def localized_text(
        self, namespace: str, path: str, generic_lang: str | None, specific_lang: str
    ) -> tuple[XmpValue[str], str] | None:
        """Best-matching item of an alt-text array and its actual language.

        Selection order: exact match with ``specific_lang``, a partial
        match with ``generic_lang``, the ``x-default`` item, the first item.
        """
        found = self._call(
            meta_bridge.meta_get_localized_text, namespace, path, generic_lang, specific_lang
        )
        if found is None:
            return None
        value, actual_lang, options = found
        return XmpValue(take_text(value) or "", options), take_text(actual_lang) or ""

    def set_localized_text(
        self, namespace: str, path: str, generic_lang: str | None, specific_lang: str, item_value: str
    ) -> None:
        """Set an alt-text item, creating the array and ``x-default`` as needed."""
        self._call(
            meta_bridge.meta_set_localized_text,
            namespace,
            path,
            generic_lang,
            specific_lang,
            item_value,
            0,
        )

    def delete_localized_text(
        self, namespace: str, path: str, generic_lang: str | None, specific_lang: str
    ) -> None:
        self._call(
            meta_bridge.meta_delete_localized_text, namespace, path, generic_lang, specific_lang
        )

    # =====================================
    # PATH COMPOSITION
    # =====================================

    @staticmethod
    def compose_array_item_path(array_ns: str, array_path: str, index: int) -> str:
        """``array_path[index]``, or ``array_path[last()]`` for :attr:`LAST_ITEM`."""
        return take_text(_call(path_bridge.compose_array_item_path, array_ns, array_path, index)) or ""

    @staticmethod
    def compose_lang_selector(schema_ns: str, array_path: str, lang_name: str) -> str:
        """``array_path[?xml:lang="lang"]``."""
        return take_text(_call(path_bridge.compose_lang_selector, schema_ns, array_path, lang_name)) or ""

    @staticmethod
    def compose_field_selector(
        schema_ns: str, array_path: str, field_ns: str, field_name: str, field_value: str | None
    ) -> str:
        """``array_path[pfx:field_name="value"]``."""
        return (
            take_text(
                _call(path_bridge.compose_field_selector, schema_ns, array_path, field_ns, field_name, field_value)
            )
            or ""
        )

    @staticmethod
    def compose_qualifier_path(schema_ns: str, prop_path: str, qual_ns: str, qual_name: str) -> str:
        """``prop_path/?pfx:qual_name``."""
        return take_text(_call(path_bridge.compose_qualifier_path, schema_ns, prop_path, qual_ns, qual_name)) or ""

    @staticmethod
    def compose_struct_field_path(schema_ns: str, struct_path: str, field_ns: str, field_name: str) -> str:
        """``struct_path/pfx:field_name``."""
        return (
            take_text(_call(path_bridge.compose_struct_field_path, schema_ns, struct_path, field_ns, field_name))
            or ""
        )

    # =====================================
    # WHOLE-MODEL OPERATIONS
    # =====================================

    def sort(self) -> None:
        """Put the model in canonical order.

        Schemas are ordered by prefix; properties, struct fields and
        qualifiers by name (``xml:lang`` and ``rdf:type`` qualifiers first).
        Unordered arrays of simple items are sorted by value and alt-text
        arrays by language with ``x-default`` first. Ordered arrays keep
        their item order.
        """
        self._call(meta_bridge.meta_sort)

    def name(self) -> str:
        """Client-assigned name of this object (``""`` by default)."""
        return take_text(self._call(meta_bridge.meta_get_object_name)) or ""

    def set_name(self, name: str) -> None:
        self._call(meta_bridge.meta_set_object_name, name)

    def to_string_with_options(self, options: ToStringOptions) -> str:
        """Serialize as RDF/XML."""
        return (
            take_text(
                self._call(
                    meta_bridge.meta_serialize,
                    options.flags,
                    options.padding,
                    options.newline,
                    options.indent,
                    options.base_indent,
                )
            )
            or ""
        )

    def iter(self, options: IterOptions | None = None) -> XmpIterator:
        """Iterate over the model (or the subtree named in ``options``)."""
        return XmpIterator(self, options)

    def __iter__(self) -> XmpIterator:
        return self.iter()

    def dump(self, sink: Callable[[str], Any] | None = None) -> str | None:
        """Describe the model in readable text.

        With a ``sink`` the text is pushed to it line by line and None is
        returned; without one the whole text is returned.
        """
        if sink is not None:
            self._call(meta_bridge.meta_dump_object, sink)
            return None
        chunks: list[str] = []
        self._call(meta_bridge.meta_dump_object, chunks.append)
        return "".join(chunks)

    def __str__(self) -> str:
        """Compact RDF without packet wrapper or formatting."""
        text = self.to_string_with_options(ToStringOptions(omit_packet_wrapper=True, omit_all_formatting=True))
        return text.rstrip()

    def __repr__(self) -> str:
        return f"<XmpMeta {self._handle!r}>"


__all__ = [
    "XmpMeta",
]
