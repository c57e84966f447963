"""Module: xmp_value.py

Date: 2026-01-13

Property values as returned by the metadata model: the value itself plus
the option bits that describe its form.

Pure domain layer - no native dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntFlag
from typing import Generic, TypeVar

T = TypeVar("T")


class PropFlags(IntFlag):
    """Option bits describing a property node.

    Example:
        >>> flags = PropFlags.VALUE_IS_ARRAY | PropFlags.ARRAY_IS_ORDERED
        >>> bool(flags & PropFlags.ARRAY_IS_ORDERED)
        True

    """

    NONE = 0
    VALUE_IS_URI = 0x0000_0002
    HAS_QUALIFIERS = 0x0000_0010
    IS_QUALIFIER = 0x0000_0020
    HAS_LANG = 0x0000_0040
    HAS_TYPE = 0x0000_0080
    VALUE_IS_STRUCT = 0x0000_0100
    VALUE_IS_ARRAY = 0x0000_0200
    ARRAY_IS_ORDERED = 0x0000_0400
    ARRAY_IS_ALTERNATE = 0x0000_0800
    ARRAY_IS_ALT_TEXT = 0x0000_1000
    IS_ALIAS = 0x0001_0000
    HAS_ALIASES = 0x0002_0000
    IS_INTERNAL = 0x0004_0000
    IS_STABLE = 0x0010_0000
    IS_DERIVED = 0x0020_0000
    IS_SCHEMA_NODE = 0x8000_0000


@dataclass(frozen=True)
class XmpValue(Generic[T]):
    """A single property or array item.

    ``set_*`` builders return a new value with the flag changed:

        >>> XmpValue("Jane").set_is_uri(True).is_uri
        True
    """

    value: T
    options: int = 0

    def _flag(self, flag: PropFlags) -> bool:
        return bool(self.options & flag)

    def _with_flag(self, flag: PropFlags, on: bool) -> XmpValue[T]:
        options = self.options | int(flag) if on else self.options & ~int(flag)
        return replace(self, options=options)

    @property
    def flags(self) -> PropFlags:
        return PropFlags(self.options)

    @property
    def has_no_flags(self) -> bool:
        return self.options == 0

    # --- value form ---

    @property
    def is_uri(self) -> bool:
        """Serialized with ``rdf:resource``."""
        return self._flag(PropFlags.VALUE_IS_URI)

    def set_is_uri(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.VALUE_IS_URI, on)

    @property
    def has_qualifiers(self) -> bool:
        return self._flag(PropFlags.HAS_QUALIFIERS)

    def set_has_qualifiers(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.HAS_QUALIFIERS, on)

    @property
    def is_qualifier(self) -> bool:
        """This node is a qualifier of another node."""
        return self._flag(PropFlags.IS_QUALIFIER)

    def set_is_qualifier(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.IS_QUALIFIER, on)

    @property
    def has_lang(self) -> bool:
        """Implies ``has_qualifiers``; the ``xml:lang`` qualifier comes first."""
        return self._flag(PropFlags.HAS_LANG)

    def set_has_lang(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.HAS_LANG, on)

    @property
    def has_type(self) -> bool:
        return self._flag(PropFlags.HAS_TYPE)

    def set_has_type(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.HAS_TYPE, on)

    # --- data structure form ---

    @property
    def is_struct(self) -> bool:
        return self._flag(PropFlags.VALUE_IS_STRUCT)

    def set_is_struct(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.VALUE_IS_STRUCT, on)

    @property
    def is_array(self) -> bool:
        """Any RDF container (bag, seq or alt)."""
        return self._flag(PropFlags.VALUE_IS_ARRAY)

    def set_is_array(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.VALUE_IS_ARRAY, on)

    @property
    def is_ordered(self) -> bool:
        """``rdf:Seq``; implies ``is_array``."""
        return self._flag(PropFlags.ARRAY_IS_ORDERED)

    def set_is_ordered(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.ARRAY_IS_ORDERED, on)

    @property
    def is_alternate(self) -> bool:
        """``rdf:Alt``; implies ``is_array`` and ``is_ordered``."""
        return self._flag(PropFlags.ARRAY_IS_ALTERNATE)

    def set_is_alternate(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.ARRAY_IS_ALTERNATE, on)

    @property
    def is_alt_text(self) -> bool:
        """Items are localized text carrying ``xml:lang``."""
        return self._flag(PropFlags.ARRAY_IS_ALT_TEXT)

    def set_is_alt_text(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.ARRAY_IS_ALT_TEXT, on)

    # --- other ---

    @property
    def is_alias(self) -> bool:
        return self._flag(PropFlags.IS_ALIAS)

    def set_is_alias(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.IS_ALIAS, on)

    @property
    def has_aliases(self) -> bool:
        return self._flag(PropFlags.HAS_ALIASES)

    def set_has_aliases(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.HAS_ALIASES, on)

    @property
    def is_internal(self) -> bool:
        return self._flag(PropFlags.IS_INTERNAL)

    def set_is_internal(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.IS_INTERNAL, on)

    @property
    def is_stable(self) -> bool:
        return self._flag(PropFlags.IS_STABLE)

    def set_is_stable(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.IS_STABLE, on)

    @property
    def is_derived(self) -> bool:
        return self._flag(PropFlags.IS_DERIVED)

    def set_is_derived(self, on: bool) -> XmpValue[T]:
        return self._with_flag(PropFlags.IS_DERIVED, on)

    @property
    def is_schema_node(self) -> bool:
        """Reported for the implicit schema nodes seen during iteration."""
        return self._flag(PropFlags.IS_SCHEMA_NODE)
