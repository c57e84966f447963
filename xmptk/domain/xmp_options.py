"""Module: xmp_options.py

Date: 2026-01-13

Option types for parsing, serialization, array placement, iteration and
file access. Each one knows how to turn itself into the engine's option bits.

Pure domain layer - no native dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag


class OpenFileOptions(IntFlag):
    """Flags for :meth:`XmpFile.open_file`.

    Example:
        >>> flags = OpenFileOptions.FOR_UPDATE | OpenFileOptions.USE_SMART_HANDLER
        >>> bool(flags & OpenFileOptions.FOR_READ)
        False

    """

    NONE = 0
    FOR_READ = 0x0000_0001
    FOR_UPDATE = 0x0000_0002
    ONLY_XMP = 0x0000_0004
    FORCE_GIVEN_HANDLER = 0x0000_0008
    STRICTLY = 0x0000_0010
    USE_SMART_HANDLER = 0x0000_0020
    USE_PACKET_SCANNING = 0x0000_0040
    LIMITED_SCANNING = 0x0000_0080
    REPAIR_FILE = 0x0000_0100
    OPTIMIZE_FILE_LAYOUT = 0x0000_0200


class CloseFileOptions(IntFlag):
    """Flags for :meth:`XmpFile.close`."""

    NONE = 0
    SAFE_UPDATE = 0x0001


@dataclass
class FromStrOptions:
    """Parsing options for :meth:`XmpMeta.from_str_with_options`.

    Attributes:
        require_xmp_meta: The ``x:xmpmeta`` outer element is mandatory.
        strict_aliasing: Fail on conflicting alias values.

    """

    require_xmp_meta: bool = False
    strict_aliasing: bool = False

    @property
    def flags(self) -> int:
        flags = 0
        if self.require_xmp_meta:
            flags |= 0x0001
        if self.strict_aliasing:
            flags |= 0x0004
        return flags


@dataclass
class ToStringOptions:
    """Serialization options for :meth:`XmpMeta.to_string_with_options`.

    Empty ``newline``/``indent`` select the configured defaults. A zero
    ``padding`` selects the engine's default padding (2 KB).
    """

    padding: int = 0
    newline: str = ""
    indent: str = ""
    base_indent: int = 0

    omit_packet_wrapper: bool = False
    read_only_packet: bool = False
    use_compact_format: bool = False
    use_canonical_format: bool = False
    include_thumbnail_pad: bool = False
    exact_packet_length: bool = False
    omit_all_formatting: bool = False
    omit_xmp_meta_element: bool = False
    include_rdf_hash: bool = False

    _FLAG_BITS = (
        ("omit_packet_wrapper", 0x0010),
        ("read_only_packet", 0x0020),
        ("use_compact_format", 0x0040),
        ("use_canonical_format", 0x0080),
        ("include_thumbnail_pad", 0x0100),
        ("exact_packet_length", 0x0200),
        ("omit_all_formatting", 0x0800),
        ("omit_xmp_meta_element", 0x1000),
        ("include_rdf_hash", 0x2000),
    )

    @property
    def flags(self) -> int:
        flags = 0
        for attr, bit in self._FLAG_BITS:
            if getattr(self, attr):
                flags |= bit
        return flags


@dataclass(frozen=True)
class ItemPlacement:
    """Where :meth:`XmpMeta.set_array_item` puts the value.

    Indexes are 1-based; :data:`LAST_ITEM` (-1) means the last item.
    """

    index: int
    flags: int = 0

    INSERT_BEFORE = 0x0000_4000
    INSERT_AFTER = 0x0000_8000

    @classmethod
    def replace_item_at_index(cls, index: int) -> ItemPlacement:
        return cls(index)

    @classmethod
    def insert_before_index(cls, index: int) -> ItemPlacement:
        return cls(index, cls.INSERT_BEFORE)

    @classmethod
    def insert_after_index(cls, index: int) -> ItemPlacement:
        return cls(index, cls.INSERT_AFTER)


@dataclass
class IterOptions:
    """Starting point and traversal options for :meth:`XmpMeta.iter`.

    By default iteration visits every schema node and everything beneath it,
    depth first. Naming a schema (and optionally a property) starts from
    that node instead.
    """

    schema_ns: str = ""
    prop_name: str = ""
    immediate_children_only: bool = False
    leaf_nodes_only: bool = False
    leaf_name_only: bool = False
    omit_qualifiers: bool = False

    def with_schema(self, schema_ns: str) -> IterOptions:
        self.schema_ns = schema_ns
        self.prop_name = ""
        return self

    def with_property(self, schema_ns: str, prop_name: str) -> IterOptions:
        self.schema_ns = schema_ns
        self.prop_name = prop_name
        return self

    @property
    def flags(self) -> int:
        flags = 0
        if self.immediate_children_only:
            flags |= 0x0100
        if self.leaf_nodes_only:
            flags |= 0x0200
        if self.leaf_name_only:
            flags |= 0x0400
        if self.omit_qualifiers:
            flags |= 0x1000
        return flags
