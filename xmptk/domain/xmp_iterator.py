"""Module: xmp_iterator.py

Date: 2026-01-14

Forward-only iteration over a metadata model.

Usage:
    for prop in meta.iter(IterOptions(leaf_nodes_only=True)):
        print(prop.schema_ns, prop.name, prop.value.value)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from xmptk.domain.xmp_error import check_boundary
from xmptk.domain.xmp_options import IterOptions
from xmptk.domain.xmp_value import XmpValue
from xmptk.infra.bridge import iterator_bridge
from xmptk.infra.bridge.boundary_error import BoundaryError
from xmptk.infra.bridge.strings import take_text

if TYPE_CHECKING:
    from xmptk.domain.xmp_meta import XmpMeta


@dataclass(frozen=True)
class XmpProperty:
    """One node reported by an :class:`XmpIterator`."""

    schema_ns: str = ""
    name: str = ""
    value: XmpValue[str] = field(default_factory=lambda: XmpValue(""))


class XmpIterator:
    """Iterator over an XMP data model or a subset of it.

    Create via :meth:`XmpMeta.iter`. The model must stay open while the
    iterator is used; closing the model closes its iterators. Once
    exhausted, the iterator stays exhausted.
    """

    def __init__(self, meta: XmpMeta, options: IterOptions | None = None) -> None:
        options = options or IterOptions()
        err = BoundaryError()
        handle = iterator_bridge.iterator_new(
            meta._handle, err, options.schema_ns, options.prop_name, options.flags
        )
        check_boundary(err)
        self._meta = meta
        self._handle = handle

    def __iter__(self) -> XmpIterator:
        return self

    def __next__(self) -> XmpProperty:
        err = BoundaryError()
        item = iterator_bridge.iterator_next(self._handle, err)
        check_boundary(err)
        if item is None:
            raise StopIteration
        ns, path, value, options = item
        return XmpProperty(
            schema_ns=take_text(ns) or "",
            name=take_text(path) or "",
            value=XmpValue(take_text(value) or "", options),
        )

    def _skip(self, mode: int) -> None:
        err = BoundaryError()
        iterator_bridge.iterator_skip(self._handle, err, mode)
        check_boundary(err)

    def skip_subtree(self) -> None:
        """Skip the subtree below the current node."""
        self._skip(iterator_bridge.SKIP_SUBTREE)

    def skip_siblings(self) -> None:
        """Skip the subtree below and the remaining siblings of the current node."""
        self._skip(iterator_bridge.SKIP_SIBLINGS)

    def close(self) -> None:
        self._handle.release()

    def __enter__(self) -> XmpIterator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
