"""
Module: mocks.py

Date: 2026-01-16

In-process stand-in for the libexempi entry points used by the bridge.

Strings live in real ctypes buffers so NativeString can copy them with
``ctypes.string_at``. Every call is counted in ``calls``; ``fail_next``
makes the next call of a given entry point fail with a chosen code.

Models are small in-memory trees (FakeModel) addressed by the same path
syntax the bridge composes: ``pfx:name``, ``/pfx:field``, ``/?pfx:qual``,
``[n]`` and ``[last()]``. Serialization writes a packet this module can
parse back; values sit in element content with ``"`` left unescaped, the
way the engine writes them.
"""

import copy
import ctypes
import re
import threading
import time
from collections import Counter
from xml.etree import ElementTree
from xml.sax.saxutils import escape

DEFAULT_NAMESPACES = {
    "http://purl.org/dc/elements/1.1/": "dc:",
    "http://ns.adobe.com/xap/1.0/": "xmp:",
    "http://www.w3.org/XML/1998/namespace": "xml:",
    "http://www.w3.org/1999/02/22-rdf-syntax-ns#": "rdf:",
}

RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
FAKE_NS = "urn:xmptk:tests:fake-model"

# Option bits
HAS_QUALIFIERS = 0x0010
IS_QUALIFIER = 0x0020
HAS_LANG = 0x0040
HAS_TYPE = 0x0080
IS_STRUCT = 0x0100
IS_ARRAY = 0x0200
IS_ORDERED = 0x0400
IS_ALTERNATE = 0x0800
IS_ALT_TEXT = 0x1000
INSERT_BEFORE = 0x4000
INSERT_AFTER = 0x8000
SCHEMA_NODE = 0x8000_0000
CREATABLE = 0x0002 | IS_STRUCT | IS_ARRAY | IS_ORDERED | IS_ALTERNATE | IS_ALT_TEXT
QUALIFIER_BITS = HAS_QUALIFIERS | IS_QUALIFIER | HAS_LANG | HAS_TYPE
ALT_TEXT_ARRAY = IS_ARRAY | IS_ORDERED | IS_ALTERNATE | IS_ALT_TEXT

# Engine error codes, as libexempi reports them
ERR_BAD_VALUE = -5
ERR_BAD_XPATH = -102
ERR_BAD_INDEX = -104
ERR_BAD_XMP = -203

_STEP_RE = re.compile(r"(?P<sep>/)?(?P<qual>\?)?(?P<name>[\w.-]+:[\w.-]+)|\[(?P<index>\d+|last\(\))\]")
_DATE_RE = re.compile(
    r"^(?:(-?\d+)(?:-(\d\d)(?:-(\d\d))?)?)?"
    r"(?:T(\d\d):(\d\d)(?::(\d\d)(?:[.,](\d+))?)?(Z|[+-]\d\d:\d\d)?)?$"
)
_ARRAY_FORMS = {"Seq": IS_ARRAY | IS_ORDERED, "Bag": IS_ARRAY, "Alt": IS_ARRAY | IS_ORDERED | IS_ALTERNATE}


class FakeEngineError(Exception):
    """Raised inside the fake to fail the current entry point with ``code``."""

    def __init__(self, code):
        super().__init__(code)
        self.code = code


class FakeNode:
    """One property, field, item or qualifier."""

    def __init__(self, name, value="", options=0):
        self.name = name
        self.value = value
        self.options = options
        self.children = []
        self.qualifiers = []

    @property
    def is_composite(self):
        return bool(self.options & (IS_STRUCT | IS_ARRAY))

    def child(self, name):
        return next((c for c in self.children if c.name == name), None)

    def qualifier(self, name):
        return next((q for q in self.qualifiers if q.name == name), None)

    def lang(self):
        q = self.qualifier("xml:lang")
        return q.value if q is not None else ""


class FakeModel:
    """Schema nodes in insertion order plus the object name."""

    def __init__(self):
        self.about = ""
        self.schemas = {}


def _implied_array_bits(options):
    if options & IS_ALT_TEXT:
        options |= IS_ALTERNATE
    if options & IS_ALTERNATE:
        options |= IS_ORDERED
    if options & IS_ORDERED:
        options |= IS_ARRAY
    return options


def _parse_path(path):
    """Steps of a property path; FakeEngineError for anything else."""
    steps = []
    pos = 0
    while pos < len(path):
        match = _STEP_RE.match(path, pos)
        if match is None:
            raise FakeEngineError(ERR_BAD_XPATH)
        if match.group("index") is not None:
            if not steps:
                raise FakeEngineError(ERR_BAD_XPATH)
            index = match.group("index")
            steps.append(("index", -1 if index == "last()" else int(index)))
        else:
            first = not steps
            if first == bool(match.group("sep")) or (first and match.group("qual")):
                raise FakeEngineError(ERR_BAD_XPATH)
            steps.append(("qual" if match.group("qual") else "field", match.group("name")))
        pos = match.end()
    if not steps:
        raise FakeEngineError(ERR_BAD_XPATH)
    return steps


def _quote_attr(text):
    return escape(text, {'"': "&quot;"})


def _format_date(d):
    year = f"-{abs(d.year):04d}" if d.year < 0 else f"{d.year:04d}"
    text = f"{year}-{d.month:02d}-{d.day:02d}T{d.hour:02d}:{d.minute:02d}:{d.second:02d}"
    if d.nanoSecond:
        text += "." + f"{d.nanoSecond:09d}".rstrip("0")
    if d.tzSign == 0:
        return text + "Z"
    return text + f"{'+' if d.tzSign > 0 else '-'}{d.tzHour:02d}:{d.tzMinute:02d}"


def _to_bool(text):
    lowered = text.strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise ValueError(text)


def _to_int(bits):
    def convert(text):
        value = int(text.strip())
        if not -(2 ** (bits - 1)) <= value < 2 ** (bits - 1):
            raise ValueError(text)
        return value

    return convert


class FakeNativeLibrary:
    """Fake libexempi with call counters and programmable failures."""

    def __init__(self, *, init_result=True, init_delay=0.0, namespaces=None):
        self.calls = Counter()
        self.error_code = 0
        self.fail_next = {}
        self.init_result = init_result
        self.init_delay = init_delay
        self.namespaces = dict(DEFAULT_NAMESPACES if namespaces is None else namespaces)

        # xmp_files_* behavior
        self.open_result = True
        self.open_report = 0
        self.file_has_xmp = True

        # rows returned by xmp_iterator_next: (ns, path, value, options);
        # when empty, iterators walk the model instead
        self.iteration_rows = []

        self.freed = []
        self._lock = threading.Lock()
        self._next_ptr = 0x1000
        self._strings = {}
        self._iterators = {}
        self._models = {}

    # =====================================
    # Bookkeeping
    # =====================================

    def _enter(self, name):
        """Count the call and apply a scheduled failure; True means fail."""
        with self._lock:
            self.calls[name] += 1
        self.error_code = 0
        code = self.fail_next.pop(name, None)
        if code is not None:
            self.error_code = code
            return True
        return False

    def _alloc(self):
        with self._lock:
            self._next_ptr += 0x10
            return self._next_ptr

    def _write(self, string_ptr, text):
        self._strings[string_ptr] = ctypes.create_string_buffer(text.encode("utf-8"))

    def text_of(self, string_ptr):
        return self._strings[string_ptr].value.decode("utf-8")

    @property
    def live_strings(self):
        return len(self._strings)

    def model(self, ptr):
        """The FakeModel behind a model pointer (for assertions)."""
        return self._models[ptr]

    # =====================================
    # Engine lifecycle and errors
    # =====================================

    def xmp_init(self):
        self._enter("xmp_init")
        if self.init_delay:
            time.sleep(self.init_delay)
        return self.init_result

    def xmp_terminate(self):
        self._enter("xmp_terminate")

    def xmp_get_error(self):
        with self._lock:
            self.calls["xmp_get_error"] += 1
        return self.error_code

    # =====================================
    # XmpString
    # =====================================

    def xmp_string_new(self):
        self._enter("xmp_string_new")
        ptr = self._alloc()
        self._write(ptr, "")
        return ptr

    def xmp_string_free(self, ptr):
        self._enter("xmp_string_free")
        del self._strings[ptr]

    def xmp_string_len(self, ptr):
        return len(self._strings[ptr].value)

    def xmp_string_cstr(self, ptr):
        return ctypes.addressof(self._strings[ptr])

    # =====================================
    # Namespaces
    # =====================================

    def xmp_register_namespace(self, uri, prefix, registered_ptr):
        if self._enter("xmp_register_namespace"):
            return False
        uri = uri.decode("utf-8")
        wanted = prefix.decode("utf-8").rstrip(":") + ":"
        existing = self.namespaces.get(uri)
        if existing is not None:
            self._write(registered_ptr, existing)
            return existing == wanted
        taken = set(self.namespaces.values())
        actual, n = wanted, 1
        while actual in taken:
            actual = f"{wanted[:-1]}_{n}_:"
            n += 1
        self.namespaces[uri] = actual
        self._write(registered_ptr, actual)
        return actual == wanted

    def xmp_namespace_prefix(self, uri, prefix_ptr):
        if self._enter("xmp_namespace_prefix"):
            return False
        prefix = self.namespaces.get(uri.decode("utf-8"))
        if prefix is None:
            return False
        self._write(prefix_ptr, prefix)
        return True

    def xmp_prefix_namespace_uri(self, prefix, uri_ptr):
        if self._enter("xmp_prefix_namespace_uri"):
            return False
        wanted = prefix.decode("utf-8").rstrip(":") + ":"
        for uri, known in self.namespaces.items():
            if known == wanted:
                self._write(uri_ptr, uri)
                return True
        return False

    # =====================================
    # Model tree
    # =====================================

    def _model(self, ptr):
        model = self._models.get(ptr)
        if model is None:
            raise FakeEngineError(ERR_BAD_XPATH)
        return model

    def _find(self, model, ns, path, create=False):
        """(parent, node) for a path; node is None when absent."""
        steps = _parse_path(path)
        schema = model.schemas.get(ns)
        if schema is None:
            if not create:
                return None, None
            schema = model.schemas[ns] = FakeNode(ns, options=SCHEMA_NODE)

        parent, node = None, schema
        for kind, name in steps:
            parent = node
            if kind == "index":
                if not parent.options & IS_ARRAY:
                    raise FakeEngineError(ERR_BAD_XPATH)
                count = len(parent.children)
                index = count if name == -1 else name
                if 1 <= index <= count:
                    node = parent.children[index - 1]
                elif create and index == count + 1:
                    node = FakeNode("[]")
                    parent.children.append(node)
                elif create:
                    raise FakeEngineError(ERR_BAD_INDEX)
                else:
                    return parent, None
            elif kind == "qual":
                node = parent.qualifier(name)
                if node is None:
                    if not create:
                        return parent, None
                    node = FakeNode(name, options=IS_QUALIFIER)
                    parent.qualifiers.append(node)
                    parent.options |= HAS_QUALIFIERS
                    if name == "xml:lang":
                        parent.options |= HAS_LANG
                    elif name == "rdf:type":
                        parent.options |= HAS_TYPE
            else:
                node = parent.child(name)
                if node is None:
                    if not create:
                        return parent, None
                    if parent is not schema and parent.options & IS_ARRAY:
                        raise FakeEngineError(ERR_BAD_XPATH)
                    node = FakeNode(name)
                    parent.children.append(node)
                    if parent is not schema:
                        parent.options |= IS_STRUCT
        return parent, node

    def _lookup(self, ptr, ns, path):
        """Node at a path or None; a malformed path sets ``error_code``."""
        try:
            return self._find(self._model(ptr), ns.decode("utf-8"), path.decode("utf-8"))[1]
        except FakeEngineError as e:
            self.error_code = e.code
            return None

    def _store(self, model, ns, path, value, options):
        node = self._find(model, ns, path, create=True)[1]
        options = _implied_array_bits(options & CREATABLE)
        if value is not None and (node.children or options & (IS_STRUCT | IS_ARRAY)):
            raise FakeEngineError(ERR_BAD_XPATH)
        node.options = (node.options & QUALIFIER_BITS) | options
        node.value = "" if value is None else value
        return node

    def _set(self, name, ptr, ns, path, value, options):
        if self._enter(name):
            return False
        try:
            self._store(self._model(ptr), ns.decode("utf-8"), path.decode("utf-8"), value, options)
        except FakeEngineError as e:
            self.error_code = e.code
            return False
        return True

    def _rows(self, ptr, schema_ns="", prop_name=""):
        model = self._models.get(ptr)
        if model is None:
            return []
        rows = []
        for uri, schema in model.schemas.items():
            if not schema.children or (schema_ns and uri != schema_ns):
                continue
            if not prop_name:
                rows.append((uri, "", "", SCHEMA_NODE))
            for prop in schema.children:
                if not prop_name or prop.name == prop_name:
                    self._emit(uri, prop, prop.name, rows)
        return rows

    def _emit(self, uri, node, path, rows):
        rows.append((uri, path, "" if node.is_composite else node.value, node.options))
        for qualifier in node.qualifiers:
            self._emit(uri, qualifier, f"{path}/?{qualifier.name}", rows)
        for index, child in enumerate(node.children, 1):
            child_path = f"{path}[{index}]" if node.options & IS_ARRAY else f"{path}/{child.name}"
            self._emit(uri, child, child_path, rows)

    # =====================================
    # Models
    # =====================================

    def xmp_new_empty(self):
        if self._enter("xmp_new_empty"):
            return 0
        ptr = self._alloc()
        self._models[ptr] = FakeModel()
        return ptr

    def xmp_new(self, data, length):
        if self._enter("xmp_new"):
            return 0
        try:
            model = self._parse_packet(bytes(data[:length]).decode("utf-8"))
        except (ElementTree.ParseError, FakeEngineError):
            self.error_code = ERR_BAD_XMP
            return 0
        ptr = self._alloc()
        self._models[ptr] = model
        return ptr

    def xmp_copy(self, ptr):
        if self._enter("xmp_copy"):
            return 0
        copied = self._alloc()
        self._models[copied] = copy.deepcopy(self._models[ptr])
        return copied

    def xmp_free(self, ptr):
        self._enter("xmp_free")
        self._models.pop(ptr, None)
        self.freed.append(("meta", ptr))
        return True

    def xmp_serialize_and_format(self, ptr, buffer_ptr, options, padding, newline, indent, base_indent):
        if self._enter("xmp_serialize_and_format"):
            return False
        model = self._models[ptr]
        lines = [
            '<x:xmpmeta xmlns:x="adobe:ns:meta/">',
            f'<rdf:RDF xmlns:rdf="{RDF_NS}">',
            f'<rdf:Description rdf:about="{_quote_attr(model.about)}" xmlns:fake="{FAKE_NS}">',
        ]
        for uri, path, value, bits in self._rows(ptr):
            if path:
                lines.append(
                    f'<fake:node ns="{_quote_attr(uri)}" path="{_quote_attr(path)}" options="{bits}">'
                    f"{escape(value)}</fake:node>"
                )
        lines += ["</rdf:Description>", "</rdf:RDF>", "</x:xmpmeta>"]
        self._write(buffer_ptr, newline.decode("utf-8").join(lines))
        return True

    def _parse_packet(self, text):
        root = ElementTree.fromstring(text)
        model = FakeModel()
        for description in root.iter(f"{{{RDF_NS}}}Description"):
            model.about = description.get(f"{{{RDF_NS}}}about", model.about)
            for element in description:
                if element.tag == f"{{{FAKE_NS}}}node":
                    options = int(element.get("options"))
                    value = None if options & (IS_STRUCT | IS_ARRAY) else (element.text or "")
                    self._store(model, element.get("ns"), element.get("path"), value, options)
                else:
                    self._parse_element(model, element)
        return model

    def _qualified_name(self, element):
        uri, local = element.tag[1:].split("}", 1)
        prefix = self.namespaces.setdefault(uri, f"ns{len(self.namespaces)}:")
        return uri, prefix + local

    def _parse_element(self, model, element):
        """Plain RDF: simple values, rdf:Seq/Bag/Alt of simple items, one-level structs."""
        uri, name = self._qualified_name(element)
        children = list(element)
        if not children:
            self._store(model, uri, name, element.text or "", 0)
            return
        form = children[0].tag.rsplit("}", 1)[-1]
        if form in _ARRAY_FORMS:
            self._store(model, uri, name, None, _ARRAY_FORMS[form])
            for index, item in enumerate(children[0], 1):
                self._store(model, uri, f"{name}[{index}]", item.text or "", 0)
            return
        self._store(model, uri, name, None, IS_STRUCT)
        for field in children:
            _, field_name = self._qualified_name(field)
            self._store(model, uri, f"{name}/{field_name}", field.text or "", 0)

    # =====================================
    # Properties
    # =====================================

    def xmp_has_property(self, ptr, ns, path):
        if self._enter("xmp_has_property"):
            return False
        return self._lookup(ptr, ns, path) is not None

    def xmp_get_property(self, ptr, ns, path, value_ptr, options_ref):
        if self._enter("xmp_get_property"):
            return False
        node = self._lookup(ptr, ns, path)
        if node is None:
            return False
        self._write(value_ptr, node.value)
        options_ref._obj.value = node.options
        return True

    def xmp_set_property(self, ptr, ns, path, value, options):
        text = None if value is None else value.decode("utf-8")
        return self._set("xmp_set_property", ptr, ns, path, text, options)

    def xmp_delete_property(self, ptr, ns, path):
        if self._enter("xmp_delete_property"):
            return False
        try:
            parent, node = self._find(self._model(ptr), ns.decode("utf-8"), path.decode("utf-8"))
        except FakeEngineError as e:
            self.error_code = e.code
            return False
        if node is None:
            return True
        if node in parent.qualifiers:
            parent.qualifiers.remove(node)
            if node.name == "xml:lang":
                parent.options &= ~HAS_LANG
            elif node.name == "rdf:type":
                parent.options &= ~HAS_TYPE
            if not parent.qualifiers:
                parent.options &= ~HAS_QUALIFIERS
        else:
            parent.children.remove(node)
        return True

    def _typed_get(self, name, ptr, ns, path, out_ref, options_ref, convert):
        if self._enter(name):
            return False
        node = self._lookup(ptr, ns, path)
        if node is None:
            return False
        try:
            out_ref._obj.value = convert(node.value)
        except ValueError:
            self.error_code = ERR_BAD_VALUE
            return False
        options_ref._obj.value = node.options
        return True

    def xmp_get_property_bool(self, ptr, ns, path, out_ref, options_ref):
        return self._typed_get("xmp_get_property_bool", ptr, ns, path, out_ref, options_ref, _to_bool)

    def xmp_get_property_int32(self, ptr, ns, path, out_ref, options_ref):
        return self._typed_get("xmp_get_property_int32", ptr, ns, path, out_ref, options_ref, _to_int(32))

    def xmp_get_property_int64(self, ptr, ns, path, out_ref, options_ref):
        return self._typed_get("xmp_get_property_int64", ptr, ns, path, out_ref, options_ref, _to_int(64))

    def xmp_get_property_float(self, ptr, ns, path, out_ref, options_ref):
        return self._typed_get("xmp_get_property_float", ptr, ns, path, out_ref, options_ref, float)

    def xmp_set_property_bool(self, ptr, ns, path, value, options):
        text = "True" if value.value else "False"
        return self._set("xmp_set_property_bool", ptr, ns, path, text, options)

    def xmp_set_property_int32(self, ptr, ns, path, value, options):
        return self._set("xmp_set_property_int32", ptr, ns, path, str(value.value), options)

    def xmp_set_property_int64(self, ptr, ns, path, value, options):
        return self._set("xmp_set_property_int64", ptr, ns, path, str(value.value), options)

    def xmp_set_property_float(self, ptr, ns, path, value, options):
        return self._set("xmp_set_property_float", ptr, ns, path, repr(value.value), options)

    def xmp_get_property_date(self, ptr, ns, path, out_ref, options_ref):
        if self._enter("xmp_get_property_date"):
            return False
        node = self._lookup(ptr, ns, path)
        if node is None:
            return False
        match = _DATE_RE.match(node.value.strip())
        if match is None or not node.value.strip():
            self.error_code = ERR_BAD_VALUE
            return False
        year, month, day, hour, minute, second, fraction, zone = match.groups()
        out = out_ref._obj
        out.year, out.month, out.day = int(year or 0), int(month or 0), int(day or 0)
        out.hour, out.minute, out.second = int(hour or 0), int(minute or 0), int(second or 0)
        out.nanoSecond = int((fraction or "")[:9].ljust(9, "0"))
        if not zone or zone == "Z":
            out.tzSign, out.tzHour, out.tzMinute = 0, 0, 0
        else:
            out.tzSign = -1 if zone[0] == "-" else 1
            out.tzHour, out.tzMinute = int(zone[1:3]), int(zone[4:6])
        options_ref._obj.value = node.options
        return True

    def xmp_set_property_date(self, ptr, ns, path, value_ref, options):
        return self._set("xmp_set_property_date", ptr, ns, path, _format_date(value_ref._obj), options)

    # =====================================
    # Arrays
    # =====================================

    def _array(self, ptr, ns, name):
        node = self._find(self._model(ptr), ns.decode("utf-8"), name.decode("utf-8"))[1]
        if node is not None and not node.options & IS_ARRAY:
            raise FakeEngineError(ERR_BAD_XPATH)
        return node

    def xmp_get_array_item(self, ptr, ns, name, index, value_ptr, options_ref):
        if self._enter("xmp_get_array_item"):
            return False
        if index < 1 and index != -1:
            self.error_code = ERR_BAD_INDEX
            return False
        step = "[last()]" if index == -1 else f"[{index}]"
        node = self._lookup(ptr, ns, name + step.encode("ascii"))
        if node is None:
            return False
        self._write(value_ptr, node.value)
        options_ref._obj.value = node.options
        return True

    def xmp_set_array_item(self, ptr, ns, name, index, value, options):
        if self._enter("xmp_set_array_item"):
            return False
        try:
            array = self._array(ptr, ns, name)
            if array is None:
                raise FakeEngineError(ERR_BAD_XPATH)
            count = len(array.children)
            index = count if index == -1 else index
            item = FakeNode("[]", "" if value is None else value.decode("utf-8"), options & CREATABLE)
            if options & INSERT_BEFORE and 1 <= index <= count:
                array.children.insert(index - 1, item)
            elif options & INSERT_AFTER and 1 <= index <= count:
                array.children.insert(index, item)
            elif not options & (INSERT_BEFORE | INSERT_AFTER) and 1 <= index <= count:
                array.children[index - 1] = item
            elif index == count + 1:
                array.children.append(item)
            else:
                raise FakeEngineError(ERR_BAD_INDEX)
        except FakeEngineError as e:
            self.error_code = e.code
            return False
        return True

    def xmp_append_array_item(self, ptr, ns, name, array_options, value, item_options):
        if self._enter("xmp_append_array_item"):
            return False
        try:
            array = self._array(ptr, ns, name)
            if array is None:
                array = self._store(
                    self._model(ptr), ns.decode("utf-8"), name.decode("utf-8"), None, array_options | IS_ARRAY
                )
            text = "" if value is None else value.decode("utf-8")
            array.children.append(FakeNode("[]", text, item_options & CREATABLE))
        except FakeEngineError as e:
            self.error_code = e.code
            return False
        return True

    # =====================================
    # Localized text
    # =====================================

    def xmp_get_localized_text(self, ptr, ns, name, generic, specific, actual_ptr, value_ptr, options_ref):
        if self._enter("xmp_get_localized_text"):
            return False
        try:
            array = self._array(ptr, ns, name)
        except FakeEngineError as e:
            self.error_code = e.code
            return False
        if array is None or not array.children:
            return False
        specific = specific.decode("utf-8").lower()
        generic = generic.decode("utf-8").lower()
        items = array.children
        chosen = (
            next((i for i in items if i.lang().lower() == specific), None)
            or next(
                (i for i in items if generic and (i.lang().lower() + "-").startswith(generic + "-")),
                None,
            )
            or next((i for i in items if i.lang() == "x-default"), None)
            or items[0]
        )
        self._write(actual_ptr, chosen.lang())
        self._write(value_ptr, chosen.value)
        options_ref._obj.value = chosen.options
        return True

    def _lang_item(self, lang, value):
        item = FakeNode("[]", value)
        item.qualifiers.append(FakeNode("xml:lang", lang, IS_QUALIFIER))
        item.options = HAS_QUALIFIERS | HAS_LANG
        return item

    def xmp_set_localized_text(self, ptr, ns, name, generic, specific, value, options):
        if self._enter("xmp_set_localized_text"):
            return False
        try:
            array = self._array(ptr, ns, name)
            if array is None:
                array = self._store(self._model(ptr), ns.decode("utf-8"), name.decode("utf-8"), None, ALT_TEXT_ARRAY)
        except FakeEngineError as e:
            self.error_code = e.code
            return False
        lang = specific.decode("utf-8")
        text = value.decode("utf-8")
        existing = next((i for i in array.children if i.lang().lower() == lang.lower()), None)
        if existing is not None:
            existing.value = text
        else:
            array.children.append(self._lang_item(lang, text))
        if not any(i.lang() == "x-default" for i in array.children):
            array.children.insert(0, self._lang_item("x-default", text))
        return True

    def xmp_delete_localized_text(self, ptr, ns, name, generic, specific):
        if self._enter("xmp_delete_localized_text"):
            return False
        try:
            array = self._array(ptr, ns, name)
        except FakeEngineError as e:
            self.error_code = e.code
            return False
        if array is not None:
            lang = specific.decode("utf-8").lower()
            array.children = [i for i in array.children if i.lang().lower() != lang]
        return True

    # =====================================
    # Iterators
    # =====================================

    def xmp_iterator_new(self, meta_ptr, schema_ns, prop_name, options):
        if self._enter("xmp_iterator_new"):
            return 0
        ptr = self._alloc()
        if self.iteration_rows:
            self._iterators[ptr] = list(self.iteration_rows)
        else:
            self._iterators[ptr] = self._rows(meta_ptr, schema_ns.decode("utf-8"), prop_name.decode("utf-8"))
        return ptr

    def xmp_iterator_next(self, ptr, ns_ptr, path_ptr, value_ptr, options_ref):
        if self._enter("xmp_iterator_next"):
            return False
        rows = self._iterators[ptr]
        if not rows:
            return False
        ns, path, value, options = rows.pop(0)
        self._write(ns_ptr, ns)
        self._write(path_ptr, path)
        self._write(value_ptr, value)
        options_ref._obj.value = options
        return True

    def xmp_iterator_skip(self, ptr, mode):
        if self._enter("xmp_iterator_skip"):
            return False
        self._iterators[ptr].clear()
        return True

    def xmp_iterator_free(self, ptr):
        self._enter("xmp_iterator_free")
        self.freed.append(("iterator", ptr))
        return True

    # =====================================
    # File sessions
    # =====================================

    def xmp_files_new(self):
        if self._enter("xmp_files_new"):
            return 0
        return self._alloc()

    def xmp_files_free(self, ptr):
        self._enter("xmp_files_free")
        self.freed.append(("file", ptr))
        return True

    def xmp_files_open(self, ptr, path, flags):
        if self._enter("xmp_files_open"):
            return False
        if self.open_result and self.open_report:
            self.error_code = self.open_report
        return self.open_result

    def xmp_files_close(self, ptr, flags):
        return not self._enter("xmp_files_close")

    def xmp_files_get_new_xmp(self, ptr):
        if self._enter("xmp_files_get_new_xmp") or not self.file_has_xmp:
            return 0
        ptr = self._alloc()
        self._models[ptr] = FakeModel()
        return ptr

    def xmp_files_can_put_xmp(self, ptr, meta_ptr):
        return not self._enter("xmp_files_can_put_xmp")

    def xmp_files_put_xmp(self, ptr, meta_ptr):
        return not self._enter("xmp_files_put_xmp")
