"""Module: xmptk.config.engine

Date: 2026-01-01

Native engine configuration: where libexempi is looked up, how the
process-wide lifecycle behaves, and the serialization defaults used when
callers leave formatting options empty.
"""

# =====================================
# NATIVE LIBRARY DISCOVERY
# =====================================

# Full path to a libexempi build; takes precedence over every other lookup
NATIVE_LIBRARY_ENV = "XMPTK_EXEMPI_LIBRARY"

# Name passed to ctypes.util.find_library()
NATIVE_LIBRARY_NAME = "exempi"

# Directory (relative to the package root) searched for a bundled build
NATIVE_LIBRARY_BUNDLE_DIR = "lib"

# Platform -> file names tried in order (bundled dir first, then the loader path)
NATIVE_LIBRARY_FILENAMES = {
    "Linux": ["libexempi.so.8", "libexempi.so.3", "libexempi.so"],
    "Darwin": ["libexempi.8.dylib", "libexempi.dylib"],
    "Windows": ["exempi.dll", "libexempi-8.dll"],
}

# =====================================
# LIFECYCLE
# =====================================

# Call xmp_terminate() once from an atexit hook after a successful init
TERMINATE_AT_EXIT = True

# =====================================
# SERIALIZATION DEFAULTS
# =====================================

# Used when ToStringOptions leaves newline / indent empty (engine defaults)
DEFAULT_NEWLINE = "\n"
DEFAULT_INDENT = "  "

# Serialization flags used internally when reading rdf:about
NAME_READ_SERIALIZE_FLAGS = 0x0010  # omit packet wrapper
