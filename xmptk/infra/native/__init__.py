"""ctypes access to libexempi."""

from xmptk.infra.native.loader import load_native_library
from xmptk.infra.native.prototypes import PROTOTYPES, bind_prototypes

__all__ = [
    "PROTOTYPES",
    "bind_prototypes",
    "load_native_library",
]
