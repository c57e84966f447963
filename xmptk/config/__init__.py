"""Module: xmptk.config

Date: 2026-01-01

Configuration package for xmptk.

This package organizes configuration into logical modules:
- app: Package info, logging settings
- engine: Native library discovery, lifecycle and serialization defaults

All settings are re-exported from this module:
    from xmptk.config import APP_NAME, NATIVE_LIBRARY_ENV
"""

from xmptk.config.app import *  # noqa: F401, F403
from xmptk.config.engine import *  # noqa: F401, F403
