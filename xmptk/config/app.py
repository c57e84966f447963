"""Module: xmptk.config.app

Date: 2026-01-01

Package-level configuration: package info and logging settings.
"""

import os

# =====================================
# PACKAGE INFORMATION
# =====================================

APP_NAME = "xmptk"
APP_VERSION = "0.4.0"

# =====================================
# LOGGING CONFIGURATION
# =====================================

# Environment override for the console level used by init_logging()
LOG_LEVEL_ENV = "XMPTK_LOG_LEVEL"

LOG_LEVEL = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Console logging
LOG_TO_CONSOLE = True
