"""Shared test configuration.

The application module builds its container at import time, so the
in-memory backends are selected before anything imports it.
"""

import os

os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("OBJECT_STORE_BACKEND", "memory")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
