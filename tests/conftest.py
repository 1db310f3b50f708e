"""
Test environment. Must run before any app import: settings are read once and
cached, and the engine is created at import time.

Tests use a shared in-memory SQLite database (StaticPool), plain HTTP (no TLS
redirect), the cheapest bcrypt cost, and no background purge loop.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REQUIRE_TLS"] = "false"
os.environ["TOKEN_PURGE_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_ENV"] = "dev"
os.environ["API_PREFIX"] = ""
