"""Settings used by the test suite.

Imports the production settings and swaps every external service for a
local stand-in: file-backed SQLite (so worker threads share one database),
local-memory cache and eager Celery tasks.
"""

import os
import tempfile

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from config.settings import *  # noqa: E402,F401,F403

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.path.join(tempfile.gettempdir(), "pharmacy_orders.sqlite3"),
        # Writers take the lock up front and queue on the busy timeout
        # instead of failing on lock upgrade.
        "OPTIONS": {"transaction_mode": "IMMEDIATE", "timeout": 30},
        "TEST": {
            "NAME": os.path.join(tempfile.gettempdir(), "test_pharmacy_orders.sqlite3"),
        },
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "pharmacy-orders-tests",
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
