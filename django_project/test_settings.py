"""
Test settings for the BabyVision backend.

Overrides production settings for test environment:
- Uses in-memory cache for local tests
- Uses PostgreSQL if DATABASE_HOST is set (CI), SQLite in-memory otherwise
- Captures outgoing email in memory
- Raises throttle rates so test runs never hit them
"""

import os

from django_project.settings import *  # noqa: F401, F403

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "unique-snowflake",
    }
}

# Configure database for tests:
# - If DATABASE_HOST is set (GitHub Actions/Docker), use PostgreSQL
# - Otherwise, use SQLite in-memory for local testing
if os.environ.get("DATABASE_HOST"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("DATABASE_NAME", "postgres"),
            "USER": os.environ.get("DATABASE_USER", "postgres"),
            "PASSWORD": os.environ.get("DATABASE_PASSWORD", ""),
            "HOST": os.environ.get("DATABASE_HOST"),
            "PORT": os.environ.get("DATABASE_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_THROTTLE_RATES": {
        "sync_push": "10000/hour",
        "voucher_redeem": "10000/hour",
    },
}

REVENUECAT_SECRET_API_KEY = "test-revenuecat-key"  # nosec B105 - test value
RESEND_API_KEY = "test-resend-key"  # nosec B105 - test value
