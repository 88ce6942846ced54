"""Test settings.

Provides the environment the base settings require (``SECRET_KEY``) and
swaps infrastructure that needs external services (Redis, a broker) for
in-process equivalents.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from config.settings import *  # noqa: E402,F401,F403
from config.settings import REST_FRAMEWORK  # noqa: E402

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "marketplace-tests",
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

IDENTITY_ALGORITHM = "HS256"
IDENTITY_SHARED_SECRET = "identity-test-secret"
IDENTITY_JWKS_URL = ""
IDENTITY_ISSUER = ""
IDENTITY_AUDIENCE = ""

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_RATES": {
        "anon": "10000/day",
        "checkout": "10000/minute",
    },
}
