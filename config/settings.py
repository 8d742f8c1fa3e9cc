"""
Loud Rejection - Django Settings (Test Project Only)
======================================================
Minimal settings so the Django integration can be loaded and
exercised by the test suite through pytest-django.
"""

from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = "loud-rejection-test-key"

DEBUG = True

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "loud_rejection.contrib.django",
]

# ── Database ──────────────────────────────────────────────────
# Nothing here touches the database; Django still wants one defined.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Loud Rejection ────────────────────────────────────────────
LOUD_REJECTION = {
    "ENABLED": True,
    "EXIT_CODE": None,
}
