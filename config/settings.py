"""
ROS – Django Settings (Infrastructure Only)
============================================
Django serves as the framework container for ROS.
ROS architecture is the authority — Django does not dictate structure.

The ORM-backed document store (core.store) is the only registered app;
engines stay framework-free.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
# BASE_DIR = project root
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("ROS_SECRET_KEY", "ros-dev-key-replace-before-deployment")

DEBUG = os.environ.get("ROS_DEBUG", "1") == "1"

ALLOWED_HOSTS = [h for h in os.environ.get("ROS_ALLOWED_HOSTS", "").split(",") if h]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    # ── ROS Modules ───────────────────────────────────────
    "core.store",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL & WSGI ────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Uploaded documents ────────────────────────────────────────
MEDIA_ROOT = BASE_DIR / "media"
MEDIA_URL = "/media/"

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── ROS ───────────────────────────────────────────────────────
# Calendar-day arithmetic for reminders happens in this zone.
ROS_LOCAL_TIME_ZONE = os.environ.get("ROS_LOCAL_TIME_ZONE", "Asia/Kolkata")

# Count Upcoming (two days out) as pending in reminder lists.
ROS_REMINDERS_INCLUDE_UPCOMING = False

# Sub-collection kind → fields still editable after submission.
ROS_OVERRIDE_FIELDS = {
    "payments": ["reminderDate"],
    "workers": ["basicSalary"],
    "agents": ["basicSalary"],
}

# None → built-in record types (HospitalData, AgentData, ClientData, WorkerData).
ROS_RECORD_TYPES = None

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "ros": {
            "handlers": ["console"],
            "level": os.environ.get("ROS_LOG_LEVEL", "INFO"),
        },
    },
}
