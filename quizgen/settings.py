"""
Django settings for the quizgen project.

All deployment-specific values come from environment variables, optionally
loaded from a .env file next to manage.py.
"""

# quizgen/settings.py
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env if present
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

# SECURITY WARNING: keep the secret key secret!
SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-default-key")

# Debug toggle (default to False in prod)
DEBUG = os.getenv("DEBUG", "False").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost").split(",")

# Application definition
INSTALLED_APPS = [
    # Django apps
    "django.contrib.sessions",

    # Project apps
    "core.apps.CoreConfig",
    "materials.apps.MaterialsConfig",
    "quiz.apps.QuizConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "quizgen.urls"
WSGI_APPLICATION = "quizgen.wsgi.application"

# No database: quizzes are never persisted
DATABASES = {}

# Quiz sessions live in the cache, one per browser session.
# The default LocMemCache is per process: with several workers set CACHE_BACKEND
# to a shared cache (file-based, redis, memcached) or set SESSION_ENGINE to
# "django.contrib.sessions.backends.signed_cookies" to keep the quiz client-side.
# Signed cookies are capped at about 4 KB, which a long quiz can exceed.
SESSION_ENGINE = os.getenv("SESSION_ENGINE", "django.contrib.sessions.backends.cache")
SESSION_COOKIE_AGE = int(os.getenv("SESSION_COOKIE_AGE", 60 * 60 * 12))
CACHES = {
    "default": {
        "BACKEND": os.getenv("CACHE_BACKEND", "django.core.cache.backends.locmem.LocMemCache"),
        "LOCATION": os.getenv("CACHE_LOCATION", "quizgen"),
    }
}

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

# Security (applies in prod)
CSRF_COOKIE_SECURE = not DEBUG
SESSION_COOKIE_SECURE = not DEBUG
SECURE_SSL_REDIRECT = os.getenv("SECURE_SSL_REDIRECT", "False").lower() in ("1", "true")
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

# Uploads
QUIZ_MAX_UPLOAD_BYTES = int(os.getenv("QUIZ_MAX_UPLOAD_BYTES", 10 * 1024 * 1024))
QUIZ_UPLOAD_DIR = os.getenv("QUIZ_UPLOAD_DIR") or None
FILE_UPLOAD_MAX_MEMORY_SIZE = int(os.getenv("FILE_UPLOAD_MAX_MEMORY_SIZE", 2621440))

# Test generation
QUIZ_MAX_SOURCE_CHARS = int(os.getenv("QUIZ_MAX_SOURCE_CHARS", 15000))
QUIZ_MIN_TEXT_LENGTH = int(os.getenv("QUIZ_MIN_TEXT_LENGTH", 50))

# === AI API Keys ===
# OpenAI (or any OpenAI-compatible endpoint via OPENAI_BASE_URL)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TIMEOUT = float(os.getenv("OPENAI_TIMEOUT", 60))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.getenv("DJANGO_LOG_LEVEL", "WARNING").upper(),
            "propagate": False,
        },
    },
}
