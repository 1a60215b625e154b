"""Settings for the form template microservice.

Everything deployment-specific comes from the environment. The service only
speaks JSON (plus multipart for background uploads), so the admin, sessions
and HTML template machinery are not installed.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List
from urllib.parse import urlparse

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in {"1", "true", "yes"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.environ.get(name, default).split(",") if item.strip()]


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "form-service-dev-key")
DEBUG = _env_flag("DJANGO_DEBUG")
ALLOWED_HOSTS = _env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "corsheaders",
    "form_templates",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "form_service.urls"
WSGI_APPLICATION = "form_service.wsgi.application"


def _database_settings() -> Dict[str, Dict[str, str]]:
    url = (
        os.environ.get("FORM_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or "sqlite:///db.sqlite3"
    )
    parsed = urlparse(url)
    if parsed.scheme in {"postgres", "postgresql"}:
        return {
            "default": {
                "ENGINE": "django.db.backends.postgresql",
                "NAME": parsed.path.lstrip("/"),
                "USER": parsed.username or "",
                "PASSWORD": parsed.password or "",
                "HOST": parsed.hostname or "localhost",
                "PORT": str(parsed.port or 5432),
            }
        }

    if parsed.scheme == "sqlite":
        # sqlite:///relative.db or sqlite:////absolute/path.db
        db_path = parsed.path[1:]
        if not db_path:
            name = ":memory:"
        elif db_path.startswith("/"):
            name = db_path
        else:
            name = str(BASE_DIR / db_path)
        return {"default": {"ENGINE": "django.db.backends.sqlite3", "NAME": name}}

    raise ValueError("Supported database URLs: postgresql:// or sqlite:///")


DATABASES = _database_settings()
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "ja"
TIME_ZONE = os.environ.get("TZ", "UTC")
USE_I18N = True
USE_TZ = True

# Uploaded page backgrounds are served from MEDIA_URL when DEBUG is on.
MEDIA_URL = "/media/"
MEDIA_ROOT = os.environ.get("FORM_MEDIA_ROOT", str(BASE_DIR / "media"))
FORM_UPLOAD_DIR = "uploads/templates"
FORM_UPLOAD_MAX_BYTES = int(os.environ.get("FORM_UPLOAD_MAX_BYTES", str(10 * 1024 * 1024)))
DATA_UPLOAD_MAX_MEMORY_SIZE = FORM_UPLOAD_MAX_BYTES + 1024 * 1024

CORS_ALLOW_ALL_ORIGINS = _env_flag("FORM_CORS_ALLOW_ALL", "true")
CORS_ALLOWED_ORIGINS = _env_list("FORM_CORS_ALLOWED_ORIGINS", "")

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "TEST_REQUEST_DEFAULT_FORMAT": "json",
}

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "form_templates": {"handlers": ["console"], "level": LOG_LEVEL},
        "designer": {"handlers": ["console"], "level": LOG_LEVEL},
    },
}
