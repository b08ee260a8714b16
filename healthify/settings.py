"""
Settings for the healthify clinic backend.

Every value can be overridden from the environment; a ``.env`` file next
to ``manage.py`` is loaded first for local work.  ``ENV=prod`` turns on
the checks and cookie flags that must hold behind TLS.
"""
from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path

import dj_database_url  # type: ignore
from dotenv import load_dotenv  # type: ignore

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")


def env_int(name: str, default: int) -> int:
    value = os.getenv(name, "").strip()
    return int(value) if value.isdigit() else default


def env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_list(name: str, default: str = "") -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


ENV = os.getenv("ENV", "dev")
IS_PROD = ENV == "prod"

DEBUG = env_bool("DEBUG")
SECRET_KEY = os.getenv("SECRET_KEY") or "dev-only-secret-key-change-me"
ALLOWED_HOSTS = env_list("ALLOWED_HOSTS", "127.0.0.1,localhost,testserver")

if IS_PROD:
    if DEBUG or "*" in ALLOWED_HOSTS or SECRET_KEY == "dev-only-secret-key-change-me":
        raise RuntimeError("prod requires DEBUG=0, explicit ALLOWED_HOSTS and a real SECRET_KEY")

INSTALLED_APPS = [
    "django_prometheus",
    "corsheaders",
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_yasg",
    "clinic",
]

MIDDLEWARE = [
    "django_prometheus.middleware.PrometheusBeforeMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "clinic.middleware.RouteGuardMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "django_prometheus.middleware.PrometheusAfterMiddleware",
]

ROOT_URLCONF = "healthify.urls"
WSGI_APPLICATION = "healthify.wsgi.application"
ASGI_APPLICATION = "healthify.asgi.application"

TEMPLATES = [{
    "BACKEND": "django.template.backends.django.DjangoTemplates",
    "DIRS": [],
    "APP_DIRS": True,
    "OPTIONS": {
        "context_processors": [
            "django.template.context_processors.request",
            "django.contrib.auth.context_processors.auth",
            "django.contrib.messages.context_processors.messages",
        ],
    },
}]

# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------
# DATABASE_URL accepts any dj-database-url scheme (postgres://, mysql://, ...)
DATABASES = {
    "default": dj_database_url.config(
        default=f"sqlite:///{(BASE_DIR / 'db.sqlite3').as_posix()}",
        conn_max_age=env_int("DB_CONN_MAX_AGE", 60),
    )
}
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REDIS_URL = os.getenv("REDIS_URL", "")
if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": REDIS_URL,
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
                "SOCKET_CONNECT_TIMEOUT": 3,
                "SOCKET_TIMEOUT": 3,
            },
        }
    }
else:
    # throttle counters live here; per-process is enough for development
    CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
MEDIA_URL = "/media/"
MEDIA_ROOT = Path(os.getenv("MEDIA_ROOT", BASE_DIR / "media"))
USER_DIR = os.getenv("USER_DIR", "users")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

UPLOAD_MAX_MB = env_int("UPLOAD_MAX_MB", 5)
# content type prefixes accepted for uploads
ALLOWED_UPLOAD_TYPES = env_list("ALLOWED_UPLOAD_TYPES", "image/,application/pdf,text/")

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

# ---------------------------------------------------------------------------
# Accounts and sessions
# ---------------------------------------------------------------------------
AUTH_USER_MODEL = "clinic.User"
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
]

ADMIN_ROLE = os.getenv("ADMIN_ROLE", "admin")
DOCTOR_ROLE = os.getenv("DOCTOR_ROLE", "doctor")
DEFAULT_ROLE = os.getenv("DEFAULT_ROLE", "user")
DEFAULT_PERMISSION = os.getenv("DEFAULT_PERMISSION", "view:dashboard")

# account created by the seed command
ADMIN_NAME = os.getenv("ADMIN_NAME", "Admin User")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin.user@healthify.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin.user")

# seconds the claims embedded in a session stay valid (``expiresAt``)
SESSION_EXPIRES_AT = env_int("SESSION_EXPIRES_AT", 3600)
# seconds the signed session token and its cookie live; longer than
# SESSION_EXPIRES_AT so an outdated session can still be read and cleared
SESSION_MAX_AGE = env_int("SESSION_MAX_AGE", 30 * 24 * 3600)
SESSION_TOKEN_COOKIE = os.getenv("SESSION_TOKEN_COOKIE", "healthify.session-token")
SESSION_TOKEN_COOKIE_SECURE = IS_PROD
# seconds a verification or password reset link stays valid
TOKEN_EXPIRES_AT = env_int("TOKEN_EXPIRES_AT", 3600)

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(seconds=SESSION_MAX_AGE),
    "SIGNING_KEY": os.getenv("JWT_SIGNING_KEY") or SECRET_KEY,
    "USER_ID_FIELD": "id",
    "USER_ID_CLAIM": "id",
    "AUTH_HEADER_TYPES": ("Bearer",),
    "AUTH_TOKEN_CLASSES": ("clinic.services.claims.SessionToken",),
    "UPDATE_LAST_LOGIN": False,
}

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ["clinic.authentication.SessionTokenAuthentication"],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
        "rest_framework.parsers.MultiPartParser",
    ],
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": os.getenv("THROTTLE_ANON", "60/min"),
        "user": os.getenv("THROTTLE_USER", "240/min"),
        "login": os.getenv("THROTTLE_LOGIN", "10/min"),
    },
    "EXCEPTION_HANDLER": "clinic.exceptions.api_exception_handler",
}

GITHUB_CLIENT_ID = os.getenv("GITHUB_CLIENT_ID", "")
GITHUB_CLIENT_SECRET = os.getenv("GITHUB_CLIENT_SECRET", "")
GITHUB_TIMEOUT = env_int("GITHUB_TIMEOUT", 5)

# ---------------------------------------------------------------------------
# Links, mail and memberships
# ---------------------------------------------------------------------------
# public origin used in emailed links and the GitHub redirect
HOST = os.getenv("HOST", "http://localhost:8000").rstrip("/")

EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend")
EMAIL_HOST = os.getenv("SMTP_HOST_NAME", "smtp.gmail.com")
EMAIL_PORT = env_int("SMTP_PORT_NUMBER", 465)
EMAIL_HOST_USER = os.getenv("SMTP_EMAIL", "email@domain.com")
EMAIL_HOST_PASSWORD = os.getenv("SMTP_PASSWORD", "password")
EMAIL_USE_SSL = EMAIL_PORT == 465
EMAIL_USE_TLS = not EMAIL_USE_SSL and env_bool("SMTP_TLS", True)
EMAIL_TIMEOUT = env_int("SMTP_TIMEOUT", 10)
DEFAULT_FROM_EMAIL = EMAIL_HOST_USER

DAYS_IN_MONTH = env_int("DAYS_IN_MONTH", 30)
DAYS_IN_YEAR = env_int("DAYS_IN_YEAR", 365)

# ---------------------------------------------------------------------------
# HTTP surface
# ---------------------------------------------------------------------------
APPEND_SLASH = False
CORS_ALLOWED_ORIGINS = env_list("CORS_ALLOWED_ORIGINS")
CORS_ALLOW_CREDENTIALS = True
SWAGGER_SETTINGS = {"DEFAULT_INFO": "healthify.urls.api_info"}

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
USE_X_FORWARDED_HOST = True
if IS_PROD:
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SECURE_HSTS_SECONDS = env_int("SECURE_HSTS_SECONDS", 3600)
    SECURE_SSL_REDIRECT = env_bool("SECURE_SSL_REDIRECT", True)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "clinic": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "django.request": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}
