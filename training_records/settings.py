import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY") or os.getenv("SECRET_KEY", "dev-secret-key")
DEBUG = os.getenv("DJANGO_DEBUG", os.getenv("DEBUG", "True")).lower() == "true"

ALLOWED_HOSTS = os.getenv("DJANGO_ALLOWED_HOSTS", "*").split(",")
CSRF_TRUSTED_ORIGINS = os.getenv(
    "CSRF_TRUSTED_ORIGINS",
    "http://localhost,http://127.0.0.1"
).split(",")
USE_X_FORWARDED_HOST = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

# -----------------------------
# Installed Apps
# -----------------------------
INSTALLED_APPS = [
    "django.contrib.sessions",

    # our apps
    "core",
    "accounts",
    "users_ui.records",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.locale.LocaleMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "training_records.main_urls"
WSGI_APPLICATION = "training_records.wsgi.application"

# -----------------------------
# Storage (workbook, no database engine)
# -----------------------------
DATABASES = {}
SESSION_ENGINE = "django.contrib.sessions.backends.signed_cookies"

RECORDS_WORKBOOK_PATH = Path(os.getenv("RECORDS_WORKBOOK_PATH", str(BASE_DIR / "data" / "records.xlsx")))
RECORDS_CACHE_TTL = int(os.getenv("RECORDS_CACHE_TTL", "300"))
RECORDS_OTP_LENGTH = int(os.getenv("RECORDS_OTP_LENGTH", "6"))
RECORDS_DEFAULT_PER_PAGE = int(os.getenv("RECORDS_DEFAULT_PER_PAGE", "25"))

# Default admin seeded by `manage.py bootstrap_store`
RECORDS_ADMIN_EMAIL = os.getenv("RECORDS_ADMIN_EMAIL", "")
RECORDS_ADMIN_PASSWORD = os.getenv("RECORDS_ADMIN_PASSWORD", "")

LANGUAGE_CODE = os.getenv("DJANGO_LANGUAGE_CODE", "en-us")
LANGUAGES = [
    ("en", "English"),
    ("fr", "French"),
    ("ar", "Arabic"),
]
LOCALE_PATHS = [BASE_DIR / "locale"]
TIME_ZONE = os.getenv("DJANGO_TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

# -----------------------------
# Media (exports) & audit logs
# -----------------------------
MEDIA_URL = os.getenv("DJANGO_MEDIA_URL", "/media/")
MEDIA_ROOT = Path(os.getenv("DJANGO_MEDIA_ROOT", str(BASE_DIR / "media")))
AUDIT_LOG_DIR = Path(os.getenv("RECORDS_AUDIT_LOG_DIR", str(MEDIA_ROOT / "logs")))
SERVE_MEDIA = os.getenv("DJANGO_SERVE_MEDIA", "False").lower() == "true"

# -----------------------------
# Mail (password reset codes)
# -----------------------------
EMAIL_BACKEND = os.getenv(
    "EMAIL_BACKEND",
    "django.core.mail.backends.console.EmailBackend" if DEBUG else "django.core.mail.backends.smtp.EmailBackend",
)
EMAIL_HOST = os.getenv("EMAIL_HOST", "localhost")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "25"))
EMAIL_HOST_USER = os.getenv("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.getenv("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_TLS = os.getenv("EMAIL_USE_TLS", "False").lower() == "true"
DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "no-reply@localhost")

# -----------------------------
# Logging
# -----------------------------
LOG_LEVEL = os.getenv("RECORDS_LOG_LEVEL", "DEBUG" if DEBUG else "INFO")
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "verbose"},
    },
    "loggers": {
        name: {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False}
        for name in ("core", "accounts", "utils", "users_ui")
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Production security hardening (only when not DEBUG)
if not DEBUG:
    SECURE_SSL_REDIRECT = os.getenv("DJANGO_SSL_REDIRECT", "True").lower() == "true"
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
