"""Django settings for the storefront web application.

Every deploy-time value is read from the environment with a development
default, so the same module serves local runs, containers and gunicorn.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str = "") -> list[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-insecure-storefront-key")
DEBUG = _env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = _env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1")

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "rest_framework",
    "rest_framework.authtoken",
    "apps.site_settings",
    "apps.catalog",
    "apps.discounts",
    "apps.shipping",
    "apps.orders",
    "apps.payments",
    "apps.monitoring",
]

MIDDLEWARE = [
    "gateway.middleware.RequestIdMiddleware",
    "gateway.middleware.ApiSizeLimitMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
]

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME", "storefront"),
        "USER": os.getenv("DB_USER", "app"),
        "PASSWORD": os.getenv("DB_PASSWORD", "app"),
        "HOST": os.getenv("DB_HOST", "localhost"),
        "PORT": os.getenv("DB_PORT", "5432"),
        "CONN_MAX_AGE": int(os.getenv("DB_CONN_MAX_AGE", "60")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "Europe/Paris")
USE_I18N = False
USE_TZ = True

# ---- REST framework ----
REST_FRAMEWORK = {
    # Token auth first so unauthenticated admin calls answer 401, not 403
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.TokenAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "EXCEPTION_HANDLER": "gateway.exceptions.api_exception_handler",
    "DEFAULT_THROTTLE_RATES": {
        "checkout": os.getenv("THROTTLE_CHECKOUT", "30/min"),
        "discount_validate": os.getenv("THROTTLE_DISCOUNT_VALIDATE", "60/min"),
        "catalog": os.getenv("THROTTLE_CATALOG", "300/min"),
        "shipping_public": os.getenv("THROTTLE_SHIPPING_PUBLIC", "120/min"),
        "webhooks": os.getenv("THROTTLE_WEBHOOKS", "600/min"),
    },
}

# ---- Store ----
ADMIN_EMAILS = [e.lower() for e in _env_list("ADMIN_EMAILS", os.getenv("ADMIN_EMAIL", ""))]
STORE_CURRENCY = os.getenv("STORE_CURRENCY", "EUR")
DEFAULT_COUNTRY = os.getenv("DEFAULT_COUNTRY", "FR")
SHIPPING_CENTS = os.getenv("SHIPPING_CENTS", "0")
DEFAULT_PAGE_SIZE = 24
MAX_PAGE_SIZE = 100

# ---- Secrets / providers ----
SETTINGS_ENCRYPTION_KEY = os.getenv("SETTINGS_ENCRYPTION_KEY", "")
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
STRIPE_PUBLISHABLE_KEY = os.getenv("STRIPE_PUBLISHABLE_KEY", "")
PAYPAL_ENV = os.getenv("PAYPAL_ENV", "sandbox")
PAYPAL_CLIENT_ID = os.getenv("PAYPAL_CLIENT_ID", os.getenv("NEXT_PUBLIC_PAYPAL_CLIENT_ID", ""))
PAYPAL_CLIENT_SECRET = os.getenv("PAYPAL_CLIENT_SECRET", "")
SENDCLOUD_BASE_URL = os.getenv("SENDCLOUD_BASE_URL", "https://panel.sendcloud.sc/api/v3")
SENDCLOUD_SERVICE_POINTS_URL = os.getenv(
    "SENDCLOUD_SERVICE_POINTS_URL", "https://servicepoints.sendcloud.sc/api/v2/service-points"
)
BREVO_API_URL = os.getenv("BREVO_API_URL", "https://api.brevo.com/v3/smtp/email")

# Real provider clients vs in-process stubs (tests, local development)
USE_HTTP_ADAPTERS = _env_bool("USE_HTTP_ADAPTERS", True)
HTTP_TIMEOUT_SECS = float(os.getenv("HTTP_TIMEOUT_SECS", "15"))

# ---- Email ----
EMAIL_DISABLED = _env_bool("EMAIL_DISABLED", False)
EMAIL_FROM = os.getenv("EMAIL_FROM", "")
BREVO_SENDER_NAME = os.getenv("BREVO_SENDER_NAME", "")
BREVO_SENDER_EMAIL = os.getenv("BREVO_SENDER_EMAIL", "")

# ---- Logging ----
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {"()": "gateway.logging_filters.RequestIdFilter"},
    },
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
            "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "filters": ["request_id"],
        },
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django.request": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}
