"""
Django settings for airfieldwatch project.
Production hints included — uses environment variables when available.
"""

import os
from pathlib import Path

# BASE_DIR (two levels up from this file)
BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-secret-key-change-me")
DEBUG = os.environ.get("DJANGO_DEBUG", "1") in ("1", "True", "true", "yes")
ALLOWED_HOSTS = os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django_crontab",

    # Third-party
    "rest_framework",
    "django_celery_results",   # stores celery task results for the sweep runs

    # Project apps
    "core",
    "ingestion",
    "alerts",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "airfieldwatch.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

# Exactly one scheduler drives the threshold sweep: "celery" (beat, below) or "cron" (django-crontab).
ALERT_SCHEDULER = os.environ.get("ALERT_SCHEDULER", "celery").lower()

CRONJOBS = [
    ('*/5 * * * *', 'django.core.management.call_command', ['run_alerts'], {}, '>> /tmp/airfieldwatch_alerts.log 2>&1'),
] if ALERT_SCHEDULER == "cron" else []

WSGI_APPLICATION = "airfieldwatch.wsgi.application"

# Database
# Default: SQLite for quick start. For production, set POSTGRES_* env vars.
if os.environ.get("POSTGRES_DB"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("POSTGRES_DB"),
            "USER": os.environ.get("POSTGRES_USER", "postgres"),
            "PASSWORD": os.environ.get("POSTGRES_PASSWORD", ""),
            "HOST": os.environ.get("POSTGRES_HOST", "localhost"),
            "PORT": os.environ.get("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": str(BASE_DIR / "db.sqlite3"),
        }
    }

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]

# Internationalization / timezone
LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("DJANGO_TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = os.environ.get("STATIC_ROOT", str(BASE_DIR / "staticfiles"))

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Django REST Framework basic config
REST_FRAMEWORK = {
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.LimitOffsetPagination",
    "PAGE_SIZE": 50,
}

# Celery configuration (uses Redis broker by default)
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", "django-db")  # use django_celery_results
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    "check-weather-alerts": {
        "task": "alerts.tasks.check_weather_alerts",
        "schedule": float(os.environ.get("ALERT_SWEEP_INTERVAL_SECONDS", 300)),
    },
} if ALERT_SCHEDULER == "celery" else {}

# Logging (simple console logger tuned for development)
LOG_LEVEL = os.environ.get("DJANGO_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {"format": "[%(asctime)s] %(levelname)s [%(name)s:%(lineno)s] %(message)s"},
        "simple": {"format": "%(levelname)s %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "verbose"},
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

# Security recommendations for production (edit when deploying)
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SESSION_COOKIE_SECURE = os.environ.get("DJANGO_SESSION_COOKIE_SECURE", "0") in ("1", "True", "true")
CSRF_COOKIE_SECURE = os.environ.get("DJANGO_CSRF_COOKIE_SECURE", "0") in ("1", "True", "true")

# Custom config for the app
AIRFIELDWATCH = {
    # weather provider: "openweather" (real API) or "simulated"
    "WEATHER_PROVIDER": os.environ.get("WEATHER_PROVIDER", "openweather"),
    "OPENWEATHER_API_KEY": os.environ.get("OPENWEATHER_API_KEY", ""),
    "OPENWEATHER_BASE_URL": os.environ.get("OPENWEATHER_BASE_URL", "https://api.openweathermap.org"),
    "WEATHER_PROVIDER_TIMEOUT": float(os.environ.get("WEATHER_PROVIDER_TIMEOUT", 10)),
    # "tuple" keeps existing alerts and skips duplicates, "replace" clears per airfield
    "ALERT_DEDUP_POLICY": os.environ.get("ALERT_DEDUP_POLICY", "tuple"),
    "ALERT_TTL_MINUTES": int(os.environ.get("ALERT_TTL_MINUTES", 180)),
    "ALERT_SWEEP_MAX_WORKERS": int(os.environ.get("ALERT_SWEEP_MAX_WORKERS", 8)),
    "WIND_BANDS_KT": {"yellow": 20.0, "orange": 30.0, "red": 40.0},
    "VISIBILITY_BANDS_KM": {"yellow": 5.0, "orange": 3.0, "red": 1.0},
}
