"""Gunicorn settings for the storefront API, tunable through ``GUNI_*`` env vars."""

import os


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


wsgi_app = "config.wsgi:application"
bind = os.getenv("GUNI_BIND", "0.0.0.0:8000")

# provider calls (Stripe, PayPal, Sendcloud, Brevo) block, so use threads
worker_class = "gthread"
workers = _int_env("GUNI_WORKERS", min(max(2, (os.cpu_count() or 1) * 2), 8))
threads = _int_env("GUNI_THREADS", 4)

timeout = _int_env("GUNI_TIMEOUT", 60)
graceful_timeout = _int_env("GUNI_GRACEFUL_TIMEOUT", 30)
keepalive = _int_env("GUNI_KEEPALIVE", 5)

# payment provider clients are cached per process; recycle workers now and then
max_requests = _int_env("GUNI_MAX_REQUESTS", 2000)
max_requests_jitter = _int_env("GUNI_MAX_REQUESTS_JITTER", 200)

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNI_LOGLEVEL", "info")
