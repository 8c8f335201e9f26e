import os
import logging
from logging.config import dictConfig

def init_logging(app):
    """Structured logs (JSON) in staging/prod; default console in dev/tests at LOG_LEVEL."""
    level = (app.config.get("LOG_LEVEL") or "INFO").upper()
    app_env = (os.getenv("APP_ENV", "development") or "development").lower()
    if app_env in ("staging", "production"):
        fmt = "%(asctime)s %(levelname)s %(name)s %(message)s"
        formatter = "pythonjsonlogger.json.JsonFormatter"
        dictConfig({
            "version": 1,
            "formatters": {"json": {"()": formatter, "fmt": fmt}},
            "handlers": {"wsgi": {"class": "logging.StreamHandler", "formatter": "json"}},
            "root": {"level": level, "handlers": ["wsgi"]},
            # httpx logs every request line at INFO; inference calls are logged by the gateway
            "loggers": {"httpx": {"level": "WARNING"}},
        })
    app.logger.setLevel(getattr(logging, level, logging.INFO))

def init_sentry(app):
    """Wire Sentry if DSN present; safe no-op otherwise."""
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration
        sentry_sdk.init(
            dsn=dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=float(os.getenv("SENTRY_TRACES", "0.0")),
            environment=os.getenv("APP_ENV", "development"),
            send_default_pii=False,
        )
    except Exception as exc:
        app.logger.warning("Sentry init skipped: %s", exc)
