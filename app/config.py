import os

DEFAULT_FALLBACK_RESPONSE = (
    "Thank you for contacting us. Your complaint has been received and will be "
    "reviewed by our support team. We will get back to you within 48 hours. "
    "For urgent matters, please call our helpline."
)

class BaseConfig:
    # Secrets (env in prod; dev/test may use defaults)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-not-secure")

    # Database (env in prod; dev/test may use default)
    try:
        from dotenv import dotenv_values
        _ENV_FALLBACK = dotenv_values(".env")
    except Exception:
        _ENV_FALLBACK = {}
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or _ENV_FALLBACK.get("DATABASE_URL") or "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging / misc
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Flask-Limiter default: off globally; prefer per-route limits
    RATELIMIT_DEFAULT = None
    SUBMIT_RATE_LIMIT = os.getenv("SUBMIT_RATE_LIMIT", "20 per minute; 200 per hour")

    # --- Identity ---
    # Bearer value granting unrestricted access (trusted backends only)
    SERVICE_ROLE_KEY = os.getenv("SERVICE_ROLE_KEY")
    ACCESS_TOKEN_SALT = os.getenv("ACCESS_TOKEN_SALT", "access-token-v1")
    ACCESS_TOKEN_TTL_SECONDS = int(os.getenv("ACCESS_TOKEN_TTL_SECONDS", str(60 * 60 * 24)))

    # --- Inference service ---
    ML_SERVICE_URL = os.getenv("ML_SERVICE_URL")
    ML_SERVICE_TIMEOUT = float(os.getenv("ML_SERVICE_TIMEOUT", "10"))
    FALLBACK_RESPONSE = os.getenv("FALLBACK_RESPONSE", DEFAULT_FALLBACK_RESPONSE)

    # --- CORS (permissive: the dashboards are served from another origin) ---
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # --- Mail ---
    MAIL_SERVER = os.getenv("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = (os.getenv("MAIL_USE_TLS", "true").lower() == "true")
    MAIL_USE_SSL = (os.getenv("MAIL_USE_SSL", "false").lower() == "true")
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "Complaint Desk <no-reply@local.test>")
    MAIL_SUPPRESS_SEND = (os.getenv("MAIL_SUPPRESS_SEND", "false").lower() == "true")

    # New-complaint notification recipient; unset disables notifications
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
    # Send notifications from a background thread (off in tests for determinism)
    NOTIFY_ASYNC = (os.getenv("NOTIFY_ASYNC", "true").lower() == "true")

    # Used for absolute links in emails (must be https in prod)
    APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")
    SITE_NAME = os.getenv("SITE_NAME", "Complaint Desk")

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")
    MAIL_SUPPRESS_SEND = True

class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")
    MAIL_SUPPRESS_SEND = False

class TestingConfig(BaseConfig):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    SERVICE_ROLE_KEY = "test-service-role-key"
    ML_SERVICE_URL = None
    ADMIN_EMAIL = None
    NOTIFY_ASYNC = False
    MAIL_SUPPRESS_SEND = True
    RATELIMIT_ENABLED = False

_ENV_MAP = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}

def get_config():
    env = os.environ.get("APP_ENV", "development").lower()
    return _ENV_MAP.get(env, DevelopmentConfig)
