import os
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

# Load .env only for local/dev. In prod, env vars come from the platform.
if os.getenv("APP_ENV", "development") != "production":
    from dotenv import load_dotenv
    # Always load .env if present and override any pre-set envs (prod: no .env → no-op)
    load_dotenv(".env", override=True)


from .config import get_config
from .extensions import db, migrate, login_manager, limiter, mail
from .security import init_cors, init_security
from .observability import init_logging, init_sentry

def create_app():
    app = Flask(__name__, template_folder="templates")

    # ---- Rate Limiting storage configuration ----
    app_env = (os.getenv("APP_ENV", "development") or "development").lower()
    use_redis = app_env in ("staging", "production")
    storage_uri = os.environ.get("REDIS_URL") if use_redis else "memory://"
    if use_redis and not storage_uri:
        # Hard fail in stage/prod so we never silently run without RL storage
        raise RuntimeError("REDIS_URL is required in staging/production for rate limiting")
    # -------------------------------------------------------

    app.config["RATELIMIT_STORAGE_URI"] = storage_uri
    app.config.setdefault("RATELIMIT_HEADERS_ENABLED", True)

    # Config: clean, explicit, class-based
    app.config.from_object(get_config())

    # --- Required env validation for prod-like envs (staging/production) ---
    def _require(name: str):
        val = os.getenv(name) or app.config.get(name)
        if not val:
            raise RuntimeError(f"Missing required environment variable: {name}")
        return val

    if app_env in ("staging", "production"):
        # Enforce hard requirements at startup (not at import time)
        _require("SECRET_KEY")
        _require("DATABASE_URL")
        _require("SERVICE_ROLE_KEY")
        if app.config.get("SECRET_KEY") == "dev-not-secure":
            raise RuntimeError("SECRET_KEY must be set to a real secret in staging/production")

    # --- Observability & Security ---
    init_logging(app)
    init_sentry(app)
    init_cors(app)

    # Apply HTTPS, HSTS & CSP only in staging/production
    if app_env in ("staging", "production"):
        init_security(app)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db, directory="migrations")
    login_manager.init_app(app)
    limiter.init_app(app)
    mail.init_app(app)

    if not app.config.get("ML_SERVICE_URL"):
        app.logger.warning("ML_SERVICE_URL not configured; complaints will get fallback classifications")
    if not app.config.get("SERVICE_ROLE_KEY"):
        app.logger.warning("SERVICE_ROLE_KEY not configured; no caller can list every complaint")

    # Registers the bearer-token request_loader on login_manager
    from .services import principal  # noqa: F401

    # Blueprints (explicit, consistent prefixes)
    from .blueprints.complaints import bp as complaints_bp
    from .blueprints.auth import bp as auth_bp

    app.register_blueprint(complaints_bp, url_prefix="/complaints")
    app.register_blueprint(auth_bp, url_prefix="/auth")

    @limiter.exempt
    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    # Error handlers: every response from this API is JSON
    from .services.errors import ServiceError

    @app.errorhandler(ServiceError)
    def handle_service_error(e):
        if e.status_code >= 500:
            app.logger.error("Service error: %s", e.message)
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not Found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    # 429 Too Many Requests with Retry-After
    @app.errorhandler(429)
    def too_many_requests(e):
        retry_after = getattr(e, "retry_after", None)
        headers = {}
        payload = {"error": "rate_limited", "code": 429}
        if retry_after is not None:
            headers["Retry-After"] = str(int(retry_after))
            payload["retry_after"] = int(retry_after)
        return (jsonify(payload), 429, headers)

    @app.errorhandler(Exception)
    def unhandled(e):
        if isinstance(e, HTTPException):
            return jsonify({"error": e.description or e.name}), e.code
        app.logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500

    # CLI commands (ops-grade utilities)
    from .cli import register_cli
    register_cli(app)

    return app
