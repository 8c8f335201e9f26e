from flask_talisman import Talisman
from app.extensions import cors

CORS_METHODS = ["GET", "POST", "PUT", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization", "X-Client-Info", "Apikey"]

def init_cors(app):
    """
    Permissive CORS on every route: the dashboards call this API from their
    own origin with a bearer token, never with cookies.
    """
    origins = app.config.get("CORS_ORIGINS", "*")
    if origins != "*":
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    cors.init_app(
        app,
        origins=origins,
        methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        supports_credentials=False,
        send_wildcard=True,
    )

def init_security(app):
    """
    Production/staging security headers. The app only serves JSON, so the
    CSP denies everything by default.
    """
    csp = {
        "default-src": ["'none'"],
        "frame-ancestors": ["'none'"],
        "base-uri":    ["'none'"],
        "form-action": ["'none'"],
    }

    Talisman(
        app,
        content_security_policy=csp,
        force_https=True,
        strict_transport_security=True,
        session_cookie_secure=True,
        frame_options="DENY",
        referrer_policy="no-referrer",
    )
