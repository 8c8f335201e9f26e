from flask import request, jsonify, current_app
from flask_login import current_user
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from app.extensions import db, limiter
from app.models.user import User
from app.services import tokens
from app.services.policy import is_admin, require_user
from app.utils.validators import is_valid_email
from . import bp

MIN_PASSWORD_LENGTH = 8


def _login_email_scope():
    data_json = request.get_json(silent=True)
    email = _text(data_json.get("email")).lower() if isinstance(data_json, dict) else ""
    # Keep a stable scope even if email is blank
    return f"login-email:{email or 'missing'}"


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _credentials():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    email = _text(data.get("email")).lower()
    password = data.get("password")
    if not isinstance(password, str):
        password = ""
    return email, password


def _find_user(email: str):
    return db.session.execute(
        db.select(User).where(func.lower(User.email) == func.lower(email))
    ).scalar_one_or_none()


def _session_payload(user: User) -> dict:
    return {
        "success": True,
        "access_token": tokens.issue_access_token(user.id),
        "token_type": "bearer",
        "expires_in": int(current_app.config.get("ACCESS_TOKEN_TTL_SECONDS", 86400)),
        "user": user.to_dict(),
    }


@bp.post("/signup")
@limiter.limit("5 per minute; 20 per hour")
def signup():
    email, password = _credentials()

    errors = []
    if not email or not is_valid_email(email):
        errors.append("A valid email is required.")
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if email and _find_user(email):
        errors.append("An account with that email already exists. Try signing in.")
    if errors:
        return jsonify({"error": " ".join(errors), "errors": errors}), 400

    user = User(email=email, is_active=True)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": "An account with that email already exists. Try signing in."}), 400

    current_app.logger.info("User %s signed up", user.id)
    return jsonify(_session_payload(user)), 201


@bp.post("/login")
@limiter.limit("10 per minute; 100 per hour")              # per-IP (anon → IP via _rate_limit_key)
@limiter.limit("5 per minute; 20 per hour", key_func=_login_email_scope)  # per-account
def login():
    email, password = _credentials()
    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400

    user = _find_user(email)
    if not user or not user.check_password(password) or not user.is_active:
        return jsonify({"error": "Invalid credentials"}), 400

    return jsonify(_session_payload(user)), 200


@bp.get("/me")
@require_user
def me():
    data = current_user.to_dict()
    data["is_admin"] = is_admin(current_user.id)
    return jsonify({"success": True, "user": data}), 200
