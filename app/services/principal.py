"""Resolve the caller of a request from its bearer credential.

Three kinds of principal exist: an anonymous guest, an authenticated user
(access token issued by ``/auth``), and the service principal (the configured
``SERVICE_ROLE_KEY``), which may read and write every complaint.
"""
from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Optional

from flask import current_app, request

from app.extensions import db, login_manager
from app.models import User
from . import tokens

KIND_ANONYMOUS = "anonymous"
KIND_USER = "user"
KIND_SERVICE = "service"


@dataclass(frozen=True)
class Principal:
    kind: str
    user_id: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_service(self) -> bool:
        return self.kind == KIND_SERVICE

    @property
    def is_user(self) -> bool:
        return self.kind == KIND_USER

    @property
    def is_anonymous(self) -> bool:
        return self.kind == KIND_ANONYMOUS


ANONYMOUS = Principal(KIND_ANONYMOUS)
SERVICE = Principal(KIND_SERVICE)


def for_user(user: User) -> Principal:
    return Principal(KIND_USER, user_id=user.id, email=user.email)


def bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer ...`` header value."""
    if not header_value or not header_value.startswith("Bearer "):
        return None
    token = header_value[len("Bearer "):].strip()
    return token or None


def _is_service_key(token: str) -> bool:
    key = current_app.config.get("SERVICE_ROLE_KEY")
    if not key:
        return False
    return hmac.compare_digest(token.encode("utf-8"), key.encode("utf-8"))


def load_user_from_token(token: Optional[str]) -> Optional[User]:
    if not token:
        return None
    user_id = tokens.verify_access_token(token)
    if not user_id:
        return None
    user = db.session.get(User, user_id)
    if not user or not user.is_active:
        return None
    return user


def resolve(header_value: Optional[str]) -> Principal:
    """Never raises: anything unrecognised resolves to the anonymous principal."""
    token = bearer_token(header_value)
    if not token:
        return ANONYMOUS
    if _is_service_key(token):
        return SERVICE
    try:
        user = load_user_from_token(token)
    except Exception:
        current_app.logger.warning("Bearer token resolution failed; treating caller as anonymous", exc_info=True)
        return ANONYMOUS
    if user is None:
        return ANONYMOUS
    return for_user(user)


def current_principal() -> Principal:
    return resolve(request.headers.get("Authorization"))


@login_manager.request_loader
def _load_user_from_request(req):
    # Flask-Login sees bearer-authenticated users as current_user
    try:
        return load_user_from_token(bearer_token(req.headers.get("Authorization")))
    except Exception:
        return None
