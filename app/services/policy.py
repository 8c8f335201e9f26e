from functools import wraps
from typing import Optional
from flask import jsonify
from flask_login import current_user
from app.extensions import db
from app.models import AdminUser

def is_admin(user_id: Optional[str]) -> bool:
    """
    True iff an admin marker exists for the user. Advisory (dashboard gating);
    complaint visibility is enforced separately in services.complaints.
    """
    if not user_id:
        return False
    return db.session.get(AdminUser, str(user_id)) is not None

def require_user(fn):
    @wraps(fn)
    def _wrap(*args, **kwargs):
        if not getattr(current_user, "is_authenticated", False):
            return _abort_json(401)
        return fn(*args, **kwargs)
    return _wrap

def _abort_json(code: int):
    return jsonify({"error": {401: "unauthorized", 403: "forbidden", 404: "not_found"}[code], "code": code}), code
