from typing import Optional
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from flask import current_app

def _serializer() -> URLSafeTimedSerializer:
    secret = current_app.config["SECRET_KEY"]
    salt = current_app.config.get("ACCESS_TOKEN_SALT", "access-token-v1")
    return URLSafeTimedSerializer(secret_key=secret, salt=salt)

def generate(kind: str, identity: str) -> str:
    """
    kind: 'access' for bearer tokens
    identity: user id string.
    """
    return _serializer().dumps({"k": kind, "i": identity})

def verify(kind: str, token: str, max_age_seconds: int) -> Optional[str]:
    try:
        data = _serializer().loads(token, max_age=max_age_seconds)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(data, dict) or data.get("k") != kind:
        return None
    return data.get("i")

def issue_access_token(user_id: str) -> str:
    return generate("access", str(user_id))

def verify_access_token(token: str) -> Optional[str]:
    ttl = int(current_app.config.get("ACCESS_TOKEN_TTL_SECONDS", 86400))
    return verify("access", token, max_age_seconds=ttl)
