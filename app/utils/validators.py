import re

# Simple, pragmatic pattern
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

def is_valid_email(val: str | None) -> bool:
    if not val:
        return False
    return bool(_EMAIL_RE.match(val))
