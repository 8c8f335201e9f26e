from typing import List
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from app.extensions import db
from app.models import Message, SENDER_ADMIN, SENDER_USER
from .complaints import get_complaint_for
from .errors import InvalidInput, PersistenceError
from .principal import Principal

def list_messages(principal: Principal, complaint_id) -> List[Message]:
    complaint = get_complaint_for(principal, complaint_id)
    return list(complaint.messages)

def post_message(principal: Principal, complaint_id, message_text) -> Message:
    """Append to a complaint's thread; the service principal posts as admin."""
    if not isinstance(message_text, str) or not message_text.strip():
        raise InvalidInput("Message text is required")
    complaint = get_complaint_for(principal, complaint_id)

    msg = Message(
        complaint_id=complaint.id,
        message_text=message_text.strip(),
        sender_role=SENDER_ADMIN if principal.is_service else SENDER_USER,
    )
    try:
        db.session.add(msg)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Persisting message on complaint %s failed", complaint.id)
        raise PersistenceError("Failed to save message") from exc
    return msg
