"""Complaint intake and access control.

Visibility is enforced here, at the data-access boundary: the service
principal sees and updates every row, a signed-in user only rows whose
``user_id`` is theirs, and an anonymous caller owns nothing.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from flask import current_app
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.models import Complaint, STATUS_PENDING, STATUS_RESOLVED, STATUS_CHOICES
from . import inference
from .email import dispatch_new_complaint_notification
from .errors import InvalidInput, Forbidden, NotFound, PersistenceError
from .principal import Principal

# Sentinel for "field not supplied" in partial updates
UNSET = object()

STATUS_FILTERS = {
    "all": None,
    "pending": STATUS_PENDING,
    "resolved": STATUS_RESOLVED,
}


def _utcnow():
    return datetime.now(timezone.utc)


def clean_complaint_text(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("Complaint text is required")
    return value.strip()


# ── Intake ──────────────────────────────────────────────


def submit_complaint(complaint_text, principal: Principal) -> Complaint:
    text = clean_complaint_text(complaint_text)

    prediction = inference.classify(text)

    complaint = Complaint(
        complaint_text=text,
        category=prediction.category,
        sentiment=prediction.sentiment,
        priority=prediction.priority,
        ai_response=prediction.ai_response,
        ai_confidence_score=prediction.confidence_score,
        ai_explanation=prediction.explanation,
        status=STATUS_PENDING,
        user_id=principal.user_id if principal.is_user else None,
        user_email=principal.email if principal.is_user else None,
    )
    try:
        db.session.add(complaint)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Persisting complaint failed")
        raise PersistenceError("Failed to save complaint") from exc

    current_app.logger.info(
        "Complaint %s created category=%s priority=%s fallback=%s guest=%s",
        complaint.id, complaint.category, complaint.priority,
        prediction.is_fallback, complaint.user_id is None,
    )

    dispatch_new_complaint_notification(complaint)
    return complaint


# ── Access ──────────────────────────────────────────────


def _visible_query(principal: Principal):
    """Base select of the rows the principal may see; None when it may see none."""
    stmt = db.select(Complaint)
    if principal.is_service:
        return stmt
    if principal.is_user and principal.user_id:
        return stmt.where(Complaint.user_id == principal.user_id)
    return None


def list_complaints(principal: Principal, status: Optional[str] = None, q: Optional[str] = None) -> List[Complaint]:
    """Newest first; ties keep insertion order."""
    status_key = (status or "all").strip().lower()
    if status_key not in STATUS_FILTERS:
        raise InvalidInput(f"Unknown status filter: {status}")

    stmt = _visible_query(principal)
    if stmt is None:
        return []

    status_value = STATUS_FILTERS[status_key]
    if status_value:
        stmt = stmt.where(Complaint.status == status_value)

    q = (q or "").strip().lower()
    if q:
        pattern = f"%{q}%"
        stmt = stmt.where(
            or_(
                func.lower(Complaint.complaint_text).like(pattern),
                func.lower(Complaint.category).like(pattern),
            )
        )

    stmt = stmt.order_by(Complaint.created_at.desc(), Complaint.seq.asc())
    try:
        return list(db.session.execute(stmt).scalars())
    except SQLAlchemyError as exc:
        current_app.logger.exception("Listing complaints failed")
        raise PersistenceError("Failed to load complaints") from exc


def get_complaint_for(principal: Principal, complaint_id) -> Complaint:
    """Fetch one complaint the principal may act on, or raise NotFound/Forbidden."""
    if complaint_id is None or not str(complaint_id).strip():
        raise InvalidInput("Complaint ID is required")
    complaint_id = str(complaint_id).strip()

    complaint = db.session.execute(
        db.select(Complaint).where(Complaint.id == complaint_id)
    ).scalar_one_or_none()
    if complaint is None:
        raise NotFound("Complaint not found")

    if principal.is_service:
        return complaint
    if principal.is_user and principal.user_id and complaint.user_id == principal.user_id:
        return complaint
    raise Forbidden("You do not have access to this complaint")


def _check_status(current: str, requested) -> str:
    if requested not in STATUS_CHOICES:
        raise InvalidInput(f"Invalid status: {requested}")
    if current == STATUS_RESOLVED and requested == STATUS_PENDING:
        raise InvalidInput("Resolved complaints cannot be reopened")
    return requested


def update_complaint(principal: Principal, complaint_id, status=UNSET, feedback_helpful=UNSET) -> Complaint:
    """
    Partial update of status and/or feedback. Missing or null fields are left
    unchanged; updated_at is always refreshed. Both fields land in one commit.
    """
    complaint = get_complaint_for(principal, complaint_id)

    new_status = None
    if status is not UNSET and status is not None:
        new_status = _check_status(complaint.status, status)

    new_feedback = None
    if feedback_helpful is not UNSET and feedback_helpful is not None:
        if not isinstance(feedback_helpful, bool):
            raise InvalidInput("feedback_helpful must be a boolean")
        new_feedback = feedback_helpful

    if new_status is not None:
        complaint.status = new_status
    if new_feedback is not None:
        complaint.feedback_helpful = new_feedback
    complaint.updated_at = _utcnow()

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Updating complaint %s failed", complaint_id)
        raise PersistenceError("Failed to update complaint") from exc

    current_app.logger.info(
        "Complaint %s updated status=%s feedback_helpful=%s by=%s",
        complaint.id, complaint.status, complaint.feedback_helpful, principal.kind,
    )
    return complaint


def complaint_stats(principal: Principal) -> dict:
    """Dashboard figures over the complaints visible to the principal."""
    rows = list_complaints(principal)
    with_feedback = [c for c in rows if c.feedback_helpful is not None]
    helpful = sum(1 for c in with_feedback if c.feedback_helpful)
    return {
        "total": len(rows),
        "pending": sum(1 for c in rows if c.status == STATUS_PENDING),
        "resolved": sum(1 for c in rows if c.status == STATUS_RESOLVED),
        "high_priority": sum(1 for c in rows if c.priority == "High"),
        "satisfaction_rate": round(helpful * 100 / len(with_feedback)) if with_feedback else 0,
    }
