from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Index, UniqueConstraint

from app.extensions import db

STATUS_PENDING = "Pending"
STATUS_RESOLVED = "Resolved"
STATUS_CHOICES = (STATUS_PENDING, STATUS_RESOLVED)


def _utcnow():
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


class Complaint(db.Model):
    __tablename__ = "complaints"

    # Internal surrogate key; also the insertion-order tiebreaker for listings
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(36), nullable=False, default=_new_id)

    complaint_text = db.Column(db.Text, nullable=False)

    # Inference outputs
    category = db.Column(db.String(100), nullable=False)
    sentiment = db.Column(db.String(20), nullable=False)
    priority = db.Column(db.String(20), nullable=False)
    ai_response = db.Column(db.Text, nullable=False)
    ai_confidence_score = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    ai_explanation = db.Column(db.Text, nullable=False, default="", server_default="")

    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING, server_default=STATUS_PENDING)
    feedback_helpful = db.Column(db.Boolean, nullable=True)

    # Submitter; null for guest submissions
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    user_email = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    messages = db.relationship(
        "Message",
        back_populates="complaint",
        order_by="Message.created_at",
        lazy="dynamic",
    )

    __table_args__ = (
        UniqueConstraint("id", name="uq_complaints_id"),
        Index("ix_complaints_created_at", "created_at"),
        Index("ix_complaints_status", "status"),
        Index("ix_complaints_priority", "priority"),
        CheckConstraint("status IN ('Pending','Resolved')", name="ck_complaints_status_valid"),
        CheckConstraint(
            "ai_confidence_score >= 0 AND ai_confidence_score <= 100",
            name="ck_complaints_confidence_range",
        ),
    )

    def __repr__(self) -> str:
        return f"<Complaint id={self.id} category={self.category!r} status={self.status!r}>"

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            complaint_text=self.complaint_text,
            category=self.category,
            sentiment=self.sentiment,
            priority=self.priority,
            ai_response=self.ai_response,
            ai_confidence_score=self.ai_confidence_score,
            ai_explanation=self.ai_explanation,
            status=self.status,
            feedback_helpful=self.feedback_helpful,
            user_id=self.user_id,
            user_email=self.user_email,
            created_at=_iso(self.created_at),
            updated_at=_iso(self.updated_at),
        )
