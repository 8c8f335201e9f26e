import uuid
from datetime import datetime, timezone
from sqlalchemy import CheckConstraint
from app.extensions import db

SENDER_USER = "user"
SENDER_ADMIN = "admin"

class Message(db.Model):
    """Thread entry on a complaint. Append-only."""
    __tablename__ = "complaint_messages"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    complaint_id = db.Column(
        db.String(36),
        db.ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    message_text = db.Column(db.Text, nullable=False)
    sender_role = db.Column(db.String(10), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    complaint = db.relationship("Complaint", back_populates="messages")

    __table_args__ = (
        CheckConstraint("sender_role IN ('user','admin')", name="ck_complaint_messages_sender_role"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "complaint_id": self.complaint_id,
            "message_text": self.message_text,
            "sender_role": self.sender_role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
