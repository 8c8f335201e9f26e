from sqlalchemy import func
from app.extensions import db

class AdminUser(db.Model):
    """Admin marker: a row here grants admin capability to the user."""
    __tablename__ = "admin_users"

    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    email = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<AdminUser user_id={self.user_id} email={self.email!r}>"
