"""create complaints and complaint_messages

Revision ID: 1a2b3c4d5e02
Revises: 1a2b3c4d5e01
Create Date: 2025-12-19 08:16:58
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "1a2b3c4d5e02"
down_revision = "1a2b3c4d5e01"
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "complaints",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("complaint_text", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("sentiment", sa.String(length=20), nullable=False),
        sa.Column("priority", sa.String(length=20), nullable=False),
        sa.Column("ai_response", sa.Text(), nullable=False),
        sa.Column("ai_confidence_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("ai_explanation", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Pending"),
        sa.Column("feedback_helpful", sa.Boolean(), nullable=True),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("user_email", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("id", name="uq_complaints_id"),
        sa.CheckConstraint("status IN ('Pending','Resolved')", name="ck_complaints_status_valid"),
        sa.CheckConstraint(
            "ai_confidence_score >= 0 AND ai_confidence_score <= 100",
            name="ck_complaints_confidence_range",
        ),
    )
    op.create_index("ix_complaints_created_at", "complaints", ["created_at"], unique=False)
    op.create_index("ix_complaints_status", "complaints", ["status"], unique=False)
    op.create_index("ix_complaints_priority", "complaints", ["priority"], unique=False)
    op.create_index("ix_complaints_user_id", "complaints", ["user_id"], unique=False)

    op.create_table(
        "complaint_messages",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("complaint_id", sa.String(length=36), nullable=False),
        sa.Column("message_text", sa.Text(), nullable=False),
        sa.Column("sender_role", sa.String(length=10), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["complaint_id"], ["complaints.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("sender_role IN ('user','admin')", name="ck_complaint_messages_sender_role"),
    )
    op.create_index("ix_complaint_messages_complaint_id", "complaint_messages", ["complaint_id"], unique=False)

def downgrade():
    op.drop_index("ix_complaint_messages_complaint_id", table_name="complaint_messages")
    op.drop_table("complaint_messages")
    op.drop_index("ix_complaints_user_id", table_name="complaints")
    op.drop_index("ix_complaints_priority", table_name="complaints")
    op.drop_index("ix_complaints_status", table_name="complaints")
    op.drop_index("ix_complaints_created_at", table_name="complaints")
    op.drop_table("complaints")
