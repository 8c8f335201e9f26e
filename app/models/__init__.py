from .user import User
from .complaint import Complaint, STATUS_PENDING, STATUS_RESOLVED, STATUS_CHOICES
from .message import Message, SENDER_USER, SENDER_ADMIN
from .admin_user import AdminUser
from .email_log import EmailLog

__all__ = [
    "User",
    "Complaint",
    "Message",
    "AdminUser",
    "EmailLog",
    "STATUS_PENDING",
    "STATUS_RESOLVED",
    "STATUS_CHOICES",
    "SENDER_USER",
    "SENDER_ADMIN",
]
