# Re-export all models for convenient imports
from app.models.user import User, UserRole
from app.models.complaint import (
    Complaint,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    CATEGORY_DETAILS,
)
from app.models.meeting import Meeting, MeetingStatus
from app.models.notification import Notification, NotificationType, NotificationStatus

__all__ = [
    # User
    "User",
    "UserRole",
    # Complaint
    "Complaint",
    "ComplaintCategory",
    "ComplaintPriority",
    "ComplaintStatus",
    "CATEGORY_DETAILS",
    # Meeting
    "Meeting",
    "MeetingStatus",
    # Notification
    "Notification",
    "NotificationType",
    "NotificationStatus",
]
