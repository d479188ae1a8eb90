from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey
from datetime import datetime
import enum

from app.core.database import Base
from app.models.user import enum_values


class NotificationType(str, enum.Enum):
    SMS = "sms"
    EMAIL = "email"


class NotificationStatus(str, enum.Enum):
    SENT = "sent"
    FAILED = "failed"


class Notification(Base):
    """Delivery record of an SMS or email sent to a user"""
    __tablename__ = "notifications"

    notification_id = Column(Integer, primary_key=True, autoincrement=True)
    computer_number = Column(
        String(10),
        ForeignKey("users.computer_number", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    type = Column(
        SQLEnum(NotificationType, name="notification_type", values_callable=enum_values),
        nullable=False
    )
    status = Column(
        SQLEnum(NotificationStatus, name="notification_status", values_callable=enum_values),
        nullable=False
    )
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Notification {self.notification_id} {self.type.value}/{self.status.value}>"
