from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.models.user import enum_values


class MeetingStatus(str, enum.Enum):
    """Meeting status"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Meeting(Base):
    """Meeting between an organizer and a single participant"""
    __tablename__ = "meetings"

    meeting_id = Column(Integer, primary_key=True, autoincrement=True)
    organizer_computer_number = Column(
        String(10),
        ForeignKey("users.computer_number", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    participant_computer_number = Column(
        String(10),
        ForeignKey("users.computer_number", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    scheduled_at = Column(DateTime, nullable=False)
    status = Column(
        SQLEnum(MeetingStatus, name="meeting_status", values_callable=enum_values),
        default=MeetingStatus.PENDING,
        nullable=False
    )

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    organizer = relationship("User", foreign_keys=[organizer_computer_number])
    participant = relationship("User", foreign_keys=[participant_computer_number])

    def involves(self, computer_number: str) -> bool:
        return computer_number in (self.organizer_computer_number, self.participant_computer_number)

    def __repr__(self):
        return f"<Meeting {self.meeting_id} ({self.status.value})>"
