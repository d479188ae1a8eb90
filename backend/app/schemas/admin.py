from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from app.models import (
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    MeetingStatus,
    NotificationStatus,
    NotificationType,
    UserRole,
)


class ComplaintCounts(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
    rejected: int = 0
    closed: int = 0
    urgent: int = 0


class UserCounts(BaseModel):
    total: int = 0
    students: int = 0
    lecturers: int = 0
    admins: int = 0


class AdminOverview(BaseModel):
    complaints: ComplaintCounts
    users: UserCounts


class MeetingCounts(BaseModel):
    total: int = 0
    pending: int = 0
    confirmed: int = 0
    cancelled: int = 0


class NotificationCounts(BaseModel):
    total: int = 0
    sent: int = 0
    failed: int = 0
    sms: int = 0
    email: int = 0


class SystemStats(BaseModel):
    server_time: datetime
    db_time: Optional[datetime] = None
    tables_count: int
    environment: str
    version: str


class RecentComplaint(BaseModel):
    complaint_id: int
    title: str
    category: ComplaintCategory
    status: ComplaintStatus
    priority: ComplaintPriority
    created_at: datetime

    class Config:
        from_attributes = True


class RecentUser(BaseModel):
    computer_number: str
    role: UserRole
    first_name: str
    last_name: str
    email: str
    created_at: datetime

    class Config:
        from_attributes = True


class RecentMeeting(BaseModel):
    meeting_id: int
    title: str
    organizer_computer_number: str
    participant_computer_number: str
    scheduled_at: datetime
    status: MeetingStatus
    created_at: datetime

    class Config:
        from_attributes = True


class RecentNotification(BaseModel):
    notification_id: int
    computer_number: str
    type: NotificationType
    status: NotificationStatus
    message: str
    created_at: datetime

    class Config:
        from_attributes = True
