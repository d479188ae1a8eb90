from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from app.models.complaint import ComplaintCategory, ComplaintPriority, ComplaintStatus


class ComplaintCreate(BaseModel):
    """
    Complaint submission.

    Required fields and enum values are checked in the endpoint so that the
    400 response can list every missing field and the allowed values.
    """
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    computer_number: Optional[str] = None
    contact_phone: Optional[str] = Field(None, max_length=20)
    contact_email: Optional[EmailStr] = None
    anonymous: bool = False


class ComplaintUpdate(BaseModel):
    status: Optional[str] = None
    priority: Optional[str] = None
    admin_response: Optional[str] = None
    admin_notes: Optional[str] = None


class ComplaintCreated(BaseModel):
    complaint_id: int
    title: str
    category: ComplaintCategory
    priority: ComplaintPriority
    status: ComplaintStatus
    anonymous: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ComplaintSummary(BaseModel):
    complaint_id: int
    computer_number: Optional[str] = None
    title: str
    description: str
    category: ComplaintCategory
    priority: ComplaintPriority
    status: ComplaintStatus
    anonymous: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ComplaintDetail(ComplaintSummary):
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    admin_response: Optional[str] = None
    admin_notes: Optional[str] = None
    resolved_at: Optional[datetime] = None


class CategoryInfo(BaseModel):
    value: str
    label: str
    description: str
