from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey
from datetime import datetime
import enum

from app.core.database import Base
from app.models.user import enum_values


class ComplaintCategory(str, enum.Enum):
    """Complaint categories"""
    ACADEMICS = "academics"
    FACILITIES = "facilities"
    ACCOMMODATION = "accommodation"
    FINANCES = "finances"
    MISSING_RESULTS = "missing_results"
    REGISTRATION = "registration"
    TRANSPORT = "transport"
    LIBRARY = "library"
    CAFETERIA = "cafeteria"
    HEALTH_SERVICES = "health_services"
    HARASSMENT = "harassment"
    ADMINISTRATIVE = "administrative"
    INTERNET_NETWORK = "internet_network"
    DISCIPLINARY = "disciplinary"
    SPORTS_RECREATION = "sports_recreation"
    OTHER = "other"


class ComplaintPriority(str, enum.Enum):
    """Complaint priority"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ComplaintStatus(str, enum.Enum):
    """Complaint status"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    CLOSED = "closed"


# Display labels for GET /complaints/categories
CATEGORY_DETAILS = {
    ComplaintCategory.ACADEMICS: (
        "Academic Issues", "Course problems, teaching issues, academic misconduct"),
    ComplaintCategory.FACILITIES: (
        "Facilities & Infrastructure", "Buildings, classrooms, equipment, maintenance issues"),
    ComplaintCategory.ACCOMMODATION: (
        "Accommodation", "Hostel issues, housing problems, roommate conflicts"),
    ComplaintCategory.FINANCES: (
        "Financial Issues", "Fee payments, bursaries, financial aid, billing problems"),
    ComplaintCategory.MISSING_RESULTS: (
        "Missing Results", "Missing grades, transcripts, exam results not published"),
    ComplaintCategory.REGISTRATION: (
        "Registration", "Course registration, enrollment issues, timetable conflicts"),
    ComplaintCategory.TRANSPORT: (
        "Transport Services", "Campus shuttle, transport delays, route issues"),
    ComplaintCategory.LIBRARY: (
        "Library Services", "Library resources, access issues, book availability"),
    ComplaintCategory.CAFETERIA: (
        "Food Services", "Cafeteria, dining hall, food quality and service"),
    ComplaintCategory.HEALTH_SERVICES: (
        "Health Services", "Campus clinic, medical services, health insurance"),
    ComplaintCategory.HARASSMENT: (
        "Harassment & Discrimination", "Sexual harassment, discrimination, bullying, safety concerns"),
    ComplaintCategory.ADMINISTRATIVE: (
        "Administrative Services", "Documentation, certificates, administrative delays"),
    ComplaintCategory.INTERNET_NETWORK: (
        "Internet & Network", "WiFi connectivity, network issues, computer lab problems"),
    ComplaintCategory.DISCIPLINARY: (
        "Disciplinary Issues", "Student conduct, disciplinary actions, appeals"),
    ComplaintCategory.SPORTS_RECREATION: (
        "Sports & Recreation", "Sports facilities, recreational activities, gym access"),
    ComplaintCategory.OTHER: (
        "Other", "Issues not covered by other categories"),
}


class Complaint(Base):
    """Complaint model"""
    __tablename__ = "complaints"

    complaint_id = Column(Integer, primary_key=True, autoincrement=True)
    # NULL for anonymous complaints
    computer_number = Column(
        String(10),
        ForeignKey("users.computer_number", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(
        SQLEnum(ComplaintCategory, name="complaint_category", values_callable=enum_values),
        nullable=False,
        index=True
    )
    priority = Column(
        SQLEnum(ComplaintPriority, name="complaint_priority", values_callable=enum_values),
        default=ComplaintPriority.MEDIUM,
        nullable=False
    )
    status = Column(
        SQLEnum(ComplaintStatus, name="complaint_status", values_callable=enum_values),
        default=ComplaintStatus.PENDING,
        nullable=False,
        index=True
    )

    contact_phone = Column(String(20), nullable=True)
    contact_email = Column(String(255), nullable=True)
    anonymous = Column(Boolean, default=False, nullable=False)

    admin_response = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    resolved_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<Complaint {self.complaint_id} ({self.status.value})>"
