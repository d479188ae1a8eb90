# Pydantic schemas
from app.schemas.auth import (
    UserRegister,
    UserLogin,
    ProfileUpdate,
    PasswordChange,
    UserResponse,
    LoginResponse,
)
from app.schemas.user import RoleUpdate
from app.schemas.complaint import (
    ComplaintCreate,
    ComplaintUpdate,
    ComplaintCreated,
    ComplaintSummary,
    ComplaintDetail,
    CategoryInfo,
)
from app.schemas.meeting import (
    MeetingCreate,
    MeetingStatusUpdate,
    MeetingParty,
    MeetingResponse,
)
