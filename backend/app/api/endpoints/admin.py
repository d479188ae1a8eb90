"""
Admin dashboard endpoints. Every route requires the admin role.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import inspect, select, func
from datetime import datetime

from app.core.config import settings
from app.core.database import get_db
from app.models import (
    Complaint,
    ComplaintPriority,
    ComplaintStatus,
    Meeting,
    MeetingStatus,
    Notification,
    NotificationStatus,
    NotificationType,
    User,
    UserRole,
)
from app.modules.auth.dependencies import get_current_admin
from app.schemas.admin import (
    AdminOverview,
    ComplaintCounts,
    MeetingCounts,
    NotificationCounts,
    RecentComplaint,
    RecentMeeting,
    RecentNotification,
    RecentUser,
    SystemStats,
    UserCounts,
)
from app.services.statistics import count_by, count_rows
from app.utils.responses import success_response

router = APIRouter(dependencies=[Depends(get_current_admin)])

RECENT_LIMIT = 20


async def latest(db: AsyncSession, model, created_column, schema):
    result = await db.execute(
        select(model).order_by(created_column.desc()).limit(RECENT_LIMIT)
    )
    return [schema.model_validate(row) for row in result.scalars().all()]


@router.get("/overview")
async def overview(db: AsyncSession = Depends(get_db)):
    """Complaint and user headline numbers"""
    by_status = await count_by(db, Complaint.status, ComplaintStatus)
    urgent = await count_rows(db, Complaint, Complaint.priority == ComplaintPriority.URGENT)
    by_role = await count_by(db, User.role, UserRole)

    data = AdminOverview(
        complaints=ComplaintCounts(total=sum(by_status.values()), urgent=urgent, **by_status),
        users=UserCounts(
            total=sum(by_role.values()),
            students=by_role[UserRole.STUDENT.value],
            lecturers=by_role[UserRole.LECTURER.value],
            admins=by_role[UserRole.ADMIN.value],
        ),
    )
    return success_response(data=data)


@router.get("/complaints/recent")
async def recent_complaints(db: AsyncSession = Depends(get_db)):
    return success_response(data=await latest(db, Complaint, Complaint.created_at, RecentComplaint))


@router.get("/users/recent")
async def recent_users(db: AsyncSession = Depends(get_db)):
    return success_response(data=await latest(db, User, User.created_at, RecentUser))


@router.get("/meetings/recent")
async def recent_meetings(db: AsyncSession = Depends(get_db)):
    return success_response(data=await latest(db, Meeting, Meeting.created_at, RecentMeeting))


@router.get("/notifications/recent")
async def recent_notifications(db: AsyncSession = Depends(get_db)):
    return success_response(
        data=await latest(db, Notification, Notification.created_at, RecentNotification)
    )


@router.get("/meetings/overview")
async def meetings_overview(db: AsyncSession = Depends(get_db)):
    by_status = await count_by(db, Meeting.status, MeetingStatus)
    return success_response(data=MeetingCounts(total=sum(by_status.values()), **by_status))


@router.get("/notifications/overview")
async def notifications_overview(db: AsyncSession = Depends(get_db)):
    by_status = await count_by(db, Notification.status, NotificationStatus)
    by_type = await count_by(db, Notification.type, NotificationType)
    return success_response(
        data=NotificationCounts(total=sum(by_status.values()), **by_status, **by_type)
    )


@router.get("/system/stats")
async def system_stats(db: AsyncSession = Depends(get_db)):
    """Server and database clocks plus the number of tables in the schema"""
    db_time = await db.scalar(select(func.current_timestamp()))
    connection = await db.connection()
    tables_count = await connection.run_sync(lambda conn: len(inspect(conn).get_table_names()))

    return success_response(data=SystemStats(
        server_time=datetime.utcnow(),
        db_time=db_time,
        tables_count=tables_count,
        environment=settings.ENVIRONMENT,
        version=settings.APP_VERSION,
    ))
