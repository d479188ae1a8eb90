"""
Meeting endpoints.

A meeting is visible to its organizer, its participant and admins. The
participant (or an admin) answers it by changing the status; the organizer
(or an admin) may delete it.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from sqlalchemy.orm import selectinload
from datetime import datetime, timezone
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import (
    AuthorizationError,
    MeetingNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.models import Meeting, MeetingStatus, User
from app.modules.auth.dependencies import get_current_user, is_admin
from app.schemas.meeting import MeetingCreate, MeetingResponse, MeetingStatusUpdate
from app.utils.pagination import PaginationParams, paginate
from app.utils.responses import success_response
from app.utils.validation import parse_choice, require_fields

router = APIRouter()


def to_utc_naive(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_meeting_status(value) -> MeetingStatus:
    return parse_choice(MeetingStatus, value, "status", plural="statuses")


def with_parties(query):
    return query.options(
        selectinload(Meeting.organizer),
        selectinload(Meeting.participant),
    ).execution_options(populate_existing=True)


async def load_meeting(db: AsyncSession, meeting_id: int) -> Meeting:
    result = await db.execute(with_parties(select(Meeting).where(Meeting.meeting_id == meeting_id)))
    meeting = result.scalar_one_or_none()
    if not meeting:
        raise MeetingNotFoundError(meeting_id)
    return meeting


async def get_meeting_for(db: AsyncSession, meeting_id: int, user: User) -> Meeting:
    """Load a meeting the caller is allowed to see"""
    meeting = await load_meeting(db, meeting_id)
    if not is_admin(user) and not meeting.involves(user.computer_number):
        raise AuthorizationError("You do not have access to this meeting")
    return meeting


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_meeting(
    payload: MeetingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Schedule a meeting organized by the caller"""
    require_fields({
        "title": payload.title,
        "participant_computer_number": payload.participant_computer_number,
        "scheduled_at": payload.scheduled_at,
    })

    if payload.participant_computer_number == current_user.computer_number:
        raise ValidationError(
            "You cannot schedule a meeting with yourself",
            field="participant_computer_number",
            code="INVALID_PARTICIPANT"
        )

    scheduled_at = to_utc_naive(payload.scheduled_at)
    if scheduled_at <= datetime.utcnow():
        raise ValidationError(
            "Meeting must be scheduled in the future",
            field="scheduled_at",
            code="INVALID_SCHEDULE"
        )

    participant = await db.get(User, payload.participant_computer_number)
    if not participant:
        raise UserNotFoundError(payload.participant_computer_number)

    meeting = Meeting(
        title=payload.title.strip(),
        description=payload.description,
        organizer_computer_number=current_user.computer_number,
        participant_computer_number=participant.computer_number,
        scheduled_at=scheduled_at,
        status=MeetingStatus.PENDING,
    )
    db.add(meeting)
    await db.commit()

    meeting = await load_meeting(db, meeting.meeting_id)
    logger.info(
        f"Meeting {meeting.meeting_id} scheduled by {current_user.computer_number} "
        f"with {participant.computer_number}",
        extra={"event_type": "meeting_created", "meeting_id": meeting.meeting_id}
    )

    return success_response(
        data=MeetingResponse.model_validate(meeting),
        message="Meeting scheduled successfully"
    )


@router.get("")
async def list_meetings(
    pagination: PaginationParams = Depends(),
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Meetings the caller organizes or attends, latest scheduled first"""
    conditions = [or_(
        Meeting.organizer_computer_number == current_user.computer_number,
        Meeting.participant_computer_number == current_user.computer_number,
    )]
    if status:
        conditions.append(Meeting.status == parse_meeting_status(status))

    query = with_parties(
        select(Meeting).where(*conditions).order_by(Meeting.scheduled_at.desc(), Meeting.meeting_id.desc())
    )
    count_query = select(func.count(Meeting.meeting_id)).where(*conditions)

    meetings, page_info = await paginate(db, query, pagination, count_query=count_query)

    return success_response(
        data=[MeetingResponse.model_validate(m) for m in meetings],
        pagination=page_info,
        filters={"status": status}
    )


@router.get("/{meeting_id}")
async def get_meeting(
    meeting_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    meeting = await get_meeting_for(db, meeting_id, current_user)
    return success_response(data=MeetingResponse.model_validate(meeting))


@router.put("/{meeting_id}")
async def update_meeting_status(
    meeting_id: int,
    update: MeetingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Confirm or cancel a meeting. Only the participant or an admin may answer."""
    meeting = await get_meeting_for(db, meeting_id, current_user)

    if not is_admin(current_user) and meeting.participant_computer_number != current_user.computer_number:
        raise AuthorizationError("Only the participant can update the meeting status")

    new_status = parse_meeting_status(update.status)

    meeting.status = new_status
    meeting.updated_at = datetime.utcnow()
    await db.commit()

    meeting = await load_meeting(db, meeting_id)
    return success_response(
        data=MeetingResponse.model_validate(meeting),
        message="Meeting status updated successfully"
    )


@router.delete("/{meeting_id}")
async def delete_meeting(
    meeting_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    meeting = await get_meeting_for(db, meeting_id, current_user)

    if not is_admin(current_user) and meeting.organizer_computer_number != current_user.computer_number:
        raise AuthorizationError("Only the organizer can delete this meeting")

    await db.delete(meeting)
    await db.commit()

    return success_response(message="Meeting deleted successfully")
