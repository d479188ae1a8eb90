"""
Complaint endpoints.

Anyone may file an anonymous complaint; everything else needs a token.
Admins see and manage every complaint, other users only their own.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from datetime import datetime
from typing import Optional
import re

from app.core.database import get_db
from app.core.exceptions import (
    AuthorizationError,
    ComplaintNotFoundError,
    NoUpdatesError,
    TokenRequiredError,
    UserNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.models import (
    CATEGORY_DETAILS,
    Complaint,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    User,
)
from app.modules.auth.dependencies import (
    get_current_admin,
    get_current_user,
    get_optional_user,
    is_admin,
)
from app.schemas.complaint import (
    CategoryInfo,
    ComplaintCreate,
    ComplaintCreated,
    ComplaintDetail,
    ComplaintSummary,
    ComplaintUpdate,
)
from app.services.statistics import count_by, daily_trend
from app.utils.pagination import PaginationParams, enum_order, paginate
from app.utils.responses import success_response
from app.utils.validation import parse_choice, require_fields

router = APIRouter()

COMPUTER_NUMBER_RE = re.compile(r"^\d{10}$")
VALID_CATEGORIES = [c.value for c in ComplaintCategory]
UPDATE_FIELDS = ["status", "priority", "admin_response", "admin_notes"]

SORT_COLUMNS = {
    "created_at": Complaint.created_at,
    "updated_at": Complaint.updated_at,
    "priority": enum_order(Complaint.priority, ComplaintPriority),
    "status": enum_order(Complaint.status, ComplaintStatus),
    "category": enum_order(Complaint.category, ComplaintCategory),
}


def parse_category(value) -> ComplaintCategory:
    return parse_choice(ComplaintCategory, value, "category", plural="categories")


def parse_priority(value) -> ComplaintPriority:
    return parse_choice(ComplaintPriority, value, "priority", plural="priorities")


def parse_status(value) -> ComplaintStatus:
    return parse_choice(ComplaintStatus, value, "status", plural="statuses")


async def resolve_submitter(
    db: AsyncSession,
    payload: ComplaintCreate,
    current_user: Optional[User]
) -> Optional[str]:
    """Computer number a non-anonymous complaint is filed under"""
    if current_user is None:
        raise TokenRequiredError()

    requested = (payload.computer_number or "").strip()
    if not requested or requested == current_user.computer_number:
        return current_user.computer_number

    if not COMPUTER_NUMBER_RE.match(requested):
        raise ValidationError("Computer number must be exactly 10 digits", field="computer_number")
    if not is_admin(current_user):
        raise AuthorizationError("You can only file complaints under your own computer number")
    if not await db.get(User, requested):
        raise UserNotFoundError(requested)
    return requested


async def get_complaint_for(db: AsyncSession, complaint_id: int, user: User) -> Complaint:
    complaint = await db.get(Complaint, complaint_id)
    if not complaint:
        raise ComplaintNotFoundError(complaint_id)
    if not is_admin(user) and complaint.computer_number != user.computer_number:
        raise AuthorizationError("You can only view your own complaints")
    return complaint


@router.get("/categories")
async def list_categories():
    categories = [
        CategoryInfo(value=category.value, label=label, description=description)
        for category, (label, description) in CATEGORY_DETAILS.items()
    ]
    return success_response(data=categories)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_complaint(
    payload: ComplaintCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user)
):
    """Submit a complaint, anonymously or under the caller's computer number"""
    require_fields(
        {
            "title": payload.title,
            "description": payload.description,
            "category": payload.category,
        },
        extra_details=None if payload.category else {"valid_categories": VALID_CATEGORIES}
    )
    category = parse_category(payload.category)
    priority = parse_priority(payload.priority) if payload.priority else ComplaintPriority.MEDIUM

    submitter = None if payload.anonymous else await resolve_submitter(db, payload, current_user)

    complaint = Complaint(
        computer_number=submitter,
        title=payload.title.strip(),
        description=payload.description.strip(),
        category=category,
        priority=priority,
        status=ComplaintStatus.PENDING,
        contact_phone=payload.contact_phone,
        contact_email=payload.contact_email,
        anonymous=payload.anonymous,
    )
    db.add(complaint)
    await db.commit()
    await db.refresh(complaint)

    logger.info(
        f"Complaint {complaint.complaint_id} submitted ({category.value}, {priority.value})",
        extra={
            "event_type": "complaint_created",
            "complaint_id": complaint.complaint_id,
            "anonymous": complaint.anonymous,
        }
    )

    return success_response(
        data=ComplaintCreated.model_validate(complaint),
        message="Complaint submitted successfully"
    )


@router.get("")
async def list_complaints(
    pagination: PaginationParams = Depends(),
    status: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[str] = None,
    computer_number: Optional[str] = None,
    sort_by: str = Query("created_at", pattern="^(created_at|updated_at|priority|status|category)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc|ASC|DESC)$"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List complaints. Non-admins only ever see their own."""
    conditions = []
    if status:
        conditions.append(Complaint.status == parse_status(status))
    if category:
        conditions.append(Complaint.category == parse_category(category))
    if priority:
        conditions.append(Complaint.priority == parse_priority(priority))

    if is_admin(current_user):
        if computer_number:
            conditions.append(Complaint.computer_number == computer_number)
    else:
        conditions.append(Complaint.computer_number == current_user.computer_number)

    query = select(Complaint)
    if conditions:
        query = query.where(and_(*conditions))

    sort_column = SORT_COLUMNS[sort_by]
    if sort_order.lower() == "desc":
        query = query.order_by(sort_column.desc(), Complaint.complaint_id.desc())
    else:
        query = query.order_by(sort_column.asc(), Complaint.complaint_id.asc())

    complaints, page_info = await paginate(db, query, pagination)

    return success_response(
        data=[ComplaintSummary.model_validate(c) for c in complaints],
        pagination=page_info,
        filters={
            "status": status,
            "category": category,
            "priority": priority,
            "computer_number": computer_number if is_admin(current_user) else current_user.computer_number,
        }
    )


@router.get("/admin/stats")
async def complaint_stats(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Counts by status and priority, per-category breakdown and a 30-day trend"""
    by_status = await count_by(db, Complaint.status, ComplaintStatus)
    by_priority = await count_by(db, Complaint.priority, ComplaintPriority)
    by_category = await count_by(db, Complaint.category, ComplaintCategory)
    resolved_by_category = await count_by(
        db, Complaint.category, ComplaintCategory,
        Complaint.status == ComplaintStatus.RESOLVED
    )

    overview = {"total": sum(by_status.values()), **by_status}
    overview.update({f"{name}_priority": count for name, count in by_priority.items()})

    categories = sorted(
        (
            {"category": name, "count": count, "resolved_count": resolved_by_category[name]}
            for name, count in by_category.items()
            if count
        ),
        key=lambda item: item["count"],
        reverse=True
    )

    return success_response(data={
        "overview": overview,
        "categories": categories,
        "trends": await daily_trend(db, Complaint.created_at),
    })


@router.get("/{complaint_id}")
async def get_complaint(
    complaint_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    complaint = await get_complaint_for(db, complaint_id, current_user)
    return success_response(data=ComplaintDetail.model_validate(complaint))


@router.put("/{complaint_id}")
async def update_complaint(
    complaint_id: int,
    update: ComplaintUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Change status or priority and record the admin's response"""
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise NoUpdatesError(UPDATE_FIELDS)

    # Validate everything before touching the row
    new_status = parse_status(changes["status"]) if "status" in changes else None
    new_priority = parse_priority(changes["priority"]) if "priority" in changes else None

    complaint = await db.get(Complaint, complaint_id)
    if not complaint:
        raise ComplaintNotFoundError(complaint_id)

    now = datetime.utcnow()
    if new_status is not None:
        if new_status == ComplaintStatus.RESOLVED and complaint.status != ComplaintStatus.RESOLVED:
            complaint.resolved_at = now
        complaint.status = new_status
    if new_priority is not None:
        complaint.priority = new_priority
    if "admin_response" in changes:
        complaint.admin_response = changes["admin_response"]
    if "admin_notes" in changes:
        complaint.admin_notes = changes["admin_notes"]
    complaint.updated_at = now

    await db.commit()
    await db.refresh(complaint)

    logger.log_admin_action(
        current_admin.computer_number, "update", "complaint", str(complaint_id),
        changes=sorted(changes)
    )

    return success_response(
        data=ComplaintDetail.model_validate(complaint),
        message="Complaint updated successfully"
    )
