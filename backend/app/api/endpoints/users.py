"""
User management endpoints.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, and_
from datetime import datetime, timedelta
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import AuthorizationError, SelfProtectionError, UserNotFoundError
from app.core.logging_config import logger
from app.models.user import User, UserRole
from app.modules.auth.dependencies import get_current_admin, get_current_user, is_admin
from app.schemas.auth import UserResponse
from app.schemas.user import RoleUpdate
from app.services.statistics import count_by, count_rows, daily_trend
from app.utils.pagination import PaginationParams, enum_order, paginate
from app.utils.responses import success_response
from app.utils.validation import parse_choice

router = APIRouter()

SORT_COLUMNS = {
    "created_at": User.created_at,
    "first_name": User.first_name,
    "last_name": User.last_name,
    "role": enum_order(User.role, UserRole),
    "computer_number": User.computer_number,
}


async def get_user_or_404(db: AsyncSession, computer_number: str) -> User:
    user = await db.get(User, computer_number)
    if not user:
        raise UserNotFoundError(computer_number)
    return user


@router.get("")
async def list_users(
    pagination: PaginationParams = Depends(),
    role: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = Query("created_at", pattern="^(created_at|first_name|last_name|role|computer_number)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc|ASC|DESC)$"),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """List all users with filtering, sorting, and pagination"""
    query = select(User)

    conditions = []
    if role:
        conditions.append(User.role == parse_choice(UserRole, role, "role"))

    if search:
        search_term = f"%{search}%"
        conditions.append(or_(
            User.first_name.ilike(search_term),
            User.last_name.ilike(search_term),
            User.email.ilike(search_term),
            User.computer_number.ilike(search_term)
        ))

    if conditions:
        query = query.where(and_(*conditions))

    sort_column = SORT_COLUMNS[sort_by]
    if sort_order.lower() == "desc":
        query = query.order_by(sort_column.desc())
    else:
        query = query.order_by(sort_column.asc())

    users, page_info = await paginate(db, query, pagination)

    return success_response(
        data=[UserResponse.model_validate(u) for u in users],
        pagination=page_info,
        filters={"role": role, "search": search, "sort_by": sort_by, "sort_order": sort_order.lower()}
    )


# Registered before /{computer_number} so "stats" is not taken for a computer number
@router.get("/stats/overview")
async def user_stats(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Totals by role, recent registrations and a 30-day registration trend"""
    now = datetime.utcnow()
    by_role = await count_by(db, User.role, UserRole)

    overview = {
        "total_users": sum(by_role.values()),
        "students": by_role[UserRole.STUDENT.value],
        "lecturers": by_role[UserRole.LECTURER.value],
        "admins": by_role[UserRole.ADMIN.value],
        "new_this_month": await count_rows(db, User, User.created_at >= now - timedelta(days=30)),
        "new_this_week": await count_rows(db, User, User.created_at >= now - timedelta(days=7)),
    }
    trends = await daily_trend(db, User.created_at, group_column=User.role, now=now)

    return success_response(data={"overview": overview, "trends": trends})


@router.get("/{computer_number}")
async def get_user(
    computer_number: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Admins can read anyone, other users only themselves"""
    if not is_admin(current_user) and current_user.computer_number != computer_number:
        raise AuthorizationError("You can only view your own profile")

    user = await get_user_or_404(db, computer_number)
    return success_response(data=UserResponse.model_validate(user))


@router.put("/{computer_number}/role")
async def update_user_role(
    computer_number: str,
    role_update: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    new_role = parse_choice(UserRole, role_update.role, "role")
    user = await get_user_or_404(db, computer_number)

    if user.computer_number == current_admin.computer_number and new_role != UserRole.ADMIN:
        raise SelfProtectionError("You cannot remove your own admin role", code="CANNOT_DEMOTE_SELF")

    old_role = user.role
    user.role = new_role
    await db.commit()
    await db.refresh(user)

    logger.log_admin_action(
        current_admin.computer_number, "update_role", "user", computer_number,
        old_role=old_role.value, new_role=new_role.value
    )

    return success_response(
        data=UserResponse.model_validate(user),
        message="User role updated successfully"
    )


@router.delete("/{computer_number}")
async def delete_user(
    computer_number: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    if computer_number == current_admin.computer_number:
        raise SelfProtectionError("You cannot delete your own account", code="CANNOT_DELETE_SELF")

    user = await get_user_or_404(db, computer_number)
    await db.delete(user)
    await db.commit()

    logger.log_admin_action(current_admin.computer_number, "delete", "user", computer_number)

    return success_response(message="User deleted successfully")
