from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Callable, Optional

from app.core.database import get_db
from app.core.exceptions import (
    AuthenticationError,
    ComplaintSystemError,
    InsufficientPermissionsError,
    TokenRequiredError,
)
from app.core.logging_config import logger, set_user_id
from app.core.security import decode_token
from app.models.user import User, UserRole

# auto_error=False so a missing header becomes our 401 TOKEN_REQUIRED envelope
security = HTTPBearer(auto_error=False)


async def _resolve_user(token: str, request: Request, db: AsyncSession) -> User:
    try:
        payload = decode_token(token)
    except ComplaintSystemError as e:
        logger.log_auth_event("token", success=False, reason=e.code, path=request.url.path)
        raise

    computer_number = payload.get("sub")
    if not computer_number:
        raise AuthenticationError("Invalid token payload", code="INVALID_TOKEN")

    user = await db.get(User, computer_number)
    if not user:
        logger.log_auth_event("token", success=False, computer_number=computer_number,
                              reason="USER_NOT_FOUND")
        raise AuthenticationError("User not found", code="USER_NOT_FOUND")

    set_user_id(user.computer_number)
    request.state.user = user
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if not credentials or not credentials.credentials:
        raise TokenRequiredError()
    return await _resolve_user(credentials.credentials, request, db)


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """
    Current user when a bearer token is sent, None otherwise.
    A token that is sent but invalid is still rejected.
    """
    if not credentials or not credentials.credentials:
        return None
    return await _resolve_user(credentials.credentials, request, db)


def require_roles(*roles: UserRole) -> Callable:
    """
    Dependency factory restricting a route to the given roles.

    Usage:
        @router.get("/stats", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """
    allowed = set(roles)

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise InsufficientPermissionsError(
                user_role=current_user.role.value,
                required_roles=[role.value for role in roles]
            )
        return current_user

    return role_checker


get_current_admin = require_roles(UserRole.ADMIN)


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == UserRole.ADMIN
