from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError

from app.core.database import get_db
from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidCredentialsError,
    NoUpdatesError,
)
from app.core.security import verify_password, get_password_hash, create_user_token
from app.core.logging_config import logger, set_user_id
from app.models.user import User, UserRole
from app.schemas.auth import (
    UserRegister,
    UserLogin,
    ProfileUpdate,
    PasswordChange,
    UserResponse,
    LoginResponse,
)
from app.modules.auth.dependencies import get_current_user
from app.utils.responses import success_response
from app.utils.validation import parse_choice

router = APIRouter()

PROFILE_FIELDS = ["first_name", "last_name", "email", "phone"]


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a new user"""
    client_ip = request.client.host if request.client else "unknown"
    user_role = parse_choice(UserRole, user_data.role or UserRole.STUDENT.value, "role")
    email = user_data.email.lower()

    result = await db.execute(
        select(User).where(or_(
            User.computer_number == user_data.computer_number,
            User.email == email
        ))
    )
    existing_user = result.scalars().first()

    if existing_user:
        if existing_user.computer_number == user_data.computer_number:
            reason, field = "Computer number already exists", "computer_number"
        else:
            reason, field = "Email address already exists", "email"
        logger.log_auth_event(
            event="register",
            success=False,
            computer_number=user_data.computer_number,
            reason=reason,
            client_ip=client_ip
        )
        raise ConflictError(reason, code="USER_EXISTS", field=field)

    user = User(
        computer_number=user_data.computer_number,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        email=email,
        phone=user_data.phone,
        role=user_role,
        password_hash=get_password_hash(user_data.password),
    )

    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration
        await db.rollback()
        raise ConflictError("User already exists", code="USER_EXISTS")
    await db.refresh(user)

    logger.log_auth_event(
        event="register",
        success=True,
        computer_number=user.computer_number,
        client_ip=client_ip,
        user_role=user_role.value
    )

    return success_response(
        data=UserResponse.model_validate(user),
        message="User registered successfully"
    )


@router.post("/login")
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Exchange computer number and password for a bearer token"""
    client_ip = request.client.host if request.client else "unknown"

    user = await db.get(User, credentials.computer_number)

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.log_auth_event(
            event="login",
            success=False,
            computer_number=credentials.computer_number,
            reason="Invalid credentials",
            client_ip=client_ip
        )
        raise InvalidCredentialsError()

    token = create_user_token(user.computer_number, user.role.value, user.email)
    set_user_id(user.computer_number)

    logger.log_auth_event(
        event="login",
        success=True,
        computer_number=user.computer_number,
        client_ip=client_ip
    )

    return success_response(
        data=LoginResponse(
            user=UserResponse.model_validate(user),
            token=token,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        ),
        message="Login successful"
    )


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return success_response(data=UserResponse.model_validate(current_user))


@router.put("/profile")
async def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update name, email or phone of the current user"""
    updates = profile.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise NoUpdatesError(PROFILE_FIELDS)

    if "email" in updates:
        updates["email"] = updates["email"].lower()
        taken = await db.scalar(
            select(User.computer_number).where(
                User.email == updates["email"],
                User.computer_number != current_user.computer_number
            )
        )
        if taken:
            raise ConflictError("Email address already in use", code="EMAIL_EXISTS", field="email")

    for field, value in updates.items():
        setattr(current_user, field, value.strip() if field in ("first_name", "last_name") else value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email address already in use", code="EMAIL_EXISTS", field="email")
    await db.refresh(current_user)

    return success_response(
        data=UserResponse.model_validate(current_user),
        message="Profile updated successfully"
    )


@router.post("/change-password")
async def change_password(
    passwords: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    if not verify_password(passwords.current_password, current_user.password_hash):
        logger.log_auth_event(
            event="change_password",
            success=False,
            computer_number=current_user.computer_number,
            reason="Wrong current password"
        )
        raise AuthenticationError("Current password is incorrect", code="INVALID_PASSWORD")

    current_user.password_hash = get_password_hash(passwords.new_password)
    await db.commit()

    logger.log_auth_event(
        event="change_password",
        success=True,
        computer_number=current_user.computer_number
    )

    return success_response(message="Password changed successfully")
