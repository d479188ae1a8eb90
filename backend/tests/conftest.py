"""
Campus Complaint System - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta
from typing import AsyncGenerator, Callable, Dict
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''
os.environ['BCRYPT_ROUNDS'] = '4'

from app.main import app
from app.core.database import Base, get_db
from app.core.security import get_password_hash, create_user_token
from app.models import Complaint, ComplaintCategory, ComplaintPriority, Meeting, User, UserRole

fake = Faker()

TEST_PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


def bearer(user: User) -> Dict[str, str]:
    token = create_user_token(user.computer_number, user.role.value, user.email)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """Factory creating a persisted user with the given role"""
    async def _make_user(role: UserRole = UserRole.STUDENT, **overrides) -> User:
        user = User(
            computer_number=overrides.pop('computer_number', fake.unique.numerify('20########')),
            email=overrides.pop('email', fake.unique.email()),
            first_name=overrides.pop('first_name', fake.first_name()),
            last_name=overrides.pop('last_name', fake.last_name()),
            password_hash=get_password_hash(overrides.pop('password', TEST_PASSWORD)),
            role=role,
            **overrides
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
async def test_user(make_user) -> User:
    """Create a student test user"""
    return await make_user(UserRole.STUDENT)


@pytest.fixture
async def other_user(make_user) -> User:
    """A second student, for ownership checks"""
    return await make_user(UserRole.STUDENT)


@pytest.fixture
async def lecturer_user(make_user) -> User:
    return await make_user(UserRole.LECTURER)


@pytest.fixture
async def admin_user(make_user) -> User:
    """Create an admin test user"""
    return await make_user(UserRole.ADMIN)


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate authentication headers for test user"""
    return bearer(test_user)


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return bearer(other_user)


@pytest.fixture
def lecturer_auth_headers(lecturer_user: User) -> dict:
    return bearer(lecturer_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    """Generate authentication headers for admin user"""
    return bearer(admin_user)


@pytest.fixture
def make_complaint(db_session: AsyncSession) -> Callable:
    """Factory creating a persisted complaint"""
    async def _make_complaint(owner: User = None, **overrides) -> Complaint:
        complaint = Complaint(
            computer_number=owner.computer_number if owner else None,
            title=overrides.pop('title', fake.sentence(nb_words=5)),
            description=overrides.pop('description', fake.paragraph()),
            category=overrides.pop('category', ComplaintCategory.FACILITIES),
            priority=overrides.pop('priority', ComplaintPriority.MEDIUM),
            anonymous=owner is None,
            **overrides
        )
        db_session.add(complaint)
        await db_session.commit()
        await db_session.refresh(complaint)
        return complaint

    return _make_complaint


@pytest.fixture
def make_meeting(db_session: AsyncSession) -> Callable:
    """Factory creating a persisted meeting between two users"""
    async def _make_meeting(organizer: User, participant: User, **overrides) -> Meeting:
        meeting = Meeting(
            organizer_computer_number=organizer.computer_number,
            participant_computer_number=participant.computer_number,
            title=overrides.pop('title', fake.sentence(nb_words=4)),
            scheduled_at=overrides.pop('scheduled_at', datetime.utcnow() + timedelta(days=2)),
            **overrides
        )
        db_session.add(meeting)
        await db_session.commit()
        await db_session.refresh(meeting)
        return meeting

    return _make_meeting
