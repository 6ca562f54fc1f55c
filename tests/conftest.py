"""Test fixtures and configuration."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from jurist.lifecycle.engine import RequestLifecycle
from jurist.models import AdminUser, Base, LawyerProfile, Request
from jurist.models.enums import AdminRole, LawyerStatus, LawyerType, RequestStatus
from jurist.moderation.engine import ModerationEngine
from jurist.storage.documents import DocumentStore

# Valid national IDs (first-pass checksum)
IIN_A = "880515300120"
IIN_B = "900101300007"
IIN_C = "950101400002"

FIXED_NOW = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)

VALID_DESCRIPTION = (
    "Нужна консультация по трудовому спору с работодателем о невыплате зарплаты."
)


class FakeClock:
    """Mutable clock for lifecycle and moderation engines."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
async def db_engine(tmp_path):
    """File-backed SQLite so separate sessions use separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_redis():
    """Mock Redis client."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.setex = AsyncMock()
    redis.delete = AsyncMock()
    redis.lpush = AsyncMock(return_value=1)
    redis.brpop = AsyncMock(return_value=None)
    return redis


@pytest.fixture
def notifier():
    """Stand-in for NotificationDispatcher; every method is an AsyncMock."""
    return AsyncMock()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.put_object = MagicMock(return_value={})
    client.delete_object = MagicMock(return_value={})
    return client


@pytest.fixture
def document_store(s3_client):
    return DocumentStore(
        s3_client,
        bucket="documents",
        public_base_url="https://cdn.test/documents",
        max_bytes=1024,
    )


@pytest.fixture
def lifecycle(db, notifier, clock):
    return RequestLifecycle(db, notifier, clock=clock)


@pytest.fixture
def moderation(db, notifier, document_store, clock):
    return ModerationEngine(db, notifier, document_store, clock=clock)


async def create_lawyer(
    db: AsyncSession,
    status: LawyerStatus = LawyerStatus.APPROVED,
    email: str | None = None,
    national_id: str = IIN_A,
    rejection_reason: str | None = None,
) -> LawyerProfile:
    suffix = uuid.uuid4().hex[:8]
    profile = LawyerProfile(
        external_id=f"ext-{suffix}",
        email=email or f"lawyer-{suffix}@example.kz",
        national_id=national_id,
        lawyer_type=LawyerType.ADVOCATE.value,
        full_name="Айгерим Сапарова",
        phone="+77011234567",
        photo_url="https://cdn.test/documents/photos/old.jpg",
        diploma_url="https://cdn.test/documents/diplomas/old.pdf",
        license_url="https://cdn.test/documents/licenses/old.pdf",
        status=status.value,
        rejection_reason=rejection_reason,
    )
    db.add(profile)
    await db.commit()
    return profile


async def create_request(
    db: AsyncSession,
    number: str = "REQ-20260310-0001",
    status: RequestStatus = RequestStatus.NEW,
    assigned_to: uuid.UUID | None = None,
    created_at: datetime = FIXED_NOW,
) -> Request:
    request = Request(
        request_number=number,
        description=VALID_DESCRIPTION,
        budget=Decimal("50000"),
        currency="KZT",
        contact_name="Ерлан",
        phone="+77017654321",
        email="client@example.kz",
        preferred_contact="ANY",
        ip_address="10.0.0.1",
        status=status.value,
        assigned_lawyer_id=assigned_to,
        assigned_at=created_at if assigned_to else None,
        created_at=created_at,
        updated_at=created_at,
    )
    db.add(request)
    await db.commit()
    return request


@pytest.fixture
async def approved_lawyer(db):
    return await create_lawyer(db, LawyerStatus.APPROVED, national_id=IIN_A)


@pytest.fixture
async def pending_lawyer(db):
    return await create_lawyer(db, LawyerStatus.PENDING, national_id=IIN_B)


@pytest.fixture
async def admin_user(db):
    admin = AdminUser(
        email="admin@jurist.kz",
        full_name="System Administrator",
        role=AdminRole.SUPER_ADMIN.value,
        is_active=True,
    )
    db.add(admin)
    await db.commit()
    return admin


@pytest.fixture
async def new_request(db):
    return await create_request(db)


@pytest.fixture
def request_form():
    return {
        "description": VALID_DESCRIPTION,
        "budget": "50000",
        "contact_name": "Ерлан",
        "phone": "+77017654321",
        "email": "client@example.kz",
    }
