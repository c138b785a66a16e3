"""Shared fixtures: an isolated app per test backed by a temporary SQLite file"""

from datetime import timedelta
from typing import Any, Dict, List, Optional
import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from rewardbin.core.config import Settings
from rewardbin.core.security import SecurityUtils
from rewardbin.main import create_app
from rewardbin.models import (
    Bin,
    Coupon,
    CouponType,
    DealType,
    Material,
    Organization,
    RecordStatus,
    RewardRule,
    Store,
    User,
    UserRole,
    UserSession,
    UserStatus,
    UserTotalPoint,
)
from rewardbin.utils.helpers import utcnow


class FakeEmailService:
    """Records outgoing mail instead of talking to SMTP"""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []

    @property
    def configured(self) -> bool:
        return True

    async def send_welcome_email(self, user_email: str, user_name: str) -> bool:
        self.sent.append({"kind": "welcome", "to": user_email, "name": user_name})
        return True

    async def send_reset_password_email(self, user_email: str, user_name: str, token: str) -> bool:
        self.sent.append({"kind": "reset", "to": user_email, "name": user_name, "token": token})
        return True


class FakeStorageService:
    """Pretends to host images"""

    def __init__(self):
        self.uploaded: List[str] = []
        self.deleted: List[str] = []

    async def upload_image(self, data: str, public_id: str, folder: Optional[str] = None) -> Dict[str, Any]:
        self.uploaded.append(public_id)
        return {"url": f"https://images.test/{public_id}.png", "public_id": public_id}

    async def delete_image(self, public_id: str, folder: Optional[str] = None) -> None:
        self.deleted.append(public_id)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        SECRET_KEY="test-secret-key-with-enough-entropy",
        DATABASE_URL=f"sqlite:///{tmp_path}/test.db",
        ENVIRONMENT="test",
        ALLOWED_HOSTS=["*"],
        RATE_LIMIT_ENABLED=False,
        AUTO_CREATE_TABLES=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
async def app(settings):
    application = create_app(settings)
    application.state.email_service = FakeEmailService()
    application.state.storage_service = FakeStorageService()
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest.fixture
def database(app):
    return app.state.database


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class Seed:
    """Writes fixture rows through short-lived committed sessions"""

    def __init__(self, database):
        self.database = database

    async def add(self, instance):
        async with self.database.session() as session:
            session.add(instance)
        return instance

    async def user(
        self,
        role: UserRole = UserRole.USER,
        status: UserStatus = UserStatus.ACTIVE,
        password: Optional[str] = None,
        name: str = "Test User",
    ) -> User:
        return await self.add(User(
            name=name,
            email=f"{uuid.uuid4().hex[:10]}@example.com",
            role=role,
            status=status,
            password_hash=SecurityUtils.hash_password(password) if password else None,
        ))

    async def session_token(self, user: User, expires_in: timedelta = timedelta(days=1)) -> str:
        token = SecurityUtils.generate_session_token()
        await self.add(UserSession(token=token, user_id=user.id, expires_at=utcnow() + expires_in))
        return token

    async def auth_headers(self, role: UserRole = UserRole.USER) -> Dict[str, str]:
        user = await self.user(role=role)
        return {"Authorization": f"Bearer {await self.session_token(user)}"}

    async def points(self, user: User, total_points: int) -> UserTotalPoint:
        return await self.add(UserTotalPoint(user_id=user.id, total_points=total_points))

    async def organization(self, name: str = "Green Co") -> Organization:
        return await self.add(Organization(name=name, slug=f"green-{uuid.uuid4().hex[:8]}"))

    async def store(
        self,
        lat: float = 13.0827,
        lng: float = 80.2707,
        status: RecordStatus = RecordStatus.ACTIVE,
        organization: Optional[Organization] = None,
        name: str = "Main Street Store",
    ) -> Store:
        return await self.add(Store(
            organization_id=organization.id if organization else None,
            name=name,
            address1="12 Main Street",
            city="Chennai",
            state="Tamil Nadu",
            zip="60000",
            country="India",
            lat=lat,
            lng=lng,
            status=status,
        ))

    async def reward_rule(self, point: int = 10, unit: float = 1, unit_type: str = "bottle") -> RewardRule:
        return await self.add(RewardRule(name="Per bottle", point=point, unit=unit, unit_type=unit_type))

    async def material(self, reward_rule: RewardRule, name: str = "Plastic") -> Material:
        return await self.add(Material(name=name, reward_rule_id=reward_rule.id))

    async def bin(
        self,
        store: Optional[Store] = None,
        material: Optional[Material] = None,
        status: RecordStatus = RecordStatus.ACTIVE,
    ) -> Bin:
        store = store or await self.store()
        material = material or await self.material(await self.reward_rule())
        return await self.add(Bin(number="BIN-001", store_id=store.id, material_id=material.id, status=status))

    async def coupon(
        self,
        points_to_redeem: int = 100,
        deal_type: DealType = DealType.POINTS,
        status: RecordStatus = RecordStatus.ACTIVE,
        start_offset: timedelta = timedelta(days=-1),
        end_offset: timedelta = timedelta(days=30),
        organization: Optional[Organization] = None,
        name: str = "Free Coffee",
    ) -> Coupon:
        now = utcnow()
        return await self.add(Coupon(
            organization_id=organization.id if organization else None,
            name=name,
            coupon_type=CouponType.FIXED,
            deal_type=deal_type,
            discount_amount=5,
            points_to_redeem=points_to_redeem,
            status=status,
            start_date=now + start_offset,
            end_date=now + end_offset,
        ))

    async def count(self, model, *conditions) -> int:
        async with self.database.session_factory() as session:
            query = select(func.count()).select_from(model)
            if conditions:
                query = query.where(*conditions)
            return await session.scalar(query)

    async def balance(self, user: User) -> Optional[int]:
        async with self.database.session_factory() as session:
            return await session.scalar(
                select(UserTotalPoint.total_points).where(UserTotalPoint.user_id == user.id)
            )


@pytest.fixture
def seed(database) -> Seed:
    return Seed(database)


@pytest.fixture
async def db(database):
    async with database.session_factory() as session:
        yield session
