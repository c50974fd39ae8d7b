import os

# Settings are read at import time, so the environment is prepared first
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test-bootstrap.db")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "100000")
os.environ.setdefault("RATE_LIMIT_LOGIN_PER_MINUTE", "100000")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_CONNECT_CLIENT_ID", "ca_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test")
os.environ.setdefault("SEED_TOKEN", "test-seed-token")
for key in ("B2_APPLICATION_KEY_ID", "B2_APPLICATION_KEY", "SMTP_HOST"):
    os.environ.pop(key, None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from app import models  # noqa: F401
from app.core.db import Base, get_db
from app.core.security import create_access_token, get_password_hash
from app.main import app
from app.modules.auth.models import User, UserRole, UserStatus, KYCStatus
from app.modules.subscriptions.models import Subscription, SubscriptionStatus, SubscriptionTier

PASSWORD = "password123"


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture()
def Session(db_path):
    """Sync sessions for arranging rows and asserting on them."""
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture()
def client(db_path, Session):
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    TestingSession = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with TestingSession() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(Session):
    def _make_user(email, role=UserRole.SUBSCRIBER, **fields):
        user = User(
            email=email,
            hashed_password=get_password_hash(PASSWORD),
            role=role,
            **fields,
        )
        with Session() as s:
            s.add(user)
            s.commit()
        return user
    return _make_user


@pytest.fixture()
def make_creator(make_user):
    def _make_creator(email, **fields):
        fields.setdefault("status", UserStatus.ACTIVE)
        fields.setdefault("kyc_status", KYCStatus.VERIFIED)
        return make_user(email, role=UserRole.CREATOR, **fields)
    return _make_creator


@pytest.fixture()
def make_subscription(Session):
    def _make_subscription(subscriber, creator, status=SubscriptionStatus.ACTIVE, **fields):
        sub = Subscription(
            subscriber_id=subscriber.id,
            creator_id=creator.id,
            status=status,
            tier=fields.pop("tier", SubscriptionTier.BASIC),
            price=fields.pop("price", 4.99),
            **fields,
        )
        with Session() as s:
            s.add(sub)
            s.commit()
        return sub
    return _make_subscription


@pytest.fixture()
def auth_headers():
    def _auth_headers(user):
        token = create_access_token(subject=user.id, role=user.role.value)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


