import os
import tempfile
from datetime import datetime, timedelta, timezone

os.environ.setdefault("SECRET_KEY", "test-signing-secret-0123456789abcdef")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("DB_INIT_MODE", "off")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "sewadar-tests.log"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sewadar_api.core.database import Base, get_db
from sewadar_api.core.permissions import UserRole
from sewadar_api.core.security import get_password_hash
from sewadar_api.main import app
from sewadar_api.models.audit import AuditLog
from sewadar_api.models.sewadar import Sewadar
from sewadar_api.models.user import User
from sewadar_api.services.rate_limiter import rate_limiter
from sewadar_api.services.token_service import TokenService, get_token_service

TEST_SECRET = "per-test-signing-secret-abcdef0123456789"
PASSWORD = "secret123"


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def signing_secret():
    return TEST_SECRET


@pytest.fixture
def token_service(clock, signing_secret):
    return TokenService(signing_secret, default_ttl=timedelta(hours=1), clock=clock)


@pytest.fixture
def client(db_session, token_service):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_service] = lambda: token_service
    rate_limiter.reset()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        rate_limiter.reset()


@pytest.fixture
def make_user(db_session):
    def _make(email, role=UserRole.VIEWER, is_active=True, first_name="Test", last_name="User", password=PASSWORD):
        user = User(
            email=email,
            password_hash=get_password_hash(password, rounds=4),
            first_name=first_name,
            last_name=last_name,
            role=UserRole.parse(role).value,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_sewadar(db_session):
    def _make(created_by, first_name="Ravi", last_name="Kumar", age=30, badge_id="B-100"):
        sewadar = Sewadar(
            first_name=first_name,
            last_name=last_name,
            age=age,
            badge_id=badge_id,
            created_by=created_by.id,
        )
        db_session.add(sewadar)
        db_session.commit()
        db_session.refresh(sewadar)
        return sewadar

    return _make


@pytest.fixture
def auth_headers(token_service):
    def _headers(user, role=None):
        token = token_service.issue(user.id, user.email, role or user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def audit_rows(db_session):
    def _rows(**filters):
        db_session.expire_all()
        return db_session.query(AuditLog).filter_by(**filters).all()

    return _rows
