from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import portal_api.models  # noqa: F401
from portal_api.core.config import get_settings
from portal_api.db.session import get_db
from portal_api.main import app
from portal_api.models.base import Base
from portal_api.models.enums import UserStatus
from portal_api.models.user import User
from portal_api.services.local_auth import hash_password

SEED_EMAIL = "a@x"
SEED_PASSWORD = "password123"


@pytest.fixture
def session_factory(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Generator[sessionmaker, None, None]:
    monkeypatch.setenv("PORTAL_AUTH_JWT_SECRET", "portal-test-secret-key-at-least-32-bytes")
    monkeypatch.setenv("PORTAL_AUTH_PASSWORD_HASH_ITERATIONS", "1000")
    monkeypatch.setenv("PORTAL_STORAGE_ROOT", str(tmp_path / "storage"))
    get_settings.cache_clear()

    sqlite_engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=sqlite_engine)
    yield sessionmaker(bind=sqlite_engine, autoflush=False, autocommit=False, class_=Session)
    Base.metadata.drop_all(bind=sqlite_engine)
    sqlite_engine.dispose()
    get_settings.cache_clear()


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def api_client(session_factory: sessionmaker) -> Generator[TestClient, None, None]:
    app.dependency_overrides.clear()

    def override_get_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def create_user(db: Session) -> Callable[..., User]:
    """直接落库一个用户，绕过注册接口。"""

    def _create(
        *,
        email: str = SEED_EMAIL,
        password: str = SEED_PASSWORD,
        username: str = "alice",
        status: str = UserStatus.ACTIVE,
        organization_id: str = "O1",
        role_id: str = "R1",
    ) -> User:
        user = User(
            organization_id=organization_id,
            role_id=role_id,
            name=username.title(),
            username=username,
            email=email,
            password_hash=hash_password(password),
            status=status,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _create


@pytest.fixture
def seed_user(create_user) -> User:
    return create_user()


@pytest.fixture
def login(api_client: TestClient) -> Callable[..., dict]:
    def _login(email: str = SEED_EMAIL, password: str = SEED_PASSWORD) -> dict:
        response = api_client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["data"]

    return _login


@pytest.fixture
def auth_headers(seed_user, login) -> dict[str, str]:
    tokens = login()
    return {"Authorization": f"Bearer {tokens['access_token']}"}
