import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import Base, get_db
from main import app
from models import subjects, users  # noqa: F401  (테이블 등록)
from services import auth_service, subject_service

PASSWORD = "password123"


@pytest.fixture
def engine():
    # 메모리 SQLite: 모든 세션이 같은 연결을 공유
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(db):
    return auth_service.register_user(db, "student@example.com", "Student", PASSWORD)


@pytest.fixture
def other_user(db):
    return auth_service.register_user(db, "other@example.com", "Other", PASSWORD)


@pytest.fixture
def auth_headers(client, user):
    r = client.post("/v1/auth/login", json={"email": user.email, "password": PASSWORD})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def make_subject(db):
    def _make(user_id, code, grade="A", name="Subject", **extra):
        payload = {"code": code, "name": name, "grade": grade, **extra}
        result = subject_service.add_subject(db, user_id, payload)
        assert result.success, result.error
        return result.data
    return _make
