"""Shared fixtures: in-memory SQLite, seeded users/enterprise, and an API client."""

import os
import sys
import uuid

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import compliance.models  # noqa: F401
from compliance.database import Base, get_db
from compliance.main import app
from compliance.middleware.auth import create_access_token
from compliance.models.enterprise import Enterprise
from compliance.models.user import User


@pytest.fixture
def engine():
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
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def _make_user(db, role: str, name: str) -> User:
    user = User(
        id=str(uuid.uuid4()),
        name=name,
        email=f"{name.lower().replace(' ', '.')}@example.org",
        password_hash="not-a-real-hash",
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db) -> User:
    return _make_user(db, "admin", "Ada Admin")


@pytest.fixture
def inspector(db) -> User:
    return _make_user(db, "inspector", "Ines Inspector")


@pytest.fixture
def viewer(db) -> User:
    return _make_user(db, "user", "Victor Viewer")


@pytest.fixture
def enterprise(db) -> Enterprise:
    ent = Enterprise(id=str(uuid.uuid4()), name="Sodeco SA", region="Littoral", city="Douala", sector="Secondaire")
    db.add(ent)
    db.commit()
    db.refresh(ent)
    return ent


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


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers
