import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from projectchat.api.completion import Completion
from projectchat.database.core.db import get_db
from projectchat.database.daos import hash_password
from projectchat.database.entities import Base, Project, User
from projectchat.main import app


class FakeProvider:
    """Deterministic stand-in for the completion provider."""

    def __init__(self, text="Hello! How can I help?", tokens=12, error=None):
        self.text = text
        self.tokens = tokens
        self.error = error
        self.calls = []

    def complete(self, system_prompt, user_message, temperature, max_output_tokens):
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_message": user_message,
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            }
        )
        if self.error is not None:
            raise self.error
        return Completion(text=self.text, tokens_used=self.tokens)


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def client(session_factory, provider):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.completion_provider = provider
    app.state.limiter.reset()
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
    app.state.completion_provider = None


@pytest.fixture
def register(client):
    """Register a user through the API and return (user, auth headers)."""

    def _register(username="alice", email="alice@example.com", password="secret123"):
        res = client.post("/api/auth/register", json={"username": username, "email": email, "password": password})
        assert res.status_code == 201, res.text
        data = res.json()["data"]
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _register


@pytest.fixture
def make_project(client):
    def _make(headers, name="My project", **extra):
        res = client.post("/api/projects", json={"name": name, **extra}, headers=headers)
        assert res.status_code == 201, res.text
        return res.json()["data"]

    return _make


@pytest.fixture
def seed_user(db):
    def _seed(username="bob", email="bob@example.com"):
        user = User(username=username, email=email, password=hash_password("secret123"))
        db.add(user)
        db.commit()
        return user

    return _seed


@pytest.fixture
def seed_project(db):
    def _seed(owner, name="Seeded"):
        project = Project(name=name, user_id=owner.id)
        db.add(project)
        db.commit()
        return project

    return _seed
