import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from feedback_bank.core.database import Base, get_db
from feedback_bank.main import app
from feedback_bank.models import orm  # noqa: F401

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool, future=True
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

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
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def make_module(client):
    def _make(title="Loops", **extra):
        r = client.post("/feedback", json={"title": title, **extra})
        assert r.status_code == 200, r.text
        return r.json()["module"]
    return _make

@pytest.fixture
def make_question(client):
    def _make(module_id, title="Q1", **extra):
        r = client.post(f"/feedback/{module_id}/questions", json={"title": title, **extra})
        assert r.status_code == 200, r.text
        return r.json()["question"]
    return _make
