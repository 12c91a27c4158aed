import os

# Point the app's own engine at an in-memory database before anything imports settings.
os.environ["DATABASE_URL"] = "sqlite+pysqlite://"

import pytest
from fastapi.testclient import TestClient #gives you a fake http client that can call your FastAPI routes without running a real server.
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.deps import get_db
from app.db.base import Base
from app.main import app
from app.services.schedule_store import SqlScheduleStore


@pytest.fixture()
def engine():
    engine = create_engine( #create isolated DB
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def store(db_session):
    # No live hub: service tests only care about persisted state.
    return SqlScheduleStore(db_session, hub=None)


@pytest.fixture() #test client
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
