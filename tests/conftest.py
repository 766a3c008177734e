"""
Shared pytest fixtures.

Uses a SQLite database file so no Postgres is required for tests. SQLite
supports the ON CONFLICT upsert the ledger relies on.

Every test gets its own owner id, so habits and heatmaps never bleed
between tests even though the database lives for the whole session.
"""
import itertools
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from habitflow.db.base import Base, get_db
from habitflow.main import app
from habitflow.models.habit import Habit
from habitflow.services.habits import HabitData, create_habit

SQLITE_URL = "sqlite:///./test_habitflow.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_owner_ids = itertools.count(1000)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def owner_id():
    return next(_owner_ids)


@pytest.fixture()
def client(owner_id):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, headers={"X-User-Id": str(owner_id), "X-Timezone": "UTC"}) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_habit(db, owner_id):
    """Persist a habit for the current test's owner."""
    def _make(
        name: str = "habit",
        target_count: int = 1,
        schedule_mode: str = "flexible",
        schedule_config: dict | None = None,
        start_date: date | None = None,
        category_id: int | None = None,
    ) -> Habit:
        return create_habit(db, owner_id, HabitData(
            name=name,
            target_count=target_count,
            schedule_mode=schedule_mode,
            schedule_config=schedule_config,
            start_date=start_date,
            category_id=category_id,
        ))
    return _make
