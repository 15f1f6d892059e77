"""
Shared fixtures for YourScore tests.

Every test gets a fresh in-memory SQLite database.
"""
import os
import tempfile

# Configure the host before yourscore.main is imported
os.environ.setdefault("YOURSCORE_DATABASE_URL", "sqlite://")
os.environ.setdefault("YOURSCORE_LOG_DIR", tempfile.mkdtemp(prefix="yourscore-logs-"))
os.environ.setdefault("YOURSCORE_API_KEY", "test-api-key")

import pytest
from datetime import date, datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from yourscore.constants import UNCATEGORIZED_ID, UNCATEGORIZED_NAME, UNCATEGORIZED_ORDER
from yourscore.database import Base
from yourscore.models import Activity, Category, Completion, ScoreHistory
from yourscore.repositories.settings_repository import SettingsRepository
from yourscore.services.date_service import DateService

TEST_API_KEY = os.environ["YOURSCORE_API_KEY"]


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def default_settings(db_session):
    """Settings row with defaults (decay 10, score 0, no dates)"""
    return SettingsRepository.get(db_session)


@pytest.fixture
def today():
    return date(2026, 3, 15)


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def frozen_today(monkeypatch, today):
    """Make DateService.today() return the `today` fixture"""
    monkeypatch.setattr(DateService, "today", staticmethod(lambda: today))
    return today


@pytest.fixture
def client(db_session, frozen_today):
    from fastapi.testclient import TestClient
    from yourscore.database import get_db
    from yourscore.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, headers={"X-API-Key": TEST_API_KEY}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def ensure_uncategorized(db) -> Category:
    category = db.get(Category, UNCATEGORIZED_ID)
    if category is None:
        category = Category(id=UNCATEGORIZED_ID, name=UNCATEGORIZED_NAME, order=UNCATEGORIZED_ORDER)
        db.add(category)
        db.commit()
    return category


def create_history(db, target_date: date, earned: int = 0, decay: int = 0, score: int = 0) -> ScoreHistory:
    """Helper to create a score history record"""
    record = ScoreHistory(date=target_date, score=score, earned=earned, decay=decay)
    db.add(record)
    db.commit()
    return record


def create_activity(db, name: str = "Read", points: int = 10, archived: bool = False,
                    category_id: str = UNCATEGORIZED_ID, order: int = 0) -> Activity:
    """Helper to create an activity, in Uncategorized by default"""
    ensure_uncategorized(db)
    activity = Activity(
        name=name,
        description="",
        points=points,
        category_id=category_id,
        archived=archived,
        order=order,
    )
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return activity


def create_completion(db, activity_id: str, target_date: date) -> Completion:
    """Helper to create a completion without touching the score"""
    completion = Completion(
        activity_id=activity_id,
        date=target_date,
        completed_at=datetime.combine(target_date, datetime.min.time()),
    )
    db.add(completion)
    db.commit()
    return completion
