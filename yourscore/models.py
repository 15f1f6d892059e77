import uuid
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, ForeignKey, UniqueConstraint
)

from yourscore.constants import DEFAULT_DECAY_AMOUNT, DEFAULT_MAIN_SCORE
from yourscore.database import Base


def generate_id() -> str:
    """Generate a unique string ID for new records"""
    return uuid.uuid4().hex


class Settings(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)

    # Decay
    decay_amount = Column(Integer, default=DEFAULT_DECAY_AMOUNT)  # Points lost per inactive day

    # Main score (ScoreState), stored apart from score_history
    main_score = Column(Integer, default=DEFAULT_MAIN_SCORE)

    # Day rollover tracking
    first_use_date = Column(Date, nullable=True)  # Set once, on first run
    last_active_date = Column(Date, nullable=True)  # Updated by every rollover check

    # Updated timestamp
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class ScoreHistory(Base):
    __tablename__ = "score_history"

    date = Column(Date, primary_key=True)  # One record per calendar day

    score = Column(Integer, default=0)   # Score at last write that day
    earned = Column(Integer, default=0)  # Net points earned from completions
    decay = Column(Integer, default=0)   # Decay applied that day


class Category(Base):
    __tablename__ = "categories"

    id = Column(String, primary_key=True, default=generate_id)
    name = Column(String, nullable=False)
    order = Column(Integer, default=0, index=True)
    created_at = Column(DateTime, default=datetime.now)


class Activity(Base):
    __tablename__ = "activities"

    id = Column(String, primary_key=True, default=generate_id)
    name = Column(String, nullable=False)
    description = Column(String, default="")
    points = Column(Integer, nullable=False)  # >= 1
    category_id = Column(String, ForeignKey("categories.id"), nullable=False, index=True)
    archived = Column(Boolean, default=False, index=True)
    order = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.now)


class Completion(Base):
    __tablename__ = "completions"
    __table_args__ = (
        UniqueConstraint("activity_id", "date", name="uq_completion_activity_date"),
    )

    id = Column(String, primary_key=True, default=generate_id)
    activity_id = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    completed_at = Column(DateTime, default=datetime.now)


class AchievementUnlock(Base):
    __tablename__ = "achievements"

    id = Column(String, primary_key=True)  # Achievement definition ID
    unlocked_at = Column(DateTime, default=datetime.now)
