"""
Score repository - Data access layer for the daily score ledger.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from yourscore.models import ScoreHistory


class ScoreHistoryRepository:
    """Repository for ScoreHistory data access"""

    @staticmethod
    def get_by_date(db: Session, target_date: date) -> Optional[ScoreHistory]:
        """Get history record for specific date"""
        return db.get(ScoreHistory, target_date)

    @staticmethod
    def get_all(db: Session) -> List[ScoreHistory]:
        """Get all history records, oldest first"""
        return db.query(ScoreHistory).order_by(ScoreHistory.date.asc()).all()

    @staticmethod
    def get_all_descending(db: Session) -> List[ScoreHistory]:
        """Get all history records, newest first"""
        return db.query(ScoreHistory).order_by(ScoreHistory.date.desc()).all()

    @staticmethod
    def get_range(db: Session, start_date: date, end_date: date) -> List[ScoreHistory]:
        """Get history records between two dates (inclusive), oldest first"""
        return db.query(ScoreHistory).filter(
            ScoreHistory.date >= start_date,
            ScoreHistory.date <= end_date
        ).order_by(ScoreHistory.date.asc()).all()

    @staticmethod
    def save(db: Session, record: ScoreHistory, commit: bool = True) -> ScoreHistory:
        """Insert or update a history record"""
        db.add(record)
        if not commit:
            db.flush()
            return record
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def clear(db: Session) -> None:
        """Delete all history records"""
        db.query(ScoreHistory).delete()
        db.commit()
