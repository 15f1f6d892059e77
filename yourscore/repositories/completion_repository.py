"""
Completion repository - Data access layer for activity completions.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from yourscore.models import Completion


class CompletionRepository:
    """Repository for Completion data access"""

    @staticmethod
    def get_by_id(db: Session, completion_id: str) -> Optional[Completion]:
        """Get completion by ID"""
        return db.get(Completion, completion_id)

    @staticmethod
    def find_by_activity_and_date(
        db: Session,
        activity_id: str,
        target_date: date
    ) -> Optional[Completion]:
        """Get the completion of an activity on a date"""
        return db.query(Completion).filter(
            Completion.activity_id == activity_id,
            Completion.date == target_date
        ).first()

    @staticmethod
    def get_by_date(db: Session, target_date: date) -> List[Completion]:
        """Get all completions on a date"""
        return db.query(Completion).filter(Completion.date == target_date).all()

    @staticmethod
    def get_by_activity(db: Session, activity_id: str) -> List[Completion]:
        """Get all completions of an activity"""
        return db.query(Completion).filter(
            Completion.activity_id == activity_id
        ).order_by(Completion.date.asc()).all()

    @staticmethod
    def get_by_date_range(db: Session, start_date: date, end_date: date) -> List[Completion]:
        """Get completions between two dates (inclusive)"""
        return db.query(Completion).filter(
            Completion.date >= start_date,
            Completion.date <= end_date
        ).order_by(Completion.date.asc()).all()

    @staticmethod
    def get_all(db: Session) -> List[Completion]:
        """Get all completions"""
        return db.query(Completion).order_by(Completion.date.asc()).all()

    @staticmethod
    def get_distinct_dates(db: Session) -> List[date]:
        """Get every date that has at least one completion"""
        rows = db.query(Completion.date).distinct().all()
        return [row[0] for row in rows]

    @staticmethod
    def count(db: Session) -> int:
        """Count all completions"""
        return db.query(Completion).count()

    @staticmethod
    def save(db: Session, completion: Completion, commit: bool = True) -> Completion:
        """Create completion"""
        db.add(completion)
        if not commit:
            db.flush()
            return completion
        db.commit()
        db.refresh(completion)
        return completion

    @staticmethod
    def delete(db: Session, completion: Completion, commit: bool = True) -> None:
        """Delete a completion"""
        db.delete(completion)
        if commit:
            db.commit()
        else:
            db.flush()
