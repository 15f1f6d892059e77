"""
Achievement repository - Data access layer for unlocked achievements.
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from yourscore.models import AchievementUnlock


class AchievementRepository:
    """Repository for AchievementUnlock data access"""

    @staticmethod
    def get_by_id(db: Session, achievement_id: str) -> Optional[AchievementUnlock]:
        """Get unlock record by achievement ID"""
        return db.get(AchievementUnlock, achievement_id)

    @staticmethod
    def get_all(db: Session) -> List[AchievementUnlock]:
        """Get all unlock records, oldest first"""
        return db.query(AchievementUnlock).order_by(AchievementUnlock.unlocked_at.asc()).all()

    @staticmethod
    def create(db: Session, record: AchievementUnlock) -> AchievementUnlock:
        """Insert unlock record"""
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def clear(db: Session) -> None:
        """Delete all unlock records"""
        db.query(AchievementUnlock).delete()
        db.commit()
