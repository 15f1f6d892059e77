"""
Settings repository - Data access layer for Settings model.
Handles all database queries related to settings.
"""
from sqlalchemy.orm import Session
from yourscore.models import Settings


class SettingsRepository:
    """Repository for Settings data access"""

    @staticmethod
    def get(db: Session) -> Settings:
        """
        Get settings (creates with defaults if not exists).

        Returns:
            Settings object
        """
        settings = db.query(Settings).first()
        if not settings:
            settings = Settings()
            db.add(settings)
            db.commit()
            db.refresh(settings)
        return settings

    @staticmethod
    def update(db: Session, settings: Settings, commit: bool = True) -> Settings:
        """
        Update settings.

        Args:
            db: Database session
            settings: Settings object with updated values
            commit: Commit immediately, or only flush so the caller can
                commit several writes together

        Returns:
            Updated settings
        """
        if not commit:
            db.flush()
            return settings
        db.commit()
        db.refresh(settings)
        return settings

    @staticmethod
    def delete_all(db: Session) -> None:
        """Remove the settings row so defaults apply on next access"""
        db.query(Settings).delete()
        db.commit()
