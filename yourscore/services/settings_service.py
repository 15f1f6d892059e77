"""
Settings service.
Handles decay configuration, the main score and rollover dates.
"""
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from yourscore.constants import DEFAULT_DECAY_AMOUNT, DEFAULT_MAIN_SCORE
from yourscore.exceptions import InvalidDecayAmountException
from yourscore.models import Settings
from yourscore.repositories.settings_repository import SettingsRepository
from yourscore.schemas import SettingsUpdate
from yourscore.services.date_service import DateService


def validate_decay_amount(amount) -> int:
    """
    Validate a decay amount.

    Raises:
        InvalidDecayAmountException: If amount is negative or not an integer
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidDecayAmountException(amount)
    return amount


class SettingsService:
    """Service for settings management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SettingsRepository()

    def get(self) -> Settings:
        """Get settings, creating defaults on first access"""
        return self.repo.get(self.db)

    def get_decay_amount(self) -> int:
        settings = self.get()
        if settings.decay_amount is None:
            return DEFAULT_DECAY_AMOUNT
        return settings.decay_amount

    def set_decay_amount(self, amount: int) -> None:
        """
        Set the daily decay amount.

        Raises:
            InvalidDecayAmountException: If amount is negative
        """
        validate_decay_amount(amount)
        settings = self.get()
        settings.decay_amount = amount
        self.repo.update(self.db, settings)

    def get_main_score(self) -> int:
        settings = self.get()
        return settings.main_score or 0

    def set_main_score(self, score: int, commit: bool = True) -> None:
        settings = self.get()
        settings.main_score = score
        self.repo.update(self.db, settings, commit=commit)

    def get_first_use_date(self) -> Optional[date]:
        return self.get().first_use_date

    def get_last_active_date(self) -> Optional[date]:
        return self.get().last_active_date

    def set_last_active_date(self, target_date: Optional[date] = None, commit: bool = True) -> None:
        if target_date is None:
            target_date = DateService.today()
        settings = self.get()
        settings.last_active_date = target_date
        self.repo.update(self.db, settings, commit=commit)

    def initialize_if_needed(self, today: Optional[date] = None) -> bool:
        """
        Initialize settings for a first-time user.

        Sets first_use_date and last_active_date to today, the main score to
        zero and the decay amount to its default. Does nothing once
        first_use_date is set.

        Returns:
            True if this is a new user
        """
        settings = self.get()
        if settings.first_use_date is not None:
            return False

        if today is None:
            today = DateService.today()

        settings.first_use_date = today
        settings.last_active_date = today
        settings.main_score = DEFAULT_MAIN_SCORE
        settings.decay_amount = DEFAULT_DECAY_AMOUNT
        self.repo.update(self.db, settings)
        return True

    def update(self, settings_update: SettingsUpdate) -> Settings:
        """Apply a partial settings update"""
        data = {
            field: value
            for field, value in settings_update.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if "decay_amount" in data:
            validate_decay_amount(data["decay_amount"])

        settings = self.get()
        for field, value in data.items():
            setattr(settings, field, value)
        return self.repo.update(self.db, settings)

    def reset(self) -> Settings:
        """Reset all settings to defaults (dates unset, score zero)"""
        self.repo.delete_all(self.db)
        return self.get()
