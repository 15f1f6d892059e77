"""
Tests for SettingsService.
"""
import pytest

from yourscore.exceptions import InvalidDecayAmountException
from yourscore.schemas import SettingsUpdate
from yourscore.services.settings_service import SettingsService, validate_decay_amount


class TestSettings:
    """Tests for settings access and initialization"""

    def test_defaults_created_on_first_access(self, db_session):
        """First access creates the default row"""
        settings = SettingsService(db_session).get()

        assert settings.decay_amount == 10
        assert settings.main_score == 0
        assert settings.first_use_date is None
        assert settings.last_active_date is None

    def test_initialize_if_needed(self, db_session, today, yesterday):
        """Only the first call initializes"""
        service = SettingsService(db_session)

        assert service.initialize_if_needed(yesterday) is True
        assert service.initialize_if_needed(today) is False
        assert service.get_first_use_date() == yesterday
        assert service.get_last_active_date() == yesterday

    def test_update_decay_amount(self, db_session):
        """Partial update changes only given fields"""
        service = SettingsService(db_session)
        service.set_main_score(40)

        settings = service.update(SettingsUpdate(decay_amount=3))

        assert settings.decay_amount == 3
        assert settings.main_score == 40

    def test_reset(self, db_session, today):
        """Reset restores defaults and unsets dates"""
        service = SettingsService(db_session)
        service.initialize_if_needed(today)
        service.set_decay_amount(50)
        service.set_main_score(-20)

        settings = service.reset()

        assert settings.decay_amount == 10
        assert settings.main_score == 0
        assert settings.first_use_date is None


class TestValidateDecayAmount:
    """Tests for decay amount validation"""

    @pytest.mark.parametrize("amount", [0, 1, 10, 10000])
    def test_valid(self, amount):
        """Non-negative integers pass through"""
        assert validate_decay_amount(amount) == amount

    @pytest.mark.parametrize("amount", [-1, 1.5, "10", None, True])
    def test_invalid(self, amount):
        """Everything else is rejected"""
        with pytest.raises(InvalidDecayAmountException):
            validate_decay_amount(amount)
