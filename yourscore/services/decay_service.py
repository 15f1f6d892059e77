"""
Decay calculation service.
Detects day rollover against the last active date and applies the
inactivity penalty to the main score, at most once per calendar day.
"""
import logging
import threading
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from yourscore.schemas import DecayPreview, DecayResult, DecaySimulation
from yourscore.services.date_service import DateService
from yourscore.services.score_service import ScoreService
from yourscore.services.settings_service import SettingsService

logger = logging.getLogger("yourscore.decay")

# Serializes rollover checks so a last_active_date write is visible to the next check
_decay_lock = threading.Lock()


def calculate_decay(days_away: int, decay_amount: int) -> int:
    """
    Calculate decay for missed days.

    Args:
        days_away: Number of days since last active
        decay_amount: Daily decay amount

    Returns:
        Total decay to apply, 0 if either input is not positive
    """
    if days_away <= 0 or decay_amount <= 0:
        return 0
    return days_away * decay_amount


def simulate_decay(current_score: int, decay_amount: int, days: int) -> DecaySimulation:
    """Simulate decay over a number of days without touching storage"""
    total_decay = calculate_decay(days, decay_amount)
    return DecaySimulation(
        starting_score=current_score,
        decay_per_day=decay_amount,
        days=days,
        total_decay=total_decay,
        final_score=current_score - total_decay,
    )


def _applied_message(days_away: int, total_decay: int) -> str:
    points_label = "point" if total_decay == 1 else "points"
    if days_away == 1:
        return f"Daily decay applied: -{total_decay} {points_label}"
    return f"You were away {days_away} days: -{total_decay} {points_label}"


class DecayService:
    """Service for daily decay"""

    def __init__(self, db: Session):
        self.db = db
        self.settings_service = SettingsService(db)
        self.score_service = ScoreService(db)

    def check_and_apply_decay(self, today: Optional[date] = None) -> DecayResult:
        """
        Check for day rollover and apply decay if needed.
        Main entry point, called by the host when a session opens.

        Calling it several times on the same calendar day has the same
        effect as calling it once.

        Args:
            today: Current calendar day, defaults to today

        Returns:
            DecayResult describing what happened
        """
        if today is None:
            today = DateService.today()

        with _decay_lock:
            return self._check_and_apply_decay(today)

    def _check_and_apply_decay(self, today: date) -> DecayResult:
        # New user: no decay on the first day
        if self.settings_service.initialize_if_needed(today):
            logger.info(f"First use recorded on {today}")
            return DecayResult(
                applied=False,
                is_first_day=True,
                message="Welcome! Your score starts today.",
            )

        settings = self.settings_service.get()
        first_use_date = settings.first_use_date
        last_active_date = settings.last_active_date
        decay_amount = self.settings_service.get_decay_amount()

        # Still day one
        if today == first_use_date:
            self.settings_service.set_last_active_date(today)
            return DecayResult(
                applied=False,
                is_first_day=True,
                message="First day - no decay applied.",
            )

        # Already processed today
        if last_active_date == today:
            return DecayResult(
                applied=False,
                message="Already active today.",
            )

        if last_active_date is None:
            days_away = 0
        else:
            days_away = DateService.days_since_last_active(last_active_date, today)

        if days_away <= 0:
            self.settings_service.set_last_active_date(today)
            return DecayResult(
                applied=False,
                message="No decay needed.",
            )

        total_decay = calculate_decay(days_away, decay_amount)
        previous_score = self.score_service.get_score()

        # Score, last active date and today's history are committed together
        try:
            new_score = self.score_service.subtract_points(total_decay, commit=False)
            self.settings_service.set_last_active_date(today, commit=False)
            self.score_service.record_history(
                target_date=today, decay=total_decay, score=new_score, commit=False
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Decay applied: {days_away} day(s) away, -{total_decay} points "
            f"({previous_score} -> {new_score})"
        )

        return DecayResult(
            applied=True,
            decay=total_decay,
            days_away=days_away,
            previous_score=previous_score,
            new_score=new_score,
            message=_applied_message(days_away, total_decay),
        )

    def preview_decay(self, today: Optional[date] = None) -> DecayPreview:
        """Preview the decay the next rollover check would apply, without applying it"""
        if today is None:
            today = DateService.today()

        settings = self.settings_service.get()
        first_use_date = settings.first_use_date
        last_active_date = settings.last_active_date

        if first_use_date is None or today == first_use_date:
            return DecayPreview(would_apply=False, reason="First day - no decay.")

        if last_active_date == today:
            return DecayPreview(would_apply=False, reason="Already active today.")

        if last_active_date is None:
            days_away = 0
        else:
            days_away = DateService.days_since_last_active(last_active_date, today)
        total_decay = calculate_decay(days_away, self.settings_service.get_decay_amount())

        return DecayPreview(
            would_apply=days_away > 0,
            decay=total_decay,
            days_away=days_away,
            reason=f"{days_away} day(s) since last active." if days_away > 0 else "No decay needed.",
        )

    def get_decay_amount(self) -> int:
        return self.settings_service.get_decay_amount()

    def set_decay_amount(self, amount: int) -> None:
        """
        Set the daily decay amount.

        Raises:
            InvalidDecayAmountException: If amount is negative
        """
        self.settings_service.set_decay_amount(amount)

    def has_broken_even_today(self, today: Optional[date] = None) -> bool:
        return self.score_service.get_break_even_status(today).break_even

    def get_points_to_break_even(self, today: Optional[date] = None) -> int:
        return self.score_service.get_break_even_status(today).remaining

    def get_surplus_points(self, today: Optional[date] = None) -> int:
        return self.score_service.get_break_even_status(today).surplus
