"""
Score ledger service.
Handles the main score, the per-day score history and break-even status.
"""
import math
from datetime import date
from typing import Callable, List, Optional
from sqlalchemy.orm import Session

from yourscore.models import ScoreHistory
from yourscore.repositories.score_repository import ScoreHistoryRepository
from yourscore.schemas import BreakEvenStatus, ScoreSummary
from yourscore.services.date_service import DateService
from yourscore.services.settings_service import SettingsService


def get_break_even_percent(earned: int, decay: int) -> int:
    """
    Calculate break-even percentage.

    Args:
        earned: Points earned today
        decay: Daily decay amount

    Returns:
        100 when decay is 0, otherwise earned/decay as a rounded
        percentage capped at 100 (halves round up)
    """
    if decay == 0:
        return 100
    return min(100, math.floor(earned / decay * 100 + 0.5))


def calculate_break_even(earned: int, decay: int) -> BreakEvenStatus:
    """Break-even status for today's earned points against the decay amount"""
    return BreakEvenStatus(
        break_even=earned >= decay,
        remaining=max(0, decay - earned),
        surplus=max(0, earned - decay),
        earned=earned,
        decay=decay,
        percent=get_break_even_percent(earned, decay),
    )


def merge_daily_record(
    existing: Optional[ScoreHistory],
    fallback_score: Callable[[], int],
    score: Optional[int] = None,
    earned: Optional[int] = None,
    decay: Optional[int] = None,
) -> dict:
    """
    Resolve the field values of a daily record write.

    Each field takes the supplied value, then the existing record's value,
    then its default: 0 for earned and decay, fallback_score() for score.
    fallback_score is only called when no score can be resolved otherwise.

    Returns:
        Dict with score, earned and decay
    """
    def resolve(value, field):
        if value is not None:
            return value
        if existing is not None and getattr(existing, field) is not None:
            return getattr(existing, field)
        return None

    resolved_score = resolve(score, "score")
    if resolved_score is None:
        resolved_score = fallback_score()

    return {
        "score": resolved_score,
        "earned": resolve(earned, "earned") or 0,
        "decay": resolve(decay, "decay") or 0,
    }


class ScoreService:
    """Service for the main score and the daily score ledger"""

    def __init__(self, db: Session):
        self.db = db
        self.history_repo = ScoreHistoryRepository()
        self.settings_service = SettingsService(db)

    # ============ Main score ============

    def get_score(self) -> int:
        return self.settings_service.get_main_score()

    def set_score(self, score: int, commit: bool = True) -> None:
        self.settings_service.set_main_score(score, commit=commit)

    def add_points(self, points: int, commit: bool = True) -> int:
        """
        Add points to the main score (negative values subtract).

        Returns:
            New score value
        """
        new_score = self.get_score() + points
        self.set_score(new_score, commit=commit)
        return new_score

    def subtract_points(self, points: int, commit: bool = True) -> int:
        """
        Subtract points from the main score.

        Returns:
            New score value
        """
        return self.add_points(-points, commit=commit)

    def reset(self) -> None:
        """Reset the score to zero"""
        self.set_score(0)

    # ============ Score history ============

    def record_history(
        self,
        target_date: Optional[date] = None,
        score: Optional[int] = None,
        earned: Optional[int] = None,
        decay: Optional[int] = None,
        commit: bool = True,
    ) -> ScoreHistory:
        """
        Upsert the history record for a day.

        Unspecified fields keep the existing record's value, falling back to
        0 for earned/decay and to the current score for score.

        Args:
            target_date: Day to write, defaults to today
            score: Score to record
            earned: Points earned that day
            decay: Decay applied that day
            commit: Commit immediately, or only flush

        Returns:
            The written history record
        """
        if target_date is None:
            target_date = DateService.today()

        record = self.history_repo.get_by_date(self.db, target_date)
        values = merge_daily_record(
            record, self.get_score, score=score, earned=earned, decay=decay
        )

        if record is None:
            record = ScoreHistory(date=target_date)
        record.score = values["score"]
        record.earned = values["earned"]
        record.decay = values["decay"]

        return self.history_repo.save(self.db, record, commit=commit)

    def update_today_history(
        self,
        score: Optional[int] = None,
        earned: Optional[int] = None,
        decay: Optional[int] = None,
        today: Optional[date] = None,
        commit: bool = True,
    ) -> ScoreHistory:
        """Merge updates into today's history record"""
        return self.record_history(
            target_date=today, score=score, earned=earned, decay=decay, commit=commit
        )

    def get_history_by_date(self, target_date: date) -> Optional[ScoreHistory]:
        return self.history_repo.get_by_date(self.db, target_date)

    def get_history_range(self, start_date: date, end_date: date) -> List[ScoreHistory]:
        """History records between two dates (inclusive), oldest first"""
        return self.history_repo.get_range(self.db, start_date, end_date)

    def get_all_history(self) -> List[ScoreHistory]:
        """All history records, oldest first"""
        return self.history_repo.get_all(self.db)

    def get_today_history(self, today: Optional[date] = None) -> Optional[ScoreHistory]:
        if today is None:
            today = DateService.today()
        return self.get_history_by_date(today)

    def add_earned_today(
        self,
        points: int,
        today: Optional[date] = None,
        commit: bool = True,
    ) -> ScoreHistory:
        """
        Add earned points to today's history record.

        The record's score is set to the live main score, so this must be
        called after the main score has been changed for the same event.

        Args:
            points: Points earned (negative when a completion is undone)
            today: Day to book the points on, defaults to today

        Returns:
            Updated history record
        """
        existing = self.get_today_history(today)
        current_earned = existing.earned if existing and existing.earned else 0

        return self.update_today_history(
            earned=current_earned + points,
            score=self.get_score(),
            today=today,
            commit=commit,
        )

    def get_earned_today(self, today: Optional[date] = None) -> int:
        history = self.get_today_history(today)
        return history.earned if history and history.earned else 0

    def get_decay_today(self, today: Optional[date] = None) -> int:
        history = self.get_today_history(today)
        return history.decay if history and history.decay else 0

    def get_break_even_status(self, today: Optional[date] = None) -> BreakEvenStatus:
        """Break-even status of today's earned points against the decay amount"""
        decay_amount = self.settings_service.get_decay_amount()
        earned_today = self.get_earned_today(today)
        return calculate_break_even(earned_today, decay_amount)

    def get_highest_score(self) -> int:
        """Highest score across all history records and the current score"""
        current_score = self.get_score()
        history = self.get_all_history()
        if not history:
            return current_score
        return max(max(h.score for h in history), current_score)

    def get_lowest_score(self) -> int:
        """Lowest score across all history records and the current score"""
        current_score = self.get_score()
        history = self.get_all_history()
        if not history:
            return current_score
        return min(min(h.score for h in history), current_score)

    def clear_history(self) -> None:
        """Delete all score history (bulk reset)"""
        self.history_repo.clear(self.db)

    def get_summary(self, today: Optional[date] = None) -> ScoreSummary:
        """Current score with its extremes and today's break-even status"""
        break_even = self.get_break_even_status(today)
        return ScoreSummary(
            score=self.get_score(),
            highest=self.get_highest_score(),
            lowest=self.get_lowest_score(),
            earned_today=break_even.earned,
            decay_today=self.get_decay_today(today),
            break_even=break_even,
        )
