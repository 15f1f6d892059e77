"""
Streak calculation service.

Three independent backward scans from a reference day:

1. Successful-day streak: consecutive score_history records with
   earned >= decay. A missing calendar day ends the streak.
2. Perfect-day streak: consecutive days on which every currently active
   activity has a completion. Uses the live activity set against past
   completions and looks back at most MAX_STREAK_LOOKBACK_DAYS.
3. Completion streak: consecutive days with at least one completion.
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from yourscore.constants import MAX_STREAK_LOOKBACK_DAYS
from yourscore.repositories.activity_repository import ActivityRepository
from yourscore.repositories.completion_repository import CompletionRepository
from yourscore.repositories.score_repository import ScoreHistoryRepository
from yourscore.schemas import StreakSummary
from yourscore.services.date_service import DateService


class StreakService:
    """Service for streak calculation"""

    def __init__(self, db: Session):
        self.db = db
        self.history_repo = ScoreHistoryRepository()
        self.activity_repo = ActivityRepository()
        self.completion_repo = CompletionRepository()

    def get_successful_day_streak(self, today: Optional[date] = None) -> int:
        """
        Count consecutive successful days (earned >= decay).

        Starts at the most recent record dated on or before today; records
        dated after today are skipped. A day with earned == decay == 0
        counts as successful.

        Args:
            today: Reference day, defaults to today

        Returns:
            Current streak count, 0 if there is no history
        """
        if today is None:
            today = DateService.today()

        history = self.history_repo.get_all_descending(self.db)
        if not history:
            return 0

        index = 0
        while index < len(history) and history[index].date > today:
            index += 1
        if index == len(history):
            return 0

        streak = 0
        check_date = history[index].date

        while index < len(history):
            record = history[index]

            # Gap in dates breaks the streak
            if record.date != check_date:
                break

            if (record.earned or 0) < (record.decay or 0):
                break

            streak += 1
            check_date -= timedelta(days=1)
            index += 1

        return streak

    def get_perfect_day_streak(self, today: Optional[date] = None) -> int:
        """
        Count consecutive days on which every active activity was completed.

        Archiving or adding activities changes the result retroactively.

        Args:
            today: Reference day, defaults to today

        Returns:
            Current perfect day streak, 0 when there are no active activities
        """
        if today is None:
            today = DateService.today()

        activity_ids = set(self.activity_repo.get_active_ids(self.db))
        if not activity_ids:
            return 0

        window_start = today - timedelta(days=MAX_STREAK_LOOKBACK_DAYS - 1)
        completed_by_date = defaultdict(set)
        for completion in self.completion_repo.get_by_date_range(self.db, window_start, today):
            completed_by_date[completion.date].add(completion.activity_id)

        streak = 0
        check_date = today
        for _ in range(MAX_STREAK_LOOKBACK_DAYS):
            if not activity_ids.issubset(completed_by_date.get(check_date, ())):
                break
            streak += 1
            check_date -= timedelta(days=1)

        return streak

    def get_completion_streak(self, end_date: Optional[date] = None) -> int:
        """
        Count consecutive days with at least one completion.

        Args:
            end_date: Day to count back from, defaults to today

        Returns:
            Number of consecutive days
        """
        if end_date is None:
            end_date = DateService.today()

        dates_with_completions = set(self.completion_repo.get_distinct_dates(self.db))

        streak = 0
        current_date = end_date
        while current_date in dates_with_completions:
            streak += 1
            current_date -= timedelta(days=1)

        return streak

    def get_summary(self, today: Optional[date] = None) -> StreakSummary:
        """All three streaks as of a day"""
        if today is None:
            today = DateService.today()
        return StreakSummary(
            successful_days=self.get_successful_day_streak(today),
            perfect_days=self.get_perfect_day_streak(today),
            completion_days=self.get_completion_streak(today),
        )
