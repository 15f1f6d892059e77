"""
Completion service.
Tracks daily activity completions and performs the completion toggle,
the only write path that moves points between activities and the score.
"""
import logging
import threading
from collections import Counter
from datetime import date
from typing import Dict, List, Optional, Set
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from yourscore.exceptions import DuplicateCompletionException, ValidationException
from yourscore.models import Completion
from yourscore.repositories.completion_repository import CompletionRepository
from yourscore.schemas import CompletionResponse, ToggleResult
from yourscore.services.achievement_service import AchievementService
from yourscore.services.activity_service import ActivityService
from yourscore.services.date_service import DateService
from yourscore.services.score_service import ScoreService
from yourscore.services.streak_service import StreakService

logger = logging.getLogger("yourscore.completions")


class ToggleGuard:
    """
    Single in-flight toggle guard.

    A toggle that arrives while another one is running is dropped rather
    than queued, so earned/score bookkeeping is never interleaved.
    """

    def __init__(self):
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @property
    def busy(self) -> bool:
        return self._lock.locked()


toggle_guard = ToggleGuard()


class CompletionService:
    """Service for activity completions"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CompletionRepository()
        self.activity_service = ActivityService(db)
        self.score_service = ScoreService(db)

    def create(self, activity_id: str, target_date: Optional[date] = None) -> Completion:
        """
        Create a completion record.

        Raises:
            ValidationException: If activity_id is empty
            ActivityNotFoundException: If activity does not exist
            DuplicateCompletionException: If already completed on that date
        """
        completion = self._add(activity_id, target_date)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateCompletionException(activity_id, completion.date)
        self.db.refresh(completion)
        return completion

    def _add(self, activity_id: str, target_date: Optional[date]) -> Completion:
        if not activity_id:
            raise ValidationException("activity_id", "activity ID is required")
        if target_date is None:
            target_date = DateService.today()

        self.activity_service.get_by_id(activity_id)

        if self.repo.find_by_activity_and_date(self.db, activity_id, target_date):
            raise DuplicateCompletionException(activity_id, target_date)

        completion = Completion(
            activity_id=activity_id,
            date=target_date,
            completed_at=DateService.timestamp(),
        )
        return self.repo.save(self.db, completion, commit=False)

    def get_by_id(self, completion_id: str) -> Optional[Completion]:
        return self.repo.get_by_id(self.db, completion_id)

    def find_by_activity_and_date(self, activity_id: str, target_date: date) -> Optional[Completion]:
        return self.repo.find_by_activity_and_date(self.db, activity_id, target_date)

    def is_completed(self, activity_id: str, target_date: Optional[date] = None) -> bool:
        if target_date is None:
            target_date = DateService.today()
        return self.find_by_activity_and_date(activity_id, target_date) is not None

    def get_by_date(self, target_date: Optional[date] = None) -> List[Completion]:
        if target_date is None:
            target_date = DateService.today()
        return self.repo.get_by_date(self.db, target_date)

    def get_by_activity(self, activity_id: str) -> List[Completion]:
        return self.repo.get_by_activity(self.db, activity_id)

    def get_by_date_range(self, start_date: date, end_date: date) -> List[Completion]:
        return self.repo.get_by_date_range(self.db, start_date, end_date)

    def get_all(self) -> List[Completion]:
        return self.repo.get_all(self.db)

    def delete(self, completion_id: str) -> None:
        """Delete a completion (undo). Missing IDs are ignored."""
        completion = self.repo.get_by_id(self.db, completion_id)
        if completion:
            self.repo.delete(self.db, completion)

    def delete_by_activity_and_date(self, activity_id: str, target_date: date) -> bool:
        """
        Delete the completion of an activity on a date.

        Returns:
            True if deleted, False if not found
        """
        completion = self.find_by_activity_and_date(activity_id, target_date)
        if completion:
            self.repo.delete(self.db, completion)
            return True
        return False

    def toggle(self, activity_id: str, target_date: Optional[date] = None) -> dict:
        """
        Toggle the completion record only, without touching the score.

        Returns:
            {"completed": bool, "completion": Completion or None}
        """
        if target_date is None:
            target_date = DateService.today()

        existing = self.find_by_activity_and_date(activity_id, target_date)
        if existing:
            self.repo.delete(self.db, existing)
            return {"completed": False, "completion": None}

        completion = self.create(activity_id, target_date)
        return {"completed": True, "completion": completion}

    def count_by_date(self, target_date: Optional[date] = None) -> int:
        return len(self.get_by_date(target_date))

    def count_all(self) -> int:
        return self.repo.count(self.db)

    def get_completion_counts_by_activity(self, start_date: date, end_date: date) -> Dict[str, int]:
        """Completion count per activity ID within a date range"""
        completions = self.get_by_date_range(start_date, end_date)
        return dict(Counter(c.activity_id for c in completions))

    def get_dates_with_completions(self, start_date: date, end_date: date) -> Set[date]:
        return {c.date for c in self.get_by_date_range(start_date, end_date)}

    def all_completed(self, target_date: date, activity_ids: List[str]) -> bool:
        """True if every listed activity has a completion on the date; False for an empty list"""
        if not activity_ids:
            return False
        completed_ids = {c.activity_id for c in self.get_by_date(target_date)}
        return all(activity_id in completed_ids for activity_id in activity_ids)

    def get_completion_streak(self, end_date: Optional[date] = None) -> int:
        """Consecutive days with at least one completion, counting back from end_date"""
        return StreakService(self.db).get_completion_streak(end_date)

    def toggle_completion(self, activity_id: str, today: Optional[date] = None) -> ToggleResult:
        """
        Toggle an activity for today and book its points.

        Toggle on: create the completion, add the activity's points to the
        score, then add them to today's earned total. Toggle off reverses
        all three. Achievements are checked after a toggle on, with the
        score seen before the change as previous_score.

        A call made while another toggle is in progress is dropped and
        returns an ignored result.

        Raises:
            ActivityNotFoundException: If activity does not exist
        """
        if not toggle_guard.try_acquire():
            logger.debug(f"Toggle for activity {activity_id} dropped: another toggle in progress")
            return ToggleResult(ignored=True)

        try:
            return self._toggle_completion(activity_id, today)
        finally:
            toggle_guard.release()

    def _toggle_completion(self, activity_id: str, today: Optional[date]) -> ToggleResult:
        if today is None:
            today = DateService.today()

        activity = self.activity_service.get_by_id(activity_id)
        existing = self.find_by_activity_and_date(activity_id, today)
        previous_score = self.score_service.get_score()

        try:
            if existing:
                self.repo.delete(self.db, existing, commit=False)
                completion = None
                points_change = -activity.points
                new_score = self.score_service.subtract_points(activity.points, commit=False)
            else:
                completion = self._add(activity_id, today)
                points_change = activity.points
                new_score = self.score_service.add_points(activity.points, commit=False)

            self.score_service.add_earned_today(points_change, today=today, commit=False)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateCompletionException(activity_id, today)
        except Exception:
            self.db.rollback()
            raise

        new_achievements: List[str] = []
        if not existing:
            new_achievements = AchievementService(self.db).check_for_new_achievements(
                previous_score=previous_score, today=today
            )

        return ToggleResult(
            completed=not existing,
            completion=CompletionResponse.model_validate(completion) if completion else None,
            score=new_score,
            points_change=points_change,
            break_even=self.score_service.get_break_even_status(today),
            new_achievements=new_achievements,
        )
