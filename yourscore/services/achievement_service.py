"""
Achievement service.
Holds the static achievement table and the unlock evaluator.

Unlocking is "unlock if not present": an achievement ID is stored at most
once and never removed by evaluation, so running the full check at any time
is safe and returns nothing for achievements that are already unlocked.
"""
import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from yourscore.constants import (
    ACHIEVEMENT_SCORE_MILESTONE,
    ACHIEVEMENT_STREAK,
    ACHIEVEMENT_PERFECT_WEEK,
    ACHIEVEMENT_RECOVERY,
    ACHIEVEMENT_FIRST_COMPLETION,
    ACHIEVEMENT_ACTIVITY_COUNT,
    PERFECT_WEEK_TARGET,
)
from yourscore.exceptions import AchievementNotFoundException
from yourscore.models import AchievementUnlock
from yourscore.repositories.achievement_repository import AchievementRepository
from yourscore.repositories.completion_repository import CompletionRepository
from yourscore.schemas import (
    AchievementDefinitionResponse,
    AchievementProgress,
    AchievementStatus,
    MilestoneProgress,
    PerfectStreakProgress,
)
from yourscore.services.date_service import DateService
from yourscore.services.score_service import ScoreService
from yourscore.services.streak_service import StreakService

logger = logging.getLogger("yourscore.achievements")


@dataclass(frozen=True)
class AchievementDefinition:
    """Static definition of an achievement"""

    id: str
    name: str
    description: str
    icon: str
    type: str
    threshold: int


_DEFINITIONS = [
    # Score milestones
    AchievementDefinition(
        id="score_100",
        name="Century",
        description="Reach 100 points",
        icon="💯",
        type=ACHIEVEMENT_SCORE_MILESTONE,
        threshold=100,
    ),
    AchievementDefinition(
        id="score_500",
        name="High Achiever",
        description="Reach 500 points",
        icon="⭐",
        type=ACHIEVEMENT_SCORE_MILESTONE,
        threshold=500,
    ),
    AchievementDefinition(
        id="score_1000",
        name="Thousand Club",
        description="Reach 1,000 points",
        icon="🏆",
        type=ACHIEVEMENT_SCORE_MILESTONE,
        threshold=1000,
    ),
    # Streaks of successful days (earned >= decay)
    AchievementDefinition(
        id="streak_3",
        name="Getting Started",
        description="Complete 3 successful days in a row",
        icon="🔥",
        type=ACHIEVEMENT_STREAK,
        threshold=3,
    ),
    AchievementDefinition(
        id="streak_7",
        name="Week Warrior",
        description="Complete 7 successful days in a row",
        icon="🔥",
        type=ACHIEVEMENT_STREAK,
        threshold=7,
    ),
    AchievementDefinition(
        id="streak_14",
        name="Fortnight Fighter",
        description="Complete 14 successful days in a row",
        icon="🔥",
        type=ACHIEVEMENT_STREAK,
        threshold=14,
    ),
    AchievementDefinition(
        id="streak_30",
        name="Monthly Master",
        description="Complete 30 successful days in a row",
        icon="🔥",
        type=ACHIEVEMENT_STREAK,
        threshold=30,
    ),
    AchievementDefinition(
        id="perfect_week",
        name="Perfect Week",
        description="Complete all activities every day for 7 consecutive days",
        icon="🌟",
        type=ACHIEVEMENT_PERFECT_WEEK,
        threshold=PERFECT_WEEK_TARGET,
    ),
    # Bounce back from a negative score
    AchievementDefinition(
        id="recovery",
        name="Comeback Kid",
        description="Recover from a negative score to positive",
        icon="🚀",
        type=ACHIEVEMENT_RECOVERY,
        threshold=0,
    ),
    AchievementDefinition(
        id="first_completion",
        name="First Step",
        description="Complete your first activity",
        icon="👣",
        type=ACHIEVEMENT_FIRST_COMPLETION,
        threshold=1,
    ),
    # Total completion counts
    AchievementDefinition(
        id="activities_50",
        name="Half Century",
        description="Complete 50 activities total",
        icon="📊",
        type=ACHIEVEMENT_ACTIVITY_COUNT,
        threshold=50,
    ),
    AchievementDefinition(
        id="activities_100",
        name="Activity Centurion",
        description="Complete 100 activities total",
        icon="📊",
        type=ACHIEVEMENT_ACTIVITY_COUNT,
        threshold=100,
    ),
    AchievementDefinition(
        id="activities_500",
        name="Habit Hero",
        description="Complete 500 activities total",
        icon="🦸",
        type=ACHIEVEMENT_ACTIVITY_COUNT,
        threshold=500,
    ),
]

ACHIEVEMENTS: Dict[str, AchievementDefinition] = {a.id: a for a in _DEFINITIONS}


def get_achievement_definitions() -> Dict[str, AchievementDefinition]:
    return ACHIEVEMENTS


def get_achievement_by_id(achievement_id: str) -> Optional[AchievementDefinition]:
    return ACHIEVEMENTS.get(achievement_id)


def _definitions_of_type(achievement_type: str) -> List[AchievementDefinition]:
    return [a for a in ACHIEVEMENTS.values() if a.type == achievement_type]


def _next_milestone(achievement_type: str, current: int) -> Optional[AchievementDefinition]:
    """Lowest-threshold definition of a type not yet reached by current"""
    pending = [a for a in _definitions_of_type(achievement_type) if a.threshold > current]
    if not pending:
        return None
    return min(pending, key=lambda a: a.threshold)


def _milestone_progress(achievement_type: str, current: int) -> MilestoneProgress:
    next_achievement = _next_milestone(achievement_type, current)
    return MilestoneProgress(
        current=current,
        next=next_achievement.threshold if next_achievement else None,
        next_achievement=(
            AchievementDefinitionResponse(**asdict(next_achievement))
            if next_achievement else None
        ),
    )


def check_recovery_condition(previous_score: int, current_score: int) -> bool:
    """True when the score went from negative to zero or above"""
    return previous_score < 0 and current_score >= 0


class AchievementService:
    """Service for achievement tracking and unlocking"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AchievementRepository()
        self.completion_repo = CompletionRepository()
        self.score_service = ScoreService(db)
        self.streak_service = StreakService(db)

    def get_unlocked_achievements(self) -> List[AchievementUnlock]:
        return self.repo.get_all(self.db)

    def is_unlocked(self, achievement_id: str) -> bool:
        return self.repo.get_by_id(self.db, achievement_id) is not None

    def unlock(self, achievement_id: str) -> AchievementUnlock:
        """
        Unlock an achievement.

        Returns:
            The unlock record, the existing one if already unlocked

        Raises:
            AchievementNotFoundException: If the ID has no definition
        """
        if achievement_id not in ACHIEVEMENTS:
            raise AchievementNotFoundException(achievement_id)

        existing = self.repo.get_by_id(self.db, achievement_id)
        if existing:
            return existing

        record = AchievementUnlock(id=achievement_id, unlocked_at=DateService.timestamp())
        record = self.repo.create(self.db, record)
        logger.info(f"Achievement unlocked: {achievement_id}")
        return record

    def get_total_completion_count(self) -> int:
        return self.completion_repo.count(self.db)

    def _unlock_new(self, achievement_id: str, newly_unlocked: List[str]) -> None:
        if not self.is_unlocked(achievement_id):
            self.unlock(achievement_id)
            newly_unlocked.append(achievement_id)

    def check_for_new_achievements(
        self,
        previous_score: Optional[int] = None,
        today: Optional[date] = None,
    ) -> List[str]:
        """
        Unlock every achievement whose condition now holds.

        Args:
            previous_score: Score observed before the triggering change;
                recovery is only evaluated when it is given
            today: Reference day for streaks, defaults to today

        Returns:
            IDs unlocked during this call, in order: score milestones,
            streaks, perfect week, recovery, first completion, activity counts
        """
        if today is None:
            today = DateService.today()

        newly_unlocked: List[str] = []
        current_score = self.score_service.get_score()

        for achievement in _definitions_of_type(ACHIEVEMENT_SCORE_MILESTONE):
            if current_score >= achievement.threshold:
                self._unlock_new(achievement.id, newly_unlocked)

        streak = self.streak_service.get_successful_day_streak(today)
        for achievement in _definitions_of_type(ACHIEVEMENT_STREAK):
            if streak >= achievement.threshold:
                self._unlock_new(achievement.id, newly_unlocked)

        perfect_streak = self.streak_service.get_perfect_day_streak(today)
        if perfect_streak >= PERFECT_WEEK_TARGET:
            self._unlock_new("perfect_week", newly_unlocked)

        if previous_score is not None:
            if check_recovery_condition(previous_score, current_score):
                self._unlock_new("recovery", newly_unlocked)

        completion_count = self.get_total_completion_count()
        for achievement in _definitions_of_type(ACHIEVEMENT_FIRST_COMPLETION):
            if completion_count >= achievement.threshold:
                self._unlock_new(achievement.id, newly_unlocked)

        for achievement in _definitions_of_type(ACHIEVEMENT_ACTIVITY_COUNT):
            if completion_count >= achievement.threshold:
                self._unlock_new(achievement.id, newly_unlocked)

        return newly_unlocked

    def get_achievement_progress(self, today: Optional[date] = None) -> AchievementProgress:
        """Current values and next targets, for "next goal" previews"""
        if today is None:
            today = DateService.today()

        current_score = self.score_service.get_score()
        streak = self.streak_service.get_successful_day_streak(today)
        perfect_streak = self.streak_service.get_perfect_day_streak(today)
        completion_count = self.get_total_completion_count()
        unlocked_ids = [record.id for record in self.get_unlocked_achievements()]

        return AchievementProgress(
            score=_milestone_progress(ACHIEVEMENT_SCORE_MILESTONE, current_score),
            streak=_milestone_progress(ACHIEVEMENT_STREAK, streak),
            perfect_streak=PerfectStreakProgress(
                current=perfect_streak,
                target=PERFECT_WEEK_TARGET,
                unlocked="perfect_week" in unlocked_ids,
            ),
            completions=_milestone_progress(ACHIEVEMENT_ACTIVITY_COUNT, completion_count),
            unlocked_count=len(unlocked_ids),
            total_count=len(ACHIEVEMENTS),
            unlocked_ids=unlocked_ids,
        )

    def get_all_achievements_with_status(self) -> List[AchievementStatus]:
        """Every definition with its unlocked flag and time"""
        unlocked = {record.id: record for record in self.get_unlocked_achievements()}
        return [
            AchievementStatus(
                **asdict(achievement),
                unlocked=achievement.id in unlocked,
                unlocked_at=unlocked[achievement.id].unlocked_at if achievement.id in unlocked else None,
            )
            for achievement in ACHIEVEMENTS.values()
        ]

    def clear_achievements(self) -> None:
        """Delete all unlock records (bulk reset)"""
        self.repo.clear(self.db)
