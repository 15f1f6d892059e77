from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import List, Optional


# Settings schemas
class SettingsUpdate(BaseModel):
    decay_amount: Optional[int] = Field(None, ge=0)


class SettingsResponse(BaseModel):
    decay_amount: int
    main_score: int
    first_use_date: Optional[date] = None
    last_active_date: Optional[date] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Category schemas
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    order: Optional[int] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    order: Optional[int] = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    order: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryReorder(BaseModel):
    ordered_ids: List[str]


# Activity schemas
class ActivityCreate(BaseModel):
    name: str = Field(..., max_length=200)
    description: Optional[str] = None
    points: float
    category_id: Optional[str] = None
    order: int = 0


class ActivityUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    points: Optional[float] = None
    category_id: Optional[str] = None
    archived: Optional[bool] = None
    order: Optional[int] = None


class ActivityResponse(BaseModel):
    id: str
    name: str
    description: str = ""
    points: int
    category_id: str
    archived: bool = False
    order: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Completion schemas
class CompletionResponse(BaseModel):
    id: str
    activity_id: str
    date: date
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Score schemas
class ScoreHistoryResponse(BaseModel):
    date: date
    score: int
    earned: int = 0
    decay: int = 0

    class Config:
        from_attributes = True


class ScoreUpdate(BaseModel):
    score: int


class BreakEvenStatus(BaseModel):
    break_even: bool
    remaining: int
    surplus: int
    earned: int
    decay: int
    percent: int


class ScoreSummary(BaseModel):
    score: int
    highest: int
    lowest: int
    earned_today: int
    decay_today: int
    break_even: BreakEvenStatus


# Decay schemas
class DecayResult(BaseModel):
    applied: bool
    decay: int = 0
    days_away: int = 0
    is_first_day: bool = False
    previous_score: Optional[int] = None
    new_score: Optional[int] = None
    message: str = ""


class DecayPreview(BaseModel):
    would_apply: bool
    decay: int = 0
    days_away: int = 0
    reason: str = ""


class DecaySimulation(BaseModel):
    starting_score: int
    decay_per_day: int
    days: int
    total_decay: int
    final_score: int


# Streak schemas
class StreakSummary(BaseModel):
    successful_days: int
    perfect_days: int
    completion_days: int


# Achievement schemas
class AchievementDefinitionResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    type: str
    threshold: int


class AchievementStatus(AchievementDefinitionResponse):
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None


class MilestoneProgress(BaseModel):
    current: int
    next: Optional[int] = None
    next_achievement: Optional[AchievementDefinitionResponse] = None


class PerfectStreakProgress(BaseModel):
    current: int
    target: int
    unlocked: bool


class AchievementProgress(BaseModel):
    score: MilestoneProgress
    streak: MilestoneProgress
    perfect_streak: PerfectStreakProgress
    completions: MilestoneProgress
    unlocked_count: int
    total_count: int
    unlocked_ids: List[str]


# Session / toggle schemas
class SessionOpenResponse(BaseModel):
    decay: DecayResult
    new_achievements: List[str] = []


class ToggleResult(BaseModel):
    ignored: bool = False
    completed: Optional[bool] = None
    completion: Optional[CompletionResponse] = None
    score: Optional[int] = None
    points_change: int = 0
    break_even: Optional[BreakEvenStatus] = None
    new_achievements: List[str] = []
