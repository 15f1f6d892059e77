from fastapi import FastAPI, Depends, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import List
from datetime import date, timedelta
import logging
import os
from pathlib import Path

from yourscore.database import engine, get_db, Base
from yourscore import models  # noqa: F401  registers all tables
from yourscore.schemas import (
    SettingsUpdate, SettingsResponse,
    CategoryCreate, CategoryUpdate, CategoryResponse, CategoryReorder,
    ActivityCreate, ActivityUpdate, ActivityResponse,
    CompletionResponse,
    ScoreHistoryResponse, ScoreUpdate, ScoreSummary, BreakEvenStatus,
    DecayPreview, DecaySimulation,
    StreakSummary,
    AchievementStatus, AchievementProgress,
    SessionOpenResponse, ToggleResult,
)
from yourscore.auth import verify_api_key
from yourscore.auto_migrate import auto_migrate
from yourscore.exceptions import (
    ValidationException,
    ActivityNotFoundException,
    CategoryNotFoundException,
    AchievementNotFoundException,
    ProtectedCategoryException,
)
from yourscore.services.date_service import DateService
from yourscore.services.settings_service import SettingsService
from yourscore.services.score_service import ScoreService
from yourscore.services.decay_service import DecayService, simulate_decay
from yourscore.services.streak_service import StreakService
from yourscore.services.achievement_service import AchievementService
from yourscore.services.activity_service import ActivityService, CategoryService
from yourscore.services.completion_service import CompletionService
from yourscore.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV, DEFAULT_LOG_FILE, CORS_ALLOWED_ORIGINS
)

LOG_DIR = os.getenv("YOURSCORE_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("YOURSCORE_LOG_FILE", DEFAULT_LOG_FILE)

try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("yourscore")

Base.metadata.create_all(bind=engine)

try:
    auto_migrate()
except Exception as e:
    logger.error(f"Auto-migration failed: {e}")
    # Keep serving with the existing schema

app = FastAPI(
    title="YourScore API",
    description="Personal score tracker with daily decay, streaks and achievements",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    logger.info(f"YourScore API started. Logging to: {log_path}")


# Domain errors
@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "field": exc.field},
    )


@app.exception_handler(ActivityNotFoundException)
@app.exception_handler(CategoryNotFoundException)
@app.exception_handler(AchievementNotFoundException)
async def not_found_exception_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ProtectedCategoryException)
async def protected_category_exception_handler(request: Request, exc: ProtectedCategoryException):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "YourScore API", "status": "active"}


# Session
@app.post("/api/session/open", response_model=SessionOpenResponse, dependencies=[Depends(verify_api_key)])
def open_session(db: Session = Depends(get_db)):
    """Apply pending decay for the current day, then evaluate achievements"""
    decay = DecayService(db).check_and_apply_decay()
    new_achievements = AchievementService(db).check_for_new_achievements()
    return SessionOpenResponse(decay=decay, new_achievements=new_achievements)


# Score
@app.get("/api/score", response_model=ScoreSummary, dependencies=[Depends(verify_api_key)])
def get_score(db: Session = Depends(get_db)):
    return ScoreService(db).get_summary()


@app.put("/api/score", response_model=ScoreSummary, dependencies=[Depends(verify_api_key)])
def set_score(score_update: ScoreUpdate, db: Session = Depends(get_db)):
    """Overwrite the main score (manual correction)"""
    score_service = ScoreService(db)
    score_service.set_score(score_update.score)
    return score_service.get_summary()


@app.get("/api/score/break-even", response_model=BreakEvenStatus, dependencies=[Depends(verify_api_key)])
def get_break_even(db: Session = Depends(get_db)):
    return ScoreService(db).get_break_even_status()


@app.get("/api/score/history", response_model=List[ScoreHistoryResponse], dependencies=[Depends(verify_api_key)])
def get_score_history(days: int = Query(30, ge=1, le=365), db: Session = Depends(get_db)):
    """Score history for the last N days, oldest first"""
    today = DateService.today()
    return ScoreService(db).get_history_range(today - timedelta(days=days - 1), today)


@app.get("/api/score/history/{target_date}", response_model=ScoreHistoryResponse, dependencies=[Depends(verify_api_key)])
def get_score_history_day(target_date: date, db: Session = Depends(get_db)):
    record = ScoreService(db).get_history_by_date(target_date)
    if not record:
        raise HTTPException(status_code=404, detail="No history for this date")
    return record


# Settings
@app.get("/api/settings", response_model=SettingsResponse, dependencies=[Depends(verify_api_key)])
def get_settings(db: Session = Depends(get_db)):
    return SettingsService(db).get()


@app.put("/api/settings", response_model=SettingsResponse, dependencies=[Depends(verify_api_key)])
def update_settings(settings_update: SettingsUpdate, db: Session = Depends(get_db)):
    return SettingsService(db).update(settings_update)


# Decay
@app.get("/api/decay/preview", response_model=DecayPreview, dependencies=[Depends(verify_api_key)])
def preview_decay(db: Session = Depends(get_db)):
    """Decay the next session open would apply"""
    return DecayService(db).preview_decay()


@app.get("/api/decay/simulate", response_model=DecaySimulation, dependencies=[Depends(verify_api_key)])
def simulate_decay_endpoint(days: int = Query(7, ge=0, le=365), db: Session = Depends(get_db)):
    decay_service = DecayService(db)
    return simulate_decay(
        ScoreService(db).get_score(),
        decay_service.get_decay_amount(),
        days,
    )


# Streaks
@app.get("/api/streaks", response_model=StreakSummary, dependencies=[Depends(verify_api_key)])
def get_streaks(db: Session = Depends(get_db)):
    return StreakService(db).get_summary()


# Achievements
@app.get("/api/achievements", response_model=List[AchievementStatus], dependencies=[Depends(verify_api_key)])
def get_achievements(db: Session = Depends(get_db)):
    return AchievementService(db).get_all_achievements_with_status()


@app.get("/api/achievements/progress", response_model=AchievementProgress, dependencies=[Depends(verify_api_key)])
def get_achievement_progress(db: Session = Depends(get_db)):
    return AchievementService(db).get_achievement_progress()


# Categories
@app.get("/api/categories", response_model=List[CategoryResponse], dependencies=[Depends(verify_api_key)])
def get_categories(db: Session = Depends(get_db)):
    return CategoryService(db).seed_defaults()


@app.post("/api/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
def create_category(category: CategoryCreate, db: Session = Depends(get_db)):
    return CategoryService(db).create(category)


@app.post("/api/categories/reorder", response_model=List[CategoryResponse], dependencies=[Depends(verify_api_key)])
def reorder_categories(reorder: CategoryReorder, db: Session = Depends(get_db)):
    category_service = CategoryService(db)
    category_service.reorder(reorder.ordered_ids)
    return category_service.get_all()


@app.put("/api/categories/{category_id}", response_model=CategoryResponse, dependencies=[Depends(verify_api_key)])
def update_category(category_id: str, category_update: CategoryUpdate, db: Session = Depends(get_db)):
    return CategoryService(db).update(category_id, category_update)


@app.delete("/api/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(verify_api_key)])
def delete_category(category_id: str, db: Session = Depends(get_db)):
    """Delete a category; its activities move to Uncategorized"""
    CategoryService(db).delete(category_id)


# Activities
@app.get("/api/activities", response_model=List[ActivityResponse], dependencies=[Depends(verify_api_key)])
def get_activities(include_archived: bool = False, db: Session = Depends(get_db)):
    activity_service = ActivityService(db)
    if include_archived:
        return activity_service.get_all_including_archived()
    return activity_service.get_all()


@app.post("/api/activities", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
def create_activity(activity: ActivityCreate, db: Session = Depends(get_db)):
    return ActivityService(db).create(activity)


@app.get("/api/activities/{activity_id}", response_model=ActivityResponse, dependencies=[Depends(verify_api_key)])
def get_activity(activity_id: str, db: Session = Depends(get_db)):
    return ActivityService(db).get_by_id(activity_id)


@app.put("/api/activities/{activity_id}", response_model=ActivityResponse, dependencies=[Depends(verify_api_key)])
def update_activity(activity_id: str, activity_update: ActivityUpdate, db: Session = Depends(get_db)):
    return ActivityService(db).update(activity_id, activity_update)


@app.delete("/api/activities/{activity_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(verify_api_key)])
def delete_activity(activity_id: str, db: Session = Depends(get_db)):
    ActivityService(db).delete(activity_id)


@app.post("/api/activities/{activity_id}/archive", response_model=ActivityResponse, dependencies=[Depends(verify_api_key)])
def archive_activity(activity_id: str, db: Session = Depends(get_db)):
    return ActivityService(db).archive(activity_id)


@app.post("/api/activities/{activity_id}/unarchive", response_model=ActivityResponse, dependencies=[Depends(verify_api_key)])
def unarchive_activity(activity_id: str, db: Session = Depends(get_db)):
    return ActivityService(db).unarchive(activity_id)


@app.post("/api/activities/{activity_id}/toggle", response_model=ToggleResult, dependencies=[Depends(verify_api_key)])
def toggle_activity(activity_id: str, db: Session = Depends(get_db)):
    """Toggle today's completion of an activity and book its points"""
    return CompletionService(db).toggle_completion(activity_id)


# Completions
@app.get("/api/completions", response_model=List[CompletionResponse], dependencies=[Depends(verify_api_key)])
def get_completions(target_date: date = None, db: Session = Depends(get_db)):
    """Completions for a day, defaults to today"""
    return CompletionService(db).get_by_date(target_date)
