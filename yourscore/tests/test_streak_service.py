"""
Tests for StreakService.

Tests cover:
1. Successful-day streak (gaps, future records, vacuous success)
2. Perfect-day streak (live activity set, archiving)
3. Completion streak
"""
from datetime import timedelta

from yourscore.constants import MAX_STREAK_LOOKBACK_DAYS
from yourscore.models import Completion
from yourscore.services.streak_service import StreakService
from yourscore.tests.conftest import create_activity, create_completion, create_history


class TestSuccessfulDayStreak:
    """Tests for get_successful_day_streak"""

    def test_empty_history(self, db_session, today):
        """No history gives 0"""
        assert StreakService(db_session).get_successful_day_streak(today) == 0

    def test_three_days_then_gap(self, db_session, today):
        """D-2..D successful with no record at D-3 gives 3"""
        for offset in range(3):
            create_history(db_session, today - timedelta(days=offset), earned=15, decay=10)
        create_history(db_session, today - timedelta(days=4), earned=15, decay=10)

        assert StreakService(db_session).get_successful_day_streak(today) == 3

    def test_failed_day_ends_streak(self, db_session, today):
        """earned < decay stops the scan"""
        create_history(db_session, today, earned=10, decay=10)
        create_history(db_session, today - timedelta(days=1), earned=5, decay=10)
        create_history(db_session, today - timedelta(days=2), earned=20, decay=10)

        assert StreakService(db_session).get_successful_day_streak(today) == 1

    def test_zero_earned_zero_decay_counts(self, db_session, today, yesterday):
        """earned == decay == 0 is a successful day"""
        create_history(db_session, today, earned=0, decay=0)
        create_history(db_session, yesterday, earned=0, decay=0)

        assert StreakService(db_session).get_successful_day_streak(today) == 2

    def test_future_records_are_skipped(self, db_session, today, yesterday):
        """Records after today are ignored"""
        create_history(db_session, today + timedelta(days=3), earned=0, decay=50)
        create_history(db_session, today, earned=10, decay=10)
        create_history(db_session, yesterday, earned=10, decay=10)

        assert StreakService(db_session).get_successful_day_streak(today) == 2

    def test_starts_at_latest_record_not_today(self, db_session, today):
        """Without a record for today the scan starts at the latest earlier record"""
        create_history(db_session, today - timedelta(days=2), earned=10, decay=10)
        create_history(db_session, today - timedelta(days=3), earned=10, decay=10)

        assert StreakService(db_session).get_successful_day_streak(today) == 2

    def test_only_future_records(self, db_session, today):
        """Nothing on or before today gives 0"""
        create_history(db_session, today + timedelta(days=1), earned=10, decay=0)

        assert StreakService(db_session).get_successful_day_streak(today) == 0


class TestPerfectDayStreak:
    """Tests for get_perfect_day_streak"""

    def test_no_active_activities(self, db_session, today):
        """Zero active activities gives 0 even with completions"""
        archived = create_activity(db_session, archived=True)
        for offset in range(10):
            create_completion(db_session, archived.id, today - timedelta(days=offset))

        assert StreakService(db_session).get_perfect_day_streak(today) == 0

    def test_every_activity_completed(self, db_session, today):
        """Days where all active activities are completed"""
        read = create_activity(db_session, name="Read")
        run = create_activity(db_session, name="Run")
        for offset in range(4):
            day = today - timedelta(days=offset)
            create_completion(db_session, read.id, day)
            create_completion(db_session, run.id, day)
        create_completion(db_session, read.id, today - timedelta(days=4))

        assert StreakService(db_session).get_perfect_day_streak(today) == 4

    def test_today_incomplete(self, db_session, today, yesterday):
        """The scan starts at today, so an incomplete today gives 0"""
        read = create_activity(db_session)
        create_completion(db_session, read.id, yesterday)

        assert StreakService(db_session).get_perfect_day_streak(today) == 0

    def test_archiving_changes_streak_retroactively(self, db_session, today):
        """Uses the live activity set against past completions"""
        read = create_activity(db_session, name="Read")
        run = create_activity(db_session, name="Run")
        for offset in range(5):
            create_completion(db_session, read.id, today - timedelta(days=offset))
        create_completion(db_session, run.id, today)

        service = StreakService(db_session)
        assert service.get_perfect_day_streak(today) == 1

        run.archived = True
        db_session.commit()
        assert service.get_perfect_day_streak(today) == 5

    def test_bounded_by_lookback_window(self, db_session, today):
        """More than 365 perfect days still counts at most 365"""
        read = create_activity(db_session)
        for offset in range(400):
            db_session.add(Completion(activity_id=read.id, date=today - timedelta(days=offset)))
        db_session.commit()

        assert StreakService(db_session).get_perfect_day_streak(today) == MAX_STREAK_LOOKBACK_DAYS == 365

    def test_full_window_of_perfect_days(self, db_session, today):
        """Exactly 365 perfect days are all counted"""
        read = create_activity(db_session)
        for offset in range(365):
            db_session.add(Completion(activity_id=read.id, date=today - timedelta(days=offset)))
        db_session.commit()

        assert StreakService(db_session).get_perfect_day_streak(today) == 365

    def test_adding_activity_breaks_streak(self, db_session, today):
        """A new activity without completions resets the streak"""
        read = create_activity(db_session, name="Read")
        create_completion(db_session, read.id, today)
        service = StreakService(db_session)
        assert service.get_perfect_day_streak(today) == 1

        create_activity(db_session, name="Meditate")
        assert service.get_perfect_day_streak(today) == 0


class TestCompletionStreak:
    """Tests for get_completion_streak"""

    def test_consecutive_days(self, db_session, today):
        """Any completion per day counts"""
        read = create_activity(db_session, name="Read")
        run = create_activity(db_session, name="Run")
        create_completion(db_session, read.id, today)
        create_completion(db_session, run.id, today - timedelta(days=1))
        create_completion(db_session, read.id, today - timedelta(days=2))
        create_completion(db_session, read.id, today - timedelta(days=4))

        assert StreakService(db_session).get_completion_streak(today) == 3

    def test_missing_end_date(self, db_session, today, yesterday):
        """No completion on end_date gives 0"""
        read = create_activity(db_session)
        create_completion(db_session, read.id, yesterday)

        assert StreakService(db_session).get_completion_streak(today) == 0
        assert StreakService(db_session).get_completion_streak(yesterday) == 1

    def test_archived_activities_still_count(self, db_session, today):
        """Completion streak ignores the activity set"""
        archived = create_activity(db_session, archived=True)
        create_completion(db_session, archived.id, today)

        assert StreakService(db_session).get_completion_streak(today) == 1

    def test_summary(self, db_session, today):
        """Summary reports all three streaks"""
        read = create_activity(db_session)
        create_completion(db_session, read.id, today)
        create_history(db_session, today, earned=10, decay=10)

        summary = StreakService(db_session).get_summary(today)

        assert summary.successful_days == 1
        assert summary.perfect_days == 1
        assert summary.completion_days == 1
