"""
Tests for ScoreService.

Tests cover:
1. Main score deltas
2. Merge-on-write history records
3. Earned bookkeeping against the live score
4. Break-even status and percentage rounding
5. Highest/lowest score
"""
import pytest
from types import SimpleNamespace

from yourscore.services.score_service import (
    ScoreService,
    calculate_break_even,
    get_break_even_percent,
    merge_daily_record,
)
from yourscore.tests.conftest import create_history


class TestMainScore:
    """Tests for score deltas"""

    def test_add_and_subtract_points(self, db_session, default_settings):
        """Deltas return the new score"""
        service = ScoreService(db_session)

        assert service.add_points(30) == 30
        assert service.subtract_points(50) == -20
        assert service.get_score() == -20

    def test_set_score_allows_negative(self, db_session, default_settings):
        """No validation beyond integer type"""
        service = ScoreService(db_session)
        service.set_score(-500)
        assert service.get_score() == -500

    def test_reset(self, db_session, default_settings):
        """reset() sets the score back to zero"""
        service = ScoreService(db_session)
        service.set_score(42)
        service.reset()
        assert service.get_score() == 0

    def test_uncommitted_delta_is_visible_in_session(self, db_session, default_settings):
        """commit=False still updates the in-session score"""
        service = ScoreService(db_session)
        service.add_points(15, commit=False)
        assert service.get_score() == 15
        db_session.rollback()
        assert service.get_score() == 0


class TestRecordHistory:
    """Tests for merge-on-write upserts"""

    def test_creates_record_with_defaults(self, db_session, default_settings, today):
        """Missing fields default to 0 and the current score"""
        service = ScoreService(db_session)
        service.set_score(70)

        record = service.record_history(target_date=today, decay=10)

        assert record.date == today
        assert record.score == 70
        assert record.earned == 0
        assert record.decay == 10

    def test_unspecified_fields_keep_existing_values(self, db_session, default_settings, today):
        """Merging keeps earned when only decay and score change"""
        create_history(db_session, today, earned=25, decay=0, score=100)
        service = ScoreService(db_session)

        record = service.record_history(target_date=today, decay=10, score=90)

        assert record.earned == 25
        assert record.decay == 10
        assert record.score == 90
        assert len(service.get_all_history()) == 1

    def test_merge_daily_record_fallback_only_called_when_needed(self):
        """fallback_score is the last resort for score"""
        calls = []

        def fallback():
            calls.append(1)
            return 5

        existing = SimpleNamespace(score=40, earned=3, decay=None)
        values = merge_daily_record(existing, fallback, earned=7)

        assert values == {"score": 40, "earned": 7, "decay": 0}
        assert calls == []

        values = merge_daily_record(None, fallback)
        assert values == {"score": 5, "earned": 0, "decay": 0}
        assert calls == [1]

    def test_history_range_is_ascending(self, db_session, default_settings, today, yesterday):
        """Range results are oldest first"""
        create_history(db_session, today, score=2)
        create_history(db_session, yesterday, score=1)
        service = ScoreService(db_session)

        result = service.get_history_range(yesterday, today)

        assert [r.date for r in result] == [yesterday, today]

    def test_clear_history(self, db_session, default_settings, today):
        """Bulk reset removes every record"""
        create_history(db_session, today)
        service = ScoreService(db_session)
        service.clear_history()
        assert service.get_all_history() == []


class TestEarnedToday:
    """Tests for add_earned_today"""

    def test_adds_to_earned_and_writes_live_score(self, db_session, default_settings, today):
        """Record score is the score at write time"""
        service = ScoreService(db_session)

        service.add_points(10)
        service.add_earned_today(10, today=today)
        service.add_points(5)
        record = service.add_earned_today(5, today=today)

        assert record.earned == 15
        assert record.score == 15
        assert service.get_earned_today(today) == 15

    def test_negative_points_undo_earned(self, db_session, default_settings, today):
        """Undoing a completion books negative earned points"""
        create_history(db_session, today, earned=20, decay=10, score=50)
        service = ScoreService(db_session)

        record = service.add_earned_today(-20, today=today)

        assert record.earned == 0
        assert record.decay == 10

    def test_no_record_means_zero(self, db_session, default_settings, today):
        """Absent record reads as earned=0, decay=0"""
        service = ScoreService(db_session)
        assert service.get_earned_today(today) == 0
        assert service.get_decay_today(today) == 0


class TestBreakEven:
    """Tests for break-even computation"""

    def test_below_break_even(self):
        """decay=20, earned=15"""
        status = calculate_break_even(15, 20)
        assert status.break_even is False
        assert status.remaining == 5
        assert status.surplus == 0
        assert status.percent == 75

    def test_above_break_even(self):
        """decay=20, earned=25"""
        status = calculate_break_even(25, 20)
        assert status.break_even is True
        assert status.remaining == 0
        assert status.surplus == 5
        assert status.percent == 100

    def test_exactly_break_even(self):
        """earned == decay is break-even with no surplus"""
        status = calculate_break_even(20, 20)
        assert status.break_even is True
        assert status.remaining == 0
        assert status.surplus == 0
        assert status.percent == 100

    def test_nothing_earned(self):
        """earned=0 gives 0 percent"""
        status = calculate_break_even(0, 20)
        assert status.break_even is False
        assert status.remaining == 20
        assert status.percent == 0

    @pytest.mark.parametrize("earned", [0, 1, 50, 1000])
    def test_zero_decay_is_always_100_percent(self, earned):
        """With decay=0 percent is 100 regardless of earned"""
        status = calculate_break_even(earned, 0)
        assert status.percent == 100
        assert status.break_even is True

    def test_percent_rounds_half_up(self):
        """1/8 = 12.5% rounds to 13"""
        assert get_break_even_percent(1, 8) == 13
        assert get_break_even_percent(1, 3) == 33

    def test_status_uses_settings_decay_amount(self, db_session, default_settings, today):
        """Scenario: decay 20, earned 15 then 25"""
        default_settings.decay_amount = 20
        db_session.commit()
        service = ScoreService(db_session)

        service.add_earned_today(15, today=today)
        status = service.get_break_even_status(today)
        assert (status.break_even, status.remaining, status.surplus, status.percent) == (False, 5, 0, 75)

        service.add_earned_today(10, today=today)
        status = service.get_break_even_status(today)
        assert (status.break_even, status.remaining, status.surplus, status.percent) == (True, 0, 5, 100)


class TestHighestLowest:
    """Tests for score extremes"""

    def test_empty_history_returns_current_score(self, db_session, default_settings):
        """Both extremes equal the current score"""
        service = ScoreService(db_session)
        service.set_score(33)
        assert service.get_highest_score() == 33
        assert service.get_lowest_score() == 33

    def test_includes_history_and_current(self, db_session, default_settings, today, yesterday):
        """Extremes span history and the live score"""
        create_history(db_session, yesterday, score=120)
        create_history(db_session, today, score=-40)
        service = ScoreService(db_session)
        service.set_score(10)

        assert service.get_highest_score() == 120
        assert service.get_lowest_score() == -40

    def test_summary(self, db_session, default_settings, today):
        """Summary bundles score, extremes and today's status"""
        create_history(db_session, today, earned=4, decay=10, score=90)
        service = ScoreService(db_session)
        service.set_score(90)

        summary = service.get_summary(today)

        assert summary.score == 90
        assert summary.earned_today == 4
        assert summary.decay_today == 10
        assert summary.break_even.remaining == 6
