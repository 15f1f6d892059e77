"""
Date calculation service.
Handles local calendar days, day counts and rollover detection.
All dates are local calendar days (datetime.date) with no time component.
"""
from datetime import datetime, timedelta, date
from typing import List, Optional


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def today() -> date:
        """
        Get the current local calendar day.

        Returns:
            Today's date in the host's local timezone
        """
        return datetime.now().date()

    @staticmethod
    def timestamp() -> datetime:
        """Get the current local timestamp"""
        return datetime.now()

    @staticmethod
    def parse_date(date_str: str) -> date:
        """
        Parse a YYYY-MM-DD string into a calendar day.

        Args:
            date_str: Date string in "YYYY-MM-DD" format

        Returns:
            Parsed date

        Raises:
            ValueError: If date string is invalid
        """
        return date.fromisoformat(date_str)

    @staticmethod
    def format_date(target_date: date) -> str:
        """Format a calendar day as YYYY-MM-DD"""
        return target_date.isoformat()

    @staticmethod
    def days_between(start_date: date, end_date: date) -> int:
        """
        Calculate the signed number of days between two calendar days.

        Args:
            start_date: Start date
            end_date: End date

        Returns:
            end_date - start_date in days (negative if end is before start)
        """
        return (end_date - start_date).days

    @staticmethod
    def days_since_last_active(last_active_date: date, current_date: Optional[date] = None) -> int:
        """
        Get the number of days since the last active date.
        Never negative: a last active date in the future (clock skew) gives 0.
        """
        if current_date is None:
            current_date = DateService.today()
        return max(0, DateService.days_between(last_active_date, current_date))

    @staticmethod
    def has_new_day_started(last_active_date: Optional[date], current_date: Optional[date] = None) -> bool:
        """Check if the calendar day differs from the last active date"""
        if current_date is None:
            current_date = DateService.today()
        return last_active_date != current_date

    @staticmethod
    def subtract_days(target_date: date, days: int) -> date:
        """Subtract N days from a date"""
        return target_date - timedelta(days=days)

    @staticmethod
    def get_date_range(start_date: date, end_date: date) -> List[date]:
        """
        Get every calendar day from start_date to end_date (inclusive).

        Returns:
            List of dates, empty if end_date is before start_date
        """
        days = DateService.days_between(start_date, end_date)
        return [start_date + timedelta(days=offset) for offset in range(days + 1)]

    @staticmethod
    def is_today(target_date: date) -> bool:
        """Check if a date is today"""
        return target_date == DateService.today()

    @staticmethod
    def is_yesterday(target_date: date) -> bool:
        """Check if a date is yesterday"""
        return target_date == DateService.today() - timedelta(days=1)
