"""
Custom exceptions for the YourScore engine.
Provides specific exception types so callers can tell validation problems
from missing records.
"""


class YourScoreException(Exception):
    """Base exception for YourScore application"""
    pass


class ValidationException(YourScoreException):
    """Raised when data validation fails. No mutation has been performed."""
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Validation error for {field}: {message}")


class InvalidDecayAmountException(ValidationException):
    """Raised when a decay amount is negative or not an integer"""
    def __init__(self, amount):
        self.amount = amount
        super().__init__("decay_amount", f"must be a non-negative integer, got {amount!r}")


class InvalidPointsException(ValidationException):
    """Raised when activity points are not a positive number"""
    def __init__(self, points):
        self.points = points
        super().__init__("points", f"must be a positive number, got {points!r}")


class DuplicateCompletionException(ValidationException):
    """Raised when an activity is already completed for a date"""
    def __init__(self, activity_id: str, target_date):
        self.activity_id = activity_id
        self.target_date = target_date
        super().__init__(
            "completion",
            f"activity {activity_id} already completed for {target_date}"
        )


class ActivityNotFoundException(YourScoreException):
    """Raised when an activity is not found"""
    def __init__(self, activity_id: str):
        self.activity_id = activity_id
        super().__init__(f"Activity with ID {activity_id} not found")


class CategoryNotFoundException(YourScoreException):
    """Raised when a category is not found"""
    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Category with ID {category_id} not found")


class AchievementNotFoundException(YourScoreException):
    """Raised when an achievement ID has no definition"""
    def __init__(self, achievement_id: str):
        self.achievement_id = achievement_id
        super().__init__(f"Achievement with ID {achievement_id} not found")


class ProtectedCategoryException(YourScoreException):
    """Raised when trying to rename or delete the Uncategorized category"""
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation} the Uncategorized category")
