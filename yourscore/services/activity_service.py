"""
Activity and category management services.
"""
import math
from collections import OrderedDict
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from yourscore.constants import (
    MAX_ACTIVITY_POINTS, UNCATEGORIZED_ID, UNCATEGORIZED_NAME, UNCATEGORIZED_ORDER
)
from yourscore.exceptions import (
    ActivityNotFoundException,
    CategoryNotFoundException,
    InvalidPointsException,
    ProtectedCategoryException,
    ValidationException,
)
from yourscore.models import Activity, Category
from yourscore.repositories.activity_repository import ActivityRepository, CategoryRepository
from yourscore.schemas import ActivityCreate, ActivityUpdate, CategoryCreate, CategoryUpdate


def validate_points(points) -> int:
    """
    Validate activity points and floor them to an integer.

    Raises:
        InvalidPointsException: If points are missing, not finite, below 1
            or too large to store
    """
    if points is None or isinstance(points, bool):
        raise InvalidPointsException(points)
    if not math.isfinite(points) or points < 1 or points > MAX_ACTIVITY_POINTS:
        raise InvalidPointsException(points)
    return math.floor(points)


class CategoryService:
    """Service for activity categories"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CategoryRepository()
        self.activity_repo = ActivityRepository()

    def create(self, category_data: CategoryCreate) -> Category:
        """Create a category, ordered after existing ones unless an order is given"""
        name = category_data.name.strip()
        if not name:
            raise ValidationException("name", "category name is required")

        order = category_data.order
        if order is None:
            orders = [c.order for c in self.repo.get_all(self.db) if c.id != UNCATEGORIZED_ID]
            order = max(orders, default=-1) + 1

        return self.repo.save(self.db, Category(name=name, order=order))

    def get_by_id(self, category_id: str) -> Category:
        """
        Get category by ID.

        Raises:
            CategoryNotFoundException: If category does not exist
        """
        category = self.repo.get_by_id(self.db, category_id)
        if not category:
            raise CategoryNotFoundException(category_id)
        return category

    def get_all(self) -> List[Category]:
        """All categories by order, Uncategorized last"""
        categories = self.repo.get_all(self.db)
        return sorted(categories, key=lambda c: (c.id == UNCATEGORIZED_ID, c.order))

    def update(self, category_id: str, category_update: CategoryUpdate) -> Category:
        category = self.get_by_id(category_id)
        data = category_update.model_dump(exclude_unset=True)

        if category_id == UNCATEGORIZED_ID and data.get("name"):
            raise ProtectedCategoryException("rename")

        if data.get("name") is not None:
            category.name = data["name"].strip()
        if data.get("order") is not None:
            category.order = data["order"]

        return self.repo.save(self.db, category)

    def delete(self, category_id: str) -> None:
        """
        Delete a category. Its activities move to Uncategorized.

        Raises:
            ProtectedCategoryException: If asked to delete Uncategorized
            CategoryNotFoundException: If category does not exist
        """
        if category_id == UNCATEGORIZED_ID:
            raise ProtectedCategoryException("delete")

        category = self.get_by_id(category_id)
        self.get_uncategorized()

        # Moving the activities and deleting the category are committed together
        try:
            ActivityService(self.db).move_to_category(category_id, UNCATEGORIZED_ID, commit=False)
            self.repo.delete(self.db, category, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def reorder(self, ordered_ids: List[str]) -> None:
        """Assign orders 0..n-1 following ordered_ids; Uncategorized stays last"""
        categories = {c.id: c for c in self.repo.get_all(self.db)}
        updates = []

        ids = [category_id for category_id in ordered_ids if category_id != UNCATEGORIZED_ID]
        for position, category_id in enumerate(ids):
            category = categories.get(category_id)
            if category and category.order != position:
                category.order = position
                updates.append(category)

        uncategorized = categories.get(UNCATEGORIZED_ID)
        if uncategorized and uncategorized.order != UNCATEGORIZED_ORDER:
            uncategorized.order = UNCATEGORIZED_ORDER
            updates.append(uncategorized)

        if updates:
            self.repo.save_many(self.db, updates)

    def get_uncategorized(self) -> Category:
        """Get the Uncategorized category, creating it if needed"""
        uncategorized = self.repo.get_by_id(self.db, UNCATEGORIZED_ID)
        if not uncategorized:
            uncategorized = self.repo.save(self.db, Category(
                id=UNCATEGORIZED_ID,
                name=UNCATEGORIZED_NAME,
                order=UNCATEGORIZED_ORDER,
            ))
        return uncategorized

    def seed_defaults(self) -> List[Category]:
        """Seed default categories for first-time use"""
        self.get_uncategorized()
        return self.get_all()

    def find_by_name(self, name: str) -> Optional[Category]:
        """Find category by name (case-insensitive)"""
        lowered = name.lower()
        for category in self.get_all():
            if category.name.lower() == lowered:
                return category
        return None

    def count(self) -> int:
        return self.repo.count(self.db)


class ActivityService:
    """Service for trackable activities"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ActivityRepository()
        self.category_repo = CategoryRepository()

    def _resolve_category(self, category_id: Optional[str]) -> str:
        if not category_id or category_id == UNCATEGORIZED_ID:
            return CategoryService(self.db).get_uncategorized().id
        if not self.category_repo.get_by_id(self.db, category_id):
            raise CategoryNotFoundException(category_id)
        return category_id

    def create(self, activity_data: ActivityCreate) -> Activity:
        """
        Create a new activity.

        Raises:
            ValidationException: If name is empty
            InvalidPointsException: If points are below 1
            CategoryNotFoundException: If category does not exist
        """
        name = (activity_data.name or "").strip()
        if not name:
            raise ValidationException("name", "activity name is required")

        points = validate_points(activity_data.points)
        category_id = self._resolve_category(activity_data.category_id)

        activity = Activity(
            name=name,
            description=(activity_data.description or "").strip(),
            points=points,
            category_id=category_id,
            archived=False,
            order=activity_data.order,
        )
        return self.repo.save(self.db, activity)

    def get_by_id(self, activity_id: str) -> Activity:
        """
        Get activity by ID (archived included).

        Raises:
            ActivityNotFoundException: If activity does not exist
        """
        activity = self.repo.get_by_id(self.db, activity_id)
        if not activity:
            raise ActivityNotFoundException(activity_id)
        return activity

    def get_all(self) -> List[Activity]:
        """All non-archived activities"""
        return self.repo.get_all(self.db)

    def get_all_including_archived(self) -> List[Activity]:
        return self.repo.get_all(self.db, include_archived=True)

    def get_archived(self) -> List[Activity]:
        return self.repo.get_archived(self.db)

    def get_by_category(self, category_id: str) -> List[Activity]:
        return self.repo.get_by_category(self.db, category_id)

    def get_grouped_by_category(self) -> Dict[str, List[Activity]]:
        """Non-archived activities keyed by category ID"""
        grouped: Dict[str, List[Activity]] = OrderedDict()
        for activity in self.get_all():
            grouped.setdefault(activity.category_id or UNCATEGORIZED_ID, []).append(activity)
        return grouped

    def update(self, activity_id: str, activity_update: ActivityUpdate) -> Activity:
        """
        Update an activity.

        Raises:
            ActivityNotFoundException: If activity does not exist
            InvalidPointsException: If new points are below 1
            CategoryNotFoundException: If new category does not exist
        """
        activity = self.get_by_id(activity_id)
        data = activity_update.model_dump(exclude_unset=True)

        if "points" in data:
            data["points"] = validate_points(data["points"])
        if data.get("category_id") is not None:
            data["category_id"] = self._resolve_category(data["category_id"])

        if data.get("name") is not None:
            name = data["name"].strip()
            if name:
                activity.name = name
        if data.get("description") is not None:
            activity.description = data["description"].strip()
        for field in ("points", "category_id", "archived", "order"):
            if data.get(field) is not None:
                setattr(activity, field, data[field])

        return self.repo.save(self.db, activity)

    def archive(self, activity_id: str) -> Activity:
        """Archive an activity (soft delete)"""
        return self.update(activity_id, ActivityUpdate(archived=True))

    def unarchive(self, activity_id: str) -> Activity:
        return self.update(activity_id, ActivityUpdate(archived=False))

    def delete(self, activity_id: str) -> None:
        """Permanently delete an activity. Prefer archive()."""
        activity = self.get_by_id(activity_id)
        self.repo.delete(self.db, activity)

    def move_to_category(self, from_category_id: str, to_category_id: str, commit: bool = True) -> int:
        """
        Move every activity (archived included) from one category to another.

        Returns:
            Number of activities moved
        """
        activities = self.repo.get_by_category(self.db, from_category_id, include_archived=True)
        if not activities:
            return 0

        for activity in activities:
            activity.category_id = to_category_id
        self.repo.save_many(self.db, activities, commit=commit)
        return len(activities)

    def get_total_possible_points(self) -> int:
        """Sum of points of all non-archived activities"""
        return sum(activity.points for activity in self.get_all())

    def count(self) -> int:
        return len(self.get_all())
