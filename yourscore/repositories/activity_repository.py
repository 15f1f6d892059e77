"""
Activity repository - Data access layer for activities and categories.
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from yourscore.models import Activity, Category


class ActivityRepository:
    """Repository for Activity data access"""

    @staticmethod
    def get_by_id(db: Session, activity_id: str) -> Optional[Activity]:
        """Get activity by ID (archived included)"""
        return db.get(Activity, activity_id)

    @staticmethod
    def get_all(db: Session, include_archived: bool = False) -> List[Activity]:
        """Get activities ordered for display"""
        query = db.query(Activity)
        if not include_archived:
            query = query.filter(Activity.archived == False)  # noqa: E712
        return query.order_by(Activity.order, Activity.created_at).all()

    @staticmethod
    def get_archived(db: Session) -> List[Activity]:
        """Get archived activities"""
        return db.query(Activity).filter(
            Activity.archived == True  # noqa: E712
        ).order_by(Activity.order, Activity.created_at).all()

    @staticmethod
    def get_by_category(
        db: Session,
        category_id: str,
        include_archived: bool = False
    ) -> List[Activity]:
        """Get activities in a category"""
        query = db.query(Activity).filter(Activity.category_id == category_id)
        if not include_archived:
            query = query.filter(Activity.archived == False)  # noqa: E712
        return query.order_by(Activity.order, Activity.created_at).all()

    @staticmethod
    def get_active_ids(db: Session) -> List[str]:
        """Get IDs of all non-archived activities"""
        rows = db.query(Activity.id).filter(Activity.archived == False).all()  # noqa: E712
        return [row[0] for row in rows]

    @staticmethod
    def save(db: Session, activity: Activity) -> Activity:
        """Create or update activity"""
        db.add(activity)
        db.commit()
        db.refresh(activity)
        return activity

    @staticmethod
    def save_many(db: Session, activities: List[Activity], commit: bool = True) -> None:
        """Create or update several activities in one commit"""
        db.add_all(activities)
        if commit:
            db.commit()
        else:
            db.flush()

    @staticmethod
    def delete(db: Session, activity: Activity) -> None:
        """Permanently delete an activity"""
        db.delete(activity)
        db.commit()


class CategoryRepository:
    """Repository for Category data access"""

    @staticmethod
    def get_by_id(db: Session, category_id: str) -> Optional[Category]:
        """Get category by ID"""
        return db.get(Category, category_id)

    @staticmethod
    def get_all(db: Session) -> List[Category]:
        """Get all categories by display order"""
        return db.query(Category).order_by(Category.order, Category.created_at).all()

    @staticmethod
    def count(db: Session) -> int:
        """Count categories"""
        return db.query(Category).count()

    @staticmethod
    def save(db: Session, category: Category) -> Category:
        """Create or update category"""
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def save_many(db: Session, categories: List[Category]) -> None:
        """Create or update several categories in one commit"""
        db.add_all(categories)
        db.commit()

    @staticmethod
    def delete(db: Session, category: Category, commit: bool = True) -> None:
        """Delete a category"""
        db.delete(category)
        if commit:
            db.commit()
        else:
            db.flush()
