"""
Meal Repository - Data access layer for meals, their photos and dashboard stats
"""

from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import and_, between, func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from repositories.base import BaseRepository
from domain.enums import RatingFilter
from domain.models import Meal, Restaurant, Dish


class MealRepository(BaseRepository[Meal]):
    """Repository for meal data access"""

    def __init__(self, db: Session):
        super().__init__(db, Meal)

    def _with_details(self):
        return self.db.query(Meal).options(
            joinedload(Meal.restaurant),
            joinedload(Meal.dish),
            selectinload(Meal.people),
        )

    def get_with_details(self, meal_id: int) -> Optional[Meal]:
        """Get meal with restaurant, dish and people eagerly loaded"""
        return self._with_details().filter(Meal.id == meal_id).first()

    def list_meals(
        self,
        search: Optional[str] = None,
        rating: Optional[RatingFilter] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Meal]:
        """List meals newest first, optionally filtered by text and rating band"""
        query = (
            self._with_details()
            .outerjoin(Restaurant, Meal.restaurant_id == Restaurant.id)
            .outerjoin(Dish, Meal.dish_id == Dish.id)
        )

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Restaurant.name.ilike(pattern),
                    Dish.name.ilike(pattern),
                    Meal.description.ilike(pattern),
                )
            )

        condition = self._rating_condition(rating)
        if condition is not None:
            query = query.filter(condition)

        return (
            query.order_by(Meal.created_at.desc(), Meal.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    @staticmethod
    def _rating_condition(rating: Optional[RatingFilter]):
        ratings = (
            Meal.taste_rating,
            Meal.presentation_rating,
            Meal.value_rating,
            Meal.service_rating,
        )
        if rating == RatingFilter.EXCELLENT:
            return Meal.is_excellent.is_(True)
        if rating == RatingFilter.WANT_AGAIN:
            return Meal.want_again.is_(True)
        if rating == RatingFilter.HIGH:
            return or_(*(r >= 2 for r in ratings))
        if rating == RatingFilter.AVERAGE:
            return and_(*(between(r, 0, 1) for r in ratings))
        if rating == RatingFilter.LOW:
            return or_(*(r <= -1 for r in ratings))
        return None

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def count(self) -> int:
        return self.db.query(func.count(Meal.id)).scalar() or 0

    def average_rating(self) -> float:
        """Mean over meals of the four-rating average, one decimal"""
        total = (
            Meal.taste_rating
            + Meal.presentation_rating
            + Meal.value_rating
            + Meal.service_rating
        )
        avg = self.db.query(func.avg(total)).scalar()
        if avg is None:
            return 0.0
        return round(float(avg) / 4, 1)

    def count_unique_restaurants(self) -> int:
        return (
            self.db.query(func.count(func.distinct(Meal.restaurant_id)))
            .filter(Meal.restaurant_id.isnot(None))
            .scalar()
            or 0
        )

    def count_since(self, since: datetime) -> int:
        return (
            self.db.query(func.count(Meal.id)).filter(Meal.created_at >= since).scalar()
            or 0
        )

    def count_current_month(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        if self.db.get_bind().dialect.name == "sqlite":
            # SQLite stores CURRENT_TIMESTAMP as naive UTC text
            month_start = month_start.replace(tzinfo=None)
        return self.count_since(month_start)
