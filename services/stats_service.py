from sqlalchemy.orm import Session
import logging

from domain.schemas.meal_schemas import MealStatsResponse
from repositories import MealRepository

logger = logging.getLogger("meallog.stats")


class StatsService:
    @staticmethod
    def get_meal_stats(db: Session) -> MealStatsResponse:
        """Totals for the dashboard header"""
        repo = MealRepository(db)
        stats = MealStatsResponse(
            total_meals=repo.count(),
            avg_rating=repo.average_rating(),
            unique_restaurants=repo.count_unique_restaurants(),
            current_month=repo.count_current_month(),
        )
        logger.debug(f"meal_stats {stats.model_dump()}")
        return stats
