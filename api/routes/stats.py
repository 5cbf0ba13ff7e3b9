"""Dashboard statistics routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db
from domain.schemas.meal_schemas import MealStatsResponse
from services import StatsService

router = APIRouter(prefix="/stats", tags=["Statistics"])
logger = logging.getLogger("meallog.api.stats")


@router.get("", response_model=MealStatsResponse)
def get_stats(db: Session = Depends(get_db)):
    """
    Meal counters for the dashboard:
    - total_meals
    - avg_rating (mean of per-meal rating averages, one decimal)
    - unique_restaurants
    - current_month (meals logged this calendar month, UTC)
    """
    return StatsService.get_meal_stats(db)
