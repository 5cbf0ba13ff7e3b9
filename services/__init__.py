"""Services package - Business logic layer"""

from services.meal_service import MealService
from services.stats_service import StatsService
from services.catalog_service import (
    CatalogService,
    restaurant_service,
    dish_service,
    person_service,
)

__all__ = [
    "MealService",
    "StatsService",
    "CatalogService",
    "restaurant_service",
    "dish_service",
    "person_service",
]
