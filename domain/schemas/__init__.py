"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.catalog_schemas import (
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantResponse,
    DishCreate,
    DishUpdate,
    DishResponse,
    PersonCreate,
    PersonUpdate,
    PersonResponse,
)
from domain.schemas.meal_schemas import (
    MealCreate,
    MealUpdate,
    MealResponse,
    MealStatsResponse,
)

__all__ = [
    # Catalog schemas
    "RestaurantCreate",
    "RestaurantUpdate",
    "RestaurantResponse",
    "DishCreate",
    "DishUpdate",
    "DishResponse",
    "PersonCreate",
    "PersonUpdate",
    "PersonResponse",
    # Meal schemas
    "MealCreate",
    "MealUpdate",
    "MealResponse",
    "MealStatsResponse",
]
