"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.catalog_repository import (
    NamedEntityRepository,
    RestaurantRepository,
    DishRepository,
    PersonRepository,
)
from repositories.meal_repository import MealRepository

__all__ = [
    "BaseRepository",
    "NamedEntityRepository",
    "RestaurantRepository",
    "DishRepository",
    "PersonRepository",
    "MealRepository",
]
