"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
)
from domain.models.meal import Restaurant, Dish, Person, Meal, meal_people

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    # Catalog models
    "Restaurant",
    "Dish",
    "Person",
    # Meal models
    "Meal",
    "meal_people",
]
