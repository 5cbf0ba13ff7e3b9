from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from domain.enums import ImageEncoding, MIN_RATING, MAX_RATING
from domain.schemas.catalog_schemas import (
    RestaurantResponse,
    DishResponse,
    PersonResponse,
)


class MealCreate(BaseModel):
    """Schema for creating a meal (built from the multipart form)"""

    restaurant_name: Optional[str] = None
    dish_name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    portion_size: Optional[str] = Field(None, description="Portion weight, e.g. '350g'")
    taste_rating: int = Field(0, ge=MIN_RATING, le=MAX_RATING)
    presentation_rating: int = Field(0, ge=MIN_RATING, le=MAX_RATING)
    value_rating: int = Field(0, ge=MIN_RATING, le=MAX_RATING)
    service_rating: int = Field(0, ge=MIN_RATING, le=MAX_RATING)
    is_excellent: bool = False
    want_again: bool = False
    people_names: List[str] = Field(default_factory=list)


class MealUpdate(BaseModel):
    """
    Partial meal update. Only fields that were supplied are applied;
    ``people_names`` replaces every association when present.
    """

    restaurant_name: Optional[str] = None
    dish_name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    portion_size: Optional[str] = None
    taste_rating: Optional[int] = Field(None, ge=MIN_RATING, le=MAX_RATING)
    presentation_rating: Optional[int] = Field(None, ge=MIN_RATING, le=MAX_RATING)
    value_rating: Optional[int] = Field(None, ge=MIN_RATING, le=MAX_RATING)
    service_rating: Optional[int] = Field(None, ge=MIN_RATING, le=MAX_RATING)
    is_excellent: Optional[bool] = None
    want_again: Optional[bool] = None
    people_names: Optional[List[str]] = None


class MealResponse(BaseModel):
    """Meal with its restaurant, dish, people and photo metadata (never the payload)"""

    id: int
    restaurant_id: Optional[int] = None
    dish_id: Optional[int] = None
    restaurant: Optional[RestaurantResponse] = None
    dish: Optional[DishResponse] = None
    people: List[PersonResponse] = []
    photo_url: Optional[str] = None
    has_image: bool = False
    image_url: Optional[str] = None
    image_width: Optional[int] = None
    image_height: Optional[int] = None
    image_encoding: Optional[ImageEncoding] = None
    price: Optional[Decimal] = None
    description: Optional[str] = None
    portion_size: Optional[str] = None
    taste_rating: int
    presentation_rating: int
    value_rating: int
    service_rating: int
    is_excellent: Optional[bool] = False
    want_again: Optional[bool] = False
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MealStatsResponse(BaseModel):
    """Dashboard counters"""

    total_meals: int
    avg_rating: float
    unique_restaurants: int
    current_month: int
