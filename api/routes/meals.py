"""Meal journal routes (multipart forms with an optional photo)"""

from decimal import Decimal
from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session
import json
import logging
from pathlib import Path
from typing import List, Optional

from api.dependencies import get_db, get_storage_policy
from app.config import settings
from app.exceptions import ServiceValidationError
from domain.enums import RatingFilter, MIN_RATING, MAX_RATING
from domain.mappers import MealMapper
from domain.schemas.meal_schemas import MealCreate, MealUpdate, MealResponse
from services import MealService
from services.image import ImageStoragePolicy, StoredImage, ingest_upload

router = APIRouter(prefix="/meals", tags=["Meals"])
logger = logging.getLogger("meallog.api.meals")


def _parse_people_names(raw: Optional[str]) -> Optional[List[str]]:
    """``people_names`` arrives as a JSON array encoded in a form field"""
    if raw is None or raw == "":
        return None
    try:
        names = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ServiceValidationError(
            "people_names must be a JSON array of strings"
        ) from e
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise ServiceValidationError("people_names must be a JSON array of strings")
    return names


def _ingest_photo(
    photo: Optional[UploadFile], policy: ImageStoragePolicy
) -> Optional[StoredImage]:
    if photo is None or not photo.filename:
        return None
    return ingest_upload(
        photo,
        policy,
        directory=settings.upload_tmp_dir,
        max_bytes=settings.image_max_upload_bytes,
    )


@router.get("", response_model=List[MealResponse])
def list_meals(
    search: Optional[str] = Query(None, description="Matches restaurant, dish or description"),
    rating: Optional[RatingFilter] = Query(None, description="Rating band filter"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """List meals, newest first"""
    meals = MealService.list_meals(db, search=search, rating=rating, limit=limit, offset=offset)
    return [MealMapper.to_response(m, settings.api_prefix) for m in meals]


@router.get("/{meal_id}", response_model=MealResponse)
def get_meal(meal_id: int, db: Session = Depends(get_db)):
    """Get a single meal with restaurant, dish and people"""
    meal = MealService.get_meal(db, meal_id)
    return MealMapper.to_response(meal, settings.api_prefix)


@router.post("", response_model=MealResponse, status_code=status.HTTP_201_CREATED)
def create_meal(
    restaurant_name: Optional[str] = Form(None),
    dish_name: Optional[str] = Form(None),
    price: Optional[Decimal] = Form(None, ge=0),
    description: Optional[str] = Form(None),
    portion_size: Optional[str] = Form(None),
    taste_rating: int = Form(0, ge=MIN_RATING, le=MAX_RATING),
    presentation_rating: int = Form(0, ge=MIN_RATING, le=MAX_RATING),
    value_rating: int = Form(0, ge=MIN_RATING, le=MAX_RATING),
    service_rating: int = Form(0, ge=MIN_RATING, le=MAX_RATING),
    is_excellent: bool = Form(False),
    want_again: bool = Form(False),
    people_names: Optional[str] = Form(None, description="JSON array of names"),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    policy: ImageStoragePolicy = Depends(get_storage_policy),
):
    """
    Create a meal.

    Restaurants, dishes and people are matched by name and created when
    unknown. The optional photo is validated (image/* only, 5 MB max) and
    stored in the row as QOI, or as the original bytes if QOI encoding fails.

    Raises:
        400: invalid form data
        413: photo too large
        415: photo is not an image
    """
    data = MealCreate(
        restaurant_name=restaurant_name,
        dish_name=dish_name,
        price=price,
        description=description,
        portion_size=portion_size,
        taste_rating=taste_rating,
        presentation_rating=presentation_rating,
        value_rating=value_rating,
        service_rating=service_rating,
        is_excellent=is_excellent,
        want_again=want_again,
        people_names=_parse_people_names(people_names) or [],
    )
    image = _ingest_photo(photo, policy)
    meal = MealService.create_meal(db, data, image)
    return MealMapper.to_response(meal, settings.api_prefix)


@router.patch("/{meal_id}", response_model=MealResponse)
def update_meal(
    meal_id: int,
    restaurant_name: Optional[str] = Form(None),
    dish_name: Optional[str] = Form(None),
    price: Optional[Decimal] = Form(None, ge=0),
    description: Optional[str] = Form(None),
    portion_size: Optional[str] = Form(None),
    taste_rating: Optional[int] = Form(None, ge=MIN_RATING, le=MAX_RATING),
    presentation_rating: Optional[int] = Form(None, ge=MIN_RATING, le=MAX_RATING),
    value_rating: Optional[int] = Form(None, ge=MIN_RATING, le=MAX_RATING),
    service_rating: Optional[int] = Form(None, ge=MIN_RATING, le=MAX_RATING),
    is_excellent: Optional[bool] = Form(None),
    want_again: Optional[bool] = Form(None),
    people_names: Optional[str] = Form(None, description="JSON array of names"),
    delete_image: bool = Form(False, description="Clear the photo (ignored when a new photo is sent)"),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    policy: ImageStoragePolicy = Depends(get_storage_policy),
):
    """
    Partially update a meal.

    A new photo replaces the stored one. ``delete_image=true`` without a
    photo removes it. ``people_names`` replaces the companion list.

    Raises:
        404: meal not found
        413/415: photo rejected
    """
    MealService.get_meal(db, meal_id)

    data = MealUpdate(
        restaurant_name=restaurant_name,
        dish_name=dish_name,
        price=price,
        description=description,
        portion_size=portion_size,
        taste_rating=taste_rating,
        presentation_rating=presentation_rating,
        value_rating=value_rating,
        service_rating=service_rating,
        is_excellent=is_excellent,
        want_again=want_again,
        people_names=_parse_people_names(people_names),
    )
    image = _ingest_photo(photo, policy)
    meal = MealService.update_meal(
        db,
        meal_id,
        data,
        image=image,
        delete_image=delete_image and image is None,
        legacy_dir=Path(settings.legacy_upload_dir),
    )
    return MealMapper.to_response(meal, settings.api_prefix)


@router.delete("/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_meal(meal_id: int, db: Session = Depends(get_db)):
    """Delete a meal together with its photo"""
    MealService.delete_meal(db, meal_id, legacy_dir=Path(settings.legacy_upload_dir))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
