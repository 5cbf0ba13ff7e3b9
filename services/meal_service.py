from typing import List, Optional
from pathlib import Path
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from domain.enums import RatingFilter
from domain.models import Meal
from domain.schemas.meal_schemas import MealCreate, MealUpdate
from repositories import (
    MealRepository,
    RestaurantRepository,
    DishRepository,
    PersonRepository,
)
from services.image.storage_policy import StoredImage
from services.image.uploads import delete_legacy_photo
from app.exceptions import NotFoundError

logger = logging.getLogger("meallog.meals")

# Scalar columns copied straight from create/update payloads
_MEAL_FIELDS = (
    "price",
    "description",
    "portion_size",
    "taste_rating",
    "presentation_rating",
    "value_rating",
    "service_rating",
    "is_excellent",
    "want_again",
)


class MealService:
    @staticmethod
    def list_meals(
        db: Session,
        search: Optional[str] = None,
        rating: Optional[RatingFilter] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Meal]:
        return MealRepository(db).list_meals(
            search=search, rating=rating, limit=limit, offset=offset
        )

    @staticmethod
    def get_meal(db: Session, meal_id: int) -> Meal:
        """
        Raises:
            NotFoundError: meal does not exist
        """
        meal = MealRepository(db).get_with_details(meal_id)
        if not meal:
            raise NotFoundError(f"Meal {meal_id} not found")
        return meal

    @staticmethod
    def find_meal(db: Session, meal_id: int) -> Optional[Meal]:
        return MealRepository(db).get_by_id(meal_id)

    @staticmethod
    def apply_image(meal: Meal, image: StoredImage) -> None:
        """Replace the photo fields as a unit"""
        meal.image_data = image.data
        meal.image_width = image.width
        meal.image_height = image.height
        meal.image_encoding = image.encoding.value

    @staticmethod
    def clear_image(meal: Meal) -> None:
        meal.photo_url = None
        meal.image_data = None
        meal.image_width = None
        meal.image_height = None
        meal.image_encoding = None

    @staticmethod
    def _resolve_people(db: Session, names: List[str]):
        repo = PersonRepository(db)
        seen = []
        for name in names:
            name = name.strip()
            if name and name not in seen:
                seen.append(name)
        return [repo.get_or_create(name) for name in seen]

    @staticmethod
    def create_meal(
        db: Session, data: MealCreate, image: Optional[StoredImage] = None
    ) -> Meal:
        """
        Create a meal, resolving restaurant/dish/people by name (created when unknown).
        The photo, if any, is written in the same transaction.
        """
        try:
            meal = Meal(**{field: getattr(data, field) for field in _MEAL_FIELDS})
            if data.restaurant_name:
                meal.restaurant = RestaurantRepository(db).get_or_create(
                    data.restaurant_name.strip()
                )
            if data.dish_name:
                meal.dish = DishRepository(db).get_or_create(data.dish_name.strip())
            meal.people = MealService._resolve_people(db, data.people_names)
            if image is not None:
                MealService.apply_image(meal, image)

            db.add(meal)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("create_meal failed")
            raise

        logger.info(
            f"meal_created meal_id={meal.id} restaurant={data.restaurant_name or '-'} "
            f"dish={data.dish_name or '-'} people={len(meal.people)} "
            f"image={image.encoding.value if image else 'none'}"
        )
        return MealService.get_meal(db, meal.id)

    @staticmethod
    def update_meal(
        db: Session,
        meal_id: int,
        data: MealUpdate,
        image: Optional[StoredImage] = None,
        delete_image: bool = False,
        legacy_dir: Optional[Path] = None,
    ) -> Meal:
        """
        Apply a partial update.

        A new ``image`` replaces the stored photo. ``delete_image`` clears the
        photo fields, and only when no new image is supplied. Legacy photo
        files are removed after the row commits.

        Raises:
            NotFoundError: meal does not exist
        """
        meal = MealService.get_meal(db, meal_id)
        stale_photo_url = meal.photo_url
        changes = data.model_dump(exclude_none=True)

        try:
            for field in _MEAL_FIELDS:
                if field in changes:
                    setattr(meal, field, changes[field])
            if data.restaurant_name:
                meal.restaurant = RestaurantRepository(db).get_or_create(
                    data.restaurant_name.strip()
                )
            if data.dish_name:
                meal.dish = DishRepository(db).get_or_create(data.dish_name.strip())
            if data.people_names is not None:
                meal.people = MealService._resolve_people(db, data.people_names)

            if image is not None:
                MealService.apply_image(meal, image)
                meal.photo_url = None
            elif delete_image:
                MealService.clear_image(meal)

            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"update_meal failed meal_id={meal_id}")
            raise

        if stale_photo_url and (image is not None or delete_image) and legacy_dir:
            delete_legacy_photo(stale_photo_url, legacy_dir)

        logger.info(
            f"meal_updated meal_id={meal_id} fields={sorted(changes)} "
            f"image={'replaced' if image is not None else 'deleted' if delete_image else 'unchanged'}"
        )
        return MealService.get_meal(db, meal_id)

    @staticmethod
    def delete_meal(db: Session, meal_id: int, legacy_dir: Optional[Path] = None) -> None:
        """
        Delete a meal and its photo. A missing legacy photo file never blocks
        the deletion.

        Raises:
            NotFoundError: meal does not exist
        """
        repo = MealRepository(db)
        meal = repo.get_by_id(meal_id)
        if not meal:
            raise NotFoundError(f"Meal {meal_id} not found")

        photo_url = meal.photo_url
        try:
            db.delete(meal)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"delete_meal failed meal_id={meal_id}")
            raise

        if photo_url and legacy_dir:
            delete_legacy_photo(photo_url, legacy_dir)
        logger.info(f"meal_deleted meal_id={meal_id}")
