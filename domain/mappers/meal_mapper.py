"""
Meal domain mappers.
Handles transformation between the Meal ORM model and its response DTO.
"""

from domain.models import Meal
from domain.schemas.meal_schemas import MealResponse


class MealMapper:
    """Mapper for meal transformations."""

    @staticmethod
    def image_url(meal: Meal, api_prefix: str = "") -> str:
        return f"{api_prefix}/images/{meal.id}"

    @staticmethod
    def to_response(meal: Meal, api_prefix: str = "") -> MealResponse:
        """
        Convert a Meal ORM instance to MealResponse.

        The photo payload itself is never included; clients follow
        ``image_url`` instead.
        """
        response = MealResponse.model_validate(meal)
        if meal.has_image:
            response.image_url = MealMapper.image_url(meal, api_prefix)
        return response
