"""Meal photo serving"""

from fastapi import APIRouter, Depends, Header, Response, status
from sqlalchemy.orm import Session
import logging
from typing import Optional

from api.dependencies import get_db, get_image_server
from api.responses import ErrorResponse
from app.config import settings
from services import MealService
from services.image import DynamicImageServer

router = APIRouter(prefix="/images", tags=["Images"])
logger = logging.getLogger("meallog.api.images")


def _if_none_match_tags(if_none_match: Optional[str]) -> set:
    if not if_none_match:
        return set()
    return {tag.strip().removeprefix("W/") for tag in if_none_match.split(",")}


@router.get(
    "/{meal_id}",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "PNG image"},
        304: {"description": "Client copy is current"},
        404: {"model": ErrorResponse, "description": "Meal or image not found"},
        500: {"model": ErrorResponse, "description": "Stored image could not be decoded"},
    },
)
def get_meal_image(
    meal_id: int,
    if_none_match: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    server: DynamicImageServer = Depends(get_image_server),
):
    """
    Serve a meal photo as PNG.

    The stored payload is decoded from QOI (or from the original upload when
    it was stored that way). Responses carry an ETag derived from the stored
    payload so a replaced photo is picked up on revalidation.
    """
    meal = MealService.find_meal(db, meal_id)
    etag = server.etag_for(meal)
    headers = {"Cache-Control": settings.image_cache_control, "ETag": etag}

    tags = _if_none_match_tags(if_none_match)
    if etag in tags:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)

    # "*" only stands for a representation that exists, so it is checked
    # once the payload has decoded
    rendered = server.render(meal)
    if "*" in tags:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)
    logger.debug(f"image_served meal_id={meal_id} bytes={len(rendered.content)}")
    return Response(content=rendered.content, media_type=rendered.media_type, headers=headers)
