"""Restaurant, dish and people management routes"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
import logging
from typing import List, Optional, Type

from pydantic import BaseModel

from api.dependencies import get_db
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
from services import CatalogService, restaurant_service, dish_service, person_service

logger = logging.getLogger("meallog.api.catalog")


def build_catalog_router(
    prefix: str,
    tag: str,
    service: CatalogService,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
) -> APIRouter:
    """Standard list/search/get/create/update/delete routes for a named entity"""
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("", response_model=List[response_schema])
    def list_entities(
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=500),
        db: Session = Depends(get_db),
    ):
        return service.list_all(db, skip=skip, limit=limit)

    @router.get("/search", response_model=List[response_schema])
    def search_entities(
        q: Optional[str] = Query(None, description="Name fragment"),
        db: Session = Depends(get_db),
    ):
        """Up to 10 case-insensitive name matches; an empty query returns []"""
        return service.search(db, q)

    @router.get("/{entity_id}", response_model=response_schema)
    def get_entity(entity_id: int, db: Session = Depends(get_db)):
        return service.get(db, entity_id)

    @router.post("", response_model=response_schema, status_code=status.HTTP_201_CREATED)
    def create_entity(payload: create_schema, db: Session = Depends(get_db)):
        return service.create(db, payload)

    @router.patch("/{entity_id}", response_model=response_schema)
    def update_entity(entity_id: int, payload: update_schema, db: Session = Depends(get_db)):
        return service.update(db, entity_id, payload)

    @router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_entity(entity_id: int, db: Session = Depends(get_db)):
        service.delete(db, entity_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


restaurants_router = build_catalog_router(
    "/restaurants",
    "Restaurants",
    restaurant_service,
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantResponse,
)
dishes_router = build_catalog_router(
    "/dishes", "Dishes", dish_service, DishCreate, DishUpdate, DishResponse
)
people_router = build_catalog_router(
    "/people", "People", person_service, PersonCreate, PersonUpdate, PersonResponse
)
