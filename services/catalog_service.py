"""
Restaurant, dish and person management.

All three are named entities with the same CRUD + search surface, so a single
service works over whichever repository it is given.
"""

from typing import List, Type
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from pydantic import BaseModel
import logging

from repositories import (
    NamedEntityRepository,
    RestaurantRepository,
    DishRepository,
    PersonRepository,
)
from app.exceptions import ConflictError, NotFoundError

logger = logging.getLogger("meallog.catalog")


class CatalogService:
    """CRUD over one kind of named catalog entity"""

    def __init__(self, repository_cls: Type[NamedEntityRepository], label: str):
        self.repository_cls = repository_cls
        self.label = label

    def _repo(self, db: Session) -> NamedEntityRepository:
        return self.repository_cls(db)

    def list_all(self, db: Session, skip: int = 0, limit: int = 100) -> List:
        return self._repo(db).get_all(skip=skip, limit=limit)

    def search(self, db: Session, query: str) -> List:
        query = (query or "").strip()
        if not query:
            return []
        return self._repo(db).search(query)

    def get(self, db: Session, entity_id: int):
        entity = self._repo(db).get_by_id(entity_id)
        if not entity:
            raise NotFoundError(f"{self.label} {entity_id} not found")
        return entity

    def create(self, db: Session, payload: BaseModel):
        repo = self._repo(db)
        try:
            entity = repo.create(repo.model(**payload.model_dump()))
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(
                f"{self.label} '{payload.name}' already exists"
            ) from e
        logger.info(f"{self.label.lower()}_created id={entity.id} name={entity.name}")
        return entity

    def update(self, db: Session, entity_id: int, payload: BaseModel):
        entity = self.get(db, entity_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(entity, field, value)
        try:
            entity = self._repo(db).update(entity)
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(
                f"{self.label} '{payload.name}' already exists"
            ) from e
        logger.info(f"{self.label.lower()}_updated id={entity_id}")
        return entity

    def delete(self, db: Session, entity_id: int) -> None:
        if not self._repo(db).delete(entity_id):
            raise NotFoundError(f"{self.label} {entity_id} not found")
        logger.info(f"{self.label.lower()}_deleted id={entity_id}")


restaurant_service = CatalogService(RestaurantRepository, "Restaurant")
dish_service = CatalogService(DishRepository, "Dish")
person_service = CatalogService(PersonRepository, "Person")
