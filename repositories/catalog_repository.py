"""
Catalog Repositories - restaurants, dishes and people are all looked up by name
"""

from typing import List, Optional, Type, TypeVar
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Restaurant, Dish, Person

NamedModel = TypeVar("NamedModel", Restaurant, Dish, Person)

SEARCH_LIMIT = 10


class NamedEntityRepository(BaseRepository[NamedModel]):
    """Shared name lookups for catalog entities"""

    def __init__(self, db: Session, model: Type[NamedModel]):
        super().__init__(db, model)

    def get_by_name(self, name: str) -> Optional[NamedModel]:
        """Exact-name lookup"""
        return self.db.query(self.model).filter(self.model.name == name).first()

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> List[NamedModel]:
        """Case-insensitive substring search on name"""
        return (
            self.db.query(self.model)
            .filter(self.model.name.ilike(f"%{query}%"))
            .order_by(self.model.name)
            .limit(limit)
            .all()
        )

    def get_or_create(self, name: str, **fields) -> NamedModel:
        """
        Return the entity with this name, creating it if needed.

        Does not commit; the caller owns the transaction so the new row is
        written together with whatever references it.
        """
        existing = self.get_by_name(name)
        if existing:
            return existing
        entity = self.model(name=name, **fields)
        self.db.add(entity)
        self.db.flush()
        return entity


class RestaurantRepository(NamedEntityRepository[Restaurant]):
    def __init__(self, db: Session):
        super().__init__(db, Restaurant)


class DishRepository(NamedEntityRepository[Dish]):
    def __init__(self, db: Session):
        super().__init__(db, Dish)


class PersonRepository(NamedEntityRepository[Person]):
    def __init__(self, db: Session):
        super().__init__(db, Person)
