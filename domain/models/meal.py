"""
Meal journal models: restaurants, dishes, people and the meals that tie them together.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    Table,
    Text,
    TIMESTAMP,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from domain.models.database import Base


meal_people = Table(
    "meal_people",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("meal_id", Integer, ForeignKey("meals.id", ondelete="CASCADE"), nullable=False),
    Column(
        "person_id", Integer, ForeignKey("people.id", ondelete="CASCADE"), nullable=False
    ),
)


class Restaurant(Base):
    """A place where meals were eaten"""

    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    address = Column(Text)
    latitude = Column(Numeric(10, 8))
    longitude = Column(Numeric(11, 8))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    meals = relationship("Meal", back_populates="restaurant")


class Dish(Base):
    """A named dish, optionally categorised"""

    __tablename__ = "dishes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    category = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    meals = relationship("Meal", back_populates="dish")


class Person(Base):
    """Someone who shared a meal"""

    __tablename__ = "people"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    meals = relationship("Meal", secondary=meal_people, back_populates="people")


class Meal(Base):
    """
    A rated meal.

    The photo lives in the row itself: ``image_data`` holds a base64 payload,
    ``image_encoding`` says whether it is QOI pixels ("qoi") or the original
    upload bytes ("raw"). Rows written before the tag existed have it NULL.
    ``photo_url`` references files from the older on-disk storage.
    """

    __tablename__ = "meals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id", ondelete="SET NULL"))
    dish_id = Column(Integer, ForeignKey("dishes.id", ondelete="SET NULL"))
    photo_url = Column(Text)
    image_data = Column(Text)
    image_width = Column(Integer)
    image_height = Column(Integer)
    image_encoding = Column(Text)
    price = Column(Numeric(10, 2))
    description = Column(Text)
    portion_size = Column(Text)
    taste_rating = Column(Integer, nullable=False, default=0)
    presentation_rating = Column(Integer, nullable=False, default=0)
    value_rating = Column(Integer, nullable=False, default=0)
    service_rating = Column(Integer, nullable=False, default=0)
    is_excellent = Column(Boolean, default=False)
    want_again = Column(Boolean, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    restaurant = relationship("Restaurant", back_populates="meals")
    dish = relationship("Dish", back_populates="meals")
    people = relationship(
        "Person", secondary=meal_people, back_populates="meals", order_by="Person.name"
    )

    __table_args__ = (
        CheckConstraint(
            "image_encoding IS NULL OR image_encoding IN ('qoi', 'raw')",
            name="ck_meal_image_encoding",
        ),
    )

    @property
    def has_image(self) -> bool:
        return bool(self.image_data)
