from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class RestaurantCreate(BaseModel):
    """Schema for creating a restaurant"""

    name: str = Field(..., min_length=1, description="Restaurant name")
    address: Optional[str] = None
    latitude: Optional[Decimal] = Field(None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(None, ge=-180, le=180)


class RestaurantUpdate(BaseModel):
    """Partial restaurant update; unset fields are left untouched"""

    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = None
    latitude: Optional[Decimal] = Field(None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(None, ge=-180, le=180)


class RestaurantResponse(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DishCreate(BaseModel):
    """Schema for creating a dish"""

    name: str = Field(..., min_length=1, description="Dish name")
    category: Optional[str] = Field(None, description="e.g. 'pizza', 'soup', 'dessert'")


class DishUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None


class DishResponse(BaseModel):
    id: int
    name: str
    category: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PersonCreate(BaseModel):
    """Schema for creating a dining companion"""

    name: str = Field(..., min_length=1, description="Unique person name")


class PersonUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)


class PersonResponse(BaseModel):
    id: int
    name: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
