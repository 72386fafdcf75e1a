"""
Menu item schemas
Path: restaurant_api/schemas/menu_item.py
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from .common import CamelModel, Money


class MenuItemBase(CamelModel):
    """Base schema for a menu item"""
    name: str = Field(..., min_length=1, description="Dish name")
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, description="Price as a decimal string, e.g. \"1500.00\"")
    category: str = Field(..., min_length=1,
                          description="Category, e.g. Main Course")
    image_url: Optional[str] = None
    available: bool = True


class MenuItemCreate(MenuItemBase):
    """Schema for creating a menu item"""
    pass


class MenuItemUpdate(CamelModel):
    """Schema for editing a menu item, only sent fields change"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    image_url: Optional[str] = None
    available: Optional[bool] = None


class MenuItemAvailability(CamelModel):
    available: bool


class MenuItemOut(MenuItemBase):
    """Schema for menu item response"""
    id: int
    price: Money
    created_at: datetime
    updated_at: datetime
