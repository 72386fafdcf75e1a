"""
Menu item model: dishes staff create, edit and toggle; referenced by order items.
Path: restaurant_api/models/menu_item.py
"""
from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..db import Base, utcnow


# Categories offered by the menu management screen. The column itself is free text.
MENU_CATEGORIES = [
    "Appetizer",
    "Main Course",
    "Side",
    "Dessert",
    "Drinks",
]


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(60), nullable=False, index=True)
    image_url = Column(String, nullable=True)
    available = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow,
                        onupdate=utcnow, nullable=False)

    # Referenced, never owned: deleting a menu item must not touch old orders
    order_items = relationship(
        "OrderItem", back_populates="menu_item", lazy="select")
