from sqlalchemy.orm import Session
from typing import List, Optional

from restaurant_api.models.menu_item import MenuItem
from restaurant_api.models.order import OrderItem
from restaurant_api.schemas.menu_item import MenuItemCreate, MenuItemUpdate
from restaurant_api.utils.exceptions import Conflict


def get_by_id(db: Session, menu_item_id: int) -> Optional[MenuItem]:
    """Get a menu item by ID"""
    return db.query(MenuItem).filter(MenuItem.id == menu_item_id).first()


def get_by_ids(db: Session, menu_item_ids: List[int]) -> dict:
    """Map of id -> MenuItem for every id that exists"""
    if not menu_item_ids:
        return {}
    items = db.query(MenuItem).filter(MenuItem.id.in_(set(menu_item_ids))).all()
    return {item.id: item for item in items}


def get_all(db: Session, available_only: bool = False, category: Optional[str] = None) -> List[MenuItem]:
    """Get menu items ordered by category then name"""
    query = db.query(MenuItem)
    if available_only:
        query = query.filter(MenuItem.available == True)
    if category:
        query = query.filter(MenuItem.category == category)
    return query.order_by(MenuItem.category, MenuItem.name).all()


def get_categories(db: Session) -> List[str]:
    """Distinct categories currently used by the menu"""
    results = db.query(MenuItem.category).distinct().order_by(MenuItem.category).all()
    return [category for (category,) in results]


def create(db: Session, item_data: MenuItemCreate) -> MenuItem:
    """Create a new menu item"""
    db_item = MenuItem(
        name=item_data.name,
        description=item_data.description,
        price=item_data.price,
        category=item_data.category,
        image_url=item_data.image_url,
        available=item_data.available
    )
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item


def update(db: Session, menu_item_id: int, item_data: MenuItemUpdate) -> Optional[MenuItem]:
    """Update a menu item"""
    db_obj = get_by_id(db, menu_item_id)
    if not db_obj:
        return None

    update_data = item_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_obj, field, value)

    db.commit()
    db.refresh(db_obj)
    return db_obj


def set_availability(db: Session, menu_item_id: int, available: bool) -> Optional[MenuItem]:
    db_obj = get_by_id(db, menu_item_id)
    if not db_obj:
        return None

    db_obj.available = available
    db.commit()
    db.refresh(db_obj)
    return db_obj


def delete(db: Session, menu_item_id: int) -> bool:
    """Delete a menu item that no order refers to"""
    db_obj = get_by_id(db, menu_item_id)
    if not db_obj:
        return False

    in_use = db.query(OrderItem.id).filter(
        OrderItem.menu_item_id == menu_item_id).first()
    if in_use:
        raise Conflict(
            f"Menu item {menu_item_id} is part of existing orders, mark it unavailable instead")

    db.delete(db_obj)
    db.commit()
    return True
