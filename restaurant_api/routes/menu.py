"""
Menu routes: the public menu and its management by staff.
Path: restaurant_api/routes/menu.py
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..CRUD import menu_crud
from ..models.menu_item import MENU_CATEGORIES, MenuItem
from ..schemas.common import ErrorResponse
from ..schemas.menu_item import MenuItemAvailability, MenuItemCreate, MenuItemOut, MenuItemUpdate
from ..utils.broadcaster import ChangeBroadcaster, EventType
from ..utils.exceptions import MenuItemNotFound
from .deps import get_broadcaster, get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/menu", tags=["Menu"], responses={
    400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})


def _menu_event(item: MenuItem, **extra) -> dict:
    return {"menuItemId": item.id, "available": item.available, **extra}


# ============ customer routes ============

@router.get("", response_model=List[MenuItemOut])
def get_menu(category: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Dishes customers can order right now"""
    return menu_crud.get_all(db, available_only=True, category=category)


@router.get("/all", response_model=List[MenuItemOut])
def get_full_menu(db: Session = Depends(get_db)):
    """Every dish including unavailable ones, for staff screens"""
    return menu_crud.get_all(db)


@router.get("/categories", response_model=List[str])
def get_categories(db: Session = Depends(get_db)):
    return menu_crud.get_categories(db)


@router.get("/{menu_item_id}", response_model=MenuItemOut)
def get_menu_item(menu_item_id: int, db: Session = Depends(get_db)):
    item = menu_crud.get_by_id(db, menu_item_id)
    if not item:
        raise MenuItemNotFound(f"Menu item {menu_item_id} not found")
    return item


# ============ staff routes ============

@router.post("", response_model=MenuItemOut, status_code=201)
async def create_menu_item(
    item_in: MenuItemCreate,
    db: Session = Depends(get_db),
    broadcaster: ChangeBroadcaster = Depends(get_broadcaster)
):
    item = menu_crud.create(db, item_in)
    logger.info(f"Created menu item {item.id} '{item.name}'")
    if item.category not in MENU_CATEGORIES:
        logger.info(f"Menu item {item.id} uses custom category '{item.category}'")
    await broadcaster.publish(EventType.menu_item_update, _menu_event(item))
    return item


@router.patch("/{menu_item_id}", response_model=MenuItemOut)
async def update_menu_item(
    menu_item_id: int,
    item_in: MenuItemUpdate,
    db: Session = Depends(get_db),
    broadcaster: ChangeBroadcaster = Depends(get_broadcaster)
):
    item = menu_crud.update(db, menu_item_id, item_in)
    if not item:
        raise MenuItemNotFound(f"Menu item {menu_item_id} not found")
    await broadcaster.publish(EventType.menu_item_update, _menu_event(item))
    return item


@router.patch("/{menu_item_id}/availability", response_model=MenuItemOut)
async def set_menu_item_availability(
    menu_item_id: int,
    body: Optional[MenuItemAvailability] = None,
    db: Session = Depends(get_db),
    broadcaster: ChangeBroadcaster = Depends(get_broadcaster)
):
    """Set availability, or flip it when no body is sent"""
    item = menu_crud.get_by_id(db, menu_item_id)
    if not item:
        raise MenuItemNotFound(f"Menu item {menu_item_id} not found")

    available = body.available if body is not None else not item.available
    item = menu_crud.set_availability(db, menu_item_id, available)
    await broadcaster.publish(EventType.menu_item_update, _menu_event(item))
    return item


@router.delete("/{menu_item_id}", response_model=dict)
async def delete_menu_item(
    menu_item_id: int,
    db: Session = Depends(get_db),
    broadcaster: ChangeBroadcaster = Depends(get_broadcaster)
):
    if not menu_crud.delete(db, menu_item_id):
        raise MenuItemNotFound(f"Menu item {menu_item_id} not found")

    logger.info(f"Deleted menu item {menu_item_id}")
    await broadcaster.publish(EventType.menu_item_update, {"menuItemId": menu_item_id, "deleted": True})
    return {"message": "Menu item deleted", "id": menu_item_id}
