from decimal import Decimal

from sqlalchemy.orm import Session

from restaurant_api.models.menu_item import MenuItem


def create_default_menu(db: Session) -> int:
    """
    Create a small demo menu when the menu table is empty.

    Returns the number of dishes created.
    """
    if db.query(MenuItem).count() > 0:
        return 0

    sample_menu = [
        # Appetizers
        {"name": "Spring Rolls", "category": "Appetizer", "price": "800.00",
         "description": "Crispy vegetable rolls with sweet chili sauce"},
        {"name": "Chicken Wings", "category": "Appetizer", "price": "1200.00",
         "description": "Six wings, pepper glaze"},

        # Main courses
        {"name": "Jollof Rice", "category": "Main Course", "price": "2500.00",
         "description": "Smoky party jollof with grilled chicken"},
        {"name": "Beef Burger", "category": "Main Course", "price": "3000.00",
         "description": "Double patty, cheddar, house sauce"},
        {"name": "Grilled Fish", "category": "Main Course", "price": "4500.00",
         "description": "Whole croaker, spicy pepper sauce"},

        # Sides
        {"name": "Fried Plantain", "category": "Side", "price": "600.00"},
        {"name": "French Fries", "category": "Side", "price": "700.00"},

        # Desserts
        {"name": "Chocolate Cake", "category": "Dessert", "price": "1500.00"},

        # Drinks
        {"name": "Chapman", "category": "Drinks", "price": "1000.00"},
        {"name": "Bottled Water", "category": "Drinks", "price": "300.00"},
    ]

    for dish in sample_menu:
        db.add(MenuItem(
            name=dish["name"],
            description=dish.get("description"),
            category=dish["category"],
            price=Decimal(dish["price"]),
            available=True
        ))
    db.commit()
    return len(sample_menu)
