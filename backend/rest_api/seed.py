"""
Seed data for development and demos.
Creates the admin account, one user per staff role and a starter menu.
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import MenuItem, User
from shared.config.constants import MenuCategory, Roles
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security.password import hash_password

logger = get_logger(__name__)


DEMO_STAFF = [
    {"name": "Morgan Manager", "email": "manager@vibedine.com", "role": Roles.MANAGER},
    {"name": "Kai Kitchen", "email": "kitchen@vibedine.com", "role": Roles.KITCHEN_STAFF},
]
DEMO_STAFF_PASSWORD = "staff12345"

DEMO_MENU = [
    {
        "name": "Crispy Calamari",
        "description": "Lightly battered squid with lemon aioli",
        "price": Decimal("11.50"),
        "category": MenuCategory.APPETIZERS,
        "ingredients": ["squid", "flour", "lemon", "garlic", "mayonnaise"],
        "allergens": ["Shellfish", "Gluten", "Eggs"],
        "preparation_time": 10,
        "nutrition_per_serving": {"calories": 420, "protein": 22, "carbs": 30, "fat": 24, "sodium": 780, "fiber": 1},
    },
    {
        "name": "Garden Hummus Plate",
        "description": "Chickpea hummus, olive oil, warm pita and crudités",
        "price": Decimal("8.00"),
        "category": MenuCategory.APPETIZERS,
        "ingredients": ["chickpeas", "tahini", "olive oil", "pita", "carrot", "cucumber"],
        "allergens": ["Sesame", "Gluten"],
        "serves": 2,
        "preparation_time": 5,
        "nutrition_per_serving": {"calories": 310, "protein": 11, "carbs": 38, "fat": 14, "sodium": 420, "fiber": 8},
    },
    {
        "name": "Grilled Salmon Bowl",
        "description": "Salmon fillet over quinoa with greens and citrus dressing",
        "price": Decimal("18.00"),
        "category": MenuCategory.MAIN_COURSE,
        "ingredients": ["salmon", "quinoa", "spinach", "orange", "olive oil"],
        "allergens": ["Fish"],
        "preparation_time": 18,
        "nutrition_per_serving": {"calories": 540, "protein": 38, "carbs": 34, "fat": 26, "sodium": 520, "fiber": 6},
    },
    {
        "name": "Steak Frites",
        "description": "Sirloin with herb butter and fries",
        "price": Decimal("24.00"),
        "category": MenuCategory.MAIN_COURSE,
        "ingredients": ["sirloin", "potatoes", "butter", "parsley"],
        "allergens": ["Dairy"],
        "preparation_time": 22,
        "nutrition_per_serving": {"calories": 890, "protein": 52, "carbs": 60, "fat": 48, "sodium": 960, "fiber": 5},
    },
    {
        "name": "Zucchini Noodle Pesto",
        "description": "Spiralized zucchini tossed in basil pesto with pine nuts",
        "price": Decimal("14.00"),
        "category": MenuCategory.MAIN_COURSE,
        "ingredients": ["zucchini", "basil", "pine nuts", "olive oil", "garlic"],
        "allergens": ["Tree Nuts"],
        "preparation_time": 12,
        "nutrition_per_serving": {"calories": 360, "protein": 9, "carbs": 12, "fat": 30, "sodium": 380, "fiber": 4},
    },
    {
        "name": "Chocolate Lava Cake",
        "description": "Warm chocolate cake with a molten center",
        "price": Decimal("9.00"),
        "category": MenuCategory.DESSERTS,
        "ingredients": ["chocolate", "butter", "eggs", "sugar", "flour"],
        "allergens": ["Dairy", "Eggs", "Gluten"],
        "preparation_time": 14,
        "nutrition_per_serving": {"calories": 610, "protein": 8, "carbs": 70, "fat": 34, "sodium": 240, "fiber": 3},
    },
    {
        "name": "Fresh Lemonade",
        "description": "Squeezed to order",
        "price": Decimal("4.50"),
        "category": MenuCategory.DRINKS,
        "ingredients": ["lemon", "sugar", "water", "mint"],
        "allergens": [],
        "preparation_time": 3,
        "nutrition_per_serving": {"calories": 120, "protein": 0, "carbs": 31, "fat": 0, "sodium": 10, "fiber": 0},
    },
]


def _ensure_user(db: Session, name: str, email: str, password: str, role: str) -> bool:
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        return False
    db.add(User(name=name, email=email, password=hash_password(password), role=role))
    return True


def seed_users(db: Session) -> None:
    created = _ensure_user(db, "VibeDine Admin", settings.seed_admin_email, settings.seed_admin_password, Roles.ADMIN)
    for member in DEMO_STAFF:
        created |= _ensure_user(db, member["name"], member["email"], DEMO_STAFF_PASSWORD, member["role"])
    if created:
        safe_commit(db)
        logger.info("Seeded staff accounts", admin_email=settings.seed_admin_email)


def seed_menu(db: Session) -> None:
    """Idempotent: only inserts if the menu is empty."""
    if db.scalar(select(MenuItem.id).limit(1)):
        logger.info("Menu already seeded, skipping")
        return
    for item in DEMO_MENU:
        db.add(MenuItem(**item))
    safe_commit(db)
    logger.info("Seeded demo menu", items=len(DEMO_MENU))


def seed(db: Session) -> None:
    seed_users(db)
    seed_menu(db)
