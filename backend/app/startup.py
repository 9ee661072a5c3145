"""Seed helper: default administrator and demo catalog."""

from typing import Optional

from sqlalchemy.orm import Session

from mireb.configs import settings
from mireb.logger_config import get_logger
from mireb.repositories.storefront.database import SessionLocal
from mireb.repositories.storefront.models.enums import Category, Role
from mireb.repositories.storefront.models.products_model import Product
from mireb.repositories.storefront.models.users_model import User
from mireb.services.auth.credentials import hash_password

logger = get_logger("startup")

DEMO_PRODUCTS = [
    {
        "name": "Smartphone Samsung Galaxy A24",
        "price": 299,
        "images": [
            "https://via.placeholder.com/600x400?text=Samsung+Galaxy+A24",
            "https://via.placeholder.com/600x400?text=Samsung+A24+Back",
        ],
        "category": Category.ELECTRONIQUE.value,
        "stock": 15,
        "description": (
            "Smartphone Samsung Galaxy A24 avec écran 6,5 pouces Super AMOLED, "
            "appareil photo 50MP, batterie 5000mAh et stockage 128GB."
        ),
        "featured": True,
    },
    {
        "name": "Robe Africaine Wax Premium",
        "price": 45,
        "images": [
            "https://via.placeholder.com/600x400?text=Robe+Wax+Africaine",
            "https://via.placeholder.com/600x400?text=Robe+Wax+Detail",
        ],
        "category": Category.MODE.value,
        "stock": 30,
        "description": (
            "Magnifique robe africaine en tissu wax 100% coton. Design "
            "traditionnel moderne, taille unique ajustable."
        ),
        "featured": True,
    },
    {
        "name": "Casque Audio Bluetooth Premium",
        "price": 89,
        "images": [
            "https://via.placeholder.com/600x400?text=Casque+Bluetooth",
            "https://via.placeholder.com/600x400?text=Casque+Detail",
        ],
        "category": Category.ELECTRONIQUE.value,
        "stock": 25,
        "description": (
            "Casque audio Bluetooth haute qualité avec réduction de bruit "
            "active et autonomie 30h."
        ),
        "featured": False,
    },
    {
        "name": "Ensemble de Cuisine 12 Pièces",
        "price": 120,
        "images": [
            "https://via.placeholder.com/600x400?text=Ensemble+Cuisine",
            "https://via.placeholder.com/600x400?text=Ustensiles+Detail",
        ],
        "category": Category.MAISON_JARDIN.value,
        "stock": 18,
        "description": (
            "Ensemble complet d'ustensiles de cuisine en acier inoxydable, "
            "12 pièces essentielles."
        ),
        "featured": False,
    },
    {
        "name": "Parfum Unisexe Luxury",
        "price": 65,
        "images": [
            "https://via.placeholder.com/600x400?text=Parfum+Luxury",
            "https://via.placeholder.com/600x400?text=Parfum+Bottle",
        ],
        "category": Category.SANTE_BEAUTE.value,
        "stock": 40,
        "description": (
            "Parfum unisexe aux notes florales et boisées, longue tenue "
            "8-10 heures."
        ),
        "featured": False,
    },
    {
        "name": "Chaussures de Sport Running",
        "price": 75,
        "images": [
            "https://via.placeholder.com/600x400?text=Chaussures+Sport",
            "https://via.placeholder.com/600x400?text=Running+Shoes",
        ],
        "category": Category.SPORTS_LOISIRS.value,
        "stock": 35,
        "description": (
            "Chaussures de running légères et respirantes, idéales pour le "
            "sport et la marche quotidienne."
        ),
        "featured": False,
    },
]


def seed_admin(db: Session) -> Optional[User]:
    """Create the configured administrator unless it already exists."""
    if not settings.DEFAULT_ADMIN_EMAIL or not settings.DEFAULT_ADMIN_PASSWORD:
        logger.info("No default administrator configured. Skipping.")
        return None

    email = settings.DEFAULT_ADMIN_EMAIL.lower()
    admin = db.query(User).filter(User.email == email).first()
    if admin is not None:
        logger.info("Administrator %s already present.", email)
        return admin

    admin = User(
        name=settings.DEFAULT_ADMIN_NAME,
        email=email,
        password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
        role=Role.ADMIN.value,
        is_active=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Administrator %s created.", email)
    return admin


def seed_products(db: Session, admin: Optional[User]) -> None:
    """Insert the demo catalog when the products table is empty."""
    existing = db.query(Product).count()
    if existing:
        logger.info("Products already present (%d records). Skipping.", existing)
        return

    created_by_id = admin.id if admin is not None else None
    for product in DEMO_PRODUCTS:
        db.add(Product(**product, created_by_id=created_by_id))
    db.commit()
    logger.info("%d demo products inserted.", len(DEMO_PRODUCTS))


def create_seed_data() -> None:
    """Populate the database with the administrator and the demo catalog."""
    db: Session = SessionLocal()
    try:
        admin = seed_admin(db)
        seed_products(db, admin)
    except Exception:
        db.rollback()
        logger.exception("Failed to seed the database")
        raise
    finally:
        db.close()


if __name__ == "__main__":  # pragma: no cover
    create_seed_data()
