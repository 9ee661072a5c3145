"""Service layer for the product catalog."""

from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from mireb.errors import NotFoundError, ValidationError
from mireb.logger_config import get_logger
from mireb.repositories.storefront.crud.products_crud import CRUDProduct
from mireb.repositories.storefront.models.enums import Category
from mireb.repositories.storefront.models.products_model import PLACEHOLDER_IMAGE, Product
from mireb.repositories.storefront.models.users_model import User
from mireb.repositories.storefront.schemas.products_schema import (
    MAX_STOCK,
    ProductCreate,
    ProductUpdate,
)
from mireb.services.listing import Listing, Page, exact, resolve_sort, text_search, value_range

logger = get_logger(__name__)

PRODUCT_SORT_COLUMNS = {
    "nom": Product.name,
    "prix": Product.price,
    "createdAt": Product.created_at,
    "views": Product.views,
}


def apply_stock_operation(current: int, quantity: int, operation: str) -> int:
    """
    Compute the new stock level.

    ``set`` and ``subtract`` floor at zero; ``add`` does not floor, a
    negative result is refused instead.

    Raises:
        ValidationError: unknown operation, ``add`` going below zero, or a
            result above ``MAX_STOCK``.
    """
    if operation == "set":
        new_stock = max(0, quantity)
    elif operation == "subtract":
        new_stock = max(0, current - quantity)
    elif operation == "add":
        new_stock = current + quantity
        if new_stock < 0:
            raise ValidationError.for_field(
                "quantity", "Le stock ne peut pas être négatif", quantity
            )
    else:
        raise ValidationError.for_field(
            "operation", "Opération de stock invalide", operation
        )
    if new_stock > MAX_STOCK:
        raise ValidationError.for_field("quantity", "Quantité hors limites", quantity)
    return new_stock


def normalize_images(images: Optional[List[str]]) -> List[str]:
    """Substitute the placeholder when no image was supplied."""
    return list(images) if images else [PLACEHOLDER_IMAGE]


class ProductService:
    """Provide catalog operations on top of the product repository."""

    def __init__(self, repository: CRUDProduct) -> None:
        self.repository = repository

    def get(self, db: Session, product_id: int) -> Product:
        """Fetch a product whatever its state (admin views)."""
        product = self.repository.get(db, product_id)
        if product is None:
            raise NotFoundError("Produit non trouvé")
        return product

    def get_public(self, db: Session, product_id: int) -> Product:
        """
        Fetch an active product for display and count the view.

        Raises:
            NotFoundError: unknown or soft-deleted product.
        """
        product = self.get(db, product_id)
        if not product.is_active:
            raise NotFoundError("Produit non disponible")
        return self.repository.increment_views(db, product)

    def list_products(
        self,
        db: Session,
        page: int,
        limit: int,
        category: Optional[Category] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        featured: Optional[bool] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> Page:
        listing = Listing(
            filters=[
                *exact(Product.category, category),
                *value_range(Product.price, min_price, max_price),
                *exact(Product.featured, featured),
                *text_search(search, Product.name, Product.description),
            ],
            order_by=resolve_sort(
                sort_by, sort_order, PRODUCT_SORT_COLUMNS, tie_breaker=Product.id
            ),
            page=page,
            limit=limit,
        )
        return listing.apply(self.repository.query(db))

    def search(self, db: Session, term: str, page: int, limit: int) -> Page:
        """Active products matching ``term``, most viewed first."""
        term = term.strip()
        if not term:
            raise ValidationError.for_field("q", "Terme de recherche requis", term)
        listing = Listing(
            filters=text_search(term, Product.name, Product.description),
            order_by=[Product.views.desc(), Product.created_at.desc(), Product.id.desc()],
            page=page,
            limit=limit,
        )
        return listing.apply(self.repository.query(db))

    def popular(self, db: Session, limit: int) -> List[Product]:
        return self.repository.top(db, limit)

    def featured(self, db: Session, limit: int) -> List[Product]:
        return self.repository.top(db, limit, featured_only=True)

    def create(self, db: Session, product_in: ProductCreate, creator: User) -> Product:
        data = product_in.model_dump()
        data["category"] = product_in.category.value
        data["images"] = normalize_images(product_in.images)
        data["created_by_id"] = creator.id
        product = self.repository.create(db, data)
        logger.info("Product %s created by %s", product.id, creator.email)
        return product

    def update(self, db: Session, product_id: int, update: ProductUpdate) -> Product:
        product = self.get(db, product_id)
        data: Dict[str, Any] = update.model_dump(exclude_unset=True, exclude_none=True)
        if "category" in data:
            data["category"] = update.category.value  # type: ignore[union-attr]
        if not data:
            return product
        return self.repository.update(db, product, data)

    def soft_delete(self, db: Session, product_id: int) -> Product:
        product = self.get(db, product_id)
        product = self.repository.update(db, product, {"is_active": False})
        logger.info("Product %s deactivated", product.id)
        return product

    def hard_delete(self, db: Session, product_id: int) -> None:
        product = self.get(db, product_id)
        self.repository.delete(db, product)
        logger.warning("Product %s permanently deleted", product_id)

    def adjust_stock(
        self, db: Session, product_id: int, quantity: int, operation: str = "set"
    ) -> Product:
        product = self.get(db, product_id)
        new_stock = apply_stock_operation(product.stock, quantity, operation)
        return self.repository.update(db, product, {"stock": new_stock})

    def category_stats(self, db: Session) -> List[Dict[str, Any]]:
        return [
            {"name": row["name"], "count": row["count"]}
            for row in self.repository.category_counts(db)
        ]

    def admin_stats(self, db: Session) -> Dict[str, Any]:
        return {
            "general": self.repository.catalog_totals(db),
            "categories": self.repository.category_counts(db),
        }


def get_product_service(repository: CRUDProduct = Depends()) -> ProductService:
    return ProductService(repository)
