"""
CRUD operations for catalog products.

This module provides a `CRUDProduct` class with methods to:
- Retrieve a product by ID and build the base listing query.
- Create, update and hard-delete a product.
- Increment the view counter atomically.
- Aggregate category and catalog statistics.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Query, Session

from mireb.repositories.storefront.models.enums import LOW_STOCK_THRESHOLD
from mireb.repositories.storefront.models.products_model import Product


class CRUDProduct:
    """
    Repository class for handling database operations related to products.

    Listing queries are built here and narrowed by the listing engine.
    """

    def get(self, db: Session, product_id: int) -> Optional[Product]:
        """
        Retrieve a product by its ID, active or not.

        Args:
            db (Session): The database session.
            product_id (int): The ID of the product.

        Returns:
            Optional[Product]: The product if found, otherwise None.
        """
        return db.query(Product).filter(Product.id == product_id).first()

    def query(self, db: Session, active_only: bool = True) -> Query:
        """Base query for listings; inactive products are hidden by default."""
        query = db.query(Product)
        if active_only:
            query = query.filter(Product.is_active.is_(True))
        return query

    def create(self, db: Session, data: Dict[str, Any]) -> Product:
        product = Product(**data)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    def update(self, db: Session, product: Product, data: Dict[str, Any]) -> Product:
        for field, value in data.items():
            setattr(product, field, value)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    def delete(self, db: Session, product: Product) -> None:
        db.delete(product)
        db.commit()

    def increment_views(self, db: Session, product: Product) -> Product:
        """
        Add one view with a single UPDATE, bypassing model-level validation.

        Args:
            db (Session): The database session.
            product (Product): The product being displayed.

        Returns:
            Product: The refreshed product.
        """
        db.query(Product).filter(Product.id == product.id).update(
            {Product.views: Product.views + 1}, synchronize_session=False
        )
        db.commit()
        db.refresh(product)
        return product

    def top(self, db: Session, limit: int, featured_only: bool = False) -> List[Product]:
        """Active products by popularity, or the newest featured ones."""
        query = self.query(db)
        if featured_only:
            return (
                query.filter(Product.featured.is_(True))
                .order_by(Product.created_at.desc())
                .limit(limit)
                .all()
            )
        return (
            query.order_by(Product.views.desc(), Product.created_at.desc())
            .limit(limit)
            .all()
        )

    def category_counts(self, db: Session) -> List[Dict[str, Any]]:
        """Active products grouped by category, largest first."""
        count = func.count(Product.id)
        rows = (
            db.query(Product.category, count, func.coalesce(func.sum(Product.stock), 0))
            .filter(Product.is_active.is_(True))
            .group_by(Product.category)
            .order_by(count.desc())
            .all()
        )
        return [
            {"name": category, "count": total, "totalStock": int(stock)}
            for category, total, stock in rows
        ]

    def catalog_totals(self, db: Session) -> Dict[str, Any]:
        """Catalog-wide figures across active and inactive products."""
        row = db.query(
            func.count(Product.id),
            func.coalesce(func.sum(case((Product.is_active.is_(True), 1), else_=0)), 0),
            func.coalesce(func.sum(Product.views), 0),
            func.avg(Product.price),
            func.coalesce(func.sum(Product.stock), 0),
            func.coalesce(
                func.sum(case((Product.stock <= LOW_STOCK_THRESHOLD, 1), else_=0)), 0
            ),
        ).one()
        total, active, views, average_price, stock, low_stock = row
        return {
            "totalProducts": total,
            "activeProducts": int(active),
            "totalViews": int(views),
            "averagePrice": round(float(average_price), 2) if average_price is not None else 0,
            "totalStock": int(stock),
            "lowStockProducts": int(low_stock),
        }
