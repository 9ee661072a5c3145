"""SQLAlchemy model for catalog products."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    Integer,
    String,
    Text,
    TIMESTAMP,
)
from sqlalchemy.orm import relationship

from mireb.repositories.storefront.database import Base
from mireb.repositories.storefront.models.enums import StockStatus, stock_status
from mireb.time_utils import utcnow

PLACEHOLDER_IMAGE = "https://via.placeholder.com/600x400?text=No+Image"


class Product(Base):  # type: ignore[misc]
    """A catalog entry customers can request to be contacted about.

    ``is_active`` is the soft-delete marker. ``created_by_id`` is a display-only
    reference: there is no foreign key, deleting the user leaves the product.
    """

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    price = Column(Float, nullable=False, index=True)
    images = Column(JSON, nullable=False, default=list)
    category = Column(String(40), nullable=False, index=True)
    stock = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    featured = Column(Boolean, nullable=False, default=False, index=True)
    views = Column(Integer, nullable=False, default=0)
    created_by_id = Column(Integer, nullable=True)
    created_at = Column(
        TIMESTAMP(timezone=False), nullable=False, default=utcnow, index=True
    )
    updated_at = Column(
        TIMESTAMP(timezone=False), nullable=False, default=utcnow, onupdate=utcnow
    )

    created_by = relationship(
        "User",
        primaryjoin="foreign(Product.created_by_id) == User.id",
        viewonly=True,
        lazy="joined",
    )

    @property
    def stock_status(self) -> StockStatus:
        return stock_status(self.stock or 0)

    @property
    def in_stock(self) -> bool:
        return (self.stock or 0) > 0

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"
