"""Pydantic schemas for catalog products."""

import re
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import AfterValidator, Field, StrictFloat, StrictInt, field_validator

from mireb.repositories.storefront.models.enums import Category, StockStatus
from mireb.repositories.storefront.schemas.common_schema import UserSummary, WireModel

IMAGE_URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)
MAX_STOCK = 2**31 - 1


def check_image_url(url: str) -> str:
    if not IMAGE_URL_PATTERN.match(url):
        raise ValueError("Chaque image doit être une URL valide")
    return url


def check_description(value: str) -> str:
    value = value.strip()
    if not 10 <= len(value) <= 2000:
        raise ValueError("La description doit contenir entre 10 et 2000 caractères")
    return value


def check_product_name(value: str) -> str:
    value = value.strip()
    if not 2 <= len(value) <= 100:
        raise ValueError("Le nom du produit doit contenir entre 2 et 100 caractères")
    return value


ImageUrl = Annotated[str, AfterValidator(check_image_url)]
Description = Annotated[str, AfterValidator(check_description)]
ProductName = Annotated[str, AfterValidator(check_product_name)]


class ProductCreate(WireModel):
    """Payload required to create a product.

    An empty ``images`` list is accepted; the service substitutes a placeholder.
    """

    name: ProductName = Field(..., alias="nom")
    price: float = Field(..., alias="prix", ge=0)
    images: List[ImageUrl] = Field(default_factory=list)
    category: Category = Field(..., alias="categorie")
    stock: int = Field(default=0, ge=0, le=MAX_STOCK)
    description: Description
    featured: bool = False


class ProductUpdate(WireModel):
    """Fields allowed to update on an existing product."""

    name: Optional[ProductName] = Field(default=None, alias="nom")
    price: Optional[float] = Field(default=None, alias="prix", ge=0)
    images: Optional[List[ImageUrl]] = Field(default=None, min_length=1)
    category: Optional[Category] = Field(default=None, alias="categorie")
    stock: Optional[int] = Field(default=None, ge=0, le=MAX_STOCK)
    description: Optional[Description] = None
    featured: Optional[bool] = None
    is_active: Optional[bool] = None


class StockUpdate(WireModel):
    """Stock adjustment request; ``quantity`` must be a JSON number."""

    quantity: Union[StrictInt, StrictFloat]
    operation: Literal["set", "add", "subtract"] = "set"

    @field_validator("quantity")
    @classmethod
    def check_integral(cls, value: Union[int, float]) -> int:
        if isinstance(value, float) and not value.is_integer():
            raise ValueError("Quantité invalide")
        if abs(value) > MAX_STOCK:
            raise ValueError("Quantité hors limites")
        return int(value)


class ProductSummary(WireModel):
    """Embedded view of the product a lead refers to."""

    id: int
    name: str = Field(..., alias="nom")
    price: float = Field(..., alias="prix")
    images: List[str] = Field(default_factory=list)


class ProductResponse(WireModel):
    id: int
    name: str = Field(..., alias="nom")
    price: float = Field(..., alias="prix")
    images: List[str]
    category: Category = Field(..., alias="categorie")
    stock: int
    description: str
    is_active: bool
    featured: bool
    views: int
    created_by: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    stock_status: StockStatus
    in_stock: bool


class StockResponse(WireModel):
    id: int
    name: str = Field(..., alias="nom")
    stock: int
    stock_status: StockStatus
