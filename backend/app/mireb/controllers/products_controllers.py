"""Catalog routes.

Static paths (``/search``, ``/popular``, ``/featured``, ``/categories/stats``,
``/admin/stats``) are declared before ``/{product_id}`` so they are matched
first.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from mireb.models.response_models import Envelope, paginated_response, success_response
from mireb.repositories.storefront.dependencies import get_db
from mireb.repositories.storefront.models.enums import Category
from mireb.repositories.storefront.models.users_model import User
from mireb.repositories.storefront.schemas.products_schema import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    StockResponse,
    StockUpdate,
)
from mireb.services.auth.access_control import require_admin
from mireb.services.catalog.products_service import ProductService, get_product_service

HIGHLIGHT_LIMIT = 6

ProductSortKey = Literal["nom", "prix", "createdAt", "views"]
SortOrder = Literal["asc", "desc"]

products_router = APIRouter(
    prefix="/products", tags=["Products"], responses={400: {"model": Envelope}}
)


def _product(product) -> dict:
    return {"product": ProductResponse.model_validate(product)}


def _products(products) -> dict:
    return {"products": [ProductResponse.model_validate(p) for p in products]}


@products_router.get("")
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1),
    categorie: Optional[Category] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    featured: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    sort_by: ProductSortKey = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    """Active products, filtered, sorted and paginated."""
    result = service.list_products(
        db,
        page,
        limit,
        category=categorie,
        min_price=min_price,
        max_price=max_price,
        featured=featured,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return paginated_response(result, ProductResponse, "Produits récupérés avec succès")


@products_router.get("/search")
def search_products(
    q: str = Query(..., min_length=1, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1),
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    result = service.search(db, q, page, limit)
    return paginated_response(
        result, ProductResponse, f"Résultats de recherche pour \"{q.strip()}\""
    )


@products_router.get("/popular")
def popular_products(
    limit: int = Query(HIGHLIGHT_LIMIT, ge=1),
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    products = service.popular(db, limit)
    return success_response("Produits populaires récupérés", _products(products))


@products_router.get("/featured")
def featured_products(
    limit: int = Query(HIGHLIGHT_LIMIT, ge=1),
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    products = service.featured(db, limit)
    return success_response("Produits mis en avant récupérés", _products(products))


@products_router.get("/categories/stats")
def category_stats(
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    categories = service.category_stats(db)
    return success_response(
        "Statistiques des catégories récupérées", {"categories": categories}
    )


@products_router.get("/admin/stats")
def admin_stats(
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    return success_response("Statistiques récupérées", service.admin_stats(db))


@products_router.post("", status_code=201)
def create_product(
    product_in: ProductCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    product = service.create(db, product_in, admin)
    return success_response("Produit créé avec succès", _product(product), status_code=201)


@products_router.get("/{product_id}", responses={404: {"model": Envelope}})
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    """Public product page; every successful read counts one view."""
    product = service.get_public(db, product_id)
    return success_response("Produit récupéré avec succès", _product(product))


@products_router.put("/{product_id}", responses={404: {"model": Envelope}})
def update_product(
    product_id: int,
    update: ProductUpdate,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    product = service.update(db, product_id, update)
    return success_response("Produit mis à jour avec succès", _product(product))


@products_router.delete("/{product_id}", responses={404: {"model": Envelope}})
def delete_product(
    product_id: int,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    service.soft_delete(db, product_id)
    return success_response("Produit supprimé avec succès")


@products_router.delete("/{product_id}/permanent", responses={404: {"model": Envelope}})
def delete_product_permanently(
    product_id: int,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    service.hard_delete(db, product_id)
    return success_response("Produit supprimé définitivement")


@products_router.patch("/{product_id}/stock", responses={404: {"model": Envelope}})
def update_stock(
    product_id: int,
    stock_in: StockUpdate,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    product = service.adjust_stock(db, product_id, stock_in.quantity, stock_in.operation)
    return success_response(
        "Stock mis à jour avec succès",
        {"product": StockResponse.model_validate(product)},
    )
