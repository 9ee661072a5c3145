"""Test the catalog service."""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError as SchemaError

from mireb.errors import NotFoundError, ValidationError
from mireb.repositories.storefront.models.enums import StockStatus, stock_status
from mireb.repositories.storefront.models.products_model import PLACEHOLDER_IMAGE, Product
from mireb.repositories.storefront.schemas.products_schema import (
    MAX_STOCK,
    ProductCreate,
    StockUpdate,
)
from mireb.services.catalog.products_service import (
    ProductService,
    apply_stock_operation,
    normalize_images,
)


class TestStockOperations:
    """Test cases for stock arithmetic."""

    @pytest.mark.parametrize(
        "current, quantity, operation, expected",
        [
            (10, 4, "set", 4),
            (10, -3, "set", 0),
            (10, 5, "add", 15),
            (10, -4, "add", 6),
            (10, 3, "subtract", 7),
            (2, 5, "subtract", 0),
        ],
    )
    def test_operations(self, current, quantity, operation, expected) -> None:
        assert apply_stock_operation(current, quantity, operation) == expected

    def test_add_below_zero_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            apply_stock_operation(3, -5, "add")

    @pytest.mark.parametrize(
        "quantity, operation",
        [(1, "add"), (MAX_STOCK + 1, "set"), (-1, "subtract")],
    )
    def test_result_above_max_stock_is_rejected(self, quantity, operation) -> None:
        with pytest.raises(ValidationError):
            apply_stock_operation(MAX_STOCK, quantity, operation)

    def test_unknown_operation_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            apply_stock_operation(3, 1, "multiply")

    @pytest.mark.parametrize(
        "stock, expected",
        [
            (0, StockStatus.OUT_OF_STOCK),
            (1, StockStatus.LOW_STOCK),
            (5, StockStatus.LOW_STOCK),
            (6, StockStatus.IN_STOCK),
        ],
    )
    def test_stock_status_thresholds(self, stock, expected) -> None:
        assert stock_status(stock) is expected


class TestStockUpdateSchema:
    """Test cases for the stock request body."""

    def test_integral_float_is_accepted(self) -> None:
        assert StockUpdate(quantity=4.0).quantity == 4

    def test_fractional_quantity_is_rejected(self) -> None:
        with pytest.raises(SchemaError):
            StockUpdate(quantity=2.5)

    def test_string_quantity_is_rejected(self) -> None:
        with pytest.raises(SchemaError):
            StockUpdate(quantity="5")

    def test_oversized_quantity_is_rejected(self) -> None:
        with pytest.raises(SchemaError):
            StockUpdate(quantity=10**20)

    def test_default_operation_is_set(self) -> None:
        assert StockUpdate(quantity=1).operation == "set"


class TestProductService:
    """Test cases for ProductService with a mocked repository."""

    def setup_method(self) -> None:
        self.repository = MagicMock()
        self.service = ProductService(self.repository)
        self.db = MagicMock()

    def test_placeholder_substituted_for_empty_images(self) -> None:
        assert normalize_images([]) == [PLACEHOLDER_IMAGE]
        assert normalize_images(["https://example.com/a.jpg"]) == [
            "https://example.com/a.jpg"
        ]

    def test_create_sets_creator_and_placeholder(self) -> None:
        creator = MagicMock(id=7, email="admin@example.com")
        product_in = ProductCreate(
            nom="Casque Bluetooth",
            prix=89,
            categorie="Électronique",
            description="Casque audio sans fil.",
        )

        self.service.create(self.db, product_in, creator)

        data = self.repository.create.call_args.args[1]
        assert data["images"] == [PLACEHOLDER_IMAGE]
        assert data["created_by_id"] == 7
        assert data["category"] == "Électronique"
        assert data["stock"] == 0

    def test_get_public_hides_inactive_product(self) -> None:
        self.repository.get.return_value = Product(id=1, is_active=False)

        with pytest.raises(NotFoundError):
            self.service.get_public(self.db, 1)
        self.repository.increment_views.assert_not_called()

    def test_get_public_counts_a_view(self) -> None:
        product = Product(id=1, is_active=True, views=3)
        self.repository.get.return_value = product

        self.service.get_public(self.db, 1)

        self.repository.increment_views.assert_called_once_with(self.db, product)

    def test_adjust_stock_on_missing_product(self) -> None:
        self.repository.get.return_value = None

        with pytest.raises(NotFoundError):
            self.service.adjust_stock(self.db, 99, 5, "add")

    def test_search_requires_a_term(self) -> None:
        with pytest.raises(ValidationError):
            self.service.search(self.db, "   ", 1, 12)
