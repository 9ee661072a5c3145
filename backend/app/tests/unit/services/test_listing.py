"""Test the listing engine."""

from unittest.mock import MagicMock

import pytest

from mireb.repositories.storefront.models.products_model import Product
from mireb.services.listing import (
    Listing,
    Pagination,
    _escape_like,
    clamp_limit,
    exact,
    resolve_sort,
    text_search,
    value_range,
)


class TestFilterClauses:
    """Test cases for the clause builders."""

    def test_unset_values_produce_no_clause(self) -> None:
        assert exact(Product.category, None) == []
        assert value_range(Product.price, None, None) == []
        assert text_search(None, Product.name) == []
        assert text_search("   ", Product.name) == []

    def test_range_bounds_are_independent(self) -> None:
        assert len(value_range(Product.price, 50, None)) == 1
        assert len(value_range(Product.price, None, 100)) == 1
        assert len(value_range(Product.price, 50, 100)) == 2

    def test_search_term_is_or_ed_into_one_clause(self) -> None:
        clauses = text_search("robe", Product.name, Product.description)
        assert len(clauses) == 1

    def test_like_wildcards_are_escaped(self) -> None:
        assert _escape_like("50%_off") == "50\\%\\_off"
        assert _escape_like("a\\b") == "a\\\\b"

    def test_resolve_sort_defaults_to_created_desc(self) -> None:
        columns = {"createdAt": Product.created_at, "prix": Product.price}
        (clause,) = resolve_sort(None, None, columns)
        assert str(clause) == str(Product.created_at.desc())

    def test_resolve_sort_ascending(self) -> None:
        columns = {"createdAt": Product.created_at, "prix": Product.price}
        (clause,) = resolve_sort("prix", "asc", columns)
        assert str(clause) == str(Product.price.asc())

    def test_resolve_sort_appends_tie_breaker_in_same_direction(self) -> None:
        columns = {"createdAt": Product.created_at, "prix": Product.price}
        clauses = resolve_sort("prix", "asc", columns, tie_breaker=Product.id)
        assert [str(c) for c in clauses] == [str(Product.price.asc()), str(Product.id.asc())]

        clauses = resolve_sort(None, None, columns, tie_breaker=Product.id)
        assert str(clauses[1]) == str(Product.id.desc())

    def test_resolve_sort_rejects_unknown_key(self) -> None:
        with pytest.raises(KeyError):
            resolve_sort("password", "asc", {"createdAt": Product.created_at})


class TestPagination:
    """Test cases for the pagination block."""

    def test_middle_page(self) -> None:
        pagination = Pagination.build(page=2, limit=10, total=35)
        assert pagination.total_pages == 4
        assert pagination.has_next_page is True
        assert pagination.has_prev_page is True
        assert pagination.next_page == 3
        assert pagination.prev_page == 1

    def test_single_page(self) -> None:
        pagination = Pagination.build(page=1, limit=12, total=3)
        assert pagination.total_pages == 1
        assert pagination.has_next_page is False
        assert pagination.has_prev_page is False
        assert pagination.next_page is None
        assert pagination.prev_page is None

    def test_page_beyond_range_stays_consistent(self) -> None:
        pagination = Pagination.build(page=7, limit=10, total=12)
        assert pagination.current_page == 7
        assert pagination.total_pages == 2
        assert pagination.has_next_page is False
        assert pagination.has_prev_page is True
        assert pagination.prev_page == 6

    def test_no_results(self) -> None:
        pagination = Pagination.build(page=1, limit=20, total=0)
        assert pagination.total_pages == 0
        assert pagination.has_next_page is False

    def test_wire_names(self) -> None:
        dumped = Pagination.build(page=1, limit=10, total=11).model_dump(by_alias=True)
        assert set(dumped) == {
            "currentPage",
            "totalPages",
            "totalItems",
            "itemsPerPage",
            "hasNextPage",
            "hasPrevPage",
            "nextPage",
            "prevPage",
        }


class TestListing:
    """Test cases for running a listing against a query."""

    def setup_method(self) -> None:
        self.query = MagicMock()
        self.filtered = self.query.filter.return_value
        self.filtered.count.return_value = 25
        self.window = self.filtered.order_by.return_value.offset.return_value.limit
        self.window.return_value.all.return_value = ["a", "b", "c", "d", "e"]

    def test_limit_is_clamped(self) -> None:
        assert clamp_limit(500, maximum=100) == 100
        assert clamp_limit(20, maximum=100) == 20
        assert Listing(limit=1000).limit == 100

    def test_apply_uses_offset_and_limit(self) -> None:
        page = Listing(page=3, limit=5).apply(self.query)

        self.filtered.order_by.return_value.offset.assert_called_once_with(10)
        self.window.assert_called_once_with(5)
        assert page.total == 25
        assert page.items == ["a", "b", "c", "d", "e"]
        assert page.pagination.total_pages == 5
        assert page.pagination.has_next_page is True

    def test_apply_passes_every_filter(self) -> None:
        filters = [Product.price >= 50, Product.category == "Mode"]
        Listing(filters=filters, page=1, limit=12).apply(self.query)

        self.query.filter.assert_called_once_with(*filters)

    def test_page_past_total_skips_the_window_query(self) -> None:
        page = Listing(page=10**19, limit=12).apply(self.query)

        self.filtered.order_by.assert_not_called()
        assert page.items == []
        assert page.total == 25
        assert page.pagination.has_next_page is False
