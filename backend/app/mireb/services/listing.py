"""Listing engine shared by every paginated endpoint.

Turns flat query parameters into SQLAlchemy filter clauses, an ORDER BY and
an OFFSET/LIMIT pair, then runs the query and builds the pagination block:

- exact equality: ``exact(Product.category, "Mode")``
- inclusive numeric or date range: ``value_range(Product.price, 50, None)``
- case-insensitive substring OR-ed across text columns:
  ``text_search("robe", Product.name, Product.description)``

Unset parameters (``None``) contribute no clause, so callers can pass the raw
query values straight through.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Generic, List, Mapping, Optional, Sequence, TypeVar

from sqlalchemy import or_
from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement

from mireb.configs import settings
from mireb.repositories.storefront.schemas.common_schema import WireModel

T = TypeVar("T")

DEFAULT_SORT_KEY = "createdAt"
DEFAULT_SORT_ORDER = "desc"
LIKE_ESCAPE = "\\"


def exact(column: Any, value: Any) -> List[ColumnElement]:
    """Equality clause, or nothing when the value is unset."""
    if value is None:
        return []
    if hasattr(value, "value"):
        value = value.value
    return [column == value]


def value_range(column: Any, lower: Any = None, upper: Any = None) -> List[ColumnElement]:
    """Inclusive bounds, each one optional."""
    clauses: List[ColumnElement] = []
    if lower is not None:
        clauses.append(column >= lower)
    if upper is not None:
        clauses.append(column <= upper)
    return clauses


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def text_search(term: Optional[str], *columns: Any) -> List[ColumnElement]:
    """Case-insensitive substring match of ``term`` on any of ``columns``."""
    if term is None or not term.strip():
        return []
    pattern = f"%{_escape_like(term.strip())}%"
    return [or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in columns))]


def clamp_limit(limit: int, maximum: Optional[int] = None) -> int:
    """Bound the page size to the configured maximum."""
    maximum = maximum if maximum is not None else settings.MAX_PAGE_SIZE
    return max(1, min(limit, maximum))


def resolve_sort(
    sort_by: Optional[str],
    sort_order: Optional[str],
    columns: Mapping[str, Any],
    default: str = DEFAULT_SORT_KEY,
    tie_breaker: Any = None,
) -> List[ColumnElement]:
    """Map an allow-listed sort key and a direction to ORDER BY clauses.

    ``tie_breaker`` is appended in the same direction so rows with equal sort
    values keep a stable order across pages.

    Raises:
        KeyError: if ``sort_by`` is not in ``columns``; the controllers reject
            unknown keys before they get here.
    """
    keys = [columns[sort_by or default]]
    if tie_breaker is not None:
        keys.append(tie_breaker)
    if (sort_order or DEFAULT_SORT_ORDER) == "asc":
        return [key.asc() for key in keys]
    return [key.desc() for key in keys]


class Pagination(WireModel):
    """Pagination block returned under ``meta.pagination``."""

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool
    next_page: Optional[int] = None
    prev_page: Optional[int] = None

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit)
        has_next = page < total_pages
        has_prev = page > 1
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total,
            items_per_page=limit,
            has_next_page=has_next,
            has_prev_page=has_prev,
            next_page=page + 1 if has_next else None,
            prev_page=page - 1 if has_prev else None,
        )


class PageMeta(WireModel):
    pagination: Pagination


@dataclass
class Page(Generic[T]):
    """One page of results and the total before pagination."""

    items: List[T]
    total: int
    page: int
    limit: int

    @property
    def pagination(self) -> Pagination:
        return Pagination.build(self.page, self.limit, self.total)

    @property
    def meta(self) -> PageMeta:
        return PageMeta(pagination=self.pagination)


@dataclass
class Listing:
    """A resolved listing request: filters, ordering and the page window."""

    filters: Sequence[ColumnElement] = field(default_factory=list)
    order_by: Sequence[ColumnElement] = field(default_factory=list)
    page: int = 1
    limit: int = 12

    def __post_init__(self) -> None:
        self.limit = clamp_limit(self.limit)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def apply(self, query: Query) -> Page:
        """Run ``query`` with the filters, returning the page and the total count."""
        filtered = query.filter(*self.filters)
        total = filtered.count()
        if self.skip >= total:
            return Page(items=[], total=total, page=self.page, limit=self.limit)
        items = (
            filtered.order_by(*self.order_by).offset(self.skip).limit(self.limit).all()
        )
        return Page(items=items, total=total, page=self.page, limit=self.limit)
