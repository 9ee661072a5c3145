"""
CRUD operations for leads.

This module provides a `CRUDLead` class with methods to:
- Retrieve a lead by ID and build the base listing query.
- Create a lead and persist in-place mutations.
- Run the follow-up and statistics queries.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from mireb.repositories.storefront.models.enums import TERMINAL_STATUSES
from mireb.repositories.storefront.models.leads_model import Lead
from mireb.repositories.storefront.models.products_model import Product


class CRUDLead:
    """Database access for leads."""

    def get(self, db: Session, lead_id: int) -> Optional[Lead]:
        """Retrieve a lead by ID, archived or not."""
        return db.query(Lead).filter(Lead.id == lead_id).first()

    def query(self, db: Session, include_archived: bool = False) -> Query:
        query = db.query(Lead)
        if not include_archived:
            query = query.filter(Lead.is_archived.is_(False))
        return query

    def create(self, db: Session, data: Dict[str, Any]) -> Lead:
        lead = Lead(**data)
        db.add(lead)
        db.commit()
        db.refresh(lead)
        return lead

    def save(self, db: Session, lead: Lead) -> Lead:
        """Persist changes made to a loaded lead."""
        db.add(lead)
        db.commit()
        db.refresh(lead)
        return lead

    def _due_query(self, db: Session, now: datetime) -> Query:
        return self.query(db).filter(
            Lead.follow_up_date.isnot(None),
            Lead.follow_up_date <= now,
            Lead.status.notin_([status.value for status in TERMINAL_STATUSES]),
        )

    def due_for_follow_up(self, db: Session, now: datetime) -> List[Lead]:
        """Open, non-archived leads whose follow-up date has passed."""
        return self._due_query(db, now).order_by(Lead.follow_up_date.asc()).all()

    def count_due_for_follow_up(self, db: Session, now: datetime) -> int:
        return self._due_query(db, now).count()

    def count(self, db: Session, *filters: Any) -> int:
        return self.query(db).filter(*filters).count()

    def count_by_status(self, db: Session) -> List[Tuple[str, int]]:
        return (
            db.query(Lead.status, func.count(Lead.id))
            .filter(Lead.is_archived.is_(False))
            .group_by(Lead.status)
            .order_by(Lead.status)
            .all()
        )

    def count_by_day(self, db: Session, since: datetime) -> List[Tuple[Any, int]]:
        day = func.date(Lead.created_at)
        return (
            db.query(day, func.count(Lead.id))
            .filter(Lead.is_archived.is_(False), Lead.created_at >= since)
            .group_by(day)
            .order_by(day)
            .all()
        )

    def top_products(
        self, db: Session, limit: int
    ) -> Sequence[Tuple[int, int, Optional[str], Optional[float]]]:
        """Products referenced by the most leads, with their name and price when they still exist."""
        count = func.count(Lead.id)
        return (
            db.query(Lead.product_id, count, Product.name, Product.price)
            .outerjoin(Product, Product.id == Lead.product_id)
            .filter(Lead.is_archived.is_(False))
            .group_by(Lead.product_id, Product.name, Product.price)
            .order_by(count.desc())
            .limit(limit)
            .all()
        )
