"""Lead lifecycle: creation, status machine, assignment, follow-ups and statistics.

Any status may move to any other status; only membership in
``LeadStatus`` is enforced (by the request schemas). Every mutation that
carries a note appends a timestamped entry to ``Lead.notes``, never
overwriting earlier entries.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from mireb.errors import NotFoundError, ValidationError
from mireb.logger_config import get_logger
from mireb.repositories.storefront.crud.leads_crud import CRUDLead
from mireb.repositories.storefront.crud.products_crud import CRUDProduct
from mireb.repositories.storefront.models.enums import LeadSource, LeadStatus
from mireb.repositories.storefront.models.leads_model import Lead
from mireb.repositories.storefront.models.users_model import User
from mireb.repositories.storefront.schemas.leads_schema import LeadCreate, LeadUpdate
from mireb.services.listing import Listing, Page, exact, resolve_sort, text_search, value_range
from mireb.time_utils import iso_timestamp, utcnow

logger = get_logger(__name__)

ASSIGNED_TAG = "Assigned - "
FOLLOW_UP_TAG = "Follow-up scheduled - "
ENTRY_SEPARATOR = "\n\n"
RECENT_ACTIVITY_DAYS = 30
TOP_PRODUCTS_LIMIT = 10

LEAD_SORT_COLUMNS = {
    "createdAt": Lead.created_at,
    "nom": Lead.name,
    "status": Lead.status,
    "followUpDate": Lead.follow_up_date,
}


def audit_entry(note: str, tag: str = "", moment: Optional[datetime] = None) -> str:
    """Format one audit log entry: ``<ISO timestamp>: <tag><note>``."""
    return f"{iso_timestamp(moment)}: {tag}{note}"


def append_entry(log: Optional[str], entry: str) -> str:
    """Append ``entry`` after the existing log, separated by a blank line."""
    return f"{log}{ENTRY_SEPARATOR}{entry}" if log else entry


def conversion_rate(converted: int, total: int) -> float:
    """Percentage of converted leads, rounded to two decimals; 0 without leads."""
    if total <= 0:
        return 0
    return round(converted / total * 100, 2)


class LeadService:
    """Own the lead state machine and the queries built on it."""

    def __init__(self, repository: CRUDLead, product_repository: CRUDProduct) -> None:
        self.repository = repository
        self.product_repository = product_repository

    def create(self, db: Session, lead_in: LeadCreate) -> Lead:
        """
        Record a lead for an active product.

        The product check and the insert are two independent statements.

        Raises:
            NotFoundError: the product does not exist.
            ValidationError: the product exists but is no longer active.
        """
        product = self.product_repository.get(db, lead_in.product_id)
        if product is None:
            raise NotFoundError("Produit non trouvé")
        if not product.is_active:
            raise ValidationError("Ce produit n'est plus disponible")

        lead = self.repository.create(
            db,
            {
                "name": lead_in.name,
                "phone": lead_in.phone,
                "message": lead_in.message,
                "product_id": product.id,
                "status": LeadStatus.NEW.value,
                "source": LeadSource.WEBSITE.value,
            },
        )
        logger.info("New lead %s: %s (%s) for %s", lead.id, lead.name, lead.phone, product.name)
        return lead

    def get(self, db: Session, lead_id: int) -> Lead:
        """Fetch a lead by id, archived ones included."""
        lead = self.repository.get(db, lead_id)
        if lead is None:
            raise NotFoundError("Lead non trouvé")
        return lead

    def _note(self, lead: Lead, note: Optional[str], tag: str = "") -> None:
        if note:
            lead.notes = append_entry(lead.notes, audit_entry(note, tag))

    def update_status(
        self, db: Session, lead: Lead, status: LeadStatus, note: Optional[str] = None
    ) -> Lead:
        lead.status = LeadStatus(status).value
        self._note(lead, note)
        return self.repository.save(db, lead)

    def assign_to(
        self, db: Session, lead: Lead, user_id: int, note: Optional[str] = None
    ) -> Lead:
        """Point the lead at a user; the user is not looked up."""
        lead.assigned_to_id = user_id
        self._note(lead, note, ASSIGNED_TAG)
        return self.repository.save(db, lead)

    def schedule_follow_up(
        self, db: Session, lead: Lead, when: datetime, note: Optional[str] = None
    ) -> Lead:
        """Set the follow-up date; a past date makes the lead due immediately."""
        lead.follow_up_date = when
        self._note(lead, note, FOLLOW_UP_TAG)
        return self.repository.save(db, lead)

    def append_note(self, db: Session, lead: Lead, note: str) -> Lead:
        self._note(lead, note)
        return self.repository.save(db, lead)

    def update(self, db: Session, lead_id: int, update: LeadUpdate) -> Lead:
        """
        Apply the admin edit form.

        Status, assignment and follow-up are applied in that order, each one
        recording the note. A note without any of them is appended alone.
        """
        lead = self.get(db, lead_id)
        note = update.notes
        touched = False
        if update.status is not None:
            lead = self.update_status(db, lead, update.status, note)
            touched = True
        if update.assigned_to is not None:
            lead = self.assign_to(db, lead, update.assigned_to, note)
            touched = True
        if update.follow_up_date is not None:
            lead = self.schedule_follow_up(db, lead, update.follow_up_date, note)
            touched = True
        if note and not touched:
            lead = self.append_note(db, lead, note)
        return lead

    def archive(self, db: Session, lead_id: int) -> Lead:
        lead = self.get(db, lead_id)
        lead.is_archived = True
        lead = self.repository.save(db, lead)
        logger.info("Lead %s archived", lead.id)
        return lead

    def list_leads(
        self,
        db: Session,
        page: int,
        limit: int,
        status: Optional[LeadStatus] = None,
        assigned_to: Optional[int] = None,
        product_id: Optional[int] = None,
        search: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> Page:
        listing = Listing(
            filters=[
                *exact(Lead.status, status),
                *exact(Lead.assigned_to_id, assigned_to),
                *exact(Lead.product_id, product_id),
                *text_search(search, Lead.name, Lead.phone, Lead.message),
                *value_range(Lead.created_at, date_from, date_to),
            ],
            order_by=resolve_sort(
                sort_by, sort_order, LEAD_SORT_COLUMNS, tie_breaker=Lead.id
            ),
            page=page,
            limit=limit,
        )
        return listing.apply(self.repository.query(db))

    def my_leads(
        self,
        db: Session,
        user: User,
        page: int,
        limit: int,
        status: Optional[LeadStatus] = None,
    ) -> Page:
        return self.list_leads(db, page, limit, status=status, assigned_to=user.id)

    def due_for_follow_up(self, db: Session, now: Optional[datetime] = None) -> List[Lead]:
        return self.repository.due_for_follow_up(db, now or utcnow())

    def statistics(self, db: Session) -> Dict[str, Any]:
        """Aggregate figures over non-archived leads."""
        since = utcnow() - timedelta(days=RECENT_ACTIVITY_DAYS)
        total = self.repository.count(db)
        converted = self.repository.count(db, Lead.status == LeadStatus.CONVERTED.value)

        return {
            "byStatus": [
                {"status": status, "count": count}
                for status, count in self.repository.count_by_status(db)
            ],
            "needingFollowUp": self.repository.count_due_for_follow_up(db, utcnow()),
            "recentActivity": [
                {"date": str(day), "count": count}
                for day, count in self.repository.count_by_day(db, since)
            ],
            "topProducts": [
                {
                    "productId": product_id,
                    "count": count,
                    "product": (
                        {"id": product_id, "nom": name, "prix": price}
                        if name is not None
                        else None
                    ),
                }
                for product_id, count, name, price in self.repository.top_products(
                    db, TOP_PRODUCTS_LIMIT
                )
            ],
            "conversion": {
                "total": total,
                "converted": converted,
                "rate": conversion_rate(converted, total),
            },
        }

    def export_rows(
        self,
        db: Session,
        status: Optional[LeadStatus] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Flat rows for spreadsheet export, newest first."""
        leads = (
            self.repository.query(db)
            .filter(
                *exact(Lead.status, status),
                *value_range(Lead.created_at, date_from, date_to),
            )
            .order_by(Lead.created_at.desc())
            .all()
        )
        return [
            {
                "Date": lead.created_at.date().isoformat(),
                "Nom": lead.name,
                "Telephone": lead.phone,
                "Produit": lead.product.name if lead.product else "N/A",
                "Prix": lead.product.price if lead.product else 0,
                "Status": lead.status,
                "Message": " ".join((lead.message or "").splitlines()),
                "Assigne": lead.assigned_to.name if lead.assigned_to else "Non assigné",
                "Age": f"{lead.age_in_days} jours",
            }
            for lead in leads
        ]


def get_lead_service(
    repository: CRUDLead = Depends(), product_repository: CRUDProduct = Depends()
) -> LeadService:
    return LeadService(repository, product_repository)
