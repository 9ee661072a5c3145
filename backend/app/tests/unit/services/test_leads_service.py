"""Test the lead lifecycle service."""

import re
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from mireb.errors import NotFoundError, ValidationError
from mireb.repositories.storefront.crud.leads_crud import CRUDLead
from mireb.repositories.storefront.crud.products_crud import CRUDProduct
from mireb.repositories.storefront.models.enums import LeadStatus
from mireb.repositories.storefront.models.leads_model import Lead
from mireb.repositories.storefront.models.products_model import Product
from mireb.repositories.storefront.schemas.leads_schema import LeadCreate, LeadUpdate
from mireb.services.leads.leads_service import (
    ASSIGNED_TAG,
    FOLLOW_UP_TAG,
    LeadService,
    append_entry,
    audit_entry,
    conversion_rate,
)
from mireb.time_utils import utcnow

ENTRY = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z: ")


class TestAuditLog:
    """Test cases for the notes audit format."""

    def test_entry_format(self) -> None:
        moment = datetime(2024, 1, 2, 3, 4, 5, 678000)
        assert audit_entry("Appelé", moment=moment) == "2024-01-02T03:04:05.678Z: Appelé"
        assert (
            audit_entry("Jean", ASSIGNED_TAG, moment)
            == "2024-01-02T03:04:05.678Z: Assigned - Jean"
        )

    def test_entries_are_separated_by_a_blank_line(self) -> None:
        assert append_entry("", "first") == "first"
        assert append_entry("first", "second") == "first\n\nsecond"

    def test_conversion_rate(self) -> None:
        assert conversion_rate(0, 0) == 0
        assert conversion_rate(1, 3) == 33.33
        assert conversion_rate(2, 2) == 100


class TestLeadServiceMocked:
    """Test cases for LeadService with mocked repositories."""

    def setup_method(self) -> None:
        self.repository = MagicMock()
        self.repository.save.side_effect = lambda db, lead: lead
        self.product_repository = MagicMock()
        self.service = LeadService(self.repository, self.product_repository)
        self.db = MagicMock()
        self.lead_in = LeadCreate(
            nom="Jean Dupont", tel="+243 812 345 678", message="Disponible ?", produit=1
        )

    def test_create_unknown_product(self) -> None:
        self.product_repository.get.return_value = None

        with pytest.raises(NotFoundError):
            self.service.create(self.db, self.lead_in)
        self.repository.create.assert_not_called()

    def test_create_inactive_product(self) -> None:
        self.product_repository.get.return_value = Product(id=1, is_active=False)

        with pytest.raises(ValidationError, match="plus disponible"):
            self.service.create(self.db, self.lead_in)
        self.repository.create.assert_not_called()

    def test_create_stores_new_website_lead(self) -> None:
        self.product_repository.get.return_value = Product(id=1, name="Robe", is_active=True)

        self.service.create(self.db, self.lead_in)

        data = self.repository.create.call_args.args[1]
        assert data["status"] == "nouveau"
        assert data["source"] == "website"
        assert data["product_id"] == 1
        assert data["phone"] == "+243 812 345 678"

    def test_status_update_without_note_leaves_log_untouched(self) -> None:
        lead = Lead(status="nouveau", notes="")

        self.service.update_status(self.db, lead, LeadStatus.CONTACTED)

        assert lead.status == "contacte"
        assert lead.notes == ""

    def test_backward_transition_is_allowed(self) -> None:
        lead = Lead(status="converti", notes="")

        self.service.update_status(self.db, lead, LeadStatus.NEW)

        assert lead.status == "nouveau"

    def test_assignment_is_tagged(self) -> None:
        lead = Lead(notes="")

        self.service.assign_to(self.db, lead, 42, "à rappeler")

        assert lead.assigned_to_id == 42
        assert ENTRY.match(lead.notes)
        assert lead.notes.endswith(": Assigned - à rappeler")

    def test_follow_up_is_tagged(self) -> None:
        lead = Lead(notes="")
        when = utcnow() - timedelta(days=1)

        self.service.schedule_follow_up(self.db, lead, when, "relance")

        assert lead.follow_up_date == when
        assert lead.notes.endswith(FOLLOW_UP_TAG + "relance")

    def test_notes_accumulate_in_order(self) -> None:
        lead = Lead(notes="")

        self.service.append_note(self.db, lead, "premier appel")
        self.service.append_note(self.db, lead, "second appel")

        entries = lead.notes.split("\n\n")
        assert len(entries) == 2
        assert all(ENTRY.match(entry) for entry in entries)
        assert entries[0].endswith("premier appel")
        assert entries[1].endswith("second appel")

    def test_combined_update_applies_each_signal(self) -> None:
        lead = Lead(status="nouveau", notes="")
        self.repository.get.return_value = lead
        update = LeadUpdate(status="interesse", assignedTo=5, notes="suivi")

        self.service.update(self.db, 1, update)

        entries = lead.notes.split("\n\n")
        assert lead.status == "interesse"
        assert lead.assigned_to_id == 5
        assert entries[0].endswith(": suivi")
        assert entries[1].endswith(": Assigned - suivi")

    def test_lone_note_is_appended_once(self) -> None:
        lead = Lead(status="nouveau", notes="")
        self.repository.get.return_value = lead

        self.service.update(self.db, 1, LeadUpdate(notes="juste une note"))

        assert lead.notes.count("juste une note") == 1
        assert lead.status == "nouveau"

    def test_update_unknown_lead(self) -> None:
        self.repository.get.return_value = None

        with pytest.raises(NotFoundError):
            self.service.update(self.db, 404, LeadUpdate(notes="x"))


class TestLeadServiceStore:
    """Test cases for LeadService against the SQLite store."""

    def setup_method(self) -> None:
        self.service = LeadService(CRUDLead(), CRUDProduct())

    def _lead(self, db, product, **overrides):
        data = {
            "name": "Jean Dupont",
            "phone": "+243812345678",
            "message": "",
            "product_id": product.id,
        }
        data.update(overrides)
        return CRUDLead().create(db, data)

    def test_statistics_without_leads(self, db) -> None:
        stats = self.service.statistics(db)

        assert stats["conversion"] == {"total": 0, "converted": 0, "rate": 0}
        assert stats["byStatus"] == []
        assert stats["needingFollowUp"] == 0
        assert stats["topProducts"] == []

    def test_statistics_exclude_archived(self, db, make_product) -> None:
        product = make_product()
        self._lead(db, product, status="converti")
        self._lead(db, product)
        self._lead(db, product, status="converti", is_archived=True)

        stats = self.service.statistics(db)

        assert stats["conversion"] == {"total": 2, "converted": 1, "rate": 50.0}
        assert stats["topProducts"][0]["count"] == 2
        assert stats["topProducts"][0]["product"]["nom"] == product.name
        assert sum(day["count"] for day in stats["recentActivity"]) == 2

    def test_due_for_follow_up(self, db, make_product) -> None:
        product = make_product()
        past = utcnow() - timedelta(hours=1)
        due = self._lead(db, product, follow_up_date=past)
        self._lead(db, product, follow_up_date=utcnow() + timedelta(days=2))
        self._lead(db, product, follow_up_date=past, status="perdu")
        self._lead(db, product, follow_up_date=past, is_archived=True)

        assert [lead.id for lead in self.service.due_for_follow_up(db)] == [due.id]
        assert self.service.statistics(db)["needingFollowUp"] == 1

    def test_list_filters_and_search(self, db, make_product) -> None:
        robe = make_product()
        casque = make_product(name="Casque Bluetooth", category="Électronique")
        self._lead(db, robe, name="Alice Martin", status="contacte")
        self._lead(db, casque, name="Bob Martin", message="livraison à Goma ?")
        self._lead(db, casque, name="Chloé Petit")

        assert self.service.list_leads(db, 1, 20, status=LeadStatus.CONTACTED).total == 1
        assert self.service.list_leads(db, 1, 20, product_id=casque.id).total == 2
        assert self.service.list_leads(db, 1, 20, search="martin").total == 2
        assert self.service.list_leads(db, 1, 20, search="GOMA").total == 1

        page = self.service.list_leads(db, 1, 20, sort_by="nom", sort_order="asc")
        assert [lead.name for lead in page.items] == [
            "Alice Martin",
            "Bob Martin",
            "Chloé Petit",
        ]

    def test_archived_lead_stays_fetchable(self, db, make_product) -> None:
        lead = self._lead(db, make_product())

        self.service.archive(db, lead.id)

        assert self.service.list_leads(db, 1, 20).total == 0
        assert self.service.get(db, lead.id).is_archived is True

    def test_export_rows(self, db, make_product) -> None:
        product = make_product(price=45.0)
        self._lead(db, product, message="ligne 1\nligne 2")

        (row,) = self.service.export_rows(db)

        assert row["Produit"] == product.name
        assert row["Prix"] == 45.0
        assert row["Message"] == "ligne 1 ligne 2"
        assert row["Assigne"] == "Non assigné"
        assert row["Age"] == "0 jours"
