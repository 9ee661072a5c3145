"""Lead routes: the public contact form and the admin pipeline."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from mireb.models.response_models import Envelope, paginated_response, success_response
from mireb.repositories.storefront.dependencies import get_db
from mireb.repositories.storefront.models.enums import LeadStatus
from mireb.repositories.storefront.models.users_model import User
from mireb.repositories.storefront.schemas.common_schema import UtcDatetime
from mireb.repositories.storefront.schemas.leads_schema import (
    LeadAssign,
    LeadCreate,
    LeadFollowUp,
    LeadResponse,
    LeadUpdate,
)
from mireb.services.auth.access_control import get_current_user, require_admin
from mireb.services.leads.leads_service import LeadService, get_lead_service

LeadSortKey = Literal["createdAt", "nom", "status", "followUpDate"]
SortOrder = Literal["asc", "desc"]

leads_router = APIRouter(
    prefix="/leads", tags=["Leads"], responses={400: {"model": Envelope}}
)


def _lead(lead) -> dict:
    return {"lead": LeadResponse.model_validate(lead)}


@leads_router.post("", status_code=201, responses={404: {"model": Envelope}})
def create_lead(
    lead_in: LeadCreate,
    db: Session = Depends(get_db),
    service: LeadService = Depends(get_lead_service),
) -> JSONResponse:
    """
    Public contact form.

    Args:
        lead_in (LeadCreate): visitor name, phone, optional message and the
        product id the request is about.

    Returns:
        The stored lead, status ``nouveau``.
    """
    lead = service.create(db, lead_in)
    return success_response(
        "Demande envoyée avec succès! Nous vous contacterons bientôt.",
        _lead(lead),
        status_code=201,
    )


@leads_router.get("")
def list_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    status: Optional[LeadStatus] = Query(None),
    assigned_to: Optional[int] = Query(None, alias="assignedTo", ge=1),
    produit: Optional[int] = Query(None, ge=1),
    search: Optional[str] = Query(None, max_length=100),
    date_from: Optional[UtcDatetime] = Query(None, alias="dateFrom"),
    date_to: Optional[UtcDatetime] = Query(None, alias="dateTo"),
    sort_by: LeadSortKey = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: LeadService = Depends(get_lead_service),
) -> JSONResponse:
    result = service.list_leads(
        db,
        page,
        limit,
        status=status,
        assigned_to=assigned_to,
        product_id=produit,
        search=search,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return paginated_response(result, LeadResponse, "Leads récupérés avec succès")


@leads_router.get("/stats")
def lead_stats(
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: LeadService = Depends(get_lead_service),
) -> JSONResponse:
    return success_response("Statistiques récupérées", service.statistics(db))


@leads_router.get("/follow-up")
def leads_due_for_follow_up(
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: LeadService = Depends(get_lead_service),
) -> JSONResponse:
    leads = service.due_for_follow_up(db)
    return success_response(
        "Leads à relancer récupérés",
        {
            "leads": [LeadResponse.model_validate(lead) for lead in leads],
            "count": len(leads),
        },
    )


@leads_router.get("/export")
def export_leads(
    status: Optional[LeadStatus] = Query(None),
    date_from: Optional[UtcDatetime] = Query(None, alias="dateFrom"),
    date_to: Optional[UtcDatetime] = Query(None, alias="dateTo"),
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: LeadService = Depends(get_lead_service),
) -> JSONResponse:
    rows = service.export_rows(db, status=status, date_from=date_from, date_to=date_to)
    return success_response(
        "Données d'export récupérées", {"leads": rows, "count": len(rows)}
    )


@leads_router.get("/my-leads")
def my_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    status: Optional[LeadStatus] = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: LeadService = Depends(get_lead_service),
) -> JSONResponse:
    result = service.my_leads(db, user, page, limit, status=status)
    return paginated_response(result, LeadResponse, "Vos leads récupérés avec succès")


@leads_router.get("/{lead_id}", responses={404: {"model": Envelope}})
def get_lead(
    lead_id: int,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: LeadService = Depends(get_lead_service),
) -> JSONResponse:
    return success_response("Lead récupéré avec succès", _lead(service.get(db, lead_id)))


@leads_router.put("/{lead_id}", responses={404: {"model": Envelope}})
def update_lead(
    lead_id: int,
    update: LeadUpdate,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: LeadService = Depends(get_lead_service),
) -> JSONResponse:
    lead = service.update(db, lead_id, update)
    return success_response("Lead mis à jour avec succès", _lead(lead))


@leads_router.delete("/{lead_id}", responses={404: {"model": Envelope}})
def archive_lead(
    lead_id: int,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: LeadService = Depends(get_lead_service),
) -> JSONResponse:
    service.archive(db, lead_id)
    return success_response("Lead archivé avec succès")


@leads_router.patch("/{lead_id}/assign", responses={404: {"model": Envelope}})
def assign_lead(
    lead_id: int,
    assignment: LeadAssign,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: LeadService = Depends(get_lead_service),
) -> JSONResponse:
    lead = service.get(db, lead_id)
    lead = service.assign_to(db, lead, assignment.assigned_to, assignment.notes)
    return success_response("Lead assigné avec succès", _lead(lead))


@leads_router.patch("/{lead_id}/follow-up", responses={404: {"model": Envelope}})
def schedule_follow_up(
    lead_id: int,
    follow_up: LeadFollowUp,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: LeadService = Depends(get_lead_service),
) -> JSONResponse:
    lead = service.get(db, lead_id)
    lead = service.schedule_follow_up(
        db, lead, follow_up.follow_up_date, follow_up.notes
    )
    return success_response("Suivi programmé avec succès", _lead(lead))
