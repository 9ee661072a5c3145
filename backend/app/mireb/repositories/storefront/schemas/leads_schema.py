"""Pydantic schemas for leads."""

import re
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BeforeValidator, Field

from mireb.repositories.storefront.models.enums import LeadSource, LeadStatus
from mireb.repositories.storefront.schemas.common_schema import (
    PersonName,
    UserSummary,
    UtcDatetime,
    WireModel,
    strip_text,
)
from mireb.repositories.storefront.schemas.products_schema import ProductSummary

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
PHONE_SEPARATORS = re.compile(r"[\s\-()]")
MAX_NOTE_LENGTH = 1000


def check_phone(value: str) -> str:
    value = value.strip()
    if not PHONE_PATTERN.match(PHONE_SEPARATORS.sub("", value)):
        raise ValueError("Veuillez entrer un numéro de téléphone valide")
    return value


Phone = Annotated[str, AfterValidator(check_phone)]
Note = Annotated[str, AfterValidator(strip_text), Field(max_length=MAX_NOTE_LENGTH)]
LeadMessage = Annotated[
    str,
    BeforeValidator(lambda value: value if value is not None else ""),
    AfterValidator(strip_text),
    Field(max_length=500),
]


class LeadCreate(WireModel):
    """Payload of the public lead submission form."""

    name: PersonName = Field(..., alias="nom")
    phone: Phone = Field(..., alias="tel")
    message: LeadMessage = ""
    product_id: int = Field(..., alias="produit", ge=1)


class LeadUpdate(WireModel):
    """Combined admin edit: any subset of status, assignment and follow-up, plus a note."""

    status: Optional[LeadStatus] = None
    notes: Optional[Note] = None
    assigned_to: Optional[int] = Field(default=None, ge=1)
    follow_up_date: Optional[UtcDatetime] = None


class LeadAssign(WireModel):
    assigned_to: int = Field(..., ge=1)
    notes: Optional[Note] = None


class LeadFollowUp(WireModel):
    follow_up_date: UtcDatetime
    notes: Optional[Note] = None


class LeadResponse(WireModel):
    """Response model for a stored lead, with the derived contact helpers."""

    id: int
    name: str = Field(..., alias="nom")
    phone: str = Field(..., alias="tel")
    message: str
    product_id: int = Field(..., alias="produitId")
    product: Optional[ProductSummary] = Field(default=None, alias="produit")
    status: LeadStatus
    source: LeadSource
    notes: str
    assigned_to: Optional[UserSummary] = None
    follow_up_date: Optional[datetime] = None
    is_archived: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    age_in_days: int
    formatted_phone: str = Field(..., alias="formattedTel")
    whatsapp_link: str
