"""Shared pydantic configuration and helpers for the wire schemas.

Python attributes are snake_case; on the wire they become camelCase, except
for the catalog fields that keep the site's historical French names
(``nom``, ``prix``, ``categorie``, ``tel``, ``produit``) through explicit aliases.
"""

import re
from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

PERSON_NAME_PATTERN = re.compile(r"^[a-zA-ZÀ-ÿ\s'-]+$")


class WireModel(BaseModel):
    """Base model accepting both the wire alias and the attribute name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def check_person_name(value: str) -> str:
    value = value.strip()
    if not 2 <= len(value) <= 50:
        raise ValueError("Le nom doit contenir entre 2 et 50 caractères")
    if not PERSON_NAME_PATTERN.match(value):
        raise ValueError(
            "Le nom ne peut contenir que des lettres, espaces, apostrophes et tirets"
        )
    return value


def strip_text(value: str) -> str:
    return value.strip()


PersonName = Annotated[str, AfterValidator(check_person_name)]
UtcDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]


class UserSummary(WireModel):
    """Embedded view of a referenced user."""

    id: int
    name: str
    email: str
