"""SQLAlchemy model for purchase-interest leads."""

import re
from urllib.parse import quote

from sqlalchemy import Boolean, Column, Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import relationship

from mireb.repositories.storefront.database import Base
from mireb.repositories.storefront.models.enums import LeadSource, LeadStatus
from mireb.time_utils import utcnow

# same unreserved set as JavaScript's encodeURIComponent
WHATSAPP_SAFE_CHARS = "!*'()"


class Lead(Base):  # type: ignore[misc]
    """A visitor asking to be contacted about a product.

    ``product_id`` and ``assigned_to_id`` are weak references: the product is
    only checked when the lead is created and no foreign key keeps it alive.
    ``notes`` is an append-only audit log managed by the lead service.
    """

    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    phone = Column(String(30), nullable=False, index=True)
    message = Column(String(500), nullable=False, default="")
    product_id = Column(Integer, nullable=False, index=True)
    status = Column(String(12), nullable=False, default=LeadStatus.NEW.value, index=True)
    source = Column(String(12), nullable=False, default=LeadSource.WEBSITE.value)
    notes = Column(Text, nullable=False, default="")
    assigned_to_id = Column(Integer, nullable=True, index=True)
    follow_up_date = Column(TIMESTAMP(timezone=False), nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        TIMESTAMP(timezone=False), nullable=False, default=utcnow, index=True
    )
    updated_at = Column(
        TIMESTAMP(timezone=False), nullable=False, default=utcnow, onupdate=utcnow
    )

    product = relationship(
        "Product",
        primaryjoin="foreign(Lead.product_id) == Product.id",
        viewonly=True,
        lazy="joined",
    )
    assigned_to = relationship(
        "User",
        primaryjoin="foreign(Lead.assigned_to_id) == User.id",
        viewonly=True,
        lazy="joined",
    )

    @property
    def age_in_days(self) -> int:
        if self.created_at is None:
            return 0
        return (utcnow() - self.created_at).days

    @property
    def formatted_phone(self) -> str:
        cleaned = re.sub(r"[^\d+]", "", self.phone or "")
        if not cleaned.startswith("+") and cleaned[:1].isdigit():
            return f"+{cleaned}"
        return cleaned

    @property
    def whatsapp_link(self) -> str:
        digits = re.sub(r"\D", "", self.formatted_phone)
        product_name = self.product.name if self.product is not None else "produit"
        text = f"Bonjour, je suis intéressé(e) par votre {product_name}. {self.message or ''}"
        return f"https://wa.me/{digits}?text={quote(text, safe=WHATSAPP_SAFE_CHARS)}"

    def __repr__(self) -> str:
        return f"<Lead id={self.id} name={self.name!r} status={self.status!r}>"
