"""SQLAlchemy model for staff and customer accounts."""

from sqlalchemy import Boolean, Column, Integer, String, TIMESTAMP

from mireb.repositories.storefront.database import Base
from mireb.repositories.storefront.models.enums import Role
from mireb.time_utils import utcnow


class User(Base):  # type: ignore[misc]
    """An account able to authenticate against the API.

    Emails are stored lowercased so the unique index is case-insensitive.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    email = Column(String(160), nullable=False, unique=True, index=True)
    password_hash = Column(String(128), nullable=False)
    role = Column(String(10), nullable=False, default=Role.USER.value, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(TIMESTAMP(timezone=False), nullable=True)
    profile_image = Column(String(500), nullable=False, default="")
    created_at = Column(TIMESTAMP(timezone=False), nullable=False, default=utcnow)
    updated_at = Column(
        TIMESTAMP(timezone=False), nullable=False, default=utcnow, onupdate=utcnow
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"
