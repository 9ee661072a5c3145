"""Access levels and the FastAPI dependencies enforcing them.

Every route declares one of three levels; ``is_allowed`` is the single
decision function, the dependencies below only resolve the acting user and
translate a refusal into the matching error.
"""

from enum import IntEnum
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from mireb.errors import AuthenticationError, AuthorizationError
from mireb.logger_config import get_logger
from mireb.repositories.storefront.crud.users_crud import CRUDUser
from mireb.repositories.storefront.dependencies import get_db
from mireb.repositories.storefront.models.enums import Role
from mireb.repositories.storefront.models.users_model import User
from mireb.services.auth.credentials import extract_token_from_header, verify_token

logger = get_logger(__name__)


class AccessLevel(IntEnum):
    PUBLIC = 0
    AUTHENTICATED = 1
    ADMIN = 2


def is_allowed(user: Optional[User], required: AccessLevel) -> bool:
    """Decide whether ``user`` (None for anonymous) may reach a ``required`` route."""
    if required is AccessLevel.PUBLIC:
        return True
    if user is None or not user.is_active:
        return False
    if required is AccessLevel.ADMIN:
        return user.role == Role.ADMIN.value
    return True


def resolve_user(db: Session, authorization: Optional[str]) -> User:
    """Resolve the acting user from an ``Authorization`` header.

    Raises:
        AuthenticationError: missing or invalid token, unknown or inactive user.
    """
    token = extract_token_from_header(authorization)
    if not token:
        raise AuthenticationError("Token d'authentification requis")

    claims = verify_token(token)
    user = CRUDUser().get(db, claims.get("id"))
    if user is None:
        raise AuthenticationError("Utilisateur non trouvé")
    if not user.is_active:
        logger.info("Rejected token of deactivated user %s", user.id)
        raise AuthenticationError("Compte utilisateur désactivé")
    return user


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    """Dependency for Authenticated routes."""
    user = resolve_user(db, authorization)
    if not is_allowed(user, AccessLevel.AUTHENTICATED):
        raise AuthenticationError()
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Dependency for Admin routes."""
    if not is_allowed(user, AccessLevel.ADMIN):
        raise AuthorizationError()
    return user
