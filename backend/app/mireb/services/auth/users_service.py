"""Service layer for registration, login and account administration."""

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from mireb.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from mireb.logger_config import get_logger
from mireb.repositories.storefront.crud.users_crud import CRUDUser
from mireb.repositories.storefront.models.enums import Role
from mireb.repositories.storefront.models.users_model import User
from mireb.repositories.storefront.schemas.users_schema import (
    AuthPayload,
    PasswordChange,
    UserCreate,
    UserLogin,
    UserProfileUpdate,
    UserResponse,
)
from mireb.services.auth.credentials import hash_password, issue_token, verify_password
from mireb.services.listing import Listing, Page, exact, text_search

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Email ou mot de passe incorrect"


class UserService:
    """Provide account operations on top of the user repository."""

    def __init__(self, repository: CRUDUser) -> None:
        self.repository = repository

    def _auth_payload(self, user: User) -> AuthPayload:
        return AuthPayload(user=UserResponse.model_validate(user), token=issue_token(user))

    def register(self, db: Session, user_in: UserCreate) -> AuthPayload:
        """
        Create a ``user``-role account and sign it in.

        Raises:
            ConflictError: if the email is already registered.
        """
        if self.repository.get_by_email(db, user_in.email):
            raise ConflictError("Un utilisateur avec cet email existe déjà")

        user = self.repository.create(
            db,
            {
                "name": user_in.name,
                "email": user_in.email,
                "password_hash": hash_password(user_in.password),
                "role": Role.USER.value,
            },
        )
        user = self.repository.touch_last_login(db, user)
        logger.info("New account registered: %s", user.email)
        return self._auth_payload(user)

    def login(self, db: Session, credentials: UserLogin) -> AuthPayload:
        user = self.repository.get_by_email(db, credentials.email)
        if user is None:
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not user.is_active:
            raise AuthenticationError(
                "Votre compte a été désactivé. Contactez l'administrateur."
            )
        if not verify_password(credentials.password, user.password_hash):
            logger.info("Failed login for %s", user.email)
            raise AuthenticationError(INVALID_CREDENTIALS)

        user = self.repository.touch_last_login(db, user)
        logger.info("User %s logged in", user.email)
        return self._auth_payload(user)

    def update_profile(self, db: Session, user: User, update: UserProfileUpdate) -> User:
        data = update.model_dump(exclude_none=True)
        if not data:
            return user
        return self.repository.update(db, user, data)

    def change_password(self, db: Session, user: User, change: PasswordChange) -> None:
        if not verify_password(change.current_password, user.password_hash):
            raise ValidationError.for_field("currentPassword", "Mot de passe actuel incorrect")
        self.repository.update(
            db, user, {"password_hash": hash_password(change.new_password)}
        )
        logger.info("Password changed for %s", user.email)

    def list_users(
        self,
        db: Session,
        page: int,
        limit: int,
        role: Optional[Role] = None,
        search: Optional[str] = None,
    ) -> Page:
        listing = Listing(
            filters=[
                *exact(User.role, role),
                *text_search(search, User.name, User.email),
            ],
            order_by=[User.created_at.desc(), User.id.desc()],
            page=page,
            limit=limit,
        )
        return listing.apply(self.repository.query(db))

    def set_active(self, db: Session, acting: User, user_id: int, is_active: bool) -> User:
        """
        Activate or deactivate an account other than the caller's own.

        Raises:
            NotFoundError: unknown user id.
            ValidationError: when an admin targets their own account.
        """
        user = self.repository.get(db, user_id)
        if user is None:
            raise NotFoundError("Utilisateur non trouvé")
        if user.id == acting.id:
            raise ValidationError(
                "Vous ne pouvez pas modifier le statut de votre propre compte"
            )
        user = self.repository.update(db, user, {"is_active": is_active})
        action = "activated" if is_active else "deactivated"
        logger.info("User %s %s by %s", user.email, action, acting.email)
        return user


def get_user_service(repository: CRUDUser = Depends()) -> UserService:
    return UserService(repository)
