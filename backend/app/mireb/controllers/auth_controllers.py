"""Account routes: registration, login, profile and user administration."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from mireb.logger_config import get_logger
from mireb.models.response_models import Envelope, paginated_response, success_response
from mireb.repositories.storefront.dependencies import get_db
from mireb.repositories.storefront.models.enums import Role
from mireb.repositories.storefront.models.users_model import User
from mireb.repositories.storefront.schemas.users_schema import (
    PasswordChange,
    UserCreate,
    UserLogin,
    UserProfileUpdate,
    UserResponse,
    UserStatusUpdate,
)
from mireb.services.auth.access_control import get_current_user, require_admin
from mireb.services.auth.users_service import UserService, get_user_service

logger = get_logger(__name__)

auth_router = APIRouter(
    prefix="/auth", tags=["Auth"], responses={400: {"model": Envelope}}
)


def _profile(user: User) -> dict:
    return {"user": UserResponse.model_validate(user)}


@auth_router.post("/register", status_code=201, responses={409: {"model": Envelope}})
def register(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    """
    Create a ``user``-role account.

    Returns:
        The public profile and a signed token.
    """
    payload = service.register(db, user_in)
    return success_response("Utilisateur créé avec succès", payload, status_code=201)


@auth_router.post("/login", responses={401: {"model": Envelope}})
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    payload = service.login(db, credentials)
    return success_response("Connexion réussie", payload)


@auth_router.get("/profile")
def get_profile(user: User = Depends(get_current_user)) -> JSONResponse:
    return success_response("Profil récupéré avec succès", _profile(user))


@auth_router.put("/profile")
def update_profile(
    update: UserProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    user = service.update_profile(db, user, update)
    return success_response("Profil mis à jour avec succès", _profile(user))


@auth_router.put("/change-password")
def change_password(
    change: PasswordChange,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    service.change_password(db, user, change)
    return success_response("Mot de passe modifié avec succès")


@auth_router.get("/verify")
def verify(user: User = Depends(get_current_user)) -> JSONResponse:
    """Reaching this handler means the bearer token was accepted."""
    return success_response("Token valide", _profile(user))


@auth_router.post("/logout")
def logout(user: User = Depends(get_current_user)) -> JSONResponse:
    # tokens are stateless, the client drops its copy
    logger.info("User %s logged out", user.email)
    return success_response("Déconnexion réussie")


@auth_router.get("/users")
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    role: Optional[Role] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    result = service.list_users(db, page, limit, role=role, search=search)
    return paginated_response(
        result, UserResponse, "Utilisateurs récupérés avec succès"
    )


@auth_router.put("/users/{user_id}/status", responses={404: {"model": Envelope}})
def set_user_status(
    user_id: int,
    status_in: UserStatusUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    user = service.set_active(db, admin, user_id, status_in.is_active)
    action = "activé" if user.is_active else "désactivé"
    return success_response(f"Utilisateur {action} avec succès", _profile(user))
