"""Error kinds raised by the services and turned into error envelopes."""

from typing import Any, Dict, List, Optional


class ApiError(Exception):
    """Base class for errors that map to an HTTP status and an error envelope."""

    status_code = 500
    default_message = "Erreur interne du serveur"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(ApiError):
    """Malformed or out-of-range input."""

    status_code = 400
    default_message = "Erreurs de validation"

    @classmethod
    def for_field(cls, field: str, message: str, value: Any = None) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message, "value": value}])


class NotFoundError(ApiError):
    """Identifier does not resolve, or resolves to an inactive record."""

    status_code = 404
    default_message = "Ressource non trouvée"


class ConflictError(ApiError):
    """Uniqueness violation."""

    status_code = 409
    default_message = "Conflit - Données déjà existantes"


class AuthenticationError(ApiError):
    """Missing, invalid or expired credential."""

    status_code = 401
    default_message = "Authentification requise"


class AuthorizationError(ApiError):
    """Authenticated but without the required role."""

    status_code = 403
    default_message = "Accès refusé - Privilèges insuffisants"


class UpstreamError(ApiError):
    """Store or credential-service failure not otherwise classified."""

    status_code = 500
