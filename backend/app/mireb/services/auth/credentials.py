"""Password hashing and signed-token helpers.

Passwords are hashed with bcrypt; tokens are HS256 JWTs carrying the user
id, email and role, scoped by issuer and audience.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from mireb.configs import settings
from mireb.errors import AuthenticationError
from mireb.logger_config import get_logger

logger = get_logger(__name__)

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    hashed = bcrypt.hashpw(
        password.encode("utf-8"), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    )
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        logger.warning("Unreadable password hash rejected")
        return False


def issue_token(user: Any) -> str:
    """Sign a token for ``user`` valid for ``JWT_EXPIRES_IN_DAYS`` days."""
    now = datetime.now(timezone.utc)
    payload = {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(days=settings.JWT_EXPIRES_IN_DAYS),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def verify_token(token: str) -> Dict[str, Any]:
    """Return the claims of a valid token.

    Raises:
        AuthenticationError: if the signature, issuer, audience or expiry is wrong.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[ALGORITHM],
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Token expiré") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Token invalide") from exc


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Read the claims without checking the signature (debugging only)."""
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None


def is_token_expired(token: str) -> bool:
    claims = decode_token(token)
    if not claims or "exp" not in claims:
        return True
    return claims["exp"] < datetime.now(timezone.utc).timestamp()


def extract_token_from_header(auth_header: Optional[str]) -> Optional[str]:
    """Return the token of a ``Bearer <token>`` header, else None."""
    if not auth_header:
        return None
    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        return None
    return parts[1]
