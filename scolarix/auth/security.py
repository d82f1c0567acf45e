from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import bcrypt
from fastapi import status
from jose import ExpiredSignatureError, JWTError, jwt

from scolarix.auth.schemas import AuthIdentity
from scolarix.core.config import settings
from scolarix.core.enums import UserRole
from scolarix.core.exceptions import ServiceError

JWT_ALGORITHM = "HS256"


def hash_password(plain_password: str) -> str:
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # In case the stored hash is invalid/corrupted
        return False


def _signing_secret() -> str:
    if not settings.jwt_secret:
        raise ServiceError(
            "JWT signing secret (JWT_SECRET) is not configured",
            "JWT_CONFIG_ERROR",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return settings.jwt_secret


def issue_token(identity: AuthIdentity, expires_minutes: Optional[int] = None) -> str:
    """Sign an access token for the identity: {userId, role, iss, aud, iat, exp}."""
    secret = _signing_secret()
    if expires_minutes is None:
        expires_minutes = settings.jwt_expires_minutes
    issued_at = datetime.now(timezone.utc)
    claims = {
        "userId": identity.id,
        "role": UserRole(identity.role).value,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(issued_at.timestamp()),
        "exp": issued_at + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(claims, secret, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Dict:
    secret = _signing_secret()
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except ExpiredSignatureError:
        raise ServiceError(
            "Authentication token has expired. Please log in again.",
            "TOKEN_EXPIRED",
            status.HTTP_401_UNAUTHORIZED,
        )
    except JWTError:
        raise ServiceError(
            "Authentication token is malformed or invalid.",
            "TOKEN_MALFORMED",
            status.HTTP_401_UNAUTHORIZED,
        )
