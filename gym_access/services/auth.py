from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from gym_access.config import get_settings
from gym_access.utils.time import utcnow

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


@dataclass(frozen=True)
class TokenData:
    subject: str
    role: str
    issued_at: datetime
    expires_at: datetime


def hash_password(password: str) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(
    subject: str,
    role: str,
    issued_at: datetime | None = None,
    ttl_hours: int | None = None,
    secret: str | None = None,
    algorithm: str | None = None,
) -> tuple[str, TokenData]:
    settings = None
    issued_at = issued_at or utcnow()
    if ttl_hours is None or secret is None or algorithm is None:
        settings = get_settings()
    ttl_hours = ttl_hours if ttl_hours is not None else settings.token_ttl_hours
    expires_at = issued_at + timedelta(hours=ttl_hours)

    payload = {
        "sub": str(subject),
        "role": role,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }

    token = jwt.encode(
        payload,
        secret or settings.jwt_secret,
        algorithm=algorithm or settings.jwt_algorithm,
    )
    return token, TokenData(subject=str(subject), role=role, issued_at=issued_at, expires_at=expires_at)


def decode_access_token(
    token: str,
    secret: str | None = None,
    algorithm: str | None = None,
) -> TokenData:
    settings = None
    if secret is None or algorithm is None:
        settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[algorithm or settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpired("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenInvalid("Token invalid") from exc

    subject = payload.get("sub")
    role = payload.get("role")
    issued_at = payload.get("iat")
    expires_at = payload.get("exp")

    if not subject or role not in (ROLE_ADMIN, ROLE_MEMBER) or not issued_at or not expires_at:
        raise TokenInvalid("Token payload missing required claims")

    return TokenData(
        subject=subject,
        role=role,
        issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
        expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
    )
