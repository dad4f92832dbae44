from functools import lru_cache

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from gym_access.config import get_settings
from gym_access.db import SessionLocal
from gym_access.models import Admin
from gym_access.services.auth import ROLE_ADMIN, ROLE_MEMBER, TokenData, TokenExpired, TokenInvalid, decode_access_token
from gym_access.services.rate_limit import InMemoryCounterStore, LoginThrottle, RateLimiter

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_login_throttle() -> LoginThrottle:
    settings = get_settings()
    return LoginThrottle(InMemoryCounterStore(), settings.login_max_attempts, settings.login_window_seconds)


@lru_cache
def get_login_ip_limiter() -> RateLimiter:
    return RateLimiter(get_settings().login_ip_per_minute, 60)


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def get_token_data(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenData:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing bearer token")

    try:
        return decode_access_token(credentials.credentials)
    except TokenExpired:
        raise HTTPException(status_code=401, detail="Token expired")
    except TokenInvalid:
        raise HTTPException(status_code=401, detail="Token invalid")


def require_member(token_data: TokenData = Depends(get_token_data)) -> TokenData:
    if token_data.role != ROLE_MEMBER:
        raise HTTPException(status_code=403, detail="Member access required")
    return token_data


def require_admin(
    token_data: TokenData = Depends(get_token_data),
    db: Session = Depends(get_db),
) -> Admin:
    if token_data.role != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="Admin access required")

    try:
        admin_id = int(token_data.subject)
    except ValueError:
        raise HTTPException(status_code=401, detail="Token invalid")

    admin = db.get(Admin, admin_id)
    if not admin or not admin.is_active:
        raise HTTPException(status_code=401, detail="Admin not found")
    return admin
