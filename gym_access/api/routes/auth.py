import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from gym_access.api.deps import get_client_ip, get_db, get_login_ip_limiter, get_login_throttle
from gym_access.models import Admin, AuditLog
from gym_access.schemas import AdminLoginRequest, TokenResponse
from gym_access.services.auth import ROLE_ADMIN, create_access_token, verify_password
from gym_access.services.rate_limit import LoginThrottle, RateLimiter
from gym_access.utils.time import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/admin/login", response_model=TokenResponse)
def admin_login(
    payload: AdminLoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    throttle: LoginThrottle = Depends(get_login_throttle),
    ip_limiter: RateLimiter = Depends(get_login_ip_limiter),
) -> TokenResponse:
    client_ip = get_client_ip(request)
    if not ip_limiter.allow(client_ip):
        raise HTTPException(status_code=429, detail="Too many requests")

    email = payload.email.strip().lower()
    if throttle.is_blocked(email):
        logger.warning("Admin login throttled for %s from %s", email, client_ip)
        raise HTTPException(status_code=429, detail="Too many login attempts. Please try again later.")

    admin = db.query(Admin).filter(func.lower(Admin.email) == email).first()
    if not admin or not admin.is_active or not verify_password(payload.password, admin.password_hash):
        attempts = throttle.record_failure(email)
        logger.warning("Failed admin login for %s (attempt %d)", email, attempts)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    throttle.reset(email)
    now = utcnow()
    admin.last_login = now
    token, token_data = create_access_token(str(admin.id), ROLE_ADMIN, issued_at=now)

    db.add(AuditLog(admin_id=admin.id, action="admin_login", meta={"ip": client_ip}))
    db.commit()

    return TokenResponse(
        access_token=token,
        issued_at=token_data.issued_at,
        expires_at=token_data.expires_at,
        server_time=now,
    )
