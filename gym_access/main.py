import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gym_access.api.routes import admin_router, auth_router, memberships_router, messages_router
from gym_access.config import get_settings

settings = get_settings()

logging.basicConfig(level=settings.log_level)

app = FastAPI(title=settings.app_name)


@app.middleware("http")
async def enforce_https(request: Request, call_next):
    if not settings.allow_insecure_http:
        proto = request.headers.get("x-forwarded-proto") or request.url.scheme
        if proto != "https":
            return JSONResponse(status_code=400, content={"detail": "HTTPS required"})
    return await call_next(request)


app.include_router(auth_router)
app.include_router(memberships_router)
app.include_router(messages_router)
app.include_router(admin_router)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
