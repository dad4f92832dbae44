from gym_access.api.routes.admin import router as admin_router
from gym_access.api.routes.auth import router as auth_router
from gym_access.api.routes.memberships import router as memberships_router
from gym_access.api.routes.messages import router as messages_router

__all__ = ["admin_router", "auth_router", "memberships_router", "messages_router"]
