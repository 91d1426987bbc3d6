"""API Routers for Property Passport UK."""

from passport.routers.admin import router as admin_router
from passport.routers.auth import router as auth_router
from passport.routers.dashboard import router as dashboard_router
from passport.routers.documents import router as documents_router
from passport.routers.events import router as events_router
from passport.routers.flags import router as flags_router
from passport.routers.integrations import router as integrations_router
from passport.routers.invitations import router as invitations_router
from passport.routers.issues import router as issues_router
from passport.routers.media import router as media_router
from passport.routers.properties import router as properties_router
from passport.routers.public import router as public_router
from passport.routers.search import router as search_router
from passport.routers.stakeholders import router as stakeholders_router
from passport.routers.tasks import router as tasks_router
from passport.routers.watchlist import router as watchlist_router

__all__ = [
    "admin_router",
    "auth_router",
    "dashboard_router",
    "documents_router",
    "events_router",
    "flags_router",
    "integrations_router",
    "invitations_router",
    "issues_router",
    "media_router",
    "properties_router",
    "public_router",
    "search_router",
    "stakeholders_router",
    "tasks_router",
    "watchlist_router",
]
