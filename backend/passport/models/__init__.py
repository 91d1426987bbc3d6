"""SQLAlchemy models for Property Passport UK."""

from passport.models.user import User
from passport.models.property import Property
from passport.models.stakeholder import PropertyStakeholder
from passport.models.document import Document
from passport.models.media import Media
from passport.models.event import PropertyEvent
from passport.models.flag import PropertyFlag
from passport.models.task import Task
from passport.models.invitation import Invitation
from passport.models.watchlist import WatchlistEntry
from passport.models.api_cache import ApiCacheEntry
from passport.models.audit import ActivityLog

__all__ = [
    "User",
    "Property",
    "PropertyStakeholder",
    "Document",
    "Media",
    "PropertyEvent",
    "PropertyFlag",
    "Task",
    "Invitation",
    "WatchlistEntry",
    "ApiCacheEntry",
    "ActivityLog",
]
