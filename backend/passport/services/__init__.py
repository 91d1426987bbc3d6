"""Services for Property Passport UK."""

from passport.services.storage import StorageService, get_storage_service
from passport.services.audit import AuditService
from passport.services.integrations import GovernmentDataService

__all__ = [
    "StorageService",
    "get_storage_service",
    "AuditService",
    "GovernmentDataService",
]
