"""Audit logging service."""

from typing import Any, Optional
from uuid import UUID

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from passport.models.audit import ActivityLog
from passport.models.enums import AuditAction


def client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None or request.client is None:
        return None
    return request.client.host


class AuditService:
    """Service for creating activity log entries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(
        self,
        action: AuditAction,
        resource_type: str,
        resource_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        details: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> ActivityLog:
        """Create an activity log entry."""
        entry = ActivityLog(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            actor_user_id=user_id,
            details=details or {},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def log_access_granted(
        self,
        property_id: UUID,
        user_id: UUID,
        target_user_id: UUID,
        status: Optional[str],
        permission: Optional[str],
        ip_address: Optional[str] = None,
    ) -> ActivityLog:
        """Log a stakeholder grant."""
        return await self.log(
            action=AuditAction.ACCESS_GRANTED,
            resource_type="property",
            resource_id=property_id,
            user_id=user_id,
            details={
                "target_user_id": str(target_user_id),
                "status": status,
                "permission": permission,
            },
            ip_address=ip_address,
        )

    async def log_access_revoked(
        self,
        property_id: UUID,
        user_id: UUID,
        target_user_id: UUID,
        status: Optional[str],
        permission: Optional[str],
        ip_address: Optional[str] = None,
    ) -> ActivityLog:
        """Log a stakeholder revocation."""
        return await self.log(
            action=AuditAction.ACCESS_REVOKED,
            resource_type="property",
            resource_id=property_id,
            user_id=user_id,
            details={
                "target_user_id": str(target_user_id),
                "status": status,
                "permission": permission,
            },
            ip_address=ip_address,
        )

    async def log_visibility_changed(
        self,
        property_id: UUID,
        user_id: UUID,
        visible: bool,
        slug: Optional[str],
        ip_address: Optional[str] = None,
    ) -> ActivityLog:
        """Log public passport visibility toggled."""
        return await self.log(
            action=AuditAction.VISIBILITY_CHANGED,
            resource_type="property",
            resource_id=property_id,
            user_id=user_id,
            details={"visible": visible, "public_slug": slug},
            ip_address=ip_address,
        )

    async def log_invite_sent(
        self,
        invitation_id: UUID,
        property_id: UUID,
        user_id: UUID,
        email: str,
        ip_address: Optional[str] = None,
    ) -> ActivityLog:
        """Log property invite sent."""
        return await self.log(
            action=AuditAction.INVITE_SENT,
            resource_type="invitation",
            resource_id=invitation_id,
            user_id=user_id,
            details={"email": email, "property_id": str(property_id)},
            ip_address=ip_address,
        )

    async def log_invite_accepted(
        self,
        invitation_id: UUID,
        property_id: UUID,
        user_id: UUID,
        email: str,
        ip_address: Optional[str] = None,
    ) -> ActivityLog:
        """Log property invite accepted."""
        return await self.log(
            action=AuditAction.INVITE_ACCEPTED,
            resource_type="invitation",
            resource_id=invitation_id,
            user_id=user_id,
            details={"email": email, "property_id": str(property_id)},
            ip_address=ip_address,
        )
