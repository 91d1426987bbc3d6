"""
Property role predicates.

Pure functions over a UserSession: no database access. A session carries, per
property, the list of statuses (owner/buyer/tenant) the user holds and the
strongest permission (editor/viewer) granted to them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional
from uuid import UUID

from passport.models.enums import PrimaryRole, PropertyPermission, PropertyStatus


class AccessStatus(str, Enum):
    ACTIVE = "active"
    EXPIRING = "expiring"
    EXPIRED = "expired"


@dataclass
class PropertyRole:
    status: list[PropertyStatus] = field(default_factory=list)
    permission: Optional[PropertyPermission] = None


@dataclass
class UserSession:
    id: UUID
    email: str
    full_name: Optional[str] = None
    primary_role: PrimaryRole = PrimaryRole.CONSUMER
    property_roles: dict[UUID, PropertyRole] = field(default_factory=dict)
    is_admin: bool = False

    def role_for(self, property_id: UUID) -> Optional[PropertyRole]:
        return self.property_roles.get(property_id)


@dataclass(frozen=True)
class RoleInfo:
    label: str
    icon: str
    description: str


ROLE_CONFIG: dict[str, RoleInfo] = {
    "owner": RoleInfo("Owner", "🏠", "Property owner with full access"),
    "buyer": RoleInfo("Buyer", "🛒", "Interested buyer with viewing rights"),
    "tenant": RoleInfo("Tenant", "🧾", "Tenant with viewing rights"),
    "editor": RoleInfo("Editor", "✏️", "Can edit property details, documents, media, and tasks"),
    "viewer": RoleInfo("Viewer", "👁️", "Read-only access to property information"),
    "admin": RoleInfo("Administrator", "🛡️", "System administrator with full access"),
}

ROLE_PRIORITY: dict[str, int] = {
    "owner": 1,
    "editor": 2,
    "viewer": 3,
    "buyer": 4,
    "tenant": 5,
    "admin": 6,
}

# Roles allowed to perform destructive or upload actions on property evidence
MEDIA_UPLOAD_ROLES = ("owner", "editor", "admin")
MEDIA_DELETE_ROLES = ("owner", "editor", "admin")
DOCUMENT_DELETE_ROLES = ("owner", "editor", "admin")

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def get_role_label(role: str) -> str:
    info = ROLE_CONFIG.get(role)
    return info.label if info else role


def get_role_icon(role: str) -> str:
    info = ROLE_CONFIG.get(role)
    return info.icon if info else "👤"


def get_role_description(role: str) -> str:
    info = ROLE_CONFIG.get(role)
    return info.description if info else ""


# =============================================================================
# Expiry
# =============================================================================


def days_remaining(expires_at: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    """Whole days until expiry, rounded up. None when the grant never expires."""
    if expires_at is None:
        return None
    now = now or datetime.utcnow()
    return math.ceil((expires_at - now).total_seconds() / 86400)


def get_access_status(expires_at: Optional[datetime], now: Optional[datetime] = None) -> AccessStatus:
    days_left = days_remaining(expires_at, now)
    if days_left is None:
        return AccessStatus.ACTIVE
    if days_left < 0:
        return AccessStatus.EXPIRED
    if days_left <= 7:
        return AccessStatus.EXPIRING
    return AccessStatus.ACTIVE


def format_expiry_date(expires_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Render an expiry as e.g. '5 Mar 2025 (3 days left)'."""
    if expires_at is None:
        return "No expiry"

    formatted = f"{expires_at.day} {_MONTHS[expires_at.month - 1]} {expires_at.year}"
    days = days_remaining(expires_at, now)

    if days < 0:
        return f"{formatted} (expired {abs(days)} days ago)"
    if days == 0:
        return f"{formatted} (expires today)"
    if days == 1:
        return f"{formatted} (expires tomorrow)"
    if days <= 7:
        return f"{formatted} ({days} days left)"
    return formatted


def is_access_current(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """A stakeholder grant counts only while it has not passed its expiry."""
    if expires_at is None:
        return True
    return expires_at > (now or datetime.utcnow())


def sort_roles(roles: Iterable[str]) -> list[str]:
    return sorted(roles, key=lambda role: ROLE_PRIORITY.get(role, 999))


# =============================================================================
# Predicates
# =============================================================================


def is_admin(session: Optional[UserSession]) -> bool:
    if session is None:
        return False
    return session.is_admin or session.primary_role == PrimaryRole.ADMIN


def _statuses(session: Optional[UserSession], property_id: UUID) -> list[PropertyStatus]:
    if session is None:
        return []
    role = session.role_for(property_id)
    return role.status if role else []


def _permission(session: Optional[UserSession], property_id: UUID) -> Optional[PropertyPermission]:
    if session is None:
        return None
    role = session.role_for(property_id)
    return role.permission if role else None


def is_owner(session: Optional[UserSession], property_id: UUID) -> bool:
    if is_admin(session):
        return True
    return PropertyStatus.OWNER in _statuses(session, property_id)


def is_buyer(session: Optional[UserSession], property_id: UUID) -> bool:
    return PropertyStatus.BUYER in _statuses(session, property_id)


def is_tenant(session: Optional[UserSession], property_id: UUID) -> bool:
    return PropertyStatus.TENANT in _statuses(session, property_id)


def is_editor(session: Optional[UserSession], property_id: UUID) -> bool:
    if is_admin(session):
        return True
    if _permission(session, property_id) == PropertyPermission.EDITOR:
        return True
    return is_owner(session, property_id)


def is_viewer(session: Optional[UserSession], property_id: UUID) -> bool:
    if is_admin(session) or is_editor(session, property_id):
        return True
    if _permission(session, property_id) == PropertyPermission.VIEWER:
        return True
    return is_buyer(session, property_id) or is_tenant(session, property_id)


def can_edit_property(session: Optional[UserSession], property_id: UUID) -> bool:
    return is_editor(session, property_id)


def can_view_property(
    session: Optional[UserSession],
    property_id: UUID,
    is_public: bool = False,
) -> bool:
    if is_admin(session) or is_public:
        return True
    return is_viewer(session, property_id)


def can_upload_document(session: Optional[UserSession], property_id: UUID) -> bool:
    return is_editor(session, property_id)


def can_upload_media(session: Optional[UserSession], property_id: UUID) -> bool:
    return is_editor(session, property_id)


def can_invite(session: Optional[UserSession], property_id: UUID) -> bool:
    return is_admin(session) or is_owner(session, property_id)


def has_property_role(
    session: Optional[UserSession],
    property_id: UUID,
    allowed_roles: Iterable[str],
) -> bool:
    """True when any status or the permission held on the property is in allowed_roles."""
    if session is None:
        return False
    if is_admin(session):
        return True
    allowed = set(allowed_roles)
    held = {status.value for status in _statuses(session, property_id)}
    permission = _permission(session, property_id)
    if permission is not None:
        held.add(permission.value)
    return bool(held & allowed)


def roles_on_property(session: Optional[UserSession], property_id: UUID) -> list[str]:
    """Every role the session holds on a property, in display order."""
    roles = [status.value for status in _statuses(session, property_id)]
    permission = _permission(session, property_id)
    if permission is not None:
        roles.append(permission.value)
    if is_admin(session):
        roles.append("admin")
    return sort_roles(dict.fromkeys(roles))
