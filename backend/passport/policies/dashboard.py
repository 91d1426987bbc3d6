"""Dashboard-level roles: which persona a user sees and which tabs/widgets it gets."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from passport.models.enums import PrimaryRole, PropertyStatus
from passport.policies.roles import RoleInfo, UserSession, is_admin


class DashboardRole(str, Enum):
    OWNER = "owner"
    BUYER = "buyer"
    AGENT = "agent"
    CONVEYANCER = "conveyancer"
    ADMIN = "admin"


ROLE_META: dict[DashboardRole, RoleInfo] = {
    DashboardRole.OWNER: RoleInfo("Owner", "🏠", "Property owner with full access"),
    DashboardRole.BUYER: RoleInfo("Buyer", "🛒", "Prospective buyer with view access"),
    DashboardRole.AGENT: RoleInfo("Agent", "📋", "Agent managing listings"),
    DashboardRole.CONVEYANCER: RoleInfo("Conveyancer", "📑", "Legal reviewer"),
    DashboardRole.ADMIN: RoleInfo("Admin", "🛡️", "System administrator"),
}

ALL_TABS = ["overview", "properties", "invitations", "issues", "documents", "media", "activity"]

DEFAULT_WIDGETS = ["propertiesList", "issuesSummary", "documentsPreview", "mediaPreview", "activityTimeline"]


def is_agent(session: Optional[UserSession]) -> bool:
    return session is not None and session.primary_role == PrimaryRole.AGENT


def is_conveyancer(session: Optional[UserSession]) -> bool:
    return session is not None and session.primary_role == PrimaryRole.CONVEYANCER


def is_any_owner(session: Optional[UserSession]) -> bool:
    """Owner status on at least one property."""
    if session is None:
        return False
    return any(PropertyStatus.OWNER in role.status for role in session.property_roles.values())


def is_any_buyer(session: Optional[UserSession]) -> bool:
    if session is None:
        return False
    if session.primary_role == PrimaryRole.CONSUMER:
        return True
    return any(PropertyStatus.BUYER in role.status for role in session.property_roles.values())


def resolve_dashboard_role(session: Optional[UserSession]) -> DashboardRole:
    if is_admin(session):
        return DashboardRole.ADMIN
    if is_agent(session):
        return DashboardRole.AGENT
    if is_conveyancer(session):
        return DashboardRole.CONVEYANCER
    if is_any_owner(session):
        return DashboardRole.OWNER
    return DashboardRole.BUYER


def can_view_documents_ui(role: DashboardRole) -> bool:
    return role in (DashboardRole.OWNER, DashboardRole.AGENT, DashboardRole.CONVEYANCER, DashboardRole.ADMIN)


def can_view_media_ui(role: DashboardRole) -> bool:
    return role in (DashboardRole.OWNER, DashboardRole.AGENT, DashboardRole.CONVEYANCER, DashboardRole.ADMIN)


def can_view_issues_ui(role: DashboardRole) -> bool:
    return role != DashboardRole.BUYER


def can_see_admin_panel(role: DashboardRole) -> bool:
    return role == DashboardRole.ADMIN


def default_dashboard_tabs(role: DashboardRole) -> list[str]:
    if role == DashboardRole.BUYER:
        return ["overview", "properties", "invitations", "issues", "activity"]
    if role == DashboardRole.ADMIN:
        return [tab for tab in ALL_TABS if tab != "invitations"]
    return list(ALL_TABS)


def dashboard_widgets(role: DashboardRole) -> list[str]:
    if role == DashboardRole.BUYER:
        return ["watchlist", "issuesSummary", "activityTimeline"]
    if role == DashboardRole.ADMIN:
        return DEFAULT_WIDGETS + ["invitations"]
    return list(DEFAULT_WIDGETS)
