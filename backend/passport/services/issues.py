"""
Issues are a user-facing view of property flags.

An issue's title, description and due date are packed into the flag's
description as blank-line separated parts; categories and statuses map onto
the flag vocabulary.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from passport.models.enums import FlagStatus, FlagType
from passport.models.flag import PropertyFlag


class IssueCategory(str, Enum):
    SAFETY = "safety"
    COMPLIANCE = "compliance"
    DOCUMENTS = "documents"
    STRUCTURAL = "structural"
    LEGAL = "legal"
    GENERAL = "general"


class IssueStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class IssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


CATEGORY_TO_FLAG_TYPE = {
    IssueCategory.SAFETY: FlagType.RISK,
    IssueCategory.COMPLIANCE: FlagType.COMPLIANCE,
    IssueCategory.DOCUMENTS: FlagType.DOCUMENT,
    IssueCategory.STRUCTURAL: FlagType.RISK,
    IssueCategory.LEGAL: FlagType.OWNERSHIP,
    IssueCategory.GENERAL: FlagType.OTHER,
}

STATUS_TO_FLAG_STATUS = {
    IssueStatus.OPEN: FlagStatus.OPEN,
    IssueStatus.IN_PROGRESS: FlagStatus.IN_REVIEW,
    IssueStatus.RESOLVED: FlagStatus.RESOLVED,
    IssueStatus.CLOSED: FlagStatus.DISMISSED,
}

_DUE_PATTERN = re.compile(r"Due:\s*(.+)", re.IGNORECASE)


@dataclass
class Issue:
    id: UUID
    property_id: UUID
    title: str
    description: Optional[str]
    severity: IssueSeverity
    status: IssueStatus
    category: IssueCategory
    created_at: datetime
    updated_at: datetime
    created_by: Optional[UUID]
    due_date: Optional[str] = None


def category_to_flag_type(category: IssueCategory) -> FlagType:
    return CATEGORY_TO_FLAG_TYPE.get(category, FlagType.OTHER)


def status_to_flag_status(status: IssueStatus) -> FlagStatus:
    return STATUS_TO_FLAG_STATUS.get(status, FlagStatus.OPEN)


def map_severity(severity: Optional[str]) -> IssueSeverity:
    value = (severity or "").lower()
    if value == "critical":
        return IssueSeverity.CRITICAL
    if value in ("high", "red"):
        return IssueSeverity.HIGH
    if value in ("medium", "warning"):
        return IssueSeverity.MEDIUM
    return IssueSeverity.LOW


def map_status(status: Optional[str]) -> IssueStatus:
    value = (status or "").lower()
    if value in ("in_review", "in-progress", "in_progress"):
        return IssueStatus.IN_PROGRESS
    if value == "resolved":
        return IssueStatus.RESOLVED
    if value in ("dismissed", "closed"):
        return IssueStatus.CLOSED
    return IssueStatus.OPEN


def map_category(flag_type: Optional[str]) -> IssueCategory:
    value = (flag_type or "").lower()
    if value in ("risk", "safety"):
        return IssueCategory.SAFETY
    if value == "compliance":
        return IssueCategory.COMPLIANCE
    if value in ("document", "documents"):
        return IssueCategory.DOCUMENTS
    if value in ("ownership", "legal"):
        return IssueCategory.LEGAL
    if value == "structural":
        return IssueCategory.STRUCTURAL
    return IssueCategory.GENERAL


def humanize_flag_type(flag_type: Optional[str]) -> str:
    """'data_quality' -> 'Data Quality'."""
    if not flag_type:
        return "Issue"
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), flag_type.replace("_", " "))


def compose_description(title: str, description: Optional[str] = None, due_date: Optional[str] = None) -> str:
    parts = [title.strip()]
    if description:
        parts.append(description.strip())
    if due_date:
        parts.append(f"Due: {due_date}")
    return "\n\n".join(parts)


def split_description(raw: Optional[str], fallback_type: str) -> tuple[str, Optional[str], Optional[str]]:
    """Inverse of compose_description: (title, description, due_date)."""
    if not raw:
        return humanize_flag_type(fallback_type), None, None

    parts = raw.split("\n\n")
    title = parts[0].strip()
    due_match = _DUE_PATTERN.search(raw)
    due_date = due_match.group(1).strip() if due_match else None

    if len(parts) > 1 and title:
        body = [part for part in parts[1:] if not _DUE_PATTERN.fullmatch(part.strip())]
        remainder = "\n\n".join(body).strip()
        return title, remainder or None, due_date
    return humanize_flag_type(fallback_type), raw.strip() or None, due_date


def flag_to_issue(flag: PropertyFlag) -> Issue:
    flag_type = flag.flag_type.value if flag.flag_type else "general"
    title, description, due_date = split_description(flag.description, flag_type)
    return Issue(
        id=flag.id,
        property_id=flag.property_id,
        title=title or "Untitled issue",
        description=description,
        severity=map_severity(flag.severity.value if flag.severity else None),
        status=map_status(flag.status.value if flag.status else None),
        category=map_category(flag_type),
        created_at=flag.created_at,
        updated_at=flag.updated_at or flag.created_at,
        created_by=flag.created_by_user_id,
        due_date=due_date,
    )
