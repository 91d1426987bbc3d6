"""Enumeration types for the Property Passport domain model."""

from enum import Enum


class PrimaryRole(str, Enum):
    """Account-level role of a user."""
    CONSUMER = "consumer"
    AGENT = "agent"
    CONVEYANCER = "conveyancer"
    SURVEYOR = "surveyor"
    ADMIN = "admin"


class PropertyStatus(str, Enum):
    """Relationship of a stakeholder to a property."""
    OWNER = "owner"
    BUYER = "buyer"
    TENANT = "tenant"


class PropertyPermission(str, Enum):
    """Access level granted to a stakeholder."""
    EDITOR = "editor"
    VIEWER = "viewer"


class PropertyLifecycle(str, Enum):
    """Publication state of a property passport."""
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class DocumentType(str, Enum):
    """Category of an uploaded document."""
    TITLE = "title"
    SURVEY = "survey"
    SEARCH = "search"
    IDENTITY = "identity"
    CONTRACT = "contract"
    WARRANTY = "warranty"
    PLANNING = "planning"
    COMPLIANCE = "compliance"
    OTHER = "other"


class DocumentStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class MediaType(str, Enum):
    """Kind of media file."""
    PHOTO = "photo"
    VIDEO = "video"
    FLOORPLAN = "floorplan"
    OTHER = "other"


class FlagType(str, Enum):
    """Category of a property flag."""
    DATA_QUALITY = "data_quality"
    RISK = "risk"
    COMPLIANCE = "compliance"
    OWNERSHIP = "ownership"
    DOCUMENT = "document"
    OTHER = "other"


class FlagSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class FlagStatus(str, Enum):
    """Review state of a flag."""
    OPEN = "open"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    OPEN = "open"
    COMPLETED = "completed"


class InvitationStatus(str, Enum):
    """Lifecycle of a property invitation."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    REVOKED = "revoked"


class ApiProvider(str, Enum):
    """Upstream data source cached in api_cache."""
    EPC = "epc"
    HMLR = "hmlr"
    FLOOD = "flood"
    CRIME = "crime"
    PLANNING = "planning"
    POSTCODES = "postcodes"


class AuditAction(str, Enum):
    """Actions recorded in the admin activity log."""
    PROPERTY_CREATED = "property_created"
    PROPERTY_UPDATED = "property_updated"
    VISIBILITY_CHANGED = "visibility_changed"
    ACCESS_GRANTED = "access_granted"
    ACCESS_REVOKED = "access_revoked"
    INVITE_SENT = "invite_sent"
    INVITE_ACCEPTED = "invite_accepted"
    INVITE_REVOKED = "invite_revoked"
    STAKEHOLDER_REMOVED = "stakeholder_removed"
    PROFILE_UPDATED = "profile_updated"


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Persist enum values (not member names) in SQL enum columns."""
    return [member.value for member in enum_cls]
