import uuid
from datetime import datetime

import pytest

from passport.models.enums import FlagSeverity, FlagStatus, FlagType
from passport.models.flag import PropertyFlag
from passport.services.issues import (
    IssueCategory,
    IssueSeverity,
    IssueStatus,
    category_to_flag_type,
    compose_description,
    flag_to_issue,
    humanize_flag_type,
    map_category,
    map_severity,
    map_status,
    split_description,
    status_to_flag_status,
)


def make_flag(description, flag_type=FlagType.RISK, severity=FlagSeverity.HIGH, status=FlagStatus.OPEN):
    now = datetime(2025, 5, 1)
    return PropertyFlag(
        id=uuid.uuid4(),
        property_id=uuid.uuid4(),
        flag_type=flag_type,
        severity=severity,
        status=status,
        description=description,
        created_at=now,
        updated_at=now,
    )


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("critical", IssueSeverity.CRITICAL),
        ("red", IssueSeverity.HIGH),
        ("warning", IssueSeverity.MEDIUM),
        (None, IssueSeverity.LOW),
    ],
)
def test_map_severity(raw, expected):
    assert map_severity(raw) == expected


def test_status_round_trip_through_flag_status():
    for status in IssueStatus:
        assert map_status(status_to_flag_status(status).value) == status


def test_categories_map_onto_flag_types():
    assert category_to_flag_type(IssueCategory.STRUCTURAL) == FlagType.RISK
    assert category_to_flag_type(IssueCategory.LEGAL) == FlagType.OWNERSHIP
    assert map_category("risk") == IssueCategory.SAFETY
    assert map_category("data_quality") == IssueCategory.GENERAL


def test_humanize_flag_type():
    assert humanize_flag_type("data_quality") == "Data Quality"
    assert humanize_flag_type(None) == "Issue"


def test_description_keeps_title_body_and_due_date():
    raw = compose_description("Damp in cellar", "North wall, visible tide marks", "2025-06-01")

    assert raw == "Damp in cellar\n\nNorth wall, visible tide marks\n\nDue: 2025-06-01"
    assert split_description(raw, "risk") == ("Damp in cellar", "North wall, visible tide marks", "2025-06-01")


def test_single_paragraph_description_uses_type_as_title():
    assert split_description("Boundary unclear", "ownership") == ("Ownership", "Boundary unclear", None)
    assert split_description(None, "data_quality") == ("Data Quality", None, None)


def test_flag_to_issue():
    flag = make_flag(compose_description("Cracked lintel", "Over the back door"), status=FlagStatus.IN_REVIEW)

    issue = flag_to_issue(flag)

    assert issue.title == "Cracked lintel"
    assert issue.description == "Over the back door"
    assert issue.status == IssueStatus.IN_PROGRESS
    assert issue.severity == IssueSeverity.HIGH
    assert issue.category == IssueCategory.SAFETY
