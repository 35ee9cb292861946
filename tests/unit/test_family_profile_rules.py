from datetime import date, datetime, timezone

import pytest

from sew4mi.core.exceptions import AppException
from sew4mi.models.enums.family_profile import RelationshipType, ReminderFrequency
from sew4mi.schemas.profiles.family_profile_schemas import FamilyProfileCreate
from sew4mi.services.profiles.family_profile_service import (
    calculate_next_reminder_date,
    calculate_age,
    _ensure_tracking_allowed,
)


def test_monthly_reminder_clamps_to_month_end():
    assert calculate_next_reminder_date(date(2026, 1, 31), ReminderFrequency.MONTHLY, True) == date(2026, 2, 28)


def test_quarterly_reminder_from_datetime():
    last = datetime(2026, 5, 10, 9, 30, tzinfo=timezone.utc)
    assert calculate_next_reminder_date(last, ReminderFrequency.QUARTERLY, True) == date(2026, 8, 10)


def test_no_reminder_when_disabled_or_never():
    assert calculate_next_reminder_date(date(2026, 1, 1), ReminderFrequency.NEVER, True) is None
    assert calculate_next_reminder_date(date(2026, 1, 1), ReminderFrequency.MONTHLY, False) is None


def test_age_in_whole_years():
    assert calculate_age(date(2010, 6, 15), today=date(2026, 6, 14)) == 15
    assert calculate_age(date(2010, 6, 15), today=date(2026, 6, 15)) == 16
    assert calculate_age(None) is None


def test_child_tracking_requires_birth_date():
    with pytest.raises(AppException) as exc:
        _ensure_tracking_allowed(RelationshipType.CHILD, None, True)
    assert exc.value.status_code == 400

    _ensure_tracking_allowed(RelationshipType.CHILD, None, False)
    _ensure_tracking_allowed(RelationshipType.SPOUSE, None, True)


def test_measurements_must_be_positive():
    with pytest.raises(ValueError):
        FamilyProfileCreate(
            nickname="Kwame",
            relationship=RelationshipType.CHILD,
            gender="MALE",
            measurements={"chest": -3},
        )
