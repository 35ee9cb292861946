from datetime import date

import pytest

from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.models.enums.family_profile import RelationshipType, Gender, ReminderFrequency
from sew4mi.schemas.profiles.family_profile_schemas import FamilyProfileCreate, FamilyProfileUpdate
from sew4mi.schemas.auth.activity_schemas import UserActivityFilters
from sew4mi.services.auth.activity_service import list_user_activities
from sew4mi.services.profiles.family_profile_service import (
    create_profile,
    get_profile,
    list_profiles,
    update_profile,
    delete_profile,
    get_growth_history,
    process_due_reminders,
)


def _child(**overrides):
    data = dict(
        nickname="Esi",
        relationship=RelationshipType.CHILD,
        gender=Gender.FEMALE,
        birth_date=date(2018, 4, 2),
        measurements={"chest": 60.0, "height": 120.0},
        growth_tracking_enabled=True,
        reminder_frequency=ReminderFrequency.QUARTERLY,
    )
    data.update(overrides)
    return FamilyProfileCreate(**data)


async def test_child_tracking_needs_birth_date(db, customer):
    with pytest.raises(AppException) as exc:
        await create_profile(db, _child(birth_date=None), customer)
    assert exc.value.status_code == 400


async def test_create_sets_reminder_and_history(db, customer):
    profile = await create_profile(db, _child(), customer)

    assert profile.relationship == RelationshipType.CHILD
    assert profile.next_reminder_date is not None
    assert profile.age is not None

    history = await get_growth_history(db, profile.id, customer)
    assert len(history.entries) == 1
    assert history.entries[0].measurements["height"] == 120.0


async def test_measurement_change_appends_history(db, customer):
    profile = await create_profile(db, _child(), customer)

    await update_profile(db, profile.id, FamilyProfileUpdate(measurements={"chest": 62.0, "height": 124.0}), customer)
    await update_profile(db, profile.id, FamilyProfileUpdate(measurements={"chest": 62.0, "height": 124.0}), customer)
    updated = await update_profile(db, profile.id, FamilyProfileUpdate(nickname="  Esi A. "), customer)

    assert updated.nickname == "Esi A."
    assert updated.measurements == {"chest": 62.0, "height": 124.0}

    history = await get_growth_history(db, profile.id, customer)
    assert len(history.entries) == 2


async def test_patch_clears_optional_fields(db, customer):
    profile = await create_profile(
        db,
        _child(avatar_url="https://cdn.example.com/esi.png", growth_tracking_enabled=False),
        customer,
    )

    updated = await update_profile(db, profile.id, FamilyProfileUpdate(birth_date=None, avatar_url=None), customer)
    assert updated.birth_date is None
    assert updated.avatar_url is None
    assert updated.age is None

    with pytest.raises(AppException) as exc:
        await update_profile(db, profile.id, FamilyProfileUpdate(nickname=None), customer)
    assert exc.value.error_code == ErrorCode.VALIDATION_ERROR
    assert exc.value.details == {"fields": ["nickname"]}

    data = await list_user_activities(db=db, filters=UserActivityFilters(code="update_family_profile"))
    assert data.total == 1
    assert data.items[0].user_id == customer.id


async def test_tracked_child_keeps_birth_date(db, customer):
    profile = await create_profile(db, _child(), customer)

    with pytest.raises(AppException) as exc:
        await update_profile(db, profile.id, FamilyProfileUpdate(birth_date=None), customer)
    assert exc.value.status_code == 400


async def test_disabling_tracking_clears_reminder(db, customer):
    profile = await create_profile(db, _child(), customer)
    updated = await update_profile(db, profile.id, FamilyProfileUpdate(growth_tracking_enabled=False), customer)
    assert updated.next_reminder_date is None


async def test_profiles_are_private_to_owner(db, customer, make_user):
    profile = await create_profile(db, _child(), customer)
    other = await make_user("customer")

    with pytest.raises(AppException) as exc:
        await get_profile(db, profile.id, other)
    assert exc.value.error_code == ErrorCode.FAMILY_PROFILE_NOT_FOUND


async def test_soft_delete(db, customer):
    profile = await create_profile(db, _child(), customer)
    await delete_profile(db, profile.id, customer)

    assert (await list_profiles(db, customer)).total == 0
    with pytest.raises(AppException):
        await get_profile(db, profile.id, customer)


async def test_profile_limit(db, customer):
    for i in range(20):
        await create_profile(db, _child(nickname=f"Kid {i}", growth_tracking_enabled=False), customer)

    with pytest.raises(AppException) as exc:
        await create_profile(db, _child(nickname="One too many"), customer)
    assert exc.value.error_code == ErrorCode.FAMILY_PROFILE_LIMIT_REACHED


async def test_due_reminders_roll_forward(db, customer):
    profile = await create_profile(db, _child(), customer)
    await create_profile(db, _child(nickname="Untracked", growth_tracking_enabled=False), customer)

    today = date(2100, 1, 15)
    assert await process_due_reminders(db, today=today) == 1

    refreshed = await get_profile(db, profile.id, customer)
    assert refreshed.next_reminder_date == date(2100, 4, 15)

    assert await process_due_reminders(db, today=today) == 0
