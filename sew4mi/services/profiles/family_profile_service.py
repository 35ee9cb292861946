# sew4mi/services/profiles/family_profile_service.py

from datetime import date, datetime
import logging

from dateutil.relativedelta import relativedelta
from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.models.profiles.family_profile_models import FamilyProfile
from sew4mi.models.users.user_models import User
from sew4mi.models.enums.family_profile import RelationshipType, ReminderFrequency

from sew4mi.schemas.profiles.family_profile_schemas import (
    FamilyProfileCreate,
    FamilyProfileUpdate,
    FamilyProfileOut,
    FamilyProfileListData,
    GrowthHistoryOut,
    GrowthEntryOut,
)

from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.constants.activity_codes import ActivityCode
from sew4mi.constants.profiles import MAX_FAMILY_PROFILES, REMINDER_INTERVAL_MONTHS
from sew4mi.utils.activity_helpers import emit_activity, actor_context
from sew4mi.utils.datetime_utils import utcnow, ensure_utc

logger = logging.getLogger(__name__)

# optional columns a PATCH may set back to null
CLEARABLE_FIELDS = {"birth_date", "avatar_url"}


# =====================================================
# PURE HELPERS
# =====================================================
def calculate_next_reminder_date(
    last_update: datetime | date,
    frequency: ReminderFrequency,
    tracking_enabled: bool,
) -> date | None:
    months = REMINDER_INTERVAL_MONTHS.get(frequency)
    if not tracking_enabled or months is None:
        return None

    if isinstance(last_update, datetime):
        last_update = ensure_utc(last_update).date()
    return last_update + relativedelta(months=months)


def calculate_age(birth_date: date | None, today: date | None = None) -> int | None:
    if birth_date is None:
        return None
    return relativedelta(today or date.today(), birth_date).years


def _ensure_tracking_allowed(relationship: RelationshipType, birth_date: date | None, tracking: bool) -> None:
    if tracking and relationship == RelationshipType.CHILD and birth_date is None:
        raise AppException(
            400,
            "Growth tracking for a child requires a birth date",
            ErrorCode.VALIDATION_ERROR,
        )


def _map_profile(profile: FamilyProfile) -> FamilyProfileOut:
    return FamilyProfileOut(
        id=profile.id,
        user_id=profile.user_id,
        nickname=profile.nickname,
        relationship=profile.relationship_type,
        gender=profile.gender,
        birth_date=profile.birth_date,
        age=calculate_age(profile.birth_date),
        avatar_url=profile.avatar_url,
        measurements=profile.measurements or {},
        visibility=profile.visibility,
        growth_tracking_enabled=profile.growth_tracking_enabled,
        reminder_frequency=profile.reminder_frequency,
        last_measurement_update=profile.last_measurement_update,
        next_reminder_date=profile.next_reminder_date,
        created_at=profile.created_at,
    )


async def _load_owned_profile(db: AsyncSession, profile_id: int, user: User) -> FamilyProfile:
    profile = await db.get(FamilyProfile, profile_id)
    if not profile or profile.is_deleted or profile.user_id != user.id:
        raise AppException(404, "Family profile not found", ErrorCode.FAMILY_PROFILE_NOT_FOUND)
    return profile


def _history_entry(recorded_at: datetime, measurements: dict) -> dict:
    return {"recorded_at": recorded_at.isoformat(), "measurements": dict(measurements)}


# =====================================================
# CREATE
# =====================================================
async def create_profile(
    db: AsyncSession,
    payload: FamilyProfileCreate,
    user: User,
) -> FamilyProfileOut:
    active = await db.scalar(
        select(func.count(FamilyProfile.id)).where(
            FamilyProfile.user_id == user.id,
            FamilyProfile.is_deleted.is_(False),
        )
    )
    if (active or 0) >= MAX_FAMILY_PROFILES:
        raise AppException(
            409,
            f"You can keep at most {MAX_FAMILY_PROFILES} family profiles",
            ErrorCode.FAMILY_PROFILE_LIMIT_REACHED,
        )

    _ensure_tracking_allowed(payload.relationship, payload.birth_date, payload.growth_tracking_enabled)

    now = utcnow()
    profile = FamilyProfile(
        user_id=user.id,
        nickname=payload.nickname.strip(),
        relationship_type=payload.relationship,
        gender=payload.gender,
        birth_date=payload.birth_date,
        avatar_url=payload.avatar_url,
        measurements=dict(payload.measurements),
        growth_history=[_history_entry(now, payload.measurements)] if payload.measurements else [],
        last_measurement_update=now,
        visibility=payload.visibility,
        growth_tracking_enabled=payload.growth_tracking_enabled,
        reminder_frequency=payload.reminder_frequency,
        next_reminder_date=calculate_next_reminder_date(
            now, payload.reminder_frequency, payload.growth_tracking_enabled
        ),
    )
    db.add(profile)
    await db.flush()

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.CREATE_FAMILY_PROFILE,
        target_name=profile.nickname,
        **actor_context(user),
    )

    result = _map_profile(profile)
    await db.commit()

    logger.info("Family profile created", extra={"profile_id": profile.id, "user_id": user.id})
    return result


# =====================================================
# READ
# =====================================================
async def get_profile(db: AsyncSession, profile_id: int, user: User) -> FamilyProfileOut:
    return _map_profile(await _load_owned_profile(db, profile_id, user))


async def list_profiles(db: AsyncSession, user: User) -> FamilyProfileListData:
    result = await db.execute(
        select(FamilyProfile)
        .where(
            FamilyProfile.user_id == user.id,
            FamilyProfile.is_deleted.is_(False),
        )
        .order_by(FamilyProfile.created_at, FamilyProfile.id)
    )
    profiles = result.scalars().all()
    return FamilyProfileListData(total=len(profiles), items=[_map_profile(p) for p in profiles])


async def get_growth_history(db: AsyncSession, profile_id: int, user: User) -> GrowthHistoryOut:
    profile = await _load_owned_profile(db, profile_id, user)
    return GrowthHistoryOut(
        profile_id=profile.id,
        entries=[GrowthEntryOut(**entry) for entry in profile.growth_history or []],
    )


# =====================================================
# UPDATE
# =====================================================
async def update_profile(
    db: AsyncSession,
    profile_id: int,
    payload: FamilyProfileUpdate,
    user: User,
) -> FamilyProfileOut:
    profile = await _load_owned_profile(db, profile_id, user)
    data = payload.model_dump(exclude_unset=True)

    not_clearable = sorted(f for f, v in data.items() if v is None and f not in CLEARABLE_FIELDS)
    if not_clearable:
        raise AppException(
            400,
            "These fields cannot be cleared",
            ErrorCode.VALIDATION_ERROR,
            {"fields": not_clearable},
        )

    if "relationship" in data:
        data["relationship_type"] = data.pop("relationship")
    if "nickname" in data and data["nickname"]:
        data["nickname"] = data["nickname"].strip()

    measurements = data.pop("measurements", None)

    for field, value in data.items():
        setattr(profile, field, value)

    _ensure_tracking_allowed(
        profile.relationship_type,
        profile.birth_date,
        profile.growth_tracking_enabled,
    )

    if measurements is not None and measurements != (profile.measurements or {}):
        now = utcnow()
        # JSON columns track reassignment, not in-place mutation
        profile.measurements = dict(measurements)
        profile.growth_history = list(profile.growth_history or []) + [_history_entry(now, measurements)]
        profile.last_measurement_update = now

    profile.next_reminder_date = calculate_next_reminder_date(
        profile.last_measurement_update,
        profile.reminder_frequency,
        profile.growth_tracking_enabled,
    )

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.UPDATE_FAMILY_PROFILE,
        target_name=profile.nickname,
        **actor_context(user),
    )

    await db.flush()
    result = _map_profile(profile)
    await db.commit()

    logger.info("Family profile updated", extra={"profile_id": profile.id, "fields": sorted(payload.model_fields_set)})
    return result


# =====================================================
# DELETE (SOFT)
# =====================================================
async def delete_profile(db: AsyncSession, profile_id: int, user: User) -> None:
    profile = await _load_owned_profile(db, profile_id, user)
    profile.is_deleted = True

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.DELETE_FAMILY_PROFILE,
        target_name=profile.nickname,
        **actor_context(user),
    )

    await db.commit()
    logger.info("Family profile deleted", extra={"profile_id": profile.id, "user_id": user.id})


# =====================================================
# REMINDER SWEEP (SCHEDULER)
# =====================================================
async def process_due_reminders(db: AsyncSession, today: date | None = None) -> int:
    """Log due measurement reminders and roll each profile to its next date."""
    today = today or date.today()

    result = await db.execute(
        select(FamilyProfile).where(
            FamilyProfile.is_deleted.is_(False),
            FamilyProfile.growth_tracking_enabled.is_(True),
            FamilyProfile.next_reminder_date.isnot(None),
            FamilyProfile.next_reminder_date <= today,
        )
    )
    profiles = result.scalars().all()

    for profile in profiles:
        logger.info(
            "Measurement reminder due",
            extra={
                "profile_id": profile.id,
                "user_id": profile.user_id,
                "nickname": profile.nickname,
                "due_date": profile.next_reminder_date.isoformat(),
            },
        )
        profile.next_reminder_date = calculate_next_reminder_date(
            today,
            profile.reminder_frequency,
            profile.growth_tracking_enabled,
        )

    await db.commit()
    return len(profiles)
