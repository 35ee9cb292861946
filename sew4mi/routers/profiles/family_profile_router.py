from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.core.db import get_db
from sew4mi.utils.get_user import get_current_user
from sew4mi.utils.response import success_response, APIResponse

from sew4mi.services.profiles.family_profile_service import (
    create_profile,
    get_profile,
    list_profiles,
    update_profile,
    delete_profile,
    get_growth_history,
)

from sew4mi.schemas.profiles.family_profile_schemas import (
    FamilyProfileCreate,
    FamilyProfileUpdate,
    FamilyProfileOut,
    FamilyProfileListData,
    GrowthHistoryOut,
)

router = APIRouter(
    prefix="/profiles/family",
    tags=["Family Profiles"],
)


@router.get("/", response_model=APIResponse[FamilyProfileListData])
async def list_profiles_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    data = await list_profiles(db, user)
    return success_response("Family profiles retrieved successfully", data)


@router.post("/", response_model=APIResponse[FamilyProfileOut], status_code=201)
async def create_profile_api(
    payload: FamilyProfileCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    profile = await create_profile(db, payload, user)
    return success_response("Family profile created", profile)


@router.get("/{profile_id}", response_model=APIResponse[FamilyProfileOut])
async def get_profile_api(
    profile_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    profile = await get_profile(db, profile_id, user)
    return success_response("Family profile retrieved successfully", profile)


@router.patch("/{profile_id}", response_model=APIResponse[FamilyProfileOut])
async def update_profile_api(
    profile_id: int,
    payload: FamilyProfileUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    profile = await update_profile(db, profile_id, payload, user)
    return success_response("Family profile updated", profile)


@router.delete("/{profile_id}", response_model=APIResponse)
async def delete_profile_api(
    profile_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    await delete_profile(db, profile_id, user)
    return success_response("Family profile deleted")


@router.get("/{profile_id}/growth-history", response_model=APIResponse[GrowthHistoryOut])
async def growth_history_api(
    profile_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    history = await get_growth_history(db, profile_id, user)
    return success_response("Growth history retrieved successfully", history)
