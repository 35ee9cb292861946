# sew4mi/routers/auth/activity_router.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.core.db import get_db
from sew4mi.schemas.auth.activity_schemas import UserActivityFilters, UserActivityListData
from sew4mi.services.auth.activity_service import list_user_activities
from sew4mi.utils.check_roles import require_role
from sew4mi.utils.response import success_response, APIResponse
from sew4mi.utils.logger import get_logger

router = APIRouter(prefix="/activities", tags=["User Activities"])
logger = get_logger(__name__)


@router.get("/", response_model=APIResponse[UserActivityListData])
async def list_user_activities_api(
    filters: UserActivityFilters = Depends(),
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    logger.info(
        "List user activities requested",
        extra=filters.model_dump(exclude_none=True),
    )

    result = await list_user_activities(db=db, filters=filters)

    return success_response(
        "User activities fetched successfully",
        result,
    )
