from fastapi import APIRouter, Depends

from sew4mi.schemas.users.user_schemas import UserOut
from sew4mi.utils.get_user import get_current_user
from sew4mi.utils.response import success_response, APIResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=APIResponse[UserOut])
async def get_me_api(user=Depends(get_current_user)):
    return success_response("Profile retrieved successfully", UserOut.model_validate(user))
