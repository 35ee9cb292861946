from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.core.db import get_db
from sew4mi.utils.check_roles import require_role
from sew4mi.utils.get_user import get_current_user
from sew4mi.utils.response import success_response, APIResponse

from sew4mi.services.reviews.review_service import (
    check_review_eligibility,
    submit_review,
    vote_on_review,
    respond_to_review,
    moderate_review,
    list_tailor_reviews,
    get_tailor_rating_summary,
)

from sew4mi.schemas.reviews.review_schemas import (
    ReviewCreate,
    ReviewVoteCreate,
    ReviewResponseCreate,
    ReviewModerate,
    ReviewOut,
    ReviewListData,
    ReviewEligibilityOut,
    TailorRatingSummary,
)

router = APIRouter(
    prefix="/reviews",
    tags=["Reviews"],
)


@router.get("/eligibility/{order_id}", response_model=APIResponse[ReviewEligibilityOut])
async def review_eligibility_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer"])),
):
    result = await check_review_eligibility(db, order_id, user)
    return success_response("Review eligibility checked", result)


@router.post("/", response_model=APIResponse[ReviewOut], status_code=201)
async def submit_review_api(
    payload: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer"])),
):
    review = await submit_review(db, payload, user)
    return success_response("Review submitted", review)


@router.post("/{review_id}/vote", response_model=APIResponse[ReviewOut])
async def vote_on_review_api(
    review_id: int,
    payload: ReviewVoteCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    review = await vote_on_review(db, review_id, payload, user)
    return success_response("Vote recorded", review)


@router.post("/{review_id}/response", response_model=APIResponse[ReviewOut], status_code=201)
async def respond_to_review_api(
    review_id: int,
    payload: ReviewResponseCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["tailor"])),
):
    review = await respond_to_review(db, review_id, payload, user)
    return success_response("Response added", review)


@router.patch("/{review_id}/moderation", response_model=APIResponse[ReviewOut])
async def moderate_review_api(
    review_id: int,
    payload: ReviewModerate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    review = await moderate_review(db, review_id, payload, admin)
    return success_response("Review moderation updated", review)


@router.get("/tailors/{tailor_id}", response_model=APIResponse[ReviewListData])
async def list_tailor_reviews_api(
    tailor_id: int,
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_user),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    sort_by: str = Query("created_at"),
    order: str = Query("desc"),
):
    data = await list_tailor_reviews(
        db,
        tailor_id,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        order=order,
    )
    return success_response("Reviews retrieved successfully", data)


@router.get("/tailors/{tailor_id}/summary", response_model=APIResponse[TailorRatingSummary])
async def tailor_rating_summary_api(
    tailor_id: int,
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_user),
):
    summary = await get_tailor_rating_summary(db, tailor_id)
    return success_response("Rating summary retrieved successfully", summary)
