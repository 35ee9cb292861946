# sew4mi/routers/__init__.py

from .users.user_router import router as user_router
from .auth.activity_router import router as activity_router

from .orders.order_router import router as order_router
from .orders.milestone_router import router as milestone_router
from .orders.dispute_router import router as dispute_router

from .payments.escrow_router import router as escrow_router

from .reviews.review_router import router as review_router
from .loyalty.loyalty_router import router as loyalty_router
from .profiles.family_profile_router import router as family_profile_router


__all__ = [
"user_router",
"activity_router",

"order_router",
"milestone_router",
"dispute_router",

"escrow_router",

"review_router",
"loyalty_router",
"family_profile_router",
]
