# Users and audit
from sew4mi.models.users.user_models import User
from sew4mi.models.support.activity_models import UserActivity

# Orders
from sew4mi.models.orders.order_models import Order
from sew4mi.models.orders.milestone_models import OrderMilestone, MilestoneApproval
from sew4mi.models.orders.message_models import OrderMessage
from sew4mi.models.orders.dispute_models import MilestoneDispute, DisputeMessage

# Payments
from sew4mi.models.payments.escrow_models import EscrowTransaction

# Loyalty
from sew4mi.models.loyalty.loyalty_models import LoyaltyAccount, LoyaltyTransaction, LoyaltyReward

# Reviews
from sew4mi.models.reviews.review_models import Review, ReviewVote, ReviewResponse

# Profiles
from sew4mi.models.profiles.family_profile_models import FamilyProfile
