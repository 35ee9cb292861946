# sew4mi/services/orders/order_lookup.py

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sew4mi.models.orders.order_models import Order
from sew4mi.models.users.user_models import User
from sew4mi.models.enums.order_status import OrderStatus
from sew4mi.models.enums.user_role import UserRole
from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.services.orders.order_progress import get_order_status_from_milestones

logger = logging.getLogger(__name__)

CLOSED_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.DISPUTED}


async def load_order(
    db: AsyncSession,
    order_id: int,
    *,
    with_milestones: bool = False,
    for_update: bool = False,
) -> Order:
    stmt = select(Order).where(
        Order.id == order_id,
        Order.is_deleted.is_(False),
    )
    if with_milestones:
        stmt = stmt.options(selectinload(Order.milestones))
    if for_update:
        stmt = stmt.with_for_update()

    result = await db.execute(stmt)
    order = result.scalar_one_or_none()
    if not order:
        raise AppException(404, "Order not found", ErrorCode.ORDER_NOT_FOUND)
    return order


def ensure_order_party(order: Order, user: User) -> None:
    if user.role == UserRole.admin.value:
        return
    if user.id not in (order.customer_id, order.tailor_id):
        raise AppException(403, "You are not a party to this order", ErrorCode.ORDER_ACCESS_DENIED)


def sync_order_status(order: Order, milestones) -> OrderStatus:
    """Re-derive the production status from approved milestones."""
    if order.status in CLOSED_STATUSES or order.status == OrderStatus.PENDING_DEPOSIT:
        return order.status

    derived = get_order_status_from_milestones(milestones)

    # nothing approved yet: keep DEPOSIT_PAID rather than stepping back to CREATED
    if derived == OrderStatus.CREATED and order.status == OrderStatus.DEPOSIT_PAID:
        return order.status

    if derived != order.status:
        logger.info(
            "Order status derived from milestones",
            extra={"order_id": order.id, "from_status": order.status, "to_status": derived},
        )
        order.status = derived
        order.version += 1

    return order.status
