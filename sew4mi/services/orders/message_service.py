# sew4mi/services/orders/message_service.py

import logging

from sqlalchemy import select, update, func, asc
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.models.orders.message_models import OrderMessage
from sew4mi.models.users.user_models import User
from sew4mi.schemas.orders.message_schemas import MessageCreate, MessageOut, MessageListData
from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.utils.datetime_utils import utcnow
from sew4mi.services.orders.order_lookup import load_order

logger = logging.getLogger(__name__)


async def _load_conversation_order(db: AsyncSession, order_id: int, user: User):
    order = await load_order(db, order_id)
    # admins read orders but do not join the conversation
    if user.id not in (order.customer_id, order.tailor_id):
        raise AppException(403, "Only the customer and tailor can use order messages", ErrorCode.ORDER_ACCESS_DENIED)
    return order


async def send_order_message(
    db: AsyncSession,
    order_id: int,
    payload: MessageCreate,
    user: User,
) -> MessageOut:
    order = await _load_conversation_order(db, order_id, user)

    message = OrderMessage(
        order_id=order.id,
        sender_id=user.id,
        body=payload.body,
    )
    db.add(message)
    await db.flush()

    result = MessageOut.model_validate(message)
    await db.commit()

    logger.info(
        "Order message sent",
        extra={"order_id": order.id, "sender_id": user.id, "message_id": message.id},
    )
    return result


async def list_order_messages(
    db: AsyncSession,
    order_id: int,
    user: User,
    *,
    page: int = 1,
    page_size: int = 50,
) -> MessageListData:
    order = await _load_conversation_order(db, order_id, user)

    await db.execute(
        update(OrderMessage)
        .where(
            OrderMessage.order_id == order.id,
            OrderMessage.sender_id != user.id,
            OrderMessage.read_at.is_(None),
        )
        .values(read_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    base_query = select(OrderMessage).where(OrderMessage.order_id == order.id)

    total = await db.scalar(
        select(func.count()).select_from(base_query.subquery())
    )

    result = await db.execute(
        base_query
        .order_by(asc(OrderMessage.created_at), asc(OrderMessage.id))
        .offset((page - 1) * page_size)
        .limit(page_size)
        .execution_options(populate_existing=True)
    )

    return MessageListData(
        total=total or 0,
        items=[MessageOut.model_validate(m) for m in result.scalars().all()],
    )
