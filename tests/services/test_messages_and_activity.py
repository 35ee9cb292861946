import pytest

from sew4mi.core.exceptions import AppException
from sew4mi.schemas.auth.activity_schemas import UserActivityFilters
from sew4mi.schemas.orders.order_schemas import OrderCreate
from sew4mi.schemas.orders.message_schemas import MessageCreate
from sew4mi.services.auth.activity_service import list_user_activities
from sew4mi.services.orders.order_service import create_order
from sew4mi.services.orders.message_service import send_order_message, list_order_messages


async def test_messages_marked_read_by_recipient(db, customer, tailor):
    order = await create_order(db, OrderCreate(tailor_id=tailor.id, garment_type="dashiki"), customer)

    sent = await send_order_message(db, order.id, MessageCreate(body="  Can we use gold thread? "), customer)
    assert sent.body == "Can we use gold thread?"
    assert sent.read_at is None

    # the sender's own view leaves the message unread
    own_view = await list_order_messages(db, order.id, customer)
    assert own_view.items[0].read_at is None

    tailor_view = await list_order_messages(db, order.id, tailor)
    assert tailor_view.total == 1
    assert tailor_view.items[0].read_at is not None


async def test_admin_cannot_join_conversation(db, customer, tailor, admin):
    order = await create_order(db, OrderCreate(tailor_id=tailor.id, garment_type="dashiki"), customer)

    with pytest.raises(AppException) as exc:
        await send_order_message(db, order.id, MessageCreate(body="Hello"), admin)
    assert exc.value.status_code == 403


def test_blank_message_rejected():
    with pytest.raises(ValueError):
        MessageCreate(body="   ")


async def test_order_creation_is_recorded_as_activity(db, customer, tailor):
    await create_order(db, OrderCreate(tailor_id=tailor.id, garment_type="dashiki"), customer)

    data = await list_user_activities(db=db, filters=UserActivityFilters(code="create_order"))
    assert data.total == 1
    assert data.items[0].user_id == customer.id
