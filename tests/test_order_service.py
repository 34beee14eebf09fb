"""Tests for order creation, transitions, assignment and fee correction"""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import update

from app.models.order import Order, OrderStatus
from app.orders.exceptions import (
    AddressNotFound,
    AddressNotOwned,
    DeliveryFeeLocked,
    InvalidOrder,
    InvalidTransition,
    MotoboyNotFound,
    OrderNotFound,
)
from app.orders.service import OrderService
from app.orders.state_machine import TIMESTAMP_FIELDS, TRANSITIONS
from app.realtime.broadcaster import Broadcaster
from app.schemas.order import OrderCreate


class RecordingBroadcaster(Broadcaster):
    """Broadcaster that remembers what was published"""

    def __init__(self):
        super().__init__(buffer_size=10)
        self.events = []

    def publish(self, event, payload):
        self.events.append((event, payload))
        return super().publish(event, payload)


@pytest.fixture
def recorder():
    return RecordingBroadcaster()


@pytest.fixture
def service(test_db, recorder, offline_fee_engine):
    return OrderService(test_db, recorder, offline_fee_engine)


def delivery_order(address, **overrides) -> OrderCreate:
    data = {
        "user_id": address.user_id,
        "address_id": address.id,
        "items": [
            {"product_id": "gin-tonic", "product_name": "Gin Tônica", "quantity": 2, "unit_price": "45.00"},
            {"product_id": "gelo", "product_name": "Gelo 5kg", "quantity": 1, "unit_price": "10.00"},
        ],
        "delivery_fee": "8.90",
        "payment_method": "pix",
    }
    data.update(overrides)
    return OrderCreate(**data)


def counter_order(**overrides) -> OrderCreate:
    data = {
        "order_type": "counter",
        "status": "accepted",
        "items": [{"product_name": "Cerveja Lata", "quantity": 6, "unit_price": "5.50"}],
        "payment_method": "cash",
        "change_for": "50.00",
        "customer_name": "Balcão",
    }
    data.update(overrides)
    return OrderCreate(**data)


async def advance(service, order, *statuses):
    for status in statuses:
        order = await service.transition(order.id, status)
    return order


@pytest.mark.asyncio
async def test_create_order_computes_totals(service, test_address):
    """Two lines plus delivery fee: 2 x 45.00 + 10.00 + 8.90"""
    order = await service.create_order(delivery_order(test_address))

    assert order.status == "pending"
    assert order.subtotal == Decimal("100.00")
    assert order.delivery_fee == Decimal("8.90")
    assert order.total == Decimal("108.90")
    assert order.created_at is not None
    assert order.accepted_at is None

    items = await service.get_items(order.id)
    assert [item.product_name for item in items] == ["Gin Tônica", "Gelo 5kg"]
    assert items[0].total_price == Decimal("90.00")


@pytest.mark.asyncio
async def test_create_order_publishes_order_created(service, recorder, test_address):
    order = await service.create_order(delivery_order(test_address))

    assert recorder.events == [("order_created", {"orderId": str(order.id), "status": "pending"})]


@pytest.mark.asyncio
async def test_discount_is_subtracted(service, test_address):
    order = await service.create_order(delivery_order(test_address, discount="10.00"))

    assert order.total == Decimal("98.90")


@pytest.mark.asyncio
async def test_discount_larger_than_order_is_rejected(service, test_address):
    with pytest.raises(InvalidOrder):
        await service.create_order(delivery_order(test_address, discount="500.00"))


@pytest.mark.asyncio
async def test_point_of_sale_order_starts_accepted(service, recorder):
    order = await service.create_order(counter_order())

    assert order.status == "accepted"
    assert order.order_type == "counter"
    assert order.accepted_at is not None
    assert order.delivery_fee == Decimal("0.00")
    assert order.delivery_distance is None
    assert order.total == Decimal("33.00")
    assert recorder.events[0][1]["status"] == "accepted"


@pytest.mark.asyncio
async def test_delivery_fee_from_zone_table_when_geocoding_is_down(service, test_address):
    order = await service.create_order(delivery_order(test_address, delivery_fee=None))

    assert order.delivery_fee == Decimal("8.90")
    assert order.delivery_distance is None


@pytest.mark.asyncio
async def test_delivery_fee_from_distance(test_db, recorder, fee_engine, test_store, test_address):
    service = OrderService(test_db, recorder, fee_engine)
    order = await service.create_order(delivery_order(test_address, delivery_fee=None))

    # About 1 km away, so the minimum fee applies
    assert order.delivery_fee == Decimal("5.00")
    assert order.delivery_distance is not None
    assert Decimal("0.5") < order.delivery_distance < Decimal("2")


@pytest.mark.asyncio
async def test_delivery_fee_needs_known_address(service, test_customer):
    data = OrderCreate(
        user_id=test_customer.id,
        address_id=uuid4(),
        items=[{"product_name": "Vodka", "quantity": 1, "unit_price": "80.00"}],
        payment_method="pix",
    )

    with pytest.raises(AddressNotFound):
        await service.create_order(data)


@pytest.mark.asyncio
async def test_priced_delivery_order_still_needs_known_address(service, test_address):
    with pytest.raises(AddressNotFound):
        await service.create_order(delivery_order(test_address, address_id=uuid4()))


@pytest.mark.asyncio
async def test_customer_orders_only_to_own_address(service, test_address, test_customer):
    with pytest.raises(AddressNotOwned):
        await service.create_order(delivery_order(test_address), customer_id=uuid4())

    order = await service.create_order(delivery_order(test_address), customer_id=test_customer.id)
    assert order.address_id == test_address.id


@pytest.mark.asyncio
async def test_each_transition_stamps_one_timestamp(service, recorder, test_address):
    order = await service.create_order(delivery_order(test_address))
    path = ["accepted", "preparing", "ready", "dispatched", "delivered"]

    previous = "pending"
    for status in path:
        before = {field: getattr(order, field) for field in TIMESTAMP_FIELDS.values()}
        order = await service.transition(order.id, status)

        assert order.status == status
        changed = [field for field, value in before.items() if getattr(order, field) != value]
        assert changed == [TIMESTAMP_FIELDS[status]]

        assert recorder.events[-1] == (
            "order_status_changed",
            {"orderId": str(order.id), "status": status, "previousStatus": previous},
        )
        previous = status


@pytest.mark.asyncio
async def test_generic_dispatch_leaves_courier_empty(service, test_address):
    order = await service.create_order(delivery_order(test_address))
    order = await advance(service, order, "accepted", "preparing", "ready", "dispatched")

    assert order.status == "dispatched"
    assert order.motoboy_id is None
    assert order.dispatched_at is not None


@pytest.mark.asyncio
async def test_duplicate_accept_is_rejected(service, recorder, test_address):
    order = await service.create_order(delivery_order(test_address))
    order = await service.transition(order.id, "accepted")
    accepted_at = order.accepted_at
    published = len(recorder.events)

    with pytest.raises(InvalidTransition) as exc_info:
        await service.transition(order.id, "accepted")

    assert exc_info.value.current_status == "accepted"
    order = await service.get_order(order.id)
    assert order.accepted_at == accepted_at
    assert len(recorder.events) == published


@pytest.mark.asyncio
async def test_terminal_orders_cannot_move(service, test_address):
    order = await service.create_order(delivery_order(test_address))
    order = await service.transition(order.id, "cancelled")
    assert order.cancelled_at is not None

    for status in ["pending", "accepted", "delivered", "cancelled"]:
        with pytest.raises(InvalidTransition):
            await service.transition(order.id, status)


@pytest.mark.asyncio
async def test_arrived_is_not_a_status(service, test_address):
    order = await service.create_order(delivery_order(test_address))
    order = await advance(service, order, "accepted", "preparing", "ready", "dispatched")

    with pytest.raises(InvalidTransition):
        await service.transition(order.id, "arrived")


@pytest.mark.asyncio
async def test_lost_race_surfaces_as_invalid_transition(test_db, service, test_address):
    order = await service.create_order(delivery_order(test_address))
    order = await service.transition(order.id, "accepted")

    # Another writer cancels the order between our read and our write
    await test_db.execute(update(Order).where(Order.id == order.id).values(status="cancelled"))
    await test_db.commit()

    with pytest.raises(InvalidTransition) as exc_info:
        await service._apply(order, "accepted", {"status": "preparing"})

    assert exc_info.value.current_status == "cancelled"
    assert (await service.get_order(order.id)).status == "cancelled"


@pytest.mark.asyncio
async def test_transition_unknown_order(service):
    with pytest.raises(OrderNotFound):
        await service.transition(uuid4(), "accepted")


@pytest.mark.asyncio
async def test_assign_dispatches_ready_order(service, recorder, test_address, test_motoboy):
    order = await service.create_order(delivery_order(test_address))
    order = await advance(service, order, "accepted", "preparing", "ready")

    order = await service.assign(order.id, test_motoboy.id)

    assert order.status == "dispatched"
    assert order.motoboy_id == test_motoboy.id
    assert order.dispatched_at is not None
    assert recorder.events[-2:] == [
        ("order_status_changed", {"orderId": str(order.id), "status": "dispatched", "previousStatus": "ready"}),
        ("order_assigned", {"orderId": str(order.id), "motoboyId": str(test_motoboy.id), "status": "dispatched"}),
    ]

    assigned = await service.list_orders(motoboy_id=test_motoboy.id)
    assert [o.id for o in assigned] == [order.id]


@pytest.mark.asyncio
async def test_assign_requires_ready(service, test_address, test_motoboy):
    order = await service.create_order(delivery_order(test_address))
    order = await advance(service, order, "accepted", "preparing")

    with pytest.raises(InvalidTransition):
        await service.assign(order.id, test_motoboy.id)

    order = await service.get_order(order.id)
    assert order.status == "preparing"
    assert order.motoboy_id is None


@pytest.mark.asyncio
async def test_assign_unknown_motoboy(service, test_address):
    order = await service.create_order(delivery_order(test_address))
    order = await advance(service, order, "accepted", "preparing", "ready")

    with pytest.raises(MotoboyNotFound):
        await service.assign(order.id, uuid4())

    assert (await service.get_order(order.id)).status == "ready"


@pytest.mark.asyncio
async def test_delivery_fee_corrected_once(service, recorder, test_address):
    order = await service.create_order(delivery_order(test_address))
    published = len(recorder.events)

    order = await service.adjust_delivery_fee(order.id, Decimal("12.00"))

    assert order.delivery_fee == Decimal("12.00")
    assert order.original_delivery_fee == Decimal("8.90")
    assert order.delivery_fee_adjusted is True
    assert order.total == Decimal("112.00")
    assert len(recorder.events) == published

    with pytest.raises(DeliveryFeeLocked):
        await service.adjust_delivery_fee(order.id, Decimal("4.00"))

    order = await service.get_order(order.id)
    assert order.delivery_fee == Decimal("12.00")


@pytest.mark.asyncio
async def test_delivery_fee_locked_for_counter_and_closed_orders(service, test_address):
    counter = await service.create_order(counter_order())
    with pytest.raises(DeliveryFeeLocked):
        await service.adjust_delivery_fee(counter.id, Decimal("5.00"))

    order = await service.create_order(delivery_order(test_address))
    await service.transition(order.id, "cancelled")
    with pytest.raises(DeliveryFeeLocked):
        await service.adjust_delivery_fee(order.id, Decimal("5.00"))


@pytest.mark.asyncio
async def test_list_orders_filters(service, test_address):
    first = await service.create_order(delivery_order(test_address))
    await service.create_order(counter_order())
    await service.transition(first.id, "accepted")

    accepted = await service.list_orders(status=OrderStatus.ACCEPTED.value)
    mine = await service.list_orders(user_id=test_address.user_id)

    assert len(accepted) == 2
    assert [o.id for o in mine] == [first.id]


PATH_TO = {
    "pending": [],
    "accepted": ["accepted"],
    "preparing": ["accepted", "preparing"],
    "ready": ["accepted", "preparing", "ready"],
    "dispatched": ["accepted", "preparing", "ready", "dispatched"],
    "delivered": ["accepted", "preparing", "ready", "dispatched", "delivered"],
    "cancelled": ["cancelled"],
}

ILLEGAL_PAIRS = [
    (current, target)
    for current in TRANSITIONS
    for target in TRANSITIONS
    if target not in TRANSITIONS[current]
]


@pytest.mark.asyncio
@pytest.mark.parametrize("current,target", ILLEGAL_PAIRS)
async def test_illegal_transition_leaves_order_untouched(service, recorder, test_address, current, target):
    order = await service.create_order(delivery_order(test_address))
    order = await advance(service, order, *PATH_TO[current])
    before = {field: getattr(order, field) for field in TIMESTAMP_FIELDS.values()}
    published = len(recorder.events)

    with pytest.raises(InvalidTransition) as exc_info:
        await service.transition(order.id, target)

    assert exc_info.value.current_status == current
    order = await service.get_order(order.id)
    assert order.status == current
    assert {field: getattr(order, field) for field in TIMESTAMP_FIELDS.values()} == before
    assert len(recorder.events) == published
