"""Order lifecycle service: creation, status transitions, courier assignment, fee correction"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.delivery.engine import DeliveryFeeEngine
from app.delivery.geocoding import AddressFields
from app.delivery.store import get_store_settings
from app.models.address import Address
from app.models.motoboy import Motoboy
from app.models.order import Order, OrderItem, OrderStatus, OrderType
from app.orders.exceptions import (
    AddressNotFound,
    AddressNotOwned,
    DeliveryFeeLocked,
    InvalidOrder,
    InvalidTransition,
    MotoboyNotFound,
    OrderNotFound,
)
from app.orders.state_machine import (
    TIMESTAMP_FIELDS,
    allowed_transitions,
    check_transition,
    is_terminal,
)
from app.realtime.broadcaster import Broadcaster
from app.realtime.sse import ORDER_ASSIGNED, ORDER_CREATED, ORDER_STATUS_CHANGED
from app.schemas.order import OrderCreate

logger = structlog.get_logger()

CENTS = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


class OrderService:
    """
    Single authority for order state changes.

    Each mutation is one conditional UPDATE committed before the matching
    event is published, so a lost race surfaces as an invalid transition
    rather than a second write.
    """

    def __init__(
        self,
        db: AsyncSession,
        broadcaster: Broadcaster,
        fee_engine: Optional[DeliveryFeeEngine] = None,
    ):
        self.db = db
        self.broadcaster = broadcaster
        self.fee_engine = fee_engine

    # Reads

    async def get_order(self, order_id: UUID) -> Order:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFound(order_id)
        return order

    async def list_orders(
        self,
        status: Optional[str] = None,
        user_id: Optional[UUID] = None,
        motoboy_id: Optional[UUID] = None,
    ) -> List[Order]:
        query = select(Order)

        if status:
            query = query.where(Order.status == status)
        if user_id:
            query = query.where(Order.user_id == user_id)
        if motoboy_id:
            query = query.where(Order.motoboy_id == motoboy_id)

        result = await self.db.execute(query.order_by(Order.created_at.desc()))
        return list(result.scalars().all())

    async def get_items(self, order_id: UUID) -> List[OrderItem]:
        await self.get_order(order_id)
        result = await self.db.execute(
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.position)
        )
        return list(result.scalars().all())

    # Creation

    async def create_order(self, data: OrderCreate, customer_id: Optional[UUID] = None) -> Order:
        """Place an order: pending from checkout, accepted when staff rings it up in person.

        ``customer_id`` restricts delivery orders to that customer's own addresses.
        """
        lines = []
        subtotal = Decimal("0")
        for item in data.items:
            total_price = _money(item.unit_price * item.quantity)
            subtotal += total_price
            lines.append((item, total_price))

        delivery_fee = data.delivery_fee
        delivery_distance = data.delivery_distance

        if data.order_type == OrderType.COUNTER:
            delivery_fee = delivery_fee or Decimal("0")
            delivery_distance = None
        else:
            address = await self.db.get(Address, data.address_id)
            if address is None:
                raise AddressNotFound(data.address_id)
            if customer_id is not None and address.user_id != customer_id:
                raise AddressNotOwned(data.address_id)
            if delivery_fee is None:
                delivery_fee, delivery_distance = await self._quote_delivery(address)

        delivery_fee = _money(delivery_fee)
        discount = _money(data.discount)
        total = _money(subtotal - discount + delivery_fee)

        if total < 0:
            raise InvalidOrder("discount exceeds the order value")

        now = datetime.utcnow()
        status = data.status.value

        order = Order(
            user_id=data.user_id,
            address_id=data.address_id if data.order_type == OrderType.DELIVERY else None,
            order_type=data.order_type.value,
            status=status,
            subtotal=_money(subtotal),
            delivery_fee=delivery_fee,
            delivery_fee_adjusted=False,
            discount=discount,
            total=total,
            delivery_distance=delivery_distance,
            payment_method=data.payment_method.value,
            change_for=data.change_for,
            notes=data.notes,
            customer_name=data.customer_name,
            created_at=now,
            accepted_at=now if status == OrderStatus.ACCEPTED.value else None,
        )
        self.db.add(order)
        await self.db.flush()

        for position, (item, total_price) in enumerate(lines):
            self.db.add(OrderItem(
                order_id=order.id,
                product_id=item.product_id,
                position=position,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=_money(item.unit_price),
                total_price=total_price,
            ))

        await self.db.commit()
        await self.db.refresh(order)

        logger.info(
            "Order created",
            order_id=str(order.id),
            status=order.status,
            order_type=order.order_type,
            total=str(order.total),
        )
        self.broadcaster.publish(ORDER_CREATED, {"orderId": str(order.id), "status": order.status})

        return order

    async def _quote_delivery(self, address: Address):
        engine = self.fee_engine or DeliveryFeeEngine()
        quote = await engine.calculate(
            AddressFields(
                street=address.street,
                number=address.number,
                neighborhood=address.neighborhood,
                city=address.city,
                state=address.state,
            ),
            await get_store_settings(self.db),
        )

        distance = Decimal(str(quote.distance_km)) if quote.distance_km is not None else None
        return Decimal(str(quote.fee)), distance

    # Transitions

    async def transition(self, order_id: UUID, target_status: str) -> Order:
        """Move an order along the transition table, stamping the new status' timestamp"""
        order = await self.get_order(order_id)
        previous = order.status
        check_transition(previous, target_status)

        values = {"status": target_status}
        field = TIMESTAMP_FIELDS[target_status]
        if getattr(order, field) is None:
            values[field] = datetime.utcnow()

        order = await self._apply(order, previous, values)

        logger.info("Order status changed", order_id=str(order.id), status=order.status, previous_status=previous)
        self._publish_status_changed(order, previous)

        return order

    async def assign(self, order_id: UUID, motoboy_id: UUID) -> Order:
        """Hand a ready order to a courier: dispatched, with the courier recorded"""
        order = await self.get_order(order_id)
        previous = order.status

        if previous != OrderStatus.READY.value:
            raise InvalidTransition(previous, OrderStatus.DISPATCHED.value, allowed_transitions(previous))

        motoboy = await self.db.get(Motoboy, motoboy_id)
        if motoboy is None:
            raise MotoboyNotFound(motoboy_id)

        values = {
            "status": OrderStatus.DISPATCHED.value,
            "motoboy_id": motoboy.id,
        }
        if order.dispatched_at is None:
            values["dispatched_at"] = datetime.utcnow()

        order = await self._apply(order, previous, values)

        logger.info("Order assigned", order_id=str(order.id), motoboy_id=str(motoboy.id))
        self._publish_status_changed(order, previous)
        self.broadcaster.publish(ORDER_ASSIGNED, {
            "orderId": str(order.id),
            "motoboyId": str(motoboy.id),
            "status": OrderStatus.DISPATCHED.value,
        })

        return order

    async def adjust_delivery_fee(self, order_id: UUID, delivery_fee: Decimal) -> Order:
        """Apply the one allowed delivery fee correction and recompute the total"""
        order = await self.get_order(order_id)

        if order.order_type == OrderType.COUNTER.value:
            raise DeliveryFeeLocked(order.id, "counter orders have no delivery fee")
        if is_terminal(order.status):
            raise DeliveryFeeLocked(order.id, f"order is already {order.status}")
        if order.delivery_fee_adjusted:
            raise DeliveryFeeLocked(order.id, "delivery fee was already corrected")

        new_fee = _money(delivery_fee)
        previous_fee = order.delivery_fee
        order_id = order.id

        result = await self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.delivery_fee_adjusted == False)  # noqa: E712
            .values(
                original_delivery_fee=previous_fee,
                delivery_fee=new_fee,
                delivery_fee_adjusted=True,
                total=_money(order.subtotal - order.discount + new_fee),
            )
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise DeliveryFeeLocked(order_id, "delivery fee was already corrected")

        await self.db.commit()
        await self.db.refresh(order)

        logger.info(
            "Delivery fee corrected",
            order_id=str(order.id),
            original_fee=str(previous_fee),
            delivery_fee=str(order.delivery_fee),
            total=str(order.total),
        )
        return order

    async def _apply(self, order: Order, expected_status: str, values: dict) -> Order:
        """Write ``values`` only if the order is still in ``expected_status``"""
        order_id = order.id
        result = await self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status == expected_status)
            .values(**values)
        )

        if result.rowcount == 0:
            await self.db.rollback()
            current = await self.get_order(order_id)
            logger.info(
                "Concurrent order update lost",
                order_id=str(order_id),
                expected_status=expected_status,
                current_status=current.status,
            )
            raise InvalidTransition(current.status, values["status"], allowed_transitions(current.status))

        await self.db.commit()
        await self.db.refresh(order)
        return order

    def _publish_status_changed(self, order: Order, previous: str) -> None:
        self.broadcaster.publish(ORDER_STATUS_CHANGED, {
            "orderId": str(order.id),
            "status": order.status,
            "previousStatus": previous,
        })
