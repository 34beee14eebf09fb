"""Order management API endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.delivery.engine import DeliveryFeeEngine, DeliveryFeeUnresolved, get_fee_engine
from app.models.order import OrderStatus
from app.models.user import User, UserRole
from app.orders.exceptions import (
    AddressNotFound,
    AddressNotOwned,
    DeliveryFeeLocked,
    InvalidOrder,
    InvalidTransition,
    MotoboyNotFound,
    OrderError,
    OrderNotFound,
)
from app.orders.service import OrderService
from app.realtime.broadcaster import Broadcaster
from app.realtime.stream import get_broadcaster, stream_channel
from app.schemas.order import (
    OrderCreate,
    OrderStatusUpdate,
    OrderAssign,
    DeliveryFeeUpdate,
    OrderResponse,
    OrderItemResponse,
)
from app.api.auth import get_current_user, require_staff, require_admin

router = APIRouter()


def get_order_service(
    db: AsyncSession = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    fee_engine: DeliveryFeeEngine = Depends(get_fee_engine),
) -> OrderService:
    return OrderService(db, broadcaster, fee_engine)


def order_error_to_http(error: OrderError) -> HTTPException:
    """Map order domain errors to structured HTTP errors"""
    if isinstance(error, InvalidTransition):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error.to_dict())
    if isinstance(error, (OrderNotFound, MotoboyNotFound, AddressNotFound)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"error": str(error)})
    if isinstance(error, AddressNotOwned):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail={"error": str(error)})
    if isinstance(error, DeliveryFeeLocked):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "delivery_fee_locked", "message": error.reason},
        )
    if isinstance(error, InvalidOrder):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "invalid_order", "message": str(error)},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"error": str(error)})


def _check_owner(order, current_user: User) -> None:
    if not current_user.is_staff and order.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied to this order")


@router.get("/sse")
async def order_events(broadcaster: Broadcaster = Depends(get_broadcaster)):
    """Server-sent order events for the kitchen, courier and customer screens"""
    channel = broadcaster.subscribe()
    return StreamingResponse(
        stream_channel(broadcaster, channel),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    current_user: User = Depends(require_staff),
    service: OrderService = Depends(get_order_service),
):
    """List all orders, newest first"""
    return await service.list_orders()


@router.get("/user/{user_id}", response_model=List[OrderResponse])
async def list_user_orders(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    """List a customer's orders"""
    if not current_user.is_staff and current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied to these orders")
    return await service.list_orders(user_id=user_id)


@router.get("/status/{order_status}", response_model=List[OrderResponse])
async def list_orders_by_status(
    order_status: OrderStatus,
    current_user: User = Depends(require_staff),
    service: OrderService = Depends(get_order_service),
):
    """List orders in one status (kitchen and courier queues)"""
    return await service.list_orders(status=order_status.value)


@router.get("/motoboy/{motoboy_id}", response_model=List[OrderResponse])
async def list_motoboy_orders(
    motoboy_id: UUID,
    current_user: User = Depends(require_staff),
    service: OrderService = Depends(get_order_service),
):
    """List orders assigned to a courier"""
    return await service.list_orders(motoboy_id=motoboy_id)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    """Get order details"""
    try:
        order = await service.get_order(order_id)
    except OrderError as e:
        raise order_error_to_http(e)

    _check_owner(order, current_user)
    return order


@router.get("/{order_id}/items", response_model=List[OrderItemResponse])
async def get_order_items(
    order_id: UUID,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    """Get the items snapshot of an order"""
    try:
        order = await service.get_order(order_id)
        _check_owner(order, current_user)
        return await service.get_items(order_id)
    except OrderError as e:
        raise order_error_to_http(e)


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(
    order_data: OrderCreate,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    """Create a new order from checkout or the point of sale"""
    if not current_user.is_staff:
        if order_data.status != OrderStatus.PENDING:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only staff can create accepted orders",
            )
        order_data.user_id = current_user.id
    elif order_data.status == OrderStatus.ACCEPTED and current_user.role not in (UserRole.PDV, UserRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only point-of-sale staff can create accepted orders",
        )

    try:
        customer_id = None if current_user.is_staff else current_user.id
        return await service.create_order(order_data, customer_id=customer_id)
    except DeliveryFeeUnresolved as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "delivery_unresolved", "message": e.message},
        )
    except OrderError as e:
        raise order_error_to_http(e)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    update: OrderStatusUpdate,
    current_user: User = Depends(require_staff),
    service: OrderService = Depends(get_order_service),
):
    """Move an order to a new status"""
    try:
        return await service.transition(order_id, update.status)
    except OrderError as e:
        raise order_error_to_http(e)


@router.patch("/{order_id}/assign", response_model=OrderResponse)
async def assign_order(
    order_id: UUID,
    assignment: OrderAssign,
    current_user: User = Depends(require_staff),
    service: OrderService = Depends(get_order_service),
):
    """Assign a courier to a ready order and dispatch it"""
    try:
        return await service.assign(order_id, assignment.motoboy_id)
    except OrderError as e:
        raise order_error_to_http(e)


@router.patch("/{order_id}/delivery-fee", response_model=OrderResponse)
async def correct_delivery_fee(
    order_id: UUID,
    update: DeliveryFeeUpdate,
    current_user: User = Depends(require_admin),
    service: OrderService = Depends(get_order_service),
):
    """Correct the delivery fee once, recomputing the total"""
    try:
        return await service.adjust_delivery_fee(order_id, update.delivery_fee)
    except OrderError as e:
        raise order_error_to_http(e)
