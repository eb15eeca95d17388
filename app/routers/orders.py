"""API routes for catering and on-demand delivery orders."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.exceptions import (
    DuplicateOrderError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    conflict_exception,
    forbidden_exception,
    not_found_exception,
)
from app.core.security import CurrentUser, get_current_user
from app.models.enums import OrderStatus
from app.schemas.order import (
    CateringRequestCreate,
    OnDemandRequestCreate,
    OrderCreated,
    OrderListResponse,
    OrderResponse,
    OrderUpdateRequest,
    OrderUpdateResponse,
)
from app.services.carrier_service import CarrierService, get_carrier_service
from app.services.order_service import (
    OrderService,
    OrderValidationError,
    get_order_service,
)
from app.utils.pagination import Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["orders"])


async def _create(create, payload, user: CurrentUser, kind: str):
    try:
        return await create(payload, user)
    except OrderValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except PermissionDeniedError as e:
        raise forbidden_exception(e.message)
    except DuplicateOrderError as e:
        raise conflict_exception(e.message)
    except IntegrityError as e:
        logger.warning(f"Integrity error creating {kind} request: {e}")
        raise conflict_exception("This order number already exists")
    except SQLAlchemyError as e:
        logger.error(f"Database error creating {kind} request: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to create {kind} request")


@router.post(
    "/catering-requests",
    response_model=OrderCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_catering_request(
    payload: CateringRequestCreate,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    """Create a catering order for the caller or, for admins, a client."""
    order = await _create(service.create_catering, payload, user, "catering")
    return OrderCreated(
        message="Catering request created successfully",
        order_id=order.id,
        order_number=order.order_number,
    )


@router.post(
    "/on-demand-requests",
    response_model=OrderCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_on_demand_request(
    payload: OnDemandRequestCreate,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    """Create an on-demand order."""
    order = await _create(service.create_on_demand, payload, user, "on-demand")
    return OrderCreated(
        message="On-demand request created successfully",
        order_id=order.id,
        order_number=order.order_number,
    )


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    status: OrderStatus | None = Query(default=None),
    search: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    pagination = Pagination(page=page, limit=limit)
    try:
        orders, total = await service.list_orders(user, pagination, status, search)
    except SQLAlchemyError as e:
        logger.error(f"Database error listing orders: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch orders")

    return OrderListResponse(
        orders=[OrderResponse.model_validate(order) for order in orders],
        total_count=total,
        total_pages=pagination.total_pages(total),
        current_page=pagination.page,
    )


@router.get("/orders/{order_number}", response_model=OrderResponse)
async def get_order(
    order_number: str,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    try:
        return await service.get_visible_order(order_number, user)
    except NotFoundError:
        raise not_found_exception("Order not found")
    except SQLAlchemyError as e:
        logger.error(f"Database error loading order {order_number}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch order")


@router.patch("/orders/{order_number}", response_model=OrderUpdateResponse)
async def update_order(
    order_number: str,
    payload: OrderUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
    carriers: CarrierService = Depends(get_carrier_service),
):
    """Update order and driver status, notifying the carrier when one owns the order."""
    if payload.status is None and payload.driver_status is None:
        raise HTTPException(status_code=400, detail="No update data provided")

    try:
        await service.get_visible_order(order_number, user)
        order = await service.update_status(
            order_number, payload.status, payload.driver_status
        )
    except NotFoundError:
        raise not_found_exception("Order not found")
    except InvalidTransitionError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except SQLAlchemyError as e:
        logger.error(f"Database error updating order {order_number}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update order")

    order_response = OrderResponse.model_validate(order)
    webhook_results = None
    match = carriers.carrier_for_order(order.order_number)
    if match is not None:
        carrier_id, carrier = match
        try:
            result = await carriers.send_status_webhook(carrier_id, carrier, order)
        except SQLAlchemyError as e:
            logger.error(f"Failed to log {carrier_id} webhook for {order_number}: {e}")
            result = None
        if result is not None:
            webhook_results = {carrier_id: result}

    return OrderUpdateResponse(
        order=order_response,
        webhook_results=webhook_results,
    )
