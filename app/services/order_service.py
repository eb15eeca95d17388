"""Creation, lookup and lifecycle updates of delivery orders."""

import logging
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    ApplicationError,
    DuplicateOrderError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from app.core.security import CurrentUser
from app.core.storage import get_session, utc_now
from app.models.enums import (
    TERMINAL_ORDER_STATUSES,
    CateringNeedHost,
    DriverStatus,
    OrderStatus,
)
from app.models.file_upload import FileUpload
from app.models.order import CateringRequest, OnDemandRequest
from app.models.profile import Address, Profile
from app.schemas.order import (
    CateringRequestCreate,
    OnDemandRequestCreate,
    OrderCreateBase,
)
from app.utils.pagination import Pagination
from app.utils.validators import validate_required_fields

logger = logging.getLogger(__name__)

Order = CateringRequest | OnDemandRequest

BASE_REQUIRED_FIELDS = [
    "orderNumber",
    "date",
    "pickupTime",
    "arrivalTime",
    "clientAttention",
    "orderTotal",
    "pickupAddress.id",
    "deliveryAddress.id",
]
CATERING_REQUIRED_FIELDS = [
    "orderNumber",
    "brokerage",
    "date",
    "pickupTime",
    "arrivalTime",
    "headcount",
    "needHost",
    "clientAttention",
    "orderTotal",
    "pickupAddress.id",
    "deliveryAddress.id",
]
HOST_REQUIRED_FIELDS = ["hoursNeeded", "numberOfHosts"]
ON_DEMAND_REQUIRED_FIELDS = BASE_REQUIRED_FIELDS + ["itemDelivered", "vehicleType"]


class OrderValidationError(ApplicationError):
    """Raised when an order payload is incomplete or references missing data."""


def to_utc(day: date, local_time: time, tz_name: str | None = None) -> datetime:
    """Combine a local date and time and convert to naive UTC."""
    local = datetime.combine(day, local_time).replace(
        tzinfo=ZoneInfo(tz_name or settings.app_timezone)
    )
    return local.astimezone(ZoneInfo("UTC")).replace(tzinfo=None)


class OrderService:
    """Service for catering and on-demand orders."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_catering(
        self, request: CateringRequestCreate, user: CurrentUser
    ) -> CateringRequest:
        """Validate and store a catering order."""
        payload = request.model_dump(by_alias=True)
        required = list(CATERING_REQUIRED_FIELDS)
        if request.need_host == CateringNeedHost.YES:
            required += HOST_REQUIRED_FIELDS
        self._check_required(payload, required)

        order = CateringRequest(
            headcount=request.headcount,
            need_host=request.need_host,
            hours_needed=request.hours_needed
            if request.need_host == CateringNeedHost.YES
            else None,
            number_of_hosts=request.number_of_hosts
            if request.need_host == CateringNeedHost.YES
            else None,
        )
        await self._populate_common(order, request, user)
        return await self._save(order, request, category="catering")

    async def create_on_demand(
        self, request: OnDemandRequestCreate, user: CurrentUser
    ) -> OnDemandRequest:
        """Validate and store an on-demand order."""
        self._check_required(
            request.model_dump(by_alias=True), ON_DEMAND_REQUIRED_FIELDS
        )

        order = OnDemandRequest(
            item_delivered=request.item_delivered,
            vehicle_type=request.vehicle_type,
            length=request.length,
            width=request.width,
            height=request.height,
            weight=request.weight,
        )
        await self._populate_common(order, request, user)
        return await self._save(order, request, category="on_demand")

    @staticmethod
    def _check_required(payload: dict, fields: list[str]) -> None:
        result = validate_required_fields(payload, fields)
        if not result.is_valid:
            raise OrderValidationError(result.error)

    async def _populate_common(
        self, order: Order, request: OrderCreateBase, user: CurrentUser
    ) -> None:
        order_number = request.order_number.strip()
        if await self._order_number_taken(order_number):
            raise DuplicateOrderError(order_number)

        order.user_id = await self._resolve_owner(request.client_id, user)
        order.pickup_address_id = await self._require_address(
            request.pickup_address.id, "Pickup"
        )
        order.delivery_address_id = await self._require_address(
            request.delivery_address.id, "Delivery"
        )
        order.order_number = order_number
        order.brokerage = request.brokerage
        order.pickup_date_time = to_utc(request.date, request.pickup_time)
        order.arrival_date_time = to_utc(request.date, request.arrival_time)
        if request.complete_time:
            order.complete_date_time = to_utc(request.date, request.complete_time)
        order.client_attention = request.client_attention
        order.pickup_notes = request.pickup_notes
        order.special_notes = request.special_notes
        order.order_total = request.order_total
        order.tip = request.tip
        order.status = OrderStatus.ACTIVE

    async def _order_number_taken(self, order_number: str) -> bool:
        lowered = order_number.lower()
        for model in (CateringRequest, OnDemandRequest):
            existing = await self.session.scalar(
                select(model.id).where(func.lower(model.order_number) == lowered)
            )
            if existing:
                return True
        return False

    async def _resolve_owner(self, client_id: str | None, user: CurrentUser) -> str:
        """Orders belong to the caller unless an admin places one for a client."""
        if not client_id or client_id == user.id:
            return user.id
        if not user.is_admin:
            raise PermissionDeniedError("Forbidden: Cannot create orders for another client")
        client = await self.session.get(Profile, client_id)
        if client is None or client.is_deleted:
            raise OrderValidationError(f"Client with ID {client_id} not found")
        return client.id

    async def _require_address(self, address_id: str, label: str) -> str:
        address = await self.session.get(Address, address_id)
        if address is None or address.deleted_at is not None:
            raise OrderValidationError(f"{label} address with ID {address_id} not found")
        return address.id

    async def _save(self, order: Order, request: OrderCreateBase, category: str) -> Order:
        self.session.add(order)
        await self.session.flush()

        for attachment in request.attachments:
            upload = FileUpload(
                user_id=order.user_id,
                file_name=attachment.file_name,
                file_type=attachment.file_type,
                file_size=attachment.file_size,
                file_url=attachment.file_url,
                category=category,
                is_temporary=False,
            )
            if isinstance(order, CateringRequest):
                upload.catering_request_id = order.id
            else:
                upload.on_demand_id = order.id
            self.session.add(upload)

        await self.session.commit()
        logger.info(
            f"Created {order.order_type} order {order.order_number} for user {order.user_id}"
            f" with {len(request.attachments)} attachments"
        )
        return order

    async def list_orders(
        self,
        user: CurrentUser,
        pagination: Pagination,
        status: OrderStatus | None = None,
        search: str | None = None,
    ) -> tuple[list[Order], int]:
        """Merge both order kinds, newest first; non-admins see their own only."""
        window = pagination.skip + pagination.take
        orders: list[Order] = []
        total = 0

        for model in (CateringRequest, OnDemandRequest):
            conditions = [model.deleted_at.is_(None)]
            if not user.is_admin:
                conditions.append(model.user_id == user.id)
            if status:
                conditions.append(model.status == status)
            if search and search.strip():
                conditions.append(model.order_number.ilike(f"%{search.strip()}%"))

            total += await self.session.scalar(
                select(func.count()).select_from(model).where(*conditions)
            ) or 0
            result = await self.session.execute(
                select(model)
                .where(*conditions)
                .order_by(model.created_at.desc())
                .limit(window)
            )
            orders.extend(result.scalars().all())

        orders.sort(key=lambda order: order.created_at, reverse=True)
        return orders[pagination.skip : window], total

    async def get_by_order_number(self, order_number: str) -> Order:
        """Case-insensitive lookup, catering orders first."""
        lowered = order_number.strip().lower()
        for model in (CateringRequest, OnDemandRequest):
            result = await self.session.execute(
                select(model).where(
                    func.lower(model.order_number) == lowered,
                    model.deleted_at.is_(None),
                )
            )
            order = result.scalar_one_or_none()
            if order is not None:
                return order
        raise NotFoundError("Order", order_number)

    async def get_visible_order(self, order_number: str, user: CurrentUser) -> Order:
        """Lookup that hides other users' orders from non-admin callers."""
        order = await self.get_by_order_number(order_number)
        if not user.is_admin and order.user_id != user.id:
            raise NotFoundError("Order", order_number)
        return order

    async def update_status(
        self,
        order_number: str,
        status: OrderStatus | None = None,
        driver_status: DriverStatus | None = None,
    ) -> Order:
        """Apply a status and/or driver status change to an order."""
        order = await self.get_by_order_number(order_number)

        if status is not None and status != order.status:
            if order.status in TERMINAL_ORDER_STATUSES:
                raise InvalidTransitionError(order.status.value, status.value)
            order.status = status
            if status == OrderStatus.COMPLETED:
                order.complete_date_time = utc_now()

        if driver_status is not None:
            order.driver_status = driver_status
            if driver_status == DriverStatus.COMPLETED and order.complete_date_time is None:
                order.complete_date_time = utc_now()

        await self.session.commit()
        logger.info(
            f"Order {order.order_number} updated: status={order.status.value}, "
            f"driver_status={order.driver_status.value if order.driver_status else None}"
        )
        return order


def get_order_service(session: AsyncSession = Depends(get_session)) -> OrderService:
    return OrderService(session)
