"""Schemas for catering and on-demand orders."""

import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import Field

from app.models.enums import CateringNeedHost, DriverStatus, OrderStatus, VehicleType
from app.schemas.common import AddressResponse, CamelModel

OrderType = Literal["catering", "on_demand"]


class AddressRef(CamelModel):
    id: str | None = None


class AttachmentIn(CamelModel):
    """File already stored by the client and attached to the order."""

    file_name: str = Field(..., min_length=1, max_length=255)
    file_type: str = Field(..., min_length=1, max_length=100)
    file_size: int = Field(..., ge=0)
    file_url: str = Field(..., min_length=1, max_length=1000)


class OrderCreateBase(CamelModel):
    """Fields shared by both order forms.

    Presence of required fields is checked by the service so that a missing
    value is reported together with every other missing value.
    """

    order_number: str | None = Field(default=None, max_length=100)
    brokerage: str | None = Field(default=None, max_length=100)
    date: dt.date | None = None
    pickup_time: dt.time | None = None
    arrival_time: dt.time | None = None
    complete_time: dt.time | None = None
    client_attention: str | None = Field(default=None, max_length=255)
    pickup_notes: str | None = None
    special_notes: str | None = None
    order_total: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    tip: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    pickup_address: AddressRef | None = None
    delivery_address: AddressRef | None = None
    client_id: str | None = None
    attachments: list[AttachmentIn] = []


class CateringRequestCreate(OrderCreateBase):
    headcount: int | None = Field(default=None, ge=1)
    need_host: CateringNeedHost | None = None
    hours_needed: Decimal | None = Field(default=None, gt=0, max_digits=5, decimal_places=2)
    number_of_hosts: int | None = Field(default=None, ge=1)


class OnDemandRequestCreate(OrderCreateBase):
    item_delivered: str | None = Field(default=None, max_length=255)
    vehicle_type: VehicleType | None = None
    length: Decimal | None = Field(default=None, ge=0)
    width: Decimal | None = Field(default=None, ge=0)
    height: Decimal | None = Field(default=None, ge=0)
    weight: Decimal | None = Field(default=None, ge=0)


class OrderCreated(CamelModel):
    message: str
    order_id: str
    order_number: str


class OrderResponse(CamelModel):
    """Order of either kind; kind-specific fields are null for the other kind."""

    id: str
    order_type: OrderType
    order_number: str
    user_id: str
    status: OrderStatus
    driver_status: DriverStatus | None = None
    brokerage: str | None = None
    pickup_date_time: dt.datetime | None = None
    arrival_date_time: dt.datetime | None = None
    complete_date_time: dt.datetime | None = None
    client_attention: str | None = None
    pickup_notes: str | None = None
    special_notes: str | None = None
    order_total: float | None = None
    tip: float | None = None
    pickup_address: AddressResponse | None = None
    delivery_address: AddressResponse | None = None
    created_at: dt.datetime
    updated_at: dt.datetime

    headcount: int | None = None
    need_host: CateringNeedHost | None = None
    hours_needed: float | None = None
    number_of_hosts: int | None = None

    item_delivered: str | None = None
    vehicle_type: VehicleType | None = None
    length: float | None = None
    width: float | None = None
    height: float | None = None
    weight: float | None = None


class OrderListResponse(CamelModel):
    orders: list[OrderResponse]
    total_count: int
    total_pages: int
    current_page: int


class OrderUpdateRequest(CamelModel):
    status: OrderStatus | None = None
    driver_status: DriverStatus | None = None


class WebhookResult(CamelModel):
    success: bool
    error: str | None = None


class OrderUpdateResponse(CamelModel):
    order: OrderResponse
    webhook_results: dict[str, WebhookResult] | None = None
