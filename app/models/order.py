"""Catering and on-demand delivery order models."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.storage import Base, new_id, utc_now
from app.models.enums import CateringNeedHost, DriverStatus, OrderStatus, VehicleType
from app.models.profile import Address


class OrderMixin:
    """Columns shared by both order kinds."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    pickup_address_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("addresses.id"), nullable=False
    )
    delivery_address_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("addresses.id"), nullable=False
    )
    order_number: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )
    brokerage: Mapped[str | None] = mapped_column(String(100), nullable=True)

    pickup_date_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    arrival_date_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    complete_date_time: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )

    client_attention: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pickup_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    special_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, native_enum=False, length=20),
        default=OrderStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    driver_status: Mapped[DriverStatus | None] = mapped_column(
        Enum(DriverStatus, native_enum=False, length=30), nullable=True
    )
    order_total: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True
    )
    tip: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class CateringRequest(OrderMixin, Base):
    """Catering delivery order, optionally staffed with hosts."""

    __tablename__ = "catering_requests"

    headcount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    need_host: Mapped[CateringNeedHost] = mapped_column(
        Enum(CateringNeedHost, native_enum=False, length=5),
        default=CateringNeedHost.NO,
        nullable=False,
    )
    hours_needed: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    number_of_hosts: Mapped[int | None] = mapped_column(Integer, nullable=True)

    pickup_address: Mapped[Address] = relationship(
        foreign_keys="CateringRequest.pickup_address_id", lazy="selectin"
    )
    delivery_address: Mapped[Address] = relationship(
        foreign_keys="CateringRequest.delivery_address_id", lazy="selectin"
    )

    @property
    def order_type(self) -> str:
        return "catering"


class OnDemandRequest(OrderMixin, Base):
    """Ad-hoc courier delivery order."""

    __tablename__ = "on_demand_requests"

    item_delivered: Mapped[str | None] = mapped_column(String(255), nullable=True)
    vehicle_type: Mapped[VehicleType] = mapped_column(
        Enum(VehicleType, native_enum=False, length=10),
        default=VehicleType.CAR,
        nullable=False,
    )
    length: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    width: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    height: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    weight: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    pickup_address: Mapped[Address] = relationship(
        foreign_keys="OnDemandRequest.pickup_address_id", lazy="selectin"
    )
    delivery_address: Mapped[Address] = relationship(
        foreign_keys="OnDemandRequest.delivery_address_id", lazy="selectin"
    )

    @property
    def order_type(self) -> str:
        return "on_demand"
