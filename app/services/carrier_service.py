"""Carrier integrations: order statistics and status webhooks."""

import logging
import time
from datetime import timedelta
from typing import Any

import httpx
from fastapi import Depends
from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import CarrierConfig, settings
from app.core.storage import get_session, utc_now
from app.models.enums import ACTIVE_ORDER_STATUSES
from app.models.order import CateringRequest, OnDemandRequest
from app.models.webhook import WebhookLog
from app.schemas.order import WebhookResult

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 5
WEBHOOK_SUCCESS_WINDOW_DAYS = 30


class CarrierWebhookClient:
    """HTTP client posting order status updates to carrier endpoints."""

    def __init__(self, timeout: float | None = None):
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or settings.webhook_timeout_seconds),
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def post(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        return await self.client.post(url, json=payload)

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()


async def get_carrier_webhook_client():
    """FastAPI dependency for webhook client with proper cleanup."""
    client = CarrierWebhookClient()
    try:
        yield client
    finally:
        await client.close()


class CarrierService:
    """Resolves carriers from configuration and reports on their orders."""

    def __init__(
        self,
        session: AsyncSession,
        webhook_client: CarrierWebhookClient | None = None,
        carriers: dict[str, CarrierConfig] | None = None,
    ):
        self.session = session
        self.webhook_client = webhook_client
        self.carriers = carriers if carriers is not None else settings.carriers

    def get_carrier(self, carrier_id: str) -> CarrierConfig | None:
        return self.carriers.get(carrier_id.lower())

    def carrier_for_order(self, order_number: str) -> tuple[str, CarrierConfig] | None:
        """Find the carrier whose order-number prefix matches."""
        upper = order_number.upper()
        for carrier_id, carrier in self.carriers.items():
            if upper.startswith(carrier.order_prefix.upper()):
                return carrier_id, carrier
        return None

    async def get_stats(self, carrier: CarrierConfig, carrier_id: str) -> dict[str, Any]:
        """Order counts, recent orders and webhook success for a carrier.

        Catering and on-demand orders both count, since webhooks go out for
        either kind when the order number carries the carrier prefix.
        """
        # Runs first: its fallback path rolls the session back
        webhook_success = await self.webhook_success_rate(carrier_id)

        now = utc_now()
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        total_orders = active_orders = today_orders = 0
        recent_orders: list[dict[str, Any]] = []

        for model, order_type in (
            (CateringRequest, "catering"),
            (OnDemandRequest, "on_demand"),
        ):
            carrier_orders = (
                model.order_number.ilike(f"{carrier.order_prefix}%"),
                model.deleted_at.is_(None),
            )
            total, active, today = (
                await self.session.execute(
                    select(
                        func.count(),
                        func.sum(
                            case((model.status.in_(ACTIVE_ORDER_STATUSES), 1), else_=0)
                        ),
                        func.sum(case((model.created_at >= today_start, 1), else_=0)),
                    ).where(*carrier_orders)
                )
            ).one()
            total_orders += total or 0
            active_orders += active or 0
            today_orders += today or 0

            recent = await self.session.execute(
                select(
                    model.id,
                    model.order_number,
                    model.status,
                    model.order_total,
                    model.created_at,
                )
                .where(*carrier_orders)
                .order_by(model.created_at.desc())
                .limit(RECENT_ORDERS_LIMIT)
            )
            recent_orders.extend(
                {
                    "id": row.id,
                    "orderNumber": row.order_number,
                    "orderType": order_type,
                    "status": row.status.value,
                    "orderTotal": float(row.order_total or 0),
                    "createdAt": row.created_at,
                }
                for row in recent.all()
            )

        recent_orders.sort(key=lambda order: order["createdAt"], reverse=True)
        recent_orders = recent_orders[:RECENT_ORDERS_LIMIT]
        for order in recent_orders:
            order["createdAt"] = order["createdAt"].isoformat()

        return {
            "carrierId": carrier_id,
            "carrierName": carrier.name,
            "totalOrders": total_orders,
            "activeOrders": active_orders,
            "todayOrders": today_orders,
            "webhookSuccess": webhook_success,
            "recentOrders": recent_orders,
        }

    async def webhook_success_rate(self, carrier_id: str) -> float | None:
        """Percentage of successful webhook attempts over the last 30 days.

        None when no attempts were made; the configured fallback rate when the
        query fails.
        """
        since = utc_now() - timedelta(days=WEBHOOK_SUCCESS_WINDOW_DAYS)
        try:
            row = (
                await self.session.execute(
                    select(
                        func.count(),
                        func.sum(case((WebhookLog.success.is_(True), 1), else_=0)),
                    ).where(
                        WebhookLog.carrier_id == carrier_id,
                        WebhookLog.created_at >= since,
                    )
                )
            ).one()
        except SQLAlchemyError as e:
            logger.error(f"Webhook success query failed for {carrier_id}: {e}")
            await self.session.rollback()
            return settings.webhook_success_fallback_rate

        total, successful = row[0] or 0, row[1] or 0
        if total == 0:
            return None
        return round(successful / total * 100, 1)

    async def get_webhook_metrics(self, carrier_id: str, hours: int) -> dict[str, Any]:
        """Attempt counts and latency for webhooks sent in the last ``hours``."""
        since = utc_now() - timedelta(hours=hours)
        row = (
            await self.session.execute(
                select(
                    func.count(),
                    func.sum(case((WebhookLog.success.is_(True), 1), else_=0)),
                    func.avg(WebhookLog.latency_ms),
                ).where(
                    WebhookLog.carrier_id == carrier_id,
                    WebhookLog.created_at >= since,
                )
            )
        ).one()

        total, successful, avg_latency = row[0] or 0, row[1] or 0, row[2] or 0.0
        return {
            "carrierId": carrier_id,
            "periodHours": hours,
            "totalWebhooks": total,
            "successfulWebhooks": successful,
            "failedWebhooks": total - successful,
            "successRate": round(successful / total * 100, 1) if total else None,
            "averageLatency": round(float(avg_latency), 2),
        }

    async def send_status_webhook(
        self,
        carrier_id: str,
        carrier: CarrierConfig,
        order: CateringRequest | OnDemandRequest,
    ) -> WebhookResult:
        """Notify the carrier of an order status change and log the attempt."""
        if not carrier.webhook_url or self.webhook_client is None:
            return WebhookResult(success=False, error="Webhook not configured")

        payload = {
            "orderNumber": order.order_number,
            "status": order.status.value,
            "driverStatus": order.driver_status.value if order.driver_status else None,
            "updatedAt": utc_now().isoformat(),
        }

        started = time.perf_counter()
        status_code = None
        error = None
        try:
            response = await self.webhook_client.post(carrier.webhook_url, payload)
            status_code = response.status_code
            if response.is_error:
                error = f"HTTP {response.status_code}"
        except httpx.HTTPError as e:
            error = str(e) or e.__class__.__name__
        latency_ms = (time.perf_counter() - started) * 1000

        success = error is None
        self.session.add(
            WebhookLog(
                carrier_id=carrier_id,
                order_number=order.order_number,
                event="status_update",
                url=carrier.webhook_url,
                success=success,
                status_code=status_code,
                latency_ms=latency_ms,
                error=error,
            )
        )
        await self.session.commit()

        if success:
            logger.info(f"{carrier.name} webhook delivered for {order.order_number}")
        else:
            logger.warning(
                f"{carrier.name} webhook failed for {order.order_number}: {error}"
            )
        return WebhookResult(success=success, error=error)


def get_carrier_service(
    session: AsyncSession = Depends(get_session),
    webhook_client: CarrierWebhookClient = Depends(get_carrier_webhook_client),
) -> CarrierService:
    return CarrierService(session, webhook_client)
