"""Admin routes reporting on carrier integrations."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import not_found_exception
from app.core.security import ADMIN_ROLES, CurrentUser, require_roles
from app.schemas.common import CamelModel
from app.services.carrier_service import CarrierService, get_carrier_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/carriers", tags=["admin", "carriers"])

require_admin = require_roles(*ADMIN_ROLES)


class WebhookMetricsRequest(CamelModel):
    hours: int = Field(default=24, ge=1, le=24 * 90)


@router.get("/{carrier_id}/stats")
async def get_carrier_stats(
    carrier_id: str,
    user: CurrentUser = Depends(require_admin),
    service: CarrierService = Depends(get_carrier_service),
):
    """Order volume, recent orders and webhook success rate for one carrier."""
    carrier = service.get_carrier(carrier_id)
    if carrier is None:
        raise not_found_exception("Carrier not found")

    try:
        return await service.get_stats(carrier, carrier_id.lower())
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching stats for carrier {carrier_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch carrier statistics")


@router.post("/{carrier_id}/stats")
async def get_carrier_webhook_metrics(
    carrier_id: str,
    payload: WebhookMetricsRequest | None = None,
    user: CurrentUser = Depends(require_admin),
    service: CarrierService = Depends(get_carrier_service),
):
    """Webhook delivery metrics for one carrier over the last ``hours``."""
    if service.get_carrier(carrier_id) is None:
        raise not_found_exception("Carrier not found")

    hours = payload.hours if payload else 24
    try:
        return await service.get_webhook_metrics(carrier_id.lower(), hours)
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching webhook metrics for {carrier_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch carrier statistics")
