# booking_form/routers/admin.py
"""
Operational endpoints.

GET  /health          - Liveness + active storage backend
POST /catalog/reload  - Rebuild the slot catalog from settings (admin token)
GET  /notifications/failures - Recent notification failures (admin token)
"""

import hmac
import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ..config import Settings
from ..deps import get_app_settings, get_booking_service
from ..services.booking import BookingService
from ..services.slots import build_catalog

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


def require_admin(
    x_admin_token: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> None:
    if not settings.admin_token:
        raise HTTPException(status_code=404)
    if not x_admin_token or not hmac.compare_digest(x_admin_token, settings.admin_token):
        raise HTTPException(status_code=403)


@router.get("/health")
async def health(service: BookingService = Depends(get_booking_service)):
    return {"status": "ok", "storage": service.store.name}


@router.post("/catalog/reload", dependencies=[Depends(require_admin)])
async def reload_catalog(request: Request, settings: Settings = Depends(get_app_settings)):
    catalog = build_catalog(settings, today=request.app.state.today)
    request.app.state.catalog = catalog

    min_date, max_date = catalog.bounds()
    logger.info(f"Slot catalog reloaded: {min_date} → {max_date}")

    return {
        "status": "reloaded",
        "minDate": min_date.isoformat(),
        "maxDate": max_date.isoformat(),
        "configuredDates": len(catalog.days_configured()),
    }


@router.get("/notifications/failures", dependencies=[Depends(require_admin)])
async def notification_failures(service: BookingService = Depends(get_booking_service)):
    return [asdict(f) for f in service.dispatcher.failures]
