# booking_form/routers/calendar.py

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from ..config import Settings
from ..deps import get_app_settings, get_booking_service
from ..services.booking import BookingService
from ..services.ics import render_calendar

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calendar"])


@router.get("/calendar.ics")
async def export_calendar(
    service: BookingService = Depends(get_booking_service),
    settings: Settings = Depends(get_app_settings),
):
    """All active bookings as an iCalendar file."""
    records = await service.load_all()
    if not records:
        return JSONResponse(status_code=404, content={"error": "No bookings found"})

    try:
        body = render_calendar(
            records,
            tz_name=settings.timezone,
            site_name=settings.site_name,
            location=settings.event_location,
        )
    except (ValueError, TypeError):
        logger.exception("Failed to generate calendar export")
        return JSONResponse(status_code=500, content={"error": "Failed to generate calendar"})

    return Response(
        content=body,
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="bookings.ics"'},
    )
