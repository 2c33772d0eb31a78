# booking_form/routers/booking.py
"""
Public booking form API.

GET  /available-slots  - Slots for one day, split into available and booked
POST /book             - Create or replace (same email) a booking
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from ..deps import get_booking_service, get_catalog
from ..errors import ValidationError
from ..schemas.bookings import BookingResponse
from ..schemas.slots import AvailableSlotsResponse
from ..services.booking import BookingService
from ..services.slots import SlotCatalog

logger = logging.getLogger(__name__)

router = APIRouter(tags=["booking"])


@router.get("/available-slots", response_model=AvailableSlotsResponse, response_model_by_alias=True)
async def get_available_slots(
    date: Optional[str] = None,
    catalog: SlotCatalog = Depends(get_catalog),
    service: BookingService = Depends(get_booking_service),
):
    """Available and booked slots for a date (defaults to the first bookable day)."""
    result = await service.day_slots(catalog, date)
    min_date, max_date = result.bounds

    return AvailableSlotsResponse(
        date=result.day.isoformat(),
        min_date=min_date.isoformat(),
        max_date=max_date.isoformat(),
        configured_dates=[d.isoformat() for d in result.configured_dates],
        all_slots=result.all_slots,
        available_slots=result.available_slots,
        booked_slots=result.booked_slots,
    )


@router.post("/book", response_model=BookingResponse, response_model_by_alias=True)
async def create_booking(
    request: Request,
    catalog: SlotCatalog = Depends(get_catalog),
    service: BookingService = Depends(get_booking_service),
):
    """
    Book a slot.

    A booking under an email that already holds one replaces it,
    wherever the earlier slot was.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid request body")
    if not isinstance(body, dict):
        raise ValidationError("Invalid request body")

    logger.info(f"Booking request for {body.get('date')} {body.get('timeSlot')}")

    decision = await service.book(body, catalog)
    request.state.booking_id = decision.record.id
    if decision.replaced is not None:
        request.state.replaced_booking_id = decision.replaced.id

    return BookingResponse(
        message="Booking updated" if decision.replaced else "Booking confirmed",
        booking=decision.record.to_json(),
        replaced_existing_booking=decision.replaced is not None,
    )
