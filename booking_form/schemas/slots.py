# booking_form/schemas/slots.py
"""
Pydantic schemas for the slots API.
"""

from pydantic import BaseModel, ConfigDict, Field


class AvailableSlotsResponse(BaseModel):
    """Slots for one day, split into available and booked."""
    date: str
    min_date: str = Field(alias="minDate")
    max_date: str = Field(alias="maxDate")
    configured_dates: list[str] = Field(alias="configuredDates")
    all_slots: list[str] = Field(alias="allSlots")
    available_slots: list[str] = Field(alias="availableSlots")
    booked_slots: list[str] = Field(alias="bookedSlots")

    model_config = ConfigDict(populate_by_name=True)
