# booking_form/schemas/bookings.py

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BookingRecord(BaseModel):
    """A persisted booking. Serialized with camelCase keys."""

    id: str
    date: Optional[str] = None  # YYYY-MM-DD; may be missing on legacy records
    time_slot: str = Field(alias="timeSlot")  # HH:MM
    name: str
    email: str
    gender: str
    age: int
    education: Optional[str] = None
    native_polish_speaker: Optional[bool] = Field(None, alias="nativePolishSpeaker")
    timestamp: Optional[str] = None

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class BookingResponse(BaseModel):
    success: bool = True
    message: str
    booking: dict
    replaced_existing_booking: bool = Field(alias="replacedExistingBooking")

    model_config = ConfigDict(populate_by_name=True)
