# booking_form/services/notifications/base.py

from abc import ABC, abstractmethod
from typing import Optional

from ...schemas.bookings import BookingRecord


class Notifier(ABC):
    """Side channel for accepted bookings. notify() raises on failure."""

    name = "notifier"

    @abstractmethod
    def notify(self, record: BookingRecord, replaced: Optional[BookingRecord] = None) -> None:
        ...

    def close(self) -> None:
        pass
