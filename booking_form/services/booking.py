# booking_form/services/booking.py
"""
Booking service: load → evaluate → commit → queue notification.

The load/evaluate/commit cycle is serialized by an asyncio.Lock, so two
requests handled by the same process cannot both pass the slot check.
Separate processes or instances sharing one backing store are not
coordinated; the last write wins there.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..errors import StorageError, ValidationError
from ..schemas.bookings import BookingRecord
from .notifications import NotificationDispatcher
from .slots import SlotCatalog, parse_date
from .store import BookingStore
from .validator import MSG_DATE, Accept, BookingRules, Reject, evaluate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DaySlots:
    day: date
    bounds: tuple[date, date]
    configured_dates: list[date]
    all_slots: list[str]
    available_slots: list[str]
    booked_slots: list[str]


class BookingService:

    def __init__(
        self,
        store: BookingStore,
        rules: BookingRules,
        dispatcher: NotificationDispatcher,
    ):
        self.store = store
        self.rules = rules
        self.dispatcher = dispatcher
        self._lock = asyncio.Lock()

    async def load_all(self) -> list[BookingRecord]:
        try:
            return await asyncio.to_thread(self.store.load_all)
        except StorageError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error loading bookings from {self.store.name} store")
            raise StorageError(f"Failed to load bookings: {e}") from e

    async def day_slots(self, catalog: SlotCatalog, requested: Optional[str]) -> DaySlots:
        """
        Slots for a day. Omitted or malformed dates fall back to the first
        bookable day; a well-formed date outside the catalog is rejected.
        """
        bounds = catalog.bounds()
        day = parse_date(requested) if requested else None
        if day is None:
            day = bounds[0]
        elif not catalog.is_configured_date(day):
            raise ValidationError(MSG_DATE)

        records = await self.load_all()
        iso_day = day.isoformat()
        booked = [r.time_slot for r in records if r.date == iso_day]
        all_slots = catalog.slots_for(day)

        return DaySlots(
            day=day,
            bounds=bounds,
            configured_dates=catalog.days_configured(),
            all_slots=all_slots,
            available_slots=[s for s in all_slots if s not in booked],
            booked_slots=booked,
        )

    async def book(self, submission: dict, catalog: SlotCatalog) -> Accept:
        """
        Run one booking through validation and persistence.

        Raises:
            ValidationError / ConflictError: submission rejected
            StorageError: store read or write failed
        """
        async with self._lock:
            existing = await self.load_all()
            decision = evaluate(submission, existing, catalog, self.rules)

            if isinstance(decision, Reject):
                logger.info(f"Booking rejected: {decision.reason}")
                raise decision.error

            try:
                await asyncio.to_thread(
                    self.store.commit, existing, decision.record, decision.replaced
                )
            except StorageError:
                logger.exception(
                    f"Failed to save booking {decision.record.id} to {self.store.name} store"
                )
                raise
            except Exception as e:
                logger.exception(
                    f"Unexpected error saving booking {decision.record.id} to {self.store.name} store"
                )
                raise StorageError(f"Failed to save booking: {e}") from e

        if decision.replaced is not None:
            logger.info(f"Booking {decision.replaced.id} replaced by {decision.record.id}")
        else:
            logger.info(f"Booking confirmed: {decision.record.id}")

        self.dispatcher.enqueue(decision.record, decision.replaced)
        return decision
