# booking_form/deps.py

from fastapi import Request

from .config import Settings
from .services.booking import BookingService
from .services.slots import SlotCatalog


def get_catalog(request: Request) -> SlotCatalog:
    # Read per request: /catalog/reload swaps app.state.catalog
    return request.app.state.catalog


def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
