# booking_form/main.py

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings
from .errors import BookingError
from .middleware.audit import audit_middleware
from .routers import admin, booking, calendar
from .services.booking import BookingService
from .services.notifications import NotificationDispatcher, Notifier, build_notifiers
from .services.slots import build_catalog
from .services.store import BookingStore, build_store
from .services.validator import BookingRules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    service: BookingService = app.state.booking_service
    service.dispatcher.start()
    logger.info(f"Booking form started (storage={service.store.name})")
    try:
        yield
    finally:
        await service.dispatcher.stop()
        service.store.close()


async def booking_error_handler(request: Request, exc: BookingError):
    request.state.booking_error = exc.message
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[BookingStore] = None,
    notifiers: Optional[list[Notifier]] = None,
    today: Callable[[], date] = date.today,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Booking Form API", lifespan=lifespan)

    app.state.settings = settings
    app.state.today = today
    app.state.catalog = build_catalog(settings, today=today)
    app.state.booking_service = BookingService(
        store=store if store is not None else build_store(settings),
        rules=BookingRules.from_settings(settings),
        dispatcher=NotificationDispatcher(
            notifiers if notifiers is not None else build_notifiers(settings)
        ),
    )

    app.middleware("http")(audit_middleware)

    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(booking.router)
    app.include_router(calendar.router)
    app.include_router(admin.router)

    return app


app = create_app()
