# booking_form/config.py

from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]

DEFAULT_TIME_SLOTS = [f"{hour:02d}:00" for hour in range(9, 18)]


class Settings(BaseSettings):
    # ===== Storage =====
    storage_backend: Literal["file", "kv", "sheets"] = "file"
    bookings_file: Path = BASE_DIR / "bookings" / "all-bookings.json"

    kv_url: Optional[str] = None
    kv_socket_timeout: float = 2.0

    apps_script_url: Optional[str] = None
    apps_script_timeout: float = 15.0

    # ===== Slot catalog =====
    catalog_file: Optional[Path] = None
    catalog_live_reload: bool = False
    time_slots: list[str] = DEFAULT_TIME_SLOTS
    booking_window_days: int = 30
    min_date: Optional[date] = None
    max_date: Optional[date] = None

    # ===== Booking rules =====
    min_age: int = 18
    max_age: int = 120
    require_education: bool = False
    require_native_speaker: bool = False
    max_total_bookings: Optional[int] = None

    # ===== Notifications =====
    notifiers: list[Literal["resend", "apps_script", "google_calendar"]] = []
    resend_api_key: Optional[str] = None
    resend_from: str = "Bookings <bookings@example.com>"
    notify_emails: list[str] = []
    site_name: str = "Appointments"
    event_location: str = ""
    timezone: str = "Europe/Warsaw"

    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""
    google_calendar_id: str = "primary"

    # ===== Server =====
    admin_token: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    @field_validator("catalog_file", "bookings_file")
    @classmethod
    def _resolve_relative(cls, value: Optional[Path]) -> Optional[Path]:
        # Relative paths are anchored at the project root, not the cwd
        if value is not None and not value.is_absolute():
            return BASE_DIR / value
        return value

    @field_validator("max_total_bookings")
    @classmethod
    def _non_positive_cap_is_unlimited(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            return None
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
