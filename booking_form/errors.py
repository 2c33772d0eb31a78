# booking_form/errors.py
"""
Error taxonomy.

ValidationError and ConflictError are user-facing outcomes: the validator
returns them inside a Reject decision and the route layer renders them as
400 responses. StorageError covers backing-store failures (500).
NotificationError is only ever logged.
"""


class BookingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    status_code = 400


class ConflictError(BookingError):
    status_code = 400


class StorageError(BookingError):
    status_code = 500


class NotificationError(BookingError):
    pass
