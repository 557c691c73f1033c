"""Typed outcomes of booking operations.

Each error carries the user-facing message and the HTTP status the API layer
answers with. Anything that is not a ``BookingError`` is treated as an internal
failure.
"""


class BookingError(Exception):
    """Base class for expected, user-facing booking failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    status_code = 400


class NotFoundError(BookingError):
    status_code = 404


class ForbiddenError(BookingError):
    status_code = 403


class ConflictError(BookingError):
    status_code = 409


class AlreadyCancelledError(BookingError):
    status_code = 400


class AuthenticationError(BookingError):
    """Bad credentials or an unusable token."""

    status_code = 401
