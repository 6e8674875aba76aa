"""Booking engine exceptions."""

from typing import Optional


class BookingEngineError(Exception):
    """Base exception for the booking engine."""

    error_type = "unknown"
    default_code: Optional[str] = None
    default_user_message: Optional[str] = None

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        error_code: Optional[str] = None,
        detail: Optional[str] = None,
        user_message: Optional[str] = None,
    ) -> None:
        self.detail = detail or message or self.__class__.__name__
        self.error_code = error_code or self.default_code
        self.user_message = user_message or self.default_user_message
        super().__init__(message or self.detail)


class ValidationError(BookingEngineError):
    """Raised when a checkout field or selection fails validation."""

    error_type = "validation"
    default_code = "validation_error"

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None, **kwargs) -> None:
        self.field = field
        super().__init__(message, **kwargs)


class InvalidStepError(ValidationError):
    """Raised when a checkout step is entered before its predecessors are complete."""

    default_code = "step_not_reachable"


class AvailabilityConflict(BookingEngineError):
    """Raised when the chosen date, slot or time is no longer free at commit."""

    error_type = "conflict"
    default_code = "no_longer_available"
    default_user_message = (
        "Someone else just booked this. Please choose different dates or another space."
    )


class ConfigurationGap(BookingEngineError):
    """Host configuration is missing something a resolver needs."""

    error_type = "configuration"
    default_code = "configuration_gap"


class PersistenceError(BookingEngineError):
    """Raised when the reservation store fails for a reason other than a conflict."""

    error_type = "persistence"
    default_code = "persistence_failed"
    default_user_message = "We couldn't save your booking. Please try again."


class PaymentHandoffError(BookingEngineError):
    """Raised when the payment collaborator fails after the reservation was stored."""

    error_type = "payment"
    default_code = "payment_handoff_failed"
    default_user_message = (
        "Your request was saved but payment could not be started. Please try again."
    )

    def __init__(self, message: Optional[str] = None, *, reservation_id: Optional[str] = None, **kwargs) -> None:
        self.reservation_id = reservation_id
        super().__init__(message, **kwargs)
