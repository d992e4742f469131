"""
Booking domain exceptions.

Services raise these; the application-level handler in ``src.main`` turns them
into the ``{"success": false, "message": ...}`` envelope the clients expect.
``details`` carries structured remediation data (available cities, paid
booking counts) that is merged into the response body.
"""

from typing import Any, Dict, List, Optional

from fastapi import status

class BookingError(Exception):
    """Base class for every error the booking core reports to a caller"""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Booking request failed"
    retryable: bool = False

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.code = self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        body = {"success": False, "message": self.message, "code": self.code}
        body.update(self.details)
        if self.retryable:
            body["retryable"] = True
        return body

# Validation
class MissingField(BookingError):
    def __init__(self, fields: List[str]):
        super().__init__(
            f"Missing required field(s): {', '.join(fields)}",
            {"missingFields": fields},
        )

class AmbiguousEventReference(BookingError):
    default_message = "Exactly one of trekId or tourId is required"

class InvalidPhone(BookingError):
    default_message = "Invalid phone number format (10 digits required)"

class InvalidMemberCount(BookingError):
    default_message = "Members count must be between 1 and 20"

class MissingVerificationData(BookingError):
    default_message = "Missing required payment verification data"

class InvalidStatusFilter(BookingError):
    default_message = "Invalid status filter"

# Reference
class EventNotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, kind: str):
        super().__init__(f"{kind.capitalize()} not found")

class BookingNotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Booking not found"

# Business rules
class EventInactive(BookingError):
    def __init__(self, kind: str, available_cities: List[str], message: Optional[str] = None):
        super().__init__(
            message or f"This {kind} is currently not available for booking",
            {"availableCities": available_cities},
        )

class NoPricingForCity(BookingError):
    def __init__(self, city: str, available_cities: List[str]):
        self.available_cities = available_cities
        super().__init__(
            f"No pricing available for {city}",
            {"availableCities": available_cities},
        )

class InvalidPriceCalculation(BookingError):
    def __init__(self, available_cities: List[str]):
        super().__init__("Invalid price calculation", {"availableCities": available_cities})

class EventStillActive(BookingError):
    def __init__(self, kind: str):
        super().__init__(f"Cannot delete bookings for active {kind}s. Deactivate {kind} first.")

class EventNotCompleted(BookingError):
    def __init__(self, kind: str):
        super().__init__(f"{kind.capitalize()} is not completed yet. Cannot delete bookings.")

class PaidBookingsExist(BookingError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, kind: str, paid_count: int):
        super().__init__(
            f"Cannot delete {kind} with paid bookings. Archive instead.",
            {"paidBookings": paid_count, "requiredPaidBookings": 0},
        )

class OrderMismatch(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Order id does not match this booking"

class GatewayRejected(BookingError):
    default_message = "Payment gateway validation failed"

# Security
class SignatureMismatch(BookingError):
    default_message = "Payment verification failed"

class AdminUnauthorized(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Unauthorized: Admin access only"

# Downstream
class GatewayUnavailable(BookingError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Payment gateway is unavailable, please retry"
    retryable = True
