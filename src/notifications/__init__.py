"""
Outbound notifications for confirmed bookings (customer confirmation and
operations alert emails).
"""

from .service import (
    BookingNotificationService, ResendEmailSender, EmailSender, get_notification_service
)

__all__ = [
    "BookingNotificationService",
    "ResendEmailSender",
    "EmailSender",
    "get_notification_service"
]
