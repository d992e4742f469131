"""
Booking confirmation emails.

A confirmed booking is handed to ``BookingNotificationService`` as a
``BookingNotification`` message after the payment state has been committed.
The service renders two Jinja2 templates (customer confirmation and the
operations alert) and delivers them through an ``EmailSender``. Delivery
problems are logged and reported as a ``NotificationStatus``; they never
propagate to the caller.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

import resend
from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.config import settings
from src.bookings.schemas import BookingNotification, NotificationStatus

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

class EmailSender(Protocol):
    def send(self, to: str, subject: str, html: str, text: Optional[str] = None) -> Dict: ...

class ResendEmailSender:
    """Delivers email through the Resend API"""

    def __init__(self, api_key: str, from_email: str):
        resend.api_key = api_key
        self.from_email = from_email

    def send(self, to: str, subject: str, html: str, text: Optional[str] = None) -> Dict:
        email_data = {
            "from": self.from_email,
            "to": to,
            "subject": subject,
            "html": html,
        }
        if text:
            email_data["text"] = text
        return resend.Emails.send(email_data)

class BookingNotificationService:
    """Renders and sends the customer confirmation and the operations alert"""

    def __init__(
        self,
        sender: Optional[EmailSender],
        admin_email: Optional[str] = None,
        enabled: bool = True
    ):
        self.sender = sender
        self.admin_email = admin_email
        self.enabled = enabled and sender is not None
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"])
        )

    def render(self, template_name: str, message: BookingNotification) -> str:
        template = self.env.get_template(template_name)
        return template.render(
            booking=message,
            kind_label=message.event_kind.value.capitalize(),
            brand_name="Infinity Trekkers"
        )

    def notify_booking_confirmed(self, message: BookingNotification) -> NotificationStatus:
        """Send both emails for a paid booking; never raises"""

        if not self.enabled:
            logger.info(f"Email notifications disabled; skipping booking {message.booking_id}")
            return NotificationStatus.NOT_ATTEMPTED

        outcomes = [
            self._deliver(
                to=message.customer_email,
                subject=f"Booking Confirmed - {message.event_name}",
                template_name="booking_confirmation.html",
                text=(
                    f"Payment successful for {message.event_name}. Booking ID: {message.booking_id}. "
                    f"Amount: Rs.{message.amount}. Start Date: {message.start_date:%a %b %d %Y}."
                ),
                message=message
            )
        ]

        if self.admin_email:
            outcomes.append(
                self._deliver(
                    to=self.admin_email,
                    subject=f"New Booking: {message.event_name} - {message.members_count} pax",
                    template_name="operations_alert.html",
                    text=(
                        f"New {message.payment_mode.value} booking: {message.customer_name} paid "
                        f"Rs.{message.amount} for {message.event_name} "
                        f"({message.members_count} members from {message.city})"
                    ),
                    message=message
                )
            )
        else:
            logger.warning("ADMIN_EMAIL not configured; operations alert not sent")
            outcomes.append(False)

        return NotificationStatus.SENT if all(outcomes) else NotificationStatus.FAILED

    def _deliver(
        self,
        to: str,
        subject: str,
        template_name: str,
        text: str,
        message: BookingNotification
    ) -> bool:
        try:
            html = self.render(template_name, message)
            self.sender.send(to=to, subject=subject, html=html, text=text)
        except Exception as e:
            logger.error(
                f"Failed to send '{template_name}' for booking {message.booking_id} to {to}: "
                f"{type(e).__name__}: {e}"
            )
            return False

        logger.info(f"Email sent to {to} for booking {message.booking_id} - Subject: {subject}")
        return True

def get_notification_service() -> BookingNotificationService:
    """FastAPI dependency building the notification service from settings"""
    sender = None
    if settings.EMAIL_ENABLED and settings.RESEND_API_KEY:
        sender = ResendEmailSender(settings.RESEND_API_KEY, settings.EMAIL_FROM)
    elif settings.EMAIL_ENABLED:
        logger.warning("RESEND_API_KEY not configured; booking emails will not be sent")

    return BookingNotificationService(
        sender=sender,
        admin_email=settings.ADMIN_EMAIL,
        enabled=settings.EMAIL_ENABLED
    )
