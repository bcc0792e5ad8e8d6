"""Guest e-mails about bookings.

Sending is best effort: a failure is logged and reported as ``False`` but
never propagates into the request or job that triggered it.
"""
import logging

from oceanview.core.config import settings
from oceanview.schemas.booking import Booking
from oceanview.services.email_service import send_email
from oceanview.storage.base import Storage

logger = logging.getLogger(__name__)


def _link(path: str) -> str:
    base = (settings.CLIENT_BASE_URL or "").rstrip("/")
    return f"{base}{path}" if base else path


def booking_confirmation_body(booking: Booking, cruise_title: str, guest_name: str) -> str:
    return (
        f"Hello {guest_name},\n\n"
        f"Your booking {booking.booking_reference} for {cruise_title} is confirmed.\n"
        f"Departure: {booking.departure_date.isoformat()}\n"
        f"Return: {booking.return_date.isoformat()}\n"
        f"Guests: {booking.number_of_guests}\n"
        f"Cabin: {booking.cabin_type}\n"
        f"Total: {booking.total_price} {settings.DEFAULT_CURRENCY}\n\n"
        f"Manage your booking: {_link('/bookings/' + str(booking.id))}\n"
    )


def departure_reminder_body(booking: Booking, cruise_title: str, guest_name: str) -> str:
    return (
        f"Hello {guest_name},\n\n"
        f"{cruise_title} departs on {booking.departure_date.isoformat()}.\n"
        f"Booking reference: {booking.booking_reference}\n"
        "Please have your travel documents ready for check-in.\n"
    )


def _send_booking_email(storage: Storage, booking: Booking, subject: str, render) -> bool:
    if not settings.NOTIFICATIONS_ENABLED:
        return False
    user = storage.get_user(booking.user_id)
    if user is None:
        logger.warning("booking %s has no user %s; not notifying", booking.booking_reference, booking.user_id)
        return False
    cruise = storage.get_cruise(booking.cruise_id)
    cruise_title = cruise.title if cruise else "your cruise"
    guest_name = user.first_name or user.username
    try:
        send_email(user.email, subject, render(booking, cruise_title, guest_name))
    except Exception:
        logger.exception("failed to send '%s' for booking %s", subject, booking.booking_reference)
        return False
    storage.mark_notification_sent(booking.id)
    return True


def notify_booking_confirmed(storage: Storage, booking: Booking) -> bool:
    return _send_booking_email(
        storage, booking, f"Booking {booking.booking_reference} confirmed", booking_confirmation_body
    )


def send_departure_reminder(storage: Storage, booking: Booking) -> bool:
    return _send_booking_email(
        storage, booking, f"Your cruise departs soon ({booking.booking_reference})", departure_reminder_body
    )


def notify_password_reset(email: str, reset_link: str) -> bool:
    if not settings.NOTIFICATIONS_ENABLED:
        return False
    body = (
        "We received a request to reset your OceanView password.\n\n"
        f"Reset it here: {reset_link}\n\n"
        f"The link expires in {settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES} minutes.\n"
    )
    try:
        send_email(email, "Reset your OceanView password", body)
    except Exception:
        logger.exception("failed to send password reset e-mail")
        return False
    return True
