import logging
from datetime import date, timedelta

from sqlalchemy.exc import OperationalError, ProgrammingError

from oceanview.core.config import settings
from oceanview.services.notification_service import send_departure_reminder
from oceanview.storage.base import Storage

logger = logging.getLogger(__name__)


def send_departure_reminders(storage: Storage | None = None, today: date | None = None) -> dict:
    """E-mail guests whose cruise departs within REMINDER_DAYS_BEFORE_DEPARTURE days.

    A booking already notified inside its reminder window is not e-mailed again.
    Run daily via Celery beat.
    """
    if not settings.NOTIFICATIONS_ENABLED:
        return {"skipped": True, "reason": "notifications_disabled"}
    if storage is None:
        # The worker is a separate process; it can only see bookings held in a database.
        if settings.STORAGE_BACKEND != "sql":
            return {"skipped": True, "reason": "memory_backend"}
        from oceanview.storage.factory import build_storage

        storage = build_storage(settings)

    today = today or storage.today()
    days = settings.REMINDER_DAYS_BEFORE_DEPARTURE
    try:
        due = storage.get_bookings_departing_between(today, today + timedelta(days=days))
    except (ProgrammingError, OperationalError):
        # DB not migrated yet; don't crash the worker.
        logger.warning("bookings table unavailable; skipping departure reminders")
        return {"skipped": True, "reason": "missing_tables"}

    sent, failed, already = 0, 0, 0
    for booking in due:
        window_start = booking.departure_date - timedelta(days=days)
        if booking.last_notification_sent and booking.last_notification_sent.date() >= window_start:
            already += 1
            continue
        if send_departure_reminder(storage, booking):
            sent += 1
        else:
            failed += 1
    logger.info("departure reminders: %d due, %d sent, %d failed", len(due), sent, failed)
    return {"due": len(due), "sent": sent, "failed": failed, "already_notified": already}
