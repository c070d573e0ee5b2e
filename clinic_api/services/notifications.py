"""SMS notifications for appointment changes.

Delivery is fire-and-forget: messages are handed to a small thread pool and
the request that triggered them returns immediately. Outcomes are only ever
logged. There is no retry queue; a failed message is dropped.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional
import logging

import httpx

from ..core.config import settings
from ..models.appointment import Appointment
from ..models.user import User

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised by a gateway when a message could not be delivered."""


class TextbeltSmsGateway:
    """Sends SMS through the Textbelt HTTP API."""

    def __init__(
        self,
        url: str,
        api_key: Optional[str],
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.url = url
        self.api_key = api_key
        self._client = client or httpx.Client(timeout=timeout)

    def send(self, phone: str, message: str) -> None:
        payload = {"phone": phone, "message": message, "key": self.api_key or ""}
        try:
            response = self._client.post(self.url, json=payload)
            result = response.json()
        except httpx.HTTPError as exc:
            raise NotificationError(f"Textbelt request failed: {exc}") from exc
        except ValueError as exc:
            raise NotificationError("Textbelt returned a non-JSON response") from exc

        if not result.get("success"):
            raise NotificationError(result.get("error") or "Textbelt reported failure")

    def close(self) -> None:
        self._client.close()


def format_appointment_time(moment: datetime) -> str:
    """e.g. ``Jul 1 at 8:00 AM`` (UTC)."""
    moment = moment.astimezone(timezone.utc)
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment:%b} {moment.day} at {hour}:{moment:%M} {meridiem}"


def confirmation_message(patient: User, appointment: Appointment) -> str:
    return (
        f"Appointment Confirmed: {appointment.service} with {patient.full_name} "
        f"on {format_appointment_time(appointment.start_time)}."
    )


def cancellation_message(patient: User, appointment: Appointment) -> str:
    return (
        f"Appointment Cancelled: {appointment.service} with {patient.full_name} "
        f"on {format_appointment_time(appointment.start_time)}."
    )


class NotificationService:
    def __init__(self, gateway, max_workers: int = 4):
        self.gateway = gateway
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sms")

    def notify_appointment_booked(self, patient: User, appointment: Appointment) -> Optional[Future]:
        return self._notify(patient, confirmation_message(patient, appointment))

    def notify_appointment_cancelled(self, patient: User, appointment: Appointment) -> Optional[Future]:
        return self._notify(patient, cancellation_message(patient, appointment))

    def _notify(self, patient: User, message: str) -> Optional[Future]:
        if not patient.phone:
            logger.info("SMS not sent: patient %s has no phone number.", patient.id)
            return None
        return self.dispatch(patient.phone, message)

    def dispatch(self, phone: str, message: str) -> Optional[Future]:
        """Queue a message for delivery without waiting for it. Never raises."""
        try:
            future = self._executor.submit(self.gateway.send, phone, message)
        except Exception:
            logger.exception("Could not queue SMS for %s", phone)
            return None

        future.add_done_callback(lambda f: self._log_outcome(f, phone))
        return future

    @staticmethod
    def _log_outcome(future: Future, phone: str) -> None:
        if future.cancelled():
            logger.warning("SMS to %s was cancelled before delivery", phone)
            return
        error = future.exception()
        if error is not None:
            logger.error("Failed to send SMS to %s. Reason: %s", phone, error)
        else:
            logger.info("Successfully sent SMS to %s", phone)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
        close = getattr(self.gateway, "close", None)
        if callable(close):
            close()


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    """Process-wide notification service."""
    gateway = TextbeltSmsGateway(
        settings.TEXTBELT_URL,
        settings.TEXTBELT_API_KEY,
        timeout=settings.SMS_TIMEOUT_SECONDS,
    )
    return NotificationService(gateway, max_workers=settings.NOTIFICATION_WORKERS)
