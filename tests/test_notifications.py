import logging
from datetime import datetime, timezone
from unittest.mock import Mock

import httpx
import pytest

from clinic_api.models.appointment import Appointment
from clinic_api.models.user import User
from clinic_api.services.notifications import (
    NotificationError,
    NotificationService,
    TextbeltSmsGateway,
    cancellation_message,
    confirmation_message,
    format_appointment_time,
)

LOGGER = "clinic_api.services.notifications"


def make_patient(phone="+15551234567"):
    return User(id="p1", full_name="Jane Doe", email="jane@clinic.com", phone=phone)


def make_appointment():
    return Appointment(
        id="a1",
        patient_id="p1",
        patient_name="Jane Doe",
        start_time=datetime(2024, 7, 1, 15, 4, tzinfo=timezone.utc),
        end_time=datetime(2024, 7, 1, 15, 34, tzinfo=timezone.utc),
        service="Root canal",
        status="Scheduled",
    )


def gateway_with(handler):
    return TextbeltSmsGateway(
        "https://sms.test/text", "key-123", client=httpx.Client(transport=httpx.MockTransport(handler))
    )


class TestMessages:

    @pytest.mark.parametrize("moment,expected", [
        (datetime(2024, 1, 2, 15, 4, tzinfo=timezone.utc), "Jan 2 at 3:04 PM"),
        (datetime(2024, 7, 1, 0, 30, tzinfo=timezone.utc), "Jul 1 at 12:30 AM"),
        (datetime(2024, 12, 25, 12, 0, tzinfo=timezone.utc), "Dec 25 at 12:00 PM"),
    ])
    def test_format_appointment_time(self, moment, expected):
        assert format_appointment_time(moment) == expected

    def test_confirmation_message(self):
        assert confirmation_message(make_patient(), make_appointment()) == (
            "Appointment Confirmed: Root canal with Jane Doe on Jul 1 at 3:04 PM."
        )

    def test_cancellation_message(self):
        assert cancellation_message(make_patient(), make_appointment()).startswith("Appointment Cancelled: Root canal")


class TestTextbeltGateway:

    def test_posts_phone_message_and_key(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = request.read()
            return httpx.Response(200, json={"success": True})

        gateway_with(handler).send("+15551234567", "hello")
        assert seen["url"] == "https://sms.test/text"
        assert b'"phone":"+15551234567"' in seen["body"].replace(b" ", b"")
        assert b'"key":"key-123"' in seen["body"].replace(b" ", b"")

    def test_reported_failure_raises(self):
        gateway = gateway_with(lambda request: httpx.Response(200, json={"success": False, "error": "Out of quota"}))
        with pytest.raises(NotificationError, match="Out of quota"):
            gateway.send("+15551234567", "hello")

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(NotificationError):
            gateway_with(handler).send("+15551234567", "hello")

    def test_non_json_response_raises(self):
        gateway = gateway_with(lambda request: httpx.Response(502, text="Bad Gateway"))
        with pytest.raises(NotificationError):
            gateway.send("+15551234567", "hello")


class TestNotificationService:

    def test_booked_dispatches_confirmation(self, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)
        gateway = Mock()
        service = NotificationService(gateway, max_workers=1)

        future = service.notify_appointment_booked(make_patient(), make_appointment())
        service.shutdown()

        assert future is not None
        gateway.send.assert_called_once_with(
            "+15551234567", "Appointment Confirmed: Root canal with Jane Doe on Jul 1 at 3:04 PM."
        )
        assert "Successfully sent SMS" in caplog.text

    def test_missing_phone_skips(self, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)
        gateway = Mock()
        service = NotificationService(gateway, max_workers=1)

        assert service.notify_appointment_cancelled(make_patient(phone=None), make_appointment()) is None
        service.shutdown()

        gateway.send.assert_not_called()
        assert "no phone number" in caplog.text

    def test_failure_is_logged_not_raised(self, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)
        gateway = Mock()
        gateway.send.side_effect = NotificationError("Out of quota")
        service = NotificationService(gateway, max_workers=1)

        service.dispatch("+15551234567", "hello")
        service.shutdown()

        assert "Failed to send SMS" in caplog.text
        assert "Out of quota" in caplog.text

    def test_dispatch_after_shutdown_does_not_raise(self, caplog):
        gateway = Mock()
        service = NotificationService(gateway, max_workers=1)
        service.shutdown()

        assert service.dispatch("+15551234567", "hello") is None
        gateway.send.assert_not_called()
        assert "Could not queue SMS" in caplog.text

    def test_shutdown_closes_gateway(self):
        gateway = Mock()
        NotificationService(gateway).shutdown()
        gateway.close.assert_called_once()
