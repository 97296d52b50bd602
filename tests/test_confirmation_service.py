import pytest

from salonflow.application.services.confirmation_service import ConfirmationService, compose_confirmation
from salonflow.exceptions import DeliveryError, ValidationError

APPOINTMENTS = [
    {"serviceName": "Haircut", "date": "2025-03-07", "time": "14:00", "price": 1500},
    {"serviceName": "Hair Wash", "date": "2025-03-07", "time": "15:00", "price": 500},
]


class FakeSms:
    def __init__(self, configured=True, fail=False):
        self.configured = configured
        self.fail = fail
        self.sent = []

    def is_configured(self):
        return self.configured

    def send(self, phone, message):
        if self.fail:
            raise DeliveryError()
        self.sent.append((phone, message))


def test_compose_lists_appointments_and_total():
    message = compose_confirmation(APPOINTMENTS, 2000)
    assert "1. Haircut - Mar 7 at 2:00 PM" in message
    assert "2. Hair Wash - Mar 7 at 3:00 PM" in message
    assert "Total: Rs 2,000" in message
    assert message.endswith("We look forward to seeing you!")


def test_notify_sends_to_normalized_phone():
    sms = FakeSms()
    result = ConfirmationService(sms).notify("0771234567", APPOINTMENTS, 2000)
    assert result["success"] is True
    assert sms.sent[0][0] == "94771234567"


def test_unconfigured_gateway_reports_success_with_debug_message():
    result = ConfirmationService(FakeSms(configured=False), expose_debug_message=True).notify(
        "0771234567", APPOINTMENTS, 2000
    )
    assert result["success"] is True
    assert "Total: Rs 2,000" in result["debug_message"]


def test_unconfigured_gateway_hides_debug_message_in_production():
    result = ConfirmationService(FakeSms(configured=False)).notify("0771234567", APPOINTMENTS, 2000)
    assert "debug_message" not in result


def test_delivery_failure_is_returned_not_raised():
    result = ConfirmationService(FakeSms(fail=True)).notify("0771234567", APPOINTMENTS, 2000)
    assert result == {"success": False, "error": "Failed to send confirmation SMS"}


def test_missing_inputs_are_rejected():
    svc = ConfirmationService(FakeSms())
    with pytest.raises(ValidationError):
        svc.notify("", APPOINTMENTS, 2000)
    with pytest.raises(ValidationError):
        svc.notify("0771234567", [], 0)
