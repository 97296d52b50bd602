import json

import httpx
import pytest
from twilio.base.exceptions import TwilioException

from salonflow.config import settings
from salonflow.exceptions import DeliveryError
from salonflow.infrastructure.sms import build_sms_gateway
from salonflow.infrastructure.sms.textlk_gateway import TextLkSmsGateway
from salonflow.infrastructure.sms.twilio_gateway import TwilioSmsGateway


def make_gateway(handler, api_token="token-123"):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return TextLkSmsGateway(
        api_token=api_token,
        sender_id="SalonFlow",
        api_url="https://sms.test/api/v3/sms/send",
        client=client,
    )


def test_send_posts_plain_message():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"status": "success"})

    make_gateway(handler).send("94771234567", "hello")

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://sms.test/api/v3/sms/send"
    assert request.headers["Authorization"] == "Bearer token-123"
    assert json.loads(request.content) == {
        "recipient": "94771234567",
        "sender_id": "SalonFlow",
        "type": "plain",
        "message": "hello",
    }


def test_provider_error_raises_delivery_error():
    gateway = make_gateway(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(DeliveryError):
        gateway.send("94771234567", "hello")


def test_network_error_raises_delivery_error():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(DeliveryError):
        make_gateway(handler).send("94771234567", "hello")


def test_without_token_gateway_is_unconfigured():
    calls = []
    gateway = make_gateway(lambda request: calls.append(request), api_token="")
    assert gateway.is_configured() is False
    with pytest.raises(DeliveryError):
        gateway.send("94771234567", "hello")
    assert calls == []


class FakeTwilioMessages:
    def __init__(self, error=None):
        self.error = error
        self.created = []

    def create(self, to, from_, body):
        if self.error:
            raise self.error
        self.created.append({"to": to, "from_": from_, "body": body})


class FakeTwilioClient:
    def __init__(self, error=None):
        self.messages = FakeTwilioMessages(error)


def test_twilio_gateway_sends_in_e164():
    client = FakeTwilioClient()
    gateway = TwilioSmsGateway(client=client, from_number="+15550000000")

    assert gateway.is_configured() is True
    gateway.send("94771234567", "hello")
    assert client.messages.created == [{"to": "+94771234567", "from_": "+15550000000", "body": "hello"}]


def test_twilio_failure_raises_delivery_error():
    gateway = TwilioSmsGateway(client=FakeTwilioClient(TwilioException("rejected")), from_number="+15550000000")
    with pytest.raises(DeliveryError):
        gateway.send("94771234567", "hello")


def test_provider_is_chosen_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "SMS_PROVIDER", "twilio")
    assert isinstance(build_sms_gateway(settings), TwilioSmsGateway)
    monkeypatch.setattr(settings, "SMS_PROVIDER", "textlk")
    assert isinstance(build_sms_gateway(settings), TextLkSmsGateway)
