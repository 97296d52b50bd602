import logging
from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from ...application.ports.sms_gateway import SmsGateway
from ...config import settings
from ...exceptions import DeliveryError

logger = logging.getLogger(__name__)


class TwilioSmsGateway(SmsGateway):
    def __init__(self, client: Optional[Client] = None, from_number: Optional[str] = None):
        self.from_number = from_number if from_number is not None else settings.TWILIO_PHONE_NUMBER
        self.client = client
        if self.client is None and settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN:
            http_client = TwilioHttpClient(timeout=settings.SMS_TIMEOUT_SECONDS, max_retries=3)
            self.client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN, http_client=http_client)

    def is_configured(self) -> bool:
        return self.client is not None and bool(self.from_number)

    def send(self, phone: str, message: str) -> None:
        if not self.is_configured():
            raise DeliveryError("SMS gateway is not configured")
        try:
            self.client.messages.create(to=f"+{phone}", from_=self.from_number, body=message)
        except TwilioException as e:
            logger.error(f"Twilio send failed: {e}")
            raise DeliveryError() from e
