from ...application.ports.sms_gateway import SmsGateway
from ...config import Settings
from .textlk_gateway import TextLkSmsGateway
from .twilio_gateway import TwilioSmsGateway


def build_sms_gateway(settings: Settings) -> SmsGateway:
    if settings.SMS_PROVIDER.lower() == "twilio":
        return TwilioSmsGateway()
    return TextLkSmsGateway()


__all__ = ["build_sms_gateway", "TextLkSmsGateway", "TwilioSmsGateway"]
