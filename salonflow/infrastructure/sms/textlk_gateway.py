from __future__ import annotations

import logging

import httpx

from ...application.ports.sms_gateway import SmsGateway
from ...config import settings
from ...exceptions import DeliveryError
from ...utils import hash_phone_number


class TextLkSmsGateway(SmsGateway):
    """text.lk HTTP API. Without an API token the gateway reports itself unconfigured."""

    def __init__(
        self,
        api_token: str | None = None,
        sender_id: str | None = None,
        api_url: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_token = api_token if api_token is not None else settings.TEXTLK_API_TOKEN
        self._sender_id = sender_id or settings.TEXTLK_SENDER_ID
        self._api_url = api_url or settings.TEXTLK_API_URL
        self._client = client or httpx.Client(timeout=settings.SMS_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

    def is_configured(self) -> bool:
        return bool(self._api_token)

    def send(self, phone: str, message: str) -> None:
        if not self.is_configured():
            raise DeliveryError("SMS gateway is not configured")
        headers = {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        payload = {
            "recipient": phone,
            "sender_id": self._sender_id,
            "type": "plain",
            "message": message,
        }
        try:
            response = self._client.post(self._api_url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._logger.error("text.lk API error", extra={"status": e.response.status_code, "body": e.response.text[:200]})
            raise DeliveryError() from e
        except httpx.HTTPError as e:
            self._logger.error("text.lk API unreachable", extra={"error": str(e)})
            raise DeliveryError() from e
        self._logger.info("SMS sent", extra={"phone_hash": hash_phone_number(phone)[:12]})
