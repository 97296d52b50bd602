from typing import Protocol


class SmsGateway(Protocol):
    def is_configured(self) -> bool:
        ...

    def send(self, phone: str, message: str) -> None:
        """Deliver ``message`` to the normalized ``phone``; raises DeliveryError."""
        ...
