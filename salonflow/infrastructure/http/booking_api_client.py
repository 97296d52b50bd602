from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from ...application.ports.booking_gateway import BookedAppointment, BookingGateway, BookingRequest, ConfirmationGateway
from ...application.ports.catalog_repo import ServiceDto, StylistDto
from ...application.ports.identity_provider import AuthSession
from ...application.ports.session_store import SessionStore
from ...application.services.availability_service import ConsolidatedSlot, TimeSlot
from ...exceptions import DeliveryError, PersistenceError, error_for_status

SESSION_KEY = "salonflow_session"


def _is_available(value: Any) -> bool:
    """Slot flags arrive as booleans, strings or integers depending on the backend."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


class BookingApiClient(BookingGateway, ConfirmationGateway):
    """Async client for the booking backend used by the cart checkout.

    The verified session is kept in ``session_store`` under ``SESSION_KEY`` so
    it survives restarts of the calling process.
    """

    def __init__(
        self,
        base_url: str,
        session_store: SessionStore,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._session_store = session_store
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BookingApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            self._logger.error("Booking backend unreachable", extra={"path": path, "error": str(e)})
            raise PersistenceError("Booking service is unavailable. Please try again.") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        if response.status_code >= 400 or data.get("success") is False:
            self._logger.warning("Booking backend rejected request", extra={"path": path, "status": response.status_code})
            raise error_for_status(response.status_code, data.get("error"), data.get("code"))
        return data

    # ---- phone verification --------------------------------------------

    async def send_otp(self, phone: str) -> Dict[str, Any]:
        return await self._request("POST", "/otp/send", json={"phone": phone})

    async def verify_otp(self, phone: str, otp: str) -> AuthSession:
        data = await self._request("POST", "/otp/verify", json={"phone": phone, "otp": otp})
        return self._store_session(data)

    async def retry_session(self, phone: str, otp: str) -> AuthSession:
        """Ask for a session again after verification succeeded but session creation failed."""
        data = await self._request("POST", "/otp/session", json={"phone": phone, "otp": otp})
        return self._store_session(data)

    def _store_session(self, data: Dict[str, Any]) -> AuthSession:
        try:
            session = AuthSession.from_dict(data["session"])
        except (KeyError, TypeError, ValueError) as e:
            raise error_for_status(500, "Failed to create session", "SessionError") from e
        self._session_store.save(SESSION_KEY, session.to_dict())
        return session

    def current_session(self) -> Optional[AuthSession]:
        """The stored session, or None when it is missing, unreadable or expired."""
        raw = self._session_store.load(SESSION_KEY)
        if raw is None:
            return None
        try:
            session = AuthSession.from_dict(raw)
        except (KeyError, TypeError, ValueError):
            self._logger.warning("Discarding unreadable stored session")
            self._session_store.delete(SESSION_KEY)
            return None
        if session.expires_at <= self._clock():
            self._session_store.delete(SESSION_KEY)
            return None
        return session

    def logout(self) -> None:
        self._session_store.delete(SESSION_KEY)

    # ---- catalog and availability --------------------------------------

    async def fetch_services(self, category: Optional[str] = None, gender: Optional[str] = None) -> List[ServiceDto]:
        data = await self._request("GET", "/public/services", params={"category": category, "gender": gender})
        return [
            ServiceDto(
                id=str(s["id"]),
                name=s["name"],
                category=s.get("category", ""),
                price=float(s.get("price", 0)),
                duration=int(s.get("duration", 0)),
                gender=s.get("gender"),
                description=s.get("description"),
            )
            for s in data.get("data", [])
        ]

    async def fetch_stylists(self, service_id: str, date: Optional[str] = None) -> List[StylistDto]:
        data = await self._request("GET", "/public/stylists", params={"service_id": service_id, "date": date})
        return [
            StylistDto(
                id=str(s["id"]),
                name=s["name"],
                specializations=list(s.get("specializations") or []),
                working_days=list(s.get("working_days") or []),
                working_hours=s.get("working_hours"),
            )
            for s in data.get("data", [])
        ]

    async def fetch_slots(self, stylist_id: str, date: str, duration: int) -> List[TimeSlot]:
        data = await self._request(
            "GET", "/public/availability", params={"stylist_id": stylist_id, "date": date, "duration": duration}
        )
        return [
            TimeSlot(time=s["time"], available=_is_available(s.get("available")), reason=s.get("reason"))
            for s in data.get("data", [])
        ]

    async def fetch_consolidated_slots(self, service_id: str, date: str, duration: Optional[int] = None) -> List[ConsolidatedSlot]:
        data = await self._request(
            "GET",
            "/public/consolidated-availability",
            params={"service_id": service_id, "date": date, "duration": duration},
        )
        return [
            ConsolidatedSlot(
                time=s["time"],
                available=_is_available(s.get("available")),
                available_stylist_count=int(s.get("availableStylistCount", 0)),
                reason=s.get("reason"),
            )
            for s in data.get("data", [])
        ]

    # ---- checkout gateways ---------------------------------------------

    async def create_booking(self, request: BookingRequest, access_token: str) -> BookedAppointment:
        data = await self._request("POST", "/public/book", json=request.to_payload(), access_token=access_token)
        try:
            return BookedAppointment.from_dict(data["data"])
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError("Unexpected response from booking service") from e

    async def send_confirmation(self, phone: str, appointments: List[Dict[str, Any]], total_price: float) -> bool:
        payload = {"phone": phone, "appointments": appointments, "totalPrice": total_price}
        try:
            response = await self._client.post("/sms/confirmation", json=payload)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DeliveryError("Confirmation service is unavailable") from e
        return bool(isinstance(data, dict) and data.get("success"))
