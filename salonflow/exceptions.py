from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class BookingFlowError(Exception):
    """Base class for every user-facing failure of the booking flow."""

    status_code: int = 500
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingFlowError):
    status_code = 400
    default_message = "Invalid request"


class SlotConflict(ValidationError):
    default_message = "This time overlaps another appointment in your cart"


class RateLimited(BookingFlowError):
    status_code = 429
    default_message = "Please wait before requesting another OTP"


class TooManyAttempts(RateLimited):
    default_message = "Too many attempts. Please request a new OTP."


class NotFoundOrExpired(BookingFlowError):
    status_code = 400
    default_message = "OTP expired or not found. Please request a new one."


ExpiredOrMissing = NotFoundOrExpired


class InvalidCode(BookingFlowError):
    status_code = 400
    default_message = "Invalid OTP. Please try again."


class DeliveryError(BookingFlowError):
    status_code = 500
    default_message = "Failed to send SMS"


class PersistenceError(BookingFlowError):
    status_code = 500
    default_message = "Failed to save your request. Please try again."


class SessionError(BookingFlowError):
    status_code = 500
    default_message = "Failed to create session"


class Forbidden(BookingFlowError):
    status_code = 403
    default_message = "You are not allowed to do this"


class NotFound(BookingFlowError):
    status_code = 404
    default_message = "Not found"


class SlotUnavailable(BookingFlowError):
    status_code = 409
    default_message = "This time slot is no longer available"


class PartialBookingFailure(BookingFlowError):
    """Some cart items were committed before a later item failed.

    ``committed`` holds the created appointments, ``failed_item`` the cart item
    that failed and ``not_attempted`` the items after it.
    """

    status_code = 502

    def __init__(self, committed: List[Any], failed_item: Any, not_attempted: List[Any], cause: BookingFlowError):
        self.committed = list(committed)
        self.failed_item = failed_item
        self.not_attempted = list(not_attempted)
        self.cause = cause
        total = len(self.committed) + 1 + len(self.not_attempted)
        super().__init__(
            f"{len(self.committed)} of {total} appointments were booked. "
            f"Booking failed: {cause.message}"
        )


def _error_classes(root=None) -> Dict[str, type]:
    root = root or BookingFlowError
    found = {root.__name__: root}
    for sub in root.__subclasses__():
        found.update(_error_classes(sub))
    return found


_STATUS_TO_ERROR = {
    400: ValidationError,
    401: SessionError,
    403: Forbidden,
    404: NotFound,
    409: SlotUnavailable,
    429: RateLimited,
}


def error_for_status(status_code: int, message: Optional[str] = None, code: Optional[str] = None) -> BookingFlowError:
    """Map an error envelope back to the matching domain error."""
    error_cls = _error_classes().get(code or "")
    if error_cls is not None and error_cls is not PartialBookingFailure:
        return error_cls(message)
    if status_code >= 500:
        return PersistenceError(message)
    return _STATUS_TO_ERROR.get(status_code, BookingFlowError)(message)


def create_error_response(error_message: str, code: Optional[str] = None) -> dict:
    """Create a standardized error response"""
    response = {
        "success": False,
        "error": error_message,
    }
    if code:
        response["code"] = code
    return response


def create_success_response(**data: Any) -> Dict[str, Any]:
    """Create a standardized success response"""
    return {"success": True, **data}


async def booking_error_handler(request: Request, exc: BookingFlowError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=create_error_response(exc.message, type(exc).__name__))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # Convert 403 from HTTPBearer to 401 for missing authentication
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(status_code=401, content=create_error_response("Authentication required"))
    return JSONResponse(status_code=exc.status_code, content=create_error_response(str(exc.detail)))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content=create_error_response(message, "ValidationError"))
