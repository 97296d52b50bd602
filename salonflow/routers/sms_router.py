from fastapi import APIRouter, Depends

from ..application.services.confirmation_service import ConfirmationService
from ..dependencies import get_confirmation_service
from ..schemas import ConfirmationRequest

router = APIRouter(prefix="/sms", tags=["Notifications"])


@router.post("/confirmation")
def send_confirmation(payload: ConfirmationRequest, service: ConfirmationService = Depends(get_confirmation_service)):
    # Delivery failures come back as success=false with HTTP 200
    appointments = [a.model_dump() for a in payload.appointments]
    return service.notify(payload.phone, appointments, payload.totalPrice)
