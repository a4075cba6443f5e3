from fastapi import APIRouter, Depends

from app.api.deps import get_booking_service, get_client_directory
from app.models.booking_models import AvailabilityQuery, BookingRequest
from app.models.retell_models import FunctionCallResponse
from app.models.tenant import ClientDirectory
from app.services.booking_service import BookingService, UNKNOWN_TENANT_MESSAGE

router = APIRouter()

class CheckAvailabilityRequest(AvailabilityQuery):
    tenant_id: str
    date: str

class BookAppointmentRequest(BookingRequest):
    tenant_id: str
    name: str
    phone: str
    date: str
    time: str

@router.post("/tools/check_availability", response_model=FunctionCallResponse)
async def check_availability(
    req: CheckAvailabilityRequest,
    directory: ClientDirectory = Depends(get_client_directory),
    booking_service: BookingService = Depends(get_booking_service),
):
    tenant = directory.resolve(req.tenant_id)
    if tenant is None:
        return {"result": UNKNOWN_TENANT_MESSAGE}
    result = await booking_service.check_availability(tenant, req.date, req.time, req.appointment_type)
    return {"result": result}

@router.post("/tools/book_appointment", response_model=FunctionCallResponse)
async def book_appointment(
    req: BookAppointmentRequest,
    directory: ClientDirectory = Depends(get_client_directory),
    booking_service: BookingService = Depends(get_booking_service),
):
    tenant = directory.resolve(req.tenant_id)
    if tenant is None:
        return {"result": UNKNOWN_TENANT_MESSAGE}
    result = await booking_service.book_appointment(tenant, req)
    return {"result": result}
