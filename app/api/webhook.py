from fastapi import APIRouter, Depends, Request
from typing import Dict, Any

from pydantic import ValidationError

from app.api.deps import get_booking_service, get_client_directory
from app.core.logger import logger
from app.models.booking_models import AvailabilityQuery, BookingRequest
from app.models.retell_models import (
    AckResponse,
    EventKind,
    FunctionCallResponse,
    FunctionName,
    RetellWebhookPayload,
)
from app.models.tenant import ClientDirectory
from app.services.booking_service import (
    AVAILABILITY_ERROR_MESSAGE,
    BOOKING_ERROR_MESSAGE,
    UNKNOWN_TENANT_MESSAGE,
    BookingService,
)

GENERIC_FUNCTION_MESSAGE = "I'll help you with that."

router = APIRouter()


async def handle_function_call(
    payload: RetellWebhookPayload,
    directory: ClientDirectory,
    booking_service: BookingService,
) -> str:
    """Resolves the tenant and runs the requested function. Always returns speakable text."""
    tenant_key = payload.call.tenant_key if payload.call else None
    tenant = directory.resolve(tenant_key)
    if tenant is None:
        logger.warning(f"⚠️ Unknown tenant '{tenant_key}' for function {payload.function_name}")
        return UNKNOWN_TENANT_MESSAGE

    function = payload.function
    args = payload.arguments
    logger.info(f"🔔 Function: {payload.function_name} tenant={tenant.tenant_id} args={args}")

    if function is FunctionName.CHECK_AVAILABILITY:
        try:
            query = AvailabilityQuery.model_validate(args)
        except ValidationError as e:
            logger.warning(f"⚠️ Bad check_availability arguments for tenant={tenant.tenant_id}: {e}")
            return AVAILABILITY_ERROR_MESSAGE
        return await booking_service.check_availability(
            tenant, query.date, query.time, query.appointment_type
        )

    if function is FunctionName.BOOK_APPOINTMENT:
        try:
            request = BookingRequest.model_validate(args)
        except ValidationError as e:
            logger.warning(f"⚠️ Bad book_appointment arguments for tenant={tenant.tenant_id}: {e}")
            return BOOKING_ERROR_MESSAGE
        return await booking_service.book_appointment(tenant, request)

    logger.info(f"Unhandled function name: {payload.function_name}")
    return GENERIC_FUNCTION_MESSAGE


async def dispatch_event(
    payload: RetellWebhookPayload,
    directory: ClientDirectory,
    booking_service: BookingService,
) -> Dict[str, Any]:
    kind = payload.kind

    if kind is EventKind.FUNCTION_CALL:
        result = await handle_function_call(payload, directory, booking_service)
        logger.info(f"📤 Result: {result}")
        return FunctionCallResponse(result=result).model_dump()

    if kind is EventKind.CALL_ENDED:
        caller = payload.call.from_number if payload.call else None
        logger.info(f"📞 Call ended: {caller}")

    return AckResponse().model_dump()


@router.post("/retell")
async def retell_webhook(
    request: Request,
    directory: ClientDirectory = Depends(get_client_directory),
    booking_service: BookingService = Depends(get_booking_service),
) -> Dict[str, Any]:
    """
    Retell custom-function webhook.
    Business failures are always reported inside a 200 response so the agent
    has something to say to the caller.
    """
    try:
        body = await request.json()
        logger.info(f"Webhook received: event={body.get('event') if isinstance(body, dict) else None}")
        logger.debug(f"📦 Payload: {body}")
        payload = RetellWebhookPayload.model_validate(body)
    except (ValueError, ValidationError) as e:
        logger.warning(f"⚠️ Ignoring malformed webhook payload: {e}")
        return AckResponse().model_dump()

    return await dispatch_event(payload, directory, booking_service)
