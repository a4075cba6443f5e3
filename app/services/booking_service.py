from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from app.core.logger import logger
from app.models.booking_models import BookingRequest
from app.models.tenant import DEFAULT_APPOINTMENT_TYPE, TenantConfig
from app.services.calendar_service import CalComClient

MAX_OFFERED_SLOTS = 4
BOOKING_SOURCE = "ai-receptionist"
BOOKING_LANGUAGE = "en"

UNKNOWN_TENANT_MESSAGE = "I'm sorry, we're having a technical issue right now. Please call back in a few minutes."
NO_AVAILABILITY_MESSAGE = "There's no availability on that date. Would you like to try a different day?"
TIME_AVAILABLE_MESSAGE = "That time is available! Can I get your name to book it?"
AVAILABILITY_ERROR_MESSAGE = "I'm having a little trouble checking the schedule. Can I get your name and number and have someone call you back to book?"
UNKNOWN_BOOKING_TYPE_MESSAGE = "I couldn't book that type of appointment. Let me take your info and have the office call you."
BOOKING_ERROR_MESSAGE = "I wasn't able to complete the booking in our system. Let me take your information and have someone call you right back to confirm."


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def format_time_of_day(moment: datetime, tz: ZoneInfo) -> str:
    """9:00 AM style, in the tenant's timezone."""
    local = moment.astimezone(tz)
    hour = local.hour % 12 or 12
    return f"{hour}:{local.strftime('%M %p')}"


def format_day(moment: datetime, tz: ZoneInfo) -> str:
    """Monday, January 15 style, in the tenant's timezone."""
    local = moment.astimezone(tz)
    return f"{local.strftime('%A, %B')} {local.day}"


def join_types(labels: List[str]) -> str:
    if not labels:
        return "a few kinds of"
    if len(labels) == 1:
        return "".join(labels)
    return ", ".join(labels[:-1]) + f", and {labels[-1]}"


class BookingService:
    def __init__(self, base_url: str = "https://api.cal.com/v1", timeout: float = 5.0):
        self.base_url = base_url
        self.timeout = timeout

    def client_for(self, tenant: TenantConfig) -> CalComClient:
        return CalComClient(tenant.cal_api_key, base_url=self.base_url, timeout=self.timeout)

    async def check_availability(
        self,
        tenant: TenantConfig,
        date: str,
        time: Optional[str] = None,
        appointment_type: Optional[str] = None,
    ) -> str:
        """
        Offers up to four open times on `date`, or confirms a requested `time`.
        Never raises: Cal.com problems become a callback offer.
        """
        label = (appointment_type or DEFAULT_APPOINTMENT_TYPE).lower()
        event_type_id = tenant.event_type_for(label)
        if not event_type_id:
            logger.info(f"Unsupported appointment type '{label}' for tenant {tenant.tenant_id}")
            return f"I don't have that appointment type. We offer {join_types(tenant.supported_types())} appointments."

        try:
            if not date:
                raise ValueError("date is required")
            tz = ZoneInfo(tenant.timezone)
            payload = await self.client_for(tenant).get_slots(event_type_id, date, tenant.timezone)
            slots = self._slots_for_day(payload)

            if not slots:
                return NO_AVAILABILITY_MESSAGE

            # Cal.com order is kept as-is: no sorting, no dedupe
            offered = [format_time_of_day(parse_timestamp(slot["time"]), tz) for slot in slots[:MAX_OFFERED_SLOTS]]

            if time:
                # Lexical match against the raw timestamp ("1:00" also hits "11:00")
                if any(time in slot["time"] for slot in slots):
                    return TIME_AVAILABLE_MESSAGE
                return f"That specific time isn't available. I have openings at {', '.join(offered)}. Would any of those work?"

            return f"I have availability at {', '.join(offered)}. What time works best for you?"

        except Exception as e:
            logger.warning(
                f"⚠️ Availability check failed: tenant={tenant.tenant_id} date={date} time={time} "
                f"type={label} error={e}"
            )
            return AVAILABILITY_ERROR_MESSAGE

    async def book_appointment(self, tenant: TenantConfig, request: BookingRequest) -> str:
        """
        Books through Cal.com and confirms using the start time Cal.com reports back.
        Never raises: failures become a manual-callback offer.
        """
        label = (request.appointment_type or DEFAULT_APPOINTMENT_TYPE).lower()
        event_type_id = tenant.event_type_for(label)
        if not event_type_id:
            logger.info(f"Unsupported appointment type '{label}' for tenant {tenant.tenant_id}")
            return UNKNOWN_BOOKING_TYPE_MESSAGE

        logger.info(f"📥 Booking Request - tenant={tenant.tenant_id} date={request.date} time={request.time} type={label}")

        try:
            if not request.date or not request.time:
                raise ValueError("date and time are required")
            body = self._booking_body(tenant, event_type_id, request)
            booking = await self.client_for(tenant).create_booking(body)

            tz = ZoneInfo(tenant.timezone)
            start = parse_timestamp(booking["startTime"])
            logger.info(f"✅ Booked {label} for tenant={tenant.tenant_id} at {booking['startTime']} (id={booking.get('id')})")

            return (
                f"You're all set! Your {label} appointment is booked for "
                f"{format_day(start, tz)} at {format_time_of_day(start, tz)}. We'll see you then!"
            )

        except Exception as e:
            logger.warning(
                f"⚠️ Booking failed: tenant={tenant.tenant_id} date={request.date} time={request.time} "
                f"type={label} error={e}"
            )
            return BOOKING_ERROR_MESSAGE

    @staticmethod
    def _slots_for_day(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        # Cal.com keys slots by date; only the first (and only) day is relevant
        slots_by_day = payload.get("slots") or {}
        if not isinstance(slots_by_day, dict):
            raise ValueError(f"Unexpected slots payload: {type(slots_by_day).__name__}")
        for day_slots in slots_by_day.values():
            return list(day_slots or [])
        return []

    @staticmethod
    def _booking_body(tenant: TenantConfig, event_type_id: str, request: BookingRequest) -> Dict[str, Any]:
        return {
            "eventTypeId": int(event_type_id),
            "start": f"{request.date}T{request.time}:00.000Z",
            "responses": {
                "name": request.name,
                "email": request.contact_email(),
                "phone": request.phone,
            },
            "timeZone": tenant.timezone,
            "language": BOOKING_LANGUAGE,
            "metadata": {
                "source": BOOKING_SOURCE,
                "notes": request.notes or "",
            },
        }
