import re
from typing import Optional
from pydantic import BaseModel, ConfigDict

PLACEHOLDER_EMAIL_DOMAIN = "noemail.placeholder"


class AvailabilityQuery(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    date: Optional[str] = None  # YYYY-MM-DD
    time: Optional[str] = None  # HH:MM
    appointment_type: Optional[str] = None


class BookingRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    appointment_type: Optional[str] = None
    notes: Optional[str] = None

    def contact_email(self) -> str:
        """
        Cal.com requires an email. Callers without one get a placeholder derived
        from their phone digits, e.g. "5551234567@noemail.placeholder".
        """
        if self.email:
            return self.email
        if not self.phone:
            raise ValueError("Booking needs either an email or a phone number")
        return f"{re.sub(r'[^0-9]', '', self.phone)}@{PLACEHOLDER_EMAIL_DOMAIN}"
