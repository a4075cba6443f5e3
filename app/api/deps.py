from functools import lru_cache

from app.core.config import settings
from app.core.config_loader import load_client_directory
from app.models.tenant import ClientDirectory
from app.services.booking_service import BookingService


@lru_cache(maxsize=1)
def get_client_directory() -> ClientDirectory:
    return load_client_directory(settings)


@lru_cache(maxsize=1)
def get_booking_service() -> BookingService:
    return BookingService(
        base_url=settings.CAL_API_BASE_URL,
        timeout=settings.CAL_API_TIMEOUT_SECONDS,
    )
