import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_booking_service, get_client_directory
from app.main import app
from app.models.tenant import ClientDirectory, TenantConfig
from app.services.booking_service import BookingService


@pytest.fixture
def tenant():
    return TenantConfig(
        tenant_id="agent_smile",
        display_name="Smile Dental",
        cal_api_key="cal_test_key",
        timezone="America/New_York",
        appointment_types={
            "cleaning": "101",
            "exam": "102",
            "new-patient": "103",
            "emergency": "104",
        },
    )


@pytest.fixture
def directory(tenant):
    return ClientDirectory([tenant])


@pytest.fixture
def booking_service():
    return BookingService(base_url="https://cal.test/v1", timeout=2.0)


@pytest.fixture
def client(directory, booking_service):
    app.dependency_overrides[get_client_directory] = lambda: directory
    app.dependency_overrides[get_booking_service] = lambda: booking_service
    yield TestClient(app)
    app.dependency_overrides.clear()
