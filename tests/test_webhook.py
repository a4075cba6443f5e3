import json

import pytest
from unittest.mock import AsyncMock, patch

from app.api.webhook import GENERIC_FUNCTION_MESSAGE, dispatch_event
from app.models.retell_models import EventKind, FunctionName, RetellWebhookPayload
from app.services.booking_service import BOOKING_ERROR_MESSAGE, UNKNOWN_TENANT_MESSAGE
from helpers import mock_response, slots_payload


def _function_call(function_name, arguments, agent_id="agent_smile"):
    return {
        "event": "function_call",
        "call": {"agent_id": agent_id, "from_number": "+15551234567"},
        "function_name": function_name,
        "arguments": arguments,
    }


def test_check_availability_end_to_end(client):
    slots = [f"2024-01-15T{h}:00:00-05:00" for h in ("09:00", "10:00", "11:00", "13:00", "14:00")]
    with patch("app.services.calendar_service.requests.get") as mock_get:
        mock_get.return_value = mock_response(slots_payload("2024-01-15", slots))

        response = client.post("/retell", json=_function_call("check_availability", {"date": "2024-01-15"}))

    assert response.status_code == 200
    result = response.json()["result"]
    assert result == "I have availability at 9:00 AM, 10:00 AM, 11:00 AM, 1:00 PM. What time works best for you?"
    assert result.endswith("What time works best for you?")


def test_book_appointment_end_to_end(client):
    args = {
        "name": "Jane Doe",
        "phone": "(555) 123-4567",
        "date": "2024-01-15",
        "time": "14:00",
        "appointment_type": "Emergency",
        "notes": "Chipped tooth",
    }
    with patch("app.services.calendar_service.requests.post") as mock_post:
        mock_post.return_value = mock_response({"id": 42, "startTime": "2024-01-15T14:00:00.000Z"})

        response = client.post("/retell", json=_function_call("book_appointment", args))

    assert response.status_code == 200
    result = response.json()["result"]
    assert "Monday" in result
    assert "January 15" in result
    assert "9:00 AM" in result
    assert "emergency" in result
    assert mock_post.call_args.kwargs["json"]["eventTypeId"] == 104


def test_call_ended_acknowledged(client):
    with patch("app.services.calendar_service.requests.get") as mock_get, \
         patch("app.services.calendar_service.requests.post") as mock_post:
        response = client.post("/retell", json={"event": "call_ended", "call": {"from_number": "+15551234567"}})

    assert response.status_code == 200
    assert response.json() == {"success": True}
    mock_get.assert_not_called()
    mock_post.assert_not_called()


@pytest.mark.parametrize("body", [
    {"event": "call_started", "call": {"agent_id": "agent_smile"}},
    {"call": {"agent_id": "agent_smile"}},
    {"event": "call_analyzed"},
])
def test_other_events_get_generic_ack(client, body):
    response = client.post("/retell", json=body)
    assert response.status_code == 200
    assert response.json() == {"success": True}


@pytest.mark.parametrize("agent_id", ["agent_unknown", "AGENT_SMILE", None])
def test_unknown_tenant_short_circuits(client, agent_id):
    with patch("app.services.calendar_service.requests.get") as mock_get, \
         patch("app.services.calendar_service.requests.post") as mock_post:
        response = client.post(
            "/retell",
            json=_function_call("check_availability", {"date": "2024-01-15"}, agent_id=agent_id),
        )

    assert response.status_code == 200
    assert response.json() == {"result": UNKNOWN_TENANT_MESSAGE}
    mock_get.assert_not_called()
    mock_post.assert_not_called()


def test_tenant_id_takes_precedence_over_agent_id(client):
    body = _function_call("transfer_call", {}, agent_id="agent_unknown")
    body["call"]["tenant_id"] = "agent_smile"

    response = client.post("/retell", json=body)

    assert response.json() == {"result": GENERIC_FUNCTION_MESSAGE}


def test_unknown_function_gets_generic_message(client):
    response = client.post("/retell", json=_function_call("transfer_call", {}))
    assert response.status_code == 200
    assert response.json() == {"result": "I'll help you with that."}


def test_arguments_as_json_string(client):
    with patch("app.services.calendar_service.requests.get") as mock_get:
        mock_get.return_value = mock_response(slots_payload("2024-01-15", []))

        body = _function_call("check_availability", json.dumps({"date": "2024-01-15", "time": "10:00"}))
        response = client.post("/retell", json=body)

    assert "no availability" in response.json()["result"]


def test_remote_failure_stays_200(client):
    with patch("app.services.calendar_service.requests.post", side_effect=RuntimeError("boom")):
        response = client.post(
            "/retell",
            json=_function_call("book_appointment", {"name": "Jane", "phone": "555", "date": "2024-01-15", "time": "09:00"}),
        )

    assert response.status_code == 200
    assert response.json() == {"result": BOOKING_ERROR_MESSAGE}


def test_invalid_argument_types_stay_200(client):
    response = client.post("/retell", json=_function_call("book_appointment", {"name": ["Jane"]}))
    assert response.status_code == 200
    assert response.json() == {"result": BOOKING_ERROR_MESSAGE}


def test_non_object_body_is_acknowledged(client):
    response = client.post("/retell", json=["not", "an", "event"])
    assert response.status_code == 200
    assert response.json() == {"success": True}


def test_payload_enums():
    payload = RetellWebhookPayload.model_validate(_function_call("book_appointment", None))
    assert payload.kind is EventKind.FUNCTION_CALL
    assert payload.function is FunctionName.BOOK_APPOINTMENT
    assert payload.arguments == {}
    assert RetellWebhookPayload(event="something_new").kind is EventKind.UNKNOWN
    assert RetellWebhookPayload(function_name="Check_Availability").function is FunctionName.UNKNOWN


@pytest.mark.asyncio
async def test_dispatch_routes_check_availability(directory, tenant):
    service = AsyncMock()
    service.check_availability.return_value = "slots!"
    payload = RetellWebhookPayload.model_validate(
        _function_call("check_availability", {"date": "2024-01-15", "time": 930, "appointment_type": "exam"})
    )

    result = await dispatch_event(payload, directory, service)

    assert result == {"result": "slots!"}
    service.check_availability.assert_awaited_once_with(tenant, "2024-01-15", "930", "exam")
    service.book_appointment.assert_not_called()


def test_numeric_function_name_still_gets_result(client):
    body = {"event": "function_call", "call": {"agent_id": "agent_smile"}, "function_name": 7}

    response = client.post("/retell", json=body)

    assert response.status_code == 200
    assert response.json() == {"result": GENERIC_FUNCTION_MESSAGE}


def test_numeric_agent_id_resolves_as_unknown_tenant(client):
    with patch("app.services.calendar_service.requests.get") as mock_get:
        response = client.post("/retell", json=_function_call("check_availability", {"date": "2024-01-15"}, agent_id=12345))

    assert response.json() == {"result": UNKNOWN_TENANT_MESSAGE}
    mock_get.assert_not_called()


def test_book_appointment_without_date_skips_remote_call(client):
    with patch("app.services.calendar_service.requests.post") as mock_post:
        response = client.post("/retell", json=_function_call("book_appointment", {"name": "J", "phone": "555"}))

    assert response.json() == {"result": BOOKING_ERROR_MESSAGE}
    mock_post.assert_not_called()
