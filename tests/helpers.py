from unittest.mock import MagicMock


def mock_response(payload=None, status_code=200, text=""):
    """Stand-in for a requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = text
    response.json.return_value = payload
    return response


def slots_payload(day, times):
    return {"slots": {day: [{"time": t} for t in times]}}
