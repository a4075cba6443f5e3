import json
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

# --- Event / function discriminators ---

class EventKind(str, Enum):
    FUNCTION_CALL = "function_call"
    CALL_ENDED = "call_ended"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "EventKind":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class FunctionName(str, Enum):
    CHECK_AVAILABILITY = "check_availability"
    BOOK_APPOINTMENT = "book_appointment"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "FunctionName":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

# --- Incoming Request Models ---

class RetellCall(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    agent_id: Optional[str] = None
    tenant_id: Optional[str] = None
    from_number: Optional[str] = None

    @property
    def tenant_key(self) -> Optional[str]:
        return self.tenant_id or self.agent_id


class RetellWebhookPayload(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    event: Optional[str] = None
    call: Optional[RetellCall] = None
    function_name: Optional[str] = None
    arguments: Dict[str, Any] = {}

    @field_validator("arguments", mode="before")
    @classmethod
    def _coerce_arguments(cls, value: Any) -> Dict[str, Any]:
        # Some agent configs send arguments as a JSON-encoded string
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return {}
        return value if isinstance(value, dict) else {}

    @property
    def kind(self) -> EventKind:
        return EventKind.parse(self.event)

    @property
    def function(self) -> FunctionName:
        return FunctionName.parse(self.function_name)

# --- Outgoing Response Models ---

class FunctionCallResponse(BaseModel):
    result: str


class AckResponse(BaseModel):
    success: bool = True
