import re
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

# Business rule: callers who don't name a type are booked for a cleaning.
DEFAULT_APPOINTMENT_TYPE = "cleaning"


def normalize_appointment_label(label: str) -> str:
    """
    Canonical form of a spoken appointment-type label.
    "New-Patient", "new patient" and "new_patient" all become "new patient".
    """
    label = re.sub(r"[-_]", " ", label.strip().lower())
    return re.sub(r"\s+", " ", label)


class TenantConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    tenant_id: str
    display_name: str = ""
    cal_api_key: str
    timezone: str = "America/New_York"
    appointment_types: Dict[str, str] = Field(default_factory=dict)

    def event_type_for(self, label: str) -> Optional[str]:
        """Returns the Cal.com event-type id for a label, or None if unsupported."""
        wanted = normalize_appointment_label(label)
        for key, event_type_id in self.appointment_types.items():
            if event_type_id and normalize_appointment_label(key) == wanted:
                return event_type_id
        return None

    def supported_types(self) -> List[str]:
        labels: List[str] = []
        for key, event_type_id in self.appointment_types.items():
            label = normalize_appointment_label(key)
            if event_type_id and label not in labels:
                labels.append(label)
        return labels


class ClientDirectory:
    """
    Read-only lookup of tenant id -> TenantConfig.
    Built once at startup; tenant ids are matched case-sensitively.
    """

    def __init__(self, tenants: Iterable[TenantConfig]):
        by_id: Dict[str, TenantConfig] = {}
        for tenant in tenants:
            if tenant.tenant_id in by_id:
                raise ValueError(f"Duplicate tenant id in client directory: {tenant.tenant_id}")
            by_id[tenant.tenant_id] = tenant
        self._tenants: Mapping[str, TenantConfig] = MappingProxyType(by_id)

    def resolve(self, tenant_id: Optional[str]) -> Optional[TenantConfig]:
        if not tenant_id:
            return None
        return self._tenants.get(tenant_id)

    def __len__(self) -> int:
        return len(self._tenants)
