import json
import os
from typing import Any, Dict, List

from app.core.config import Settings
from app.core.logger import logger
from app.models.tenant import ClientDirectory, TenantConfig

def _tenant_from_entry(entry: Dict[str, Any], default_timezone: str) -> TenantConfig:
    data = dict(entry)
    data.setdefault("timezone", default_timezone)
    # Keys may be written as ${CAL_KEY_ACME} so secrets stay in the environment
    if isinstance(data.get("cal_api_key"), str):
        data["cal_api_key"] = os.path.expandvars(data["cal_api_key"])
    return TenantConfig.model_validate(data)

def _tenant_from_env(settings: Settings) -> TenantConfig:
    """Single-clinic deployment configured purely through CAL_* variables."""
    return TenantConfig(
        tenant_id=settings.DEFAULT_TENANT_ID,
        display_name=settings.PROJECT_NAME,
        cal_api_key=settings.CAL_API_KEY,
        timezone=settings.DEFAULT_TIMEZONE,
        appointment_types={
            "cleaning": settings.CAL_EVENT_CLEANING,
            "exam": settings.CAL_EVENT_EXAM,
            "new-patient": settings.CAL_EVENT_NEW_PATIENT,
            "new patient": settings.CAL_EVENT_NEW_PATIENT,
            "emergency": settings.CAL_EVENT_EMERGENCY,
        },
    )

def load_client_directory(settings: Settings) -> ClientDirectory:
    """
    Builds the tenant directory.
    Reads CLIENTS_CONFIG_PATH if it exists, otherwise falls back to a single
    tenant described by CAL_API_KEY / CAL_EVENT_*.
    Raises FileNotFoundError if neither source is available.
    """
    path = settings.CLIENTS_CONFIG_PATH

    if not os.path.exists(path):
        if settings.CAL_API_KEY:
            logger.info(f"No clients file at '{path}', using single tenant '{settings.DEFAULT_TENANT_ID}' from environment")
            return ClientDirectory([_tenant_from_env(settings)])
        logger.critical(f"❌ Client directory '{path}' not found and CAL_API_KEY is not set. Cannot start.")
        raise FileNotFoundError(f"Client directory not found at {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        logger.critical(f"❌ Invalid JSON in client directory '{path}': {e}")
        raise ValueError(f"Invalid JSON in client directory: {e}")

    entries: List[Dict[str, Any]] = config.get("clients", [])
    directory = ClientDirectory(
        _tenant_from_entry(entry, settings.DEFAULT_TIMEZONE) for entry in entries
    )
    logger.info(f"✅ Client directory loaded: {len(directory)} tenant(s) from {path}")
    return directory
